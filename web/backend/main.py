from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger

from audio_shelf import __version__
from audio_shelf.core.config import Config, load_config
from audio_shelf.domain.library import LibraryError

app = FastAPI(title="Audio Shelf API", version=__version__)


def get_allowed_origins(config: Config) -> list[str]:
    """CORS origins from [web] allowed_origins (ALLOWED_ORIGINS env overrides)."""
    return [origin.strip() for origin in config.web.allowed_origins if origin.strip()]


allowed_origins = get_allowed_origins(load_config())

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(LibraryError)
async def library_error_handler(request: Request, exc: LibraryError):
    """Translate store errors into a status code and {error, details} body."""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc}")
    else:
        logger.info(f"{request.method} {request.url.path} rejected: {exc}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.error, "details": exc.details},
    )


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception(f"{request.method} {request.url.path} crashed: {exc}")
    return JSONResponse(
        status_code=500,
        content={"error": "Internal server error", "details": str(exc)},
    )


# Include routers
from web.backend.routers import audio

app.include_router(audio.router, tags=["audio"])


@app.get("/health")
async def health_check():
    return {"status": "healthy"}
