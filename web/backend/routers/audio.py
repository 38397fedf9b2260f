from fastapi import APIRouter, Depends, File, Form, UploadFile
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import FileResponse, StreamingResponse
from loguru import logger
import mimetypes
from pathlib import Path
from typing import Optional

from audio_shelf.core.config import Config
from audio_shelf.domain.library import (
    BadRequestError,
    LibraryStore,
    UploadTooLargeError,
)
from ..deps import get_config, get_store
from ..schemas import (
    AudioListEntry,
    BatchMetadataRequest,
    BatchMetadataResponse,
    FilenamesRequest,
    MessageResponse,
    MetadataResponse,
    MetadataUpdate,
    MetadataUpdateResponse,
    ReplaceResponse,
    StoredMetadata,
    UploadedFile,
    UploadResponse,
)

router = APIRouter(prefix="/audio")

AUDIO_MIME_TYPES: dict[str, str] = {
    ".mp3": "audio/mpeg",
    ".wav": "audio/wav",
}

ARCHIVE_NAME = "files.zip"


def get_mime_type(file_path: Path) -> str:
    """Pure function - deterministic MIME type detection."""
    mime = AUDIO_MIME_TYPES.get(file_path.suffix.lower())
    if mime:
        return mime
    guessed, _ = mimetypes.guess_type(str(file_path))
    return guessed or "application/octet-stream"


def upload_basename(raw_name: Optional[str]) -> str:
    """Pure function - strip any client-side directory from an upload name."""
    if not raw_name:
        return ""
    return Path(raw_name.replace("\\", "/")).name


async def read_upload(upload: UploadFile, max_bytes: int) -> bytes:
    """Read an upload fully, refusing anything above max_bytes."""
    content = await upload.read(max_bytes + 1)
    if len(content) > max_bytes:
        raise UploadTooLargeError(
            f"{upload.filename} exceeds {max_bytes // (1024 * 1024)} MB"
        )
    return content


@router.post("", status_code=201, response_model=UploadResponse)
async def upload_audio(
    mp3: Optional[list[UploadFile]] = File(None),
    files: Optional[list[UploadFile]] = File(None),
    store: LibraryStore = Depends(get_store),
    config: Config = Depends(get_config),
):
    """Upload one or many audio files (multipart field ``mp3`` or ``files``)."""
    uploads = [u for u in (mp3 or []) + (files or []) if u.filename]
    if not uploads:
        raise BadRequestError("No file uploaded", error="No file uploaded")

    max_bytes = config.web.max_upload_mb * 1024 * 1024
    batch = []
    for upload in uploads:
        content = await read_upload(upload, max_bytes)
        batch.append((upload_basename(upload.filename), content))

    stored = await run_in_threadpool(store.create_batch, batch)
    message = (
        "Audio uploaded successfully"
        if len(stored) == 1
        else "Audio files uploaded successfully"
    )
    return UploadResponse(
        message=message, files=[UploadedFile.from_audio(a) for a in stored]
    )


@router.get("", response_model=list[AudioListEntry])
async def list_audio(store: LibraryStore = Depends(get_store)):
    """List audio files with their custom tags."""
    entries = await run_in_threadpool(store.list_files)
    return [AudioListEntry(file=audio.filename, customTags=tags) for audio, tags in entries]


# Literal paths must be registered before the {filename} routes


@router.delete("/multiple", response_model=MessageResponse)
async def delete_multiple(
    request: FilenamesRequest, store: LibraryStore = Depends(get_store)
):
    """Delete several files, stopping at the first failure."""
    await run_in_threadpool(store.delete_batch, request.filenames)
    logger.info(f"Deleted {len(request.filenames)} files")
    return MessageResponse(message="Files deleted successfully")


@router.put("/multiple/metadata", response_model=BatchMetadataResponse)
async def update_multiple_metadata(
    request: BatchMetadataRequest, store: LibraryStore = Depends(get_store)
):
    """Merge the same metadata into several files, stopping at the first failure."""
    await run_in_threadpool(
        store.write_metadata_batch, request.filenames, request.metadata.fields()
    )
    return BatchMetadataResponse(
        message="Metadata updated successfully", updated=request.filenames
    )


@router.post("/download")
async def download_archive(
    request: FilenamesRequest, store: LibraryStore = Depends(get_store)
):
    """Stream a zip of the requested files; missing ones are skipped."""
    stream = store.download_archive(request.filenames)
    logger.info(f"Streaming archive of {len(request.filenames)} files")
    return StreamingResponse(
        stream,
        media_type="application/zip",
        headers={"Content-Disposition": f'attachment; filename="{ARCHIVE_NAME}"'},
    )


@router.post("/replace", response_model=ReplaceResponse)
async def replace_audio(
    mp3: Optional[UploadFile] = File(None),
    originalFilePath: Optional[str] = Form(None),
    store: LibraryStore = Depends(get_store),
    config: Config = Depends(get_config),
):
    """Replace an existing file's bytes in place, keeping its metadata."""
    content = None
    if mp3 is not None and mp3.filename:
        content = await read_upload(mp3, config.web.max_upload_mb * 1024 * 1024)

    target = await run_in_threadpool(store.replace, originalFilePath, content)
    return ReplaceResponse(message="File replaced successfully", filePath=str(target))


@router.get("/{filename}")
async def stream_audio(filename: str, store: LibraryStore = Depends(get_store)):
    """Serve the raw audio bytes."""
    file_path = store.audio_path(filename)
    logger.debug(f"Streaming {file_path.name}")
    return FileResponse(file_path, media_type=get_mime_type(file_path))


@router.get("/{filename}/metadata", response_model=MetadataResponse)
async def get_metadata(filename: str, store: LibraryStore = Depends(get_store)):
    """Sidecar metadata merged with tags and duration read from the audio."""
    view = await run_in_threadpool(store.read_metadata, filename)
    return MetadataResponse.from_view(view)


@router.put("/{filename}/metadata", response_model=MetadataUpdateResponse)
async def update_metadata(
    filename: str,
    update: MetadataUpdate,
    store: LibraryStore = Depends(get_store),
):
    """Merge the submitted fields into the file's metadata."""
    record = await run_in_threadpool(store.write_metadata, filename, update.fields())
    return MetadataUpdateResponse(
        message="Metadata updated successfully",
        updatedMetadata=StoredMetadata.from_record(record),
    )


@router.delete("/{filename}", response_model=MessageResponse)
async def delete_audio(filename: str, store: LibraryStore = Depends(get_store)):
    """Delete an audio file and its metadata."""
    await run_in_threadpool(store.delete, filename)
    return MessageResponse(message="Audio and metadata deleted successfully")
