"""Shared pytest fixtures: tiny but valid MP3/WAV payloads and a store on tmp_path."""

import io
import wave

import pytest

from audio_shelf.domain.library import LibraryStore

# MPEG-1 Layer III, 128 kbps, 44.1 kHz, no padding -> 417-byte frames
MP3_FRAME_HEADER = b"\xff\xfb\x90\x00"
MP3_FRAME_SIZE = 417


def make_mp3_bytes(frames: int = 40) -> bytes:
    """Silent constant-bitrate MP3 stream with no tags."""
    frame = MP3_FRAME_HEADER + b"\x00" * (MP3_FRAME_SIZE - len(MP3_FRAME_HEADER))
    return frame * frames


def make_wav_bytes(seconds: float = 1.0, sample_rate: int = 8000) -> bytes:
    """Silent 16-bit mono PCM WAV."""
    buffer = io.BytesIO()
    with wave.open(buffer, "wb") as wav:
        wav.setnchannels(1)
        wav.setsampwidth(2)
        wav.setframerate(sample_rate)
        wav.writeframes(b"\x00\x00" * int(sample_rate * seconds))
    return buffer.getvalue()


@pytest.fixture
def mp3_bytes() -> bytes:
    return make_mp3_bytes()


@pytest.fixture
def wav_bytes() -> bytes:
    return make_wav_bytes()


@pytest.fixture
def audio_dir(tmp_path):
    path = tmp_path / "audio"
    path.mkdir()
    return path


@pytest.fixture
def store(audio_dir) -> LibraryStore:
    return LibraryStore(audio_dir)
