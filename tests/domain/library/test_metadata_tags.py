"""
Tests for intrinsic metadata extraction and ID3 mirroring in metadata.py.
"""

import pytest
from mutagen.id3 import ID3

from audio_shelf.domain.library.exceptions import MetadataReadError
from audio_shelf.domain.library.metadata import (
    extract_audio_metadata,
    format_tags_comment,
    write_id3_tags,
)
from audio_shelf.domain.library.models import MetadataRecord


class TestFormatTagsComment:
    """Test the comment text built from custom tags."""

    def test_joins_with_comma_space(self):
        """Test tags are joined with ', '."""
        assert format_tags_comment(["chill", "vocal"]) == "chill, vocal"

    def test_empty(self):
        """Test no tags give an empty comment."""
        assert format_tags_comment([]) == ""


class TestExtractAudioMetadata:
    """Test reading duration and embedded tags with mutagen."""

    def test_wav_duration(self, tmp_path, wav_bytes):
        """Test WAV duration is read from the fmt/data chunks."""
        path = tmp_path / "tone.wav"
        path.write_bytes(wav_bytes)
        result = extract_audio_metadata(str(path))
        assert result.duration == pytest.approx(1.0, abs=0.01)
        assert result.title is None
        assert result.artist is None

    def test_mp3_duration(self, tmp_path, mp3_bytes):
        """Test MP3 duration is positive for a CBR stream."""
        path = tmp_path / "song.mp3"
        path.write_bytes(mp3_bytes)
        result = extract_audio_metadata(str(path))
        assert result.duration > 0

    def test_unparseable_mp3_raises(self, tmp_path):
        """Test garbage bytes raise MetadataReadError."""
        path = tmp_path / "broken.mp3"
        path.write_bytes(b"definitely not audio" * 10)
        with pytest.raises(MetadataReadError):
            extract_audio_metadata(str(path))

    def test_unknown_format_raises(self, tmp_path):
        """Test files mutagen does not recognize raise MetadataReadError."""
        path = tmp_path / "notes.txt"
        path.write_text("hello", encoding="utf-8")
        with pytest.raises(MetadataReadError):
            extract_audio_metadata(str(path))


class TestWriteId3Tags:
    """Test mirroring sidecar fields into ID3 frames."""

    def test_writes_frames(self, tmp_path, mp3_bytes):
        """Test title, artist, bpm and comment frames are written."""
        path = tmp_path / "song.mp3"
        path.write_bytes(mp3_bytes)
        record = MetadataRecord(title="Title", artist="Artist", bpm="124", tags=["a", "b"])

        assert write_id3_tags(str(path), record) is True

        id3 = ID3(path)
        assert id3["TIT2"].text == ["Title"]
        assert id3["TPE1"].text == ["Artist"]
        assert id3["TBPM"].text == ["124"]
        assert id3.getall("COMM")[0].text == ["a, b"]
        assert not (tmp_path / "song.mp3.tmp").exists()

    def test_round_trip_through_extraction(self, tmp_path, mp3_bytes):
        """Test written frames are visible to extraction."""
        path = tmp_path / "song.mp3"
        path.write_bytes(mp3_bytes)
        write_id3_tags(str(path), MetadataRecord(title="T", artist="A", bpm="90"))

        result = extract_audio_metadata(str(path))
        assert result.title == "T"
        assert result.artist == "A"
        assert result.bpm == "90"
        assert result.duration > 0

    def test_empty_fields_remove_frames(self, tmp_path, mp3_bytes):
        """Test empty fields clear previously written frames."""
        path = tmp_path / "song.mp3"
        path.write_bytes(mp3_bytes)
        write_id3_tags(str(path), MetadataRecord(title="T", artist="A"))
        write_id3_tags(str(path), MetadataRecord(artist="A"))

        id3 = ID3(path)
        assert "TIT2" not in id3
        assert id3["TPE1"].text == ["A"]

    def test_missing_file(self, tmp_path):
        """Test a missing file returns False."""
        assert write_id3_tags(str(tmp_path / "gone.mp3"), MetadataRecord()) is False
