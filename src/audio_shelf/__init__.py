"""Audio Shelf - HTTP service for a directory of MP3/WAV files and their metadata."""

__version__ = "0.1.0"
