"""Domain layer for Audio Shelf."""
