"""
core/classifier.py
Extension-based media classification. No file content is read here.
"""

import os
from enum import Enum


class MediaType(Enum):
    PHOTO = "photo"
    MUSIC = "music"
    VIDEO = "video"
    OTHER = "other"


IMAGE_EXTENSIONS = frozenset({".jpg", ".jpeg", ".png", ".gif", ".bmp", ".tiff", ".webp", ".heic", ".heif"})
AUDIO_EXTENSIONS = frozenset({".mp3", ".flac", ".wav", ".aac", ".m4a", ".ogg", ".wma", ".opus"})
VIDEO_EXTENSIONS = frozenset({".mp4", ".mkv", ".avi", ".mov", ".wmv", ".flv", ".webm", ".m4v", ".mpeg", ".mpg"})


def classify(filename: str) -> MediaType:
    """Map a file name to its media class by lower-cased extension."""
    ext = os.path.splitext(filename)[1].lower()
    if ext in IMAGE_EXTENSIONS:
        return MediaType.PHOTO
    if ext in AUDIO_EXTENSIONS:
        return MediaType.MUSIC
    if ext in VIDEO_EXTENSIONS:
        return MediaType.VIDEO
    return MediaType.OTHER
