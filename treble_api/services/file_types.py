"""
Treble API — File-Type Validation
==================================

What:  Extension allow-lists for pattern documents and thumbnails.
Why:   Files are hosted elsewhere; all we can check is that the URL points
       at a document or image type the site knows how to show.
How:   Take the suffix of the last path segment (PurePosixPath.suffix),
       lowercase it, and test membership. A URL with no extension fails.
"""

from pathlib import PurePosixPath

ALLOWED_DOCUMENT_EXTENSIONS = frozenset({".pdf", ".doc", ".docx", ".txt"})
ALLOWED_IMAGE_EXTENSIONS = frozenset({".webp", ".png", ".jpeg", ".jpg"})


def url_extension(url: str) -> str:
    """Lowercased extension of the final path segment, '' if there is none."""
    return PurePosixPath(url).suffix.lower()


def is_valid_document_url(url: str) -> bool:
    return url_extension(url) in ALLOWED_DOCUMENT_EXTENSIONS


def is_valid_image_url(url: str) -> bool:
    return url_extension(url) in ALLOWED_IMAGE_EXTENSIONS
