"""Case document uploads, downloads and storage."""

from .validation import (
    ACCEPTED_FILE_EXTENSIONS,
    is_accepted_extension,
    sanitize_filename,
    validate_file_size,
    validate_filename,
)

__all__ = [
    "ACCEPTED_FILE_EXTENSIONS",
    "is_accepted_extension",
    "sanitize_filename",
    "validate_file_size",
    "validate_filename",
]
