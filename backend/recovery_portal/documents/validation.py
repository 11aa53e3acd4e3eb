"""File validation utilities for document uploads"""

import os
import re
from typing import Optional, Tuple

from ..config import get_settings

# Extensions accepted by the portal upload form
ACCEPTED_FILE_EXTENSIONS = {
    '.pdf', '.doc', '.docx', '.txt',
    '.jpg', '.jpeg', '.png', '.gif', '.heic', '.heif',
    '.xls', '.xlsx', '.csv',
    '.zip', '.rar',
    '.mp4', '.mov', '.avi', '.webm', '.mkv', '.m4v', '.wmv', '.3gp', '.3gpp',
}


def is_accepted_extension(filename: str) -> bool:
    """Check if the filename has an extension accepted for upload

    Example:
        >>> is_accepted_extension('statement.PDF')
        True
        >>> is_accepted_extension('payload.exe')
        False
    """
    _, ext = os.path.splitext(filename)
    return ext.lower() in ACCEPTED_FILE_EXTENSIONS


def validate_file_size(size_bytes: int, max_size: Optional[int] = None) -> Tuple[bool, Optional[str]]:
    """Validate file size is within limits

    Args:
        size_bytes: File size in bytes
        max_size: Maximum allowed size (defaults to MAX_UPLOAD_SIZE_BYTES setting)

    Returns:
        Tuple of (is_valid, error_message)
    """
    if max_size is None:
        max_size = get_settings().MAX_UPLOAD_SIZE_BYTES

    if size_bytes == 0:
        return False, "File is empty (0 bytes)"

    if size_bytes > max_size:
        return False, f"File exceeds maximum size of {max_size} bytes (got {size_bytes} bytes)"

    return True, None


def validate_filename(filename: str) -> Tuple[bool, Optional[str]]:
    """Validate an uploaded filename

    Validation rules:
    - Not empty
    - Max 255 characters
    - No path traversal (../, ..\\)
    - No null bytes or control characters

    Example:
        >>> validate_filename('letter.pdf')
        (True, None)
        >>> validate_filename('')
        (False, 'Filename cannot be empty')
    """
    if not filename or len(filename.strip()) == 0:
        return False, "Filename cannot be empty"

    if len(filename) > 255:
        return False, f"Filename exceeds 255 characters (got {len(filename)})"

    if '..' in filename or '/' in filename or '\\' in filename:
        return False, "Filename contains path traversal or directory separators"

    if '\x00' in filename:
        return False, "Filename contains null bytes"

    if any(ord(c) < 32 for c in filename):
        return False, "Filename contains control characters"

    return True, None


def sanitize_filename(filename: str) -> str:
    """Sanitize filename for safe storage

    Example:
        >>> sanitize_filename('bodycam clip.mp4')
        'bodycam_clip.mp4'
    """
    filename = os.path.basename(filename)

    # Replace problematic characters with underscore
    filename = re.sub(r'[^\w\s.-]', '_', filename)

    # Collapse multiple spaces/underscores
    filename = re.sub(r'[\s_]+', '_', filename)

    if len(filename) > 255:
        name, ext = os.path.splitext(filename)
        filename = name[:255 - len(ext)] + ext

    return filename
