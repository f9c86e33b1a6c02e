"""File validation utilities for member document uploads"""

import os
import re
from typing import Optional, Tuple
from urllib.parse import quote

ALLOWED_EXTENSIONS = ('.pdf', '.png', '.jpg', '.jpeg')

ALLOWED_MIME_TYPES = {
    'application/pdf',
    'image/png',
    'image/jpeg',
}

# 50 MB
DEFAULT_MAX_FILE_SIZE = 50 * 1024 * 1024


def get_extension(filename: str) -> str:
    """Return the lower-cased extension including the dot ('' if none)

    Example:
        >>> get_extension('Passport.PDF')
        '.pdf'
    """
    return os.path.splitext(filename)[1].lower()


def validate_extension(filename: str) -> Tuple[bool, Optional[str]]:
    """Validate the file extension against the allowed list

    Returns:
        Tuple of (is_valid, error_message)

    Example:
        >>> validate_extension('contract.pdf')
        (True, None)
        >>> validate_extension('payload.exe')[0]
        False
    """
    if get_extension(filename) not in ALLOWED_EXTENSIONS:
        return False, f"Invalid file extension. Allowed: {', '.join(ALLOWED_EXTENSIONS)}"
    return True, None


def is_supported_mime_type(mime_type: str) -> bool:
    return mime_type in ALLOWED_MIME_TYPES


def format_size_limit(max_size: int) -> str:
    """Human readable size limit used in error messages ("50MB")."""
    return f"{max_size // (1024 * 1024)}MB"


def validate_file_size(size_bytes: int, max_size: int = DEFAULT_MAX_FILE_SIZE) -> Tuple[bool, Optional[str]]:
    """Validate file size is within limits

    Args:
        size_bytes: File size in bytes
        max_size: Maximum allowed size

    Returns:
        Tuple of (is_valid, error_message)

    Example:
        >>> validate_file_size(1024)
        (True, None)
        >>> validate_file_size(0)
        (False, 'File is empty (0 bytes)')
    """
    if size_bytes <= 0:
        return False, "File is empty (0 bytes)"

    if size_bytes > max_size:
        return False, f"File size exceeds maximum limit of {format_size_limit(max_size)}"

    return True, None


def sanitize_filename(filename: str) -> str:
    """Sanitize a filename for a quoted Content-Disposition value

    Keeps letters, digits, dot, dash, underscore and space; everything else
    becomes an underscore.

    Example:
        >>> sanitize_filename('../Passport "scan".pdf')
        'Passport _scan_.pdf'
    """
    filename = os.path.basename(filename.replace('\\', '/'))
    filename = re.sub(r'[^\w .-]', '_', filename)
    return filename or 'download'


def build_content_disposition(filename: str) -> str:
    """Build an attachment Content-Disposition header (RFC 6266 / RFC 5987)

    Example:
        >>> build_content_disposition('résumé.pdf')
        'attachment; filename="r_sum_.pdf"; filename*=UTF-8\\'\\'r%C3%A9sum%C3%A9.pdf'
    """
    safe_name = sanitize_filename(filename).encode('ascii', 'replace').decode('ascii').replace('?', '_')
    encoded_name = quote(filename, safe='')
    return f'attachment; filename="{safe_name}"; filename*=UTF-8\'\'{encoded_name}'
