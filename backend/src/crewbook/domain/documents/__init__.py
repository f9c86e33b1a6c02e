"""Documents domain module - member document lifecycle, status rules, file validation"""

from .document_status import (
    ALLOWED_TRANSITIONS,
    DocumentStatus,
    DocumentType,
    can_transition,
    get_allowed_transitions,
)
from .validation import (
    ALLOWED_EXTENSIONS,
    ALLOWED_MIME_TYPES,
    build_content_disposition,
    format_size_limit,
    get_extension,
    is_supported_mime_type,
    sanitize_filename,
    validate_extension,
    validate_file_size,
)

__all__ = [
    "ALLOWED_TRANSITIONS",
    "DocumentStatus",
    "DocumentType",
    "can_transition",
    "get_allowed_transitions",
    "ALLOWED_EXTENSIONS",
    "ALLOWED_MIME_TYPES",
    "build_content_disposition",
    "format_size_limit",
    "get_extension",
    "is_supported_mime_type",
    "sanitize_filename",
    "validate_extension",
    "validate_file_size",
]
