"""Unit tests for document file validation utilities"""

import pytest

from crewbook.domain.documents import (
    ALLOWED_EXTENSIONS,
    build_content_disposition,
    format_size_limit,
    get_extension,
    is_supported_mime_type,
    sanitize_filename,
    validate_extension,
    validate_file_size,
)

MB = 1024 * 1024


class TestExtensionValidation:
    """Only PDF and common image extensions are accepted"""

    def test_allowed_extensions_constant(self):
        assert ALLOWED_EXTENSIONS == ('.pdf', '.png', '.jpg', '.jpeg')

    @pytest.mark.parametrize("name", ["contract.pdf", "scan.PNG", "photo.jpg", "ID.Jpeg"])
    def test_allowed_extension(self, name):
        assert validate_extension(name) == (True, None)

    @pytest.mark.parametrize("name", ["payload.exe", "notes.docx", "archive.pdf.zip", "noextension"])
    def test_rejected_extension(self, name):
        valid, error = validate_extension(name)
        assert valid is False
        assert error == "Invalid file extension. Allowed: .pdf, .png, .jpg, .jpeg"

    def test_get_extension_is_lower_cased(self):
        assert get_extension("Passport.PDF") == ".pdf"
        assert get_extension("README") == ""


class TestMimeTypeValidation:

    def test_supported_types(self):
        assert is_supported_mime_type("application/pdf") is True
        assert is_supported_mime_type("image/png") is True
        assert is_supported_mime_type("image/jpeg") is True

    def test_unsupported_types(self):
        assert is_supported_mime_type("text/html") is False
        assert is_supported_mime_type("application/x-msdownload") is False


class TestFileSizeValidation:

    def test_within_limit(self):
        assert validate_file_size(1024) == (True, None)
        assert validate_file_size(50 * MB) == (True, None)

    def test_empty_file(self):
        assert validate_file_size(0) == (False, "File is empty (0 bytes)")

    def test_over_limit(self):
        valid, error = validate_file_size(50 * MB + 1)
        assert valid is False
        assert error == "File size exceeds maximum limit of 50MB"

    def test_custom_limit(self):
        valid, error = validate_file_size(2 * MB, max_size=1 * MB)
        assert valid is False
        assert "1MB" in error

    def test_format_size_limit(self):
        assert format_size_limit(50 * MB) == "50MB"


class TestContentDisposition:

    def test_sanitize_strips_path_and_quotes(self):
        assert sanitize_filename('../Passport "scan".pdf') == 'Passport _scan_.pdf'

    def test_sanitize_empty_name(self):
        assert sanitize_filename("") == "download"

    def test_attachment_header_ascii(self):
        header = build_content_disposition("contract.pdf")
        assert header == "attachment; filename=\"contract.pdf\"; filename*=UTF-8''contract.pdf"

    def test_attachment_header_unicode(self):
        header = build_content_disposition("résumé.pdf")
        assert header.startswith('attachment; filename="r_sum_.pdf"')
        assert header.endswith("filename*=UTF-8''r%C3%A9sum%C3%A9.pdf")
