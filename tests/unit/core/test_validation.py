"""Tests for validation utilities."""

import pytest

from core.errors import ValidationError
from core.utils import utf16_len, validate_document_id, validate_positive_int


class TestValidateDocumentId:
    """Test document ID validation."""

    def test_valid_document_id(self):
        assert validate_document_id("1AbC_d-9") == "1AbC_d-9"

    def test_strips_whitespace(self):
        assert validate_document_id("  abc123  ") == "abc123"

    def test_empty_raises_error(self):
        with pytest.raises(ValidationError):
            validate_document_id("")

    def test_whitespace_only_raises_error(self):
        with pytest.raises(ValidationError):
            validate_document_id("   ")

    def test_invalid_chars_raises_error(self):
        with pytest.raises(ValidationError):
            validate_document_id("https://docs.google.com/document/d/abc")

    def test_error_names_parameter(self):
        with pytest.raises(ValidationError, match="doc_id"):
            validate_document_id("", param_name="doc_id")


class TestValidatePositiveInt:
    """Test positive integer validation."""

    def test_valid_positive_int(self):
        assert validate_positive_int(10, "count") == 10

    def test_one_is_valid(self):
        assert validate_positive_int(1, "count") == 1

    def test_zero_raises_error(self):
        with pytest.raises(ValidationError):
            validate_positive_int(0, "count")

    def test_bool_raises_error(self):
        with pytest.raises(ValidationError):
            validate_positive_int(True, "count")

    def test_max_value_enforced(self):
        with pytest.raises(ValidationError):
            validate_positive_int(100, "count", max_value=50)

    def test_at_max_value_ok(self):
        assert validate_positive_int(50, "count", max_value=50) == 50


class TestUtf16Len:
    """Test index-unit length."""

    def test_ascii(self):
        assert utf16_len("hello") == 5

    def test_bmp_characters_count_once(self):
        assert utf16_len("—…☐") == 3

    def test_astral_characters_count_twice(self):
        assert utf16_len("\U0001f600a") == 3
