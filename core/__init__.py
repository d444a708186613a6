"""Core utilities for gdocs-markdown."""

from core.config import configure_logging, get_document_url, get_log_level, is_smart_typography_enabled
from core.errors import (
    APIError,
    GDocsMarkdownError,
    PermissionDeniedError,
    RateLimitError,
    ResourceNotFoundError,
    StalePositionError,
    TableMaterializationError,
    ValidationError,
)
from core.utils import (
    TransientNetworkError,
    handle_http_errors,
    utf16_len,
    validate_document_id,
    validate_positive_int,
)

__all__ = [
    "APIError",
    "configure_logging",
    "GDocsMarkdownError",
    "get_document_url",
    "get_log_level",
    "handle_http_errors",
    "is_smart_typography_enabled",
    "PermissionDeniedError",
    "RateLimitError",
    "ResourceNotFoundError",
    "StalePositionError",
    "TableMaterializationError",
    "TransientNetworkError",
    "utf16_len",
    "validate_document_id",
    "validate_positive_int",
    "ValidationError",
]
