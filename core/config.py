"""
Runtime configuration for gdocs-markdown.

Settings come from environment variables with embedded defaults, read through
accessor functions so tests can override them with monkeypatch.
"""

import logging
import os

# =============================================================================
# Defaults
# =============================================================================

GDOCS_SMART_TYPOGRAPHY_DEFAULT = "true"
GDOCS_LOG_LEVEL_DEFAULT = "INFO"
GDOCS_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

DOCUMENT_URL_TEMPLATE = "https://docs.google.com/document/d/{document_id}/edit"


def is_smart_typography_enabled() -> bool:
    """
    Whether the typography filter runs before tokenization by default.

    Returns:
        False only when GDOCS_SMART_TYPOGRAPHY is set to a false-like value.
    """
    value = os.getenv("GDOCS_SMART_TYPOGRAPHY", GDOCS_SMART_TYPOGRAPHY_DEFAULT)
    return value.strip().lower() not in ("0", "false", "no", "off")


def get_log_level() -> int:
    """Log level from GDOCS_LOG_LEVEL, falling back to INFO for unknown names."""
    name = os.getenv("GDOCS_LOG_LEVEL", GDOCS_LOG_LEVEL_DEFAULT).strip().upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.INFO


def configure_logging(level: int | None = None) -> None:
    """Install a root handler for scripts; library code only creates loggers."""
    logging.basicConfig(level=level if level is not None else get_log_level(), format=GDOCS_LOG_FORMAT)


def get_document_url(document_id: str) -> str:
    """Edit link for a document, used in confirmation messages."""
    return DOCUMENT_URL_TEMPLATE.format(document_id=document_id)
