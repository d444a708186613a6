"""
Custom error types for Markdown publishing to Google Docs.

Provides user-friendly error messages and structured error handling.
"""


# =============================================================================
# Base Exception Hierarchy
# =============================================================================


class GDocsMarkdownError(Exception):
    """Base exception for all gdocs-markdown errors."""

    pass


# =============================================================================
# Validation Errors
# =============================================================================


class ValidationError(GDocsMarkdownError):
    """Raised when input validation fails."""

    pass


# =============================================================================
# API Errors
# =============================================================================


class APIError(GDocsMarkdownError):
    """Raised for general Google API errors."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class ResourceNotFoundError(APIError):
    """Raised when a requested document doesn't exist (404)."""

    pass


class PermissionDeniedError(APIError):
    """Raised when the user lacks permission for an operation (401/403)."""

    pass


class RateLimitError(APIError):
    """Raised when API rate limits are exceeded (429)."""

    pass


class TableMaterializationError(APIError):
    """
    Raised when table materialization stops part way through a document.

    Text, styles and every table completed before the failure stay applied;
    nothing is rolled back.
    """

    def __init__(
        self,
        message: str,
        tables_completed: int,
        tables_remaining: int,
        status_code: int | None = None,
    ):
        super().__init__(
            f"{message} ({tables_completed} table(s) materialized, {tables_remaining} not applied)",
            status_code=status_code,
        )
        self.tables_completed = tables_completed
        self.tables_remaining = tables_remaining


# =============================================================================
# Sequencing Errors
# =============================================================================


class StalePositionError(RuntimeError):
    """
    Raised when a document position is used after a structural mutation.

    Positions are only valid for the document generation they were read from.
    Not a GDocsMarkdownError: the publishing code never catches it.
    """

    def __init__(self, layout_generation: int, current_generation: int):
        super().__init__(
            f"Table layout from generation {layout_generation} used at generation {current_generation}; "
            "re-query the document after every structural change."
        )
        self.layout_generation = layout_generation
        self.current_generation = current_generation
