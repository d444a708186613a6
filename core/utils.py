import asyncio
import functools
import logging
import re
import ssl

from googleapiclient.errors import HttpError

from core.errors import (
    APIError,
    PermissionDeniedError,
    RateLimitError,
    ResourceNotFoundError,
    ValidationError,
)

logger = logging.getLogger(__name__)


def validate_document_id(document_id: str, param_name: str = "document_id") -> str:
    """Validate a Google Docs document ID."""
    if not document_id:
        raise ValidationError(f"{param_name} is required")

    document_id = document_id.strip()
    if not document_id:
        raise ValidationError(f"{param_name} cannot be empty")

    if not re.match(r"^[\w\-_]+$", document_id):
        raise ValidationError(f"{param_name} contains invalid characters")

    return document_id


def validate_positive_int(value: int, param_name: str, max_value: int | None = None) -> int:
    """Validate a positive integer."""
    if not isinstance(value, int) or isinstance(value, bool) or value < 1:
        raise ValidationError(f"{param_name} must be a positive integer")

    if max_value is not None and value > max_value:
        raise ValidationError(f"{param_name} cannot exceed {max_value}")

    return value


def utf16_len(text: str) -> int:
    """Length of text in UTF-16 code units, the unit Google Docs indexes by."""
    return len(text.encode("utf-16-le")) // 2


class TransientNetworkError(Exception):
    """Custom exception for transient network errors after retries."""

    pass


def _api_error_for_status(status: int, message: str) -> APIError:
    if status == 404:
        return ResourceNotFoundError(message, status_code=status)
    if status in (401, 403):
        return PermissionDeniedError(message, status_code=status)
    if status == 429:
        return RateLimitError(message, status_code=status)
    return APIError(message, status_code=status)


def handle_http_errors(operation: str, is_read_only: bool = False):
    """
    A decorator to handle Google API HttpErrors and transient SSL errors in a standardized way.

    It wraps an async Docs API call, catches HttpError, logs a detailed error message,
    and raises an APIError subclass chosen by HTTP status.

    If is_read_only is True, it will also catch ssl.SSLError and retry with
    exponential backoff. After exhausting retries, it raises a TransientNetworkError.

    Args:
        operation (str): The name of the API operation being decorated (e.g., 'documents.get').
        is_read_only (bool): If True, the operation is considered safe to retry on
                             transient network errors. Defaults to False.
    """

    def decorator(func):
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            max_retries = 3
            base_delay = 1

            for attempt in range(max_retries):
                try:
                    return await func(*args, **kwargs)
                except ssl.SSLError as e:
                    if is_read_only and attempt < max_retries - 1:
                        delay = base_delay * (2**attempt)
                        logger.warning(
                            f"SSL error in {operation} on attempt {attempt + 1}: {e}. Retrying in {delay} seconds..."
                        )
                        await asyncio.sleep(delay)
                    else:
                        logger.error(f"SSL error in {operation} on final attempt: {e}. Raising exception.")
                        raise TransientNetworkError(
                            f"A transient SSL error occurred in '{operation}' after {attempt + 1} attempt(s). "
                            "This is likely a temporary network or certificate issue. Please try again shortly."
                        ) from e
                except HttpError as error:
                    status = error.resp.status
                    if status in (401, 403):
                        message = (
                            f"API error in {operation}: {error}. "
                            "You might need to re-authenticate or request access to the document."
                        )
                    else:
                        message = f"API error in {operation}: {error}"

                    logger.error(f"API error in {operation}: {error}", exc_info=True)
                    raise _api_error_for_status(status, message) from error
                except (APIError, ValidationError, TransientNetworkError):
                    raise
                except Exception as e:
                    message = f"An unexpected error occurred in {operation}: {e}"
                    logger.exception(message)
                    raise APIError(message) from e

        return wrapper

    return decorator
