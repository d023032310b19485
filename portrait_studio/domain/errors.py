"""Error taxonomy for the edit pipeline.

Operation errors are raised by the normalizer or the edit gateway and end a
single upload/edit; the session service stores them as ``last_error``.
Caller errors (``InvalidSessionOperation``) reject an operation before it
starts and are raised straight back to the caller.
"""
from __future__ import annotations


class StudioError(Exception):
    kind = "error"
    user_message = "Something went wrong. Please try again."

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.user_message)
        self.message = message or self.user_message


class DecodeError(StudioError):
    kind = "decode"
    user_message = "The file could not be read as an image. Try a JPEG or PNG photo."


class FileTooLargeError(StudioError):
    kind = "file_too_large"
    user_message = "The file is too large."

    def __init__(self, size: int, limit: int) -> None:
        super().__init__(f"File is {size} bytes, limit is {limit} bytes")
        self.size = size
        self.limit = limit
        self.user_message = f"The file is too large. The maximum size is {limit / (1024 * 1024):g} MB."


class ConfigurationError(StudioError):
    kind = "configuration"
    user_message = "The editing service is not configured. Set GEMINI_API_KEY and restart."


class EmptyResponseError(StudioError):
    kind = "empty_response"
    user_message = "The editing service returned no result. Please try again."


class ServiceRefusalError(StudioError):
    """The remote model answered with text instead of an image."""

    kind = "refusal"
    user_message = "The editing service declined this request."


class AuthError(StudioError):
    kind = "auth"
    user_message = "The editing service rejected the API key. Check your credentials."


class RateLimitError(StudioError):
    kind = "rate_limit"
    user_message = "Too many requests to the editing service. Wait a moment and retry."


class TransportError(StudioError):
    kind = "transport"
    user_message = "Could not reach the editing service. Check your connection and retry."


class InvalidSessionOperation(StudioError):
    kind = "invalid_operation"
    user_message = "This action is not available right now."


class SessionBusyError(InvalidSessionOperation):
    kind = "busy"
    user_message = "Another operation is still in progress."


class NoImageError(InvalidSessionOperation):
    kind = "no_image"
    user_message = "Upload a photo first."
