"""
Service exceptions.

Each error carries the HTTP status the API layer answers with.
"""

from typing import Optional


class PdfServiceError(Exception):
    """Base class for errors raised by the PDF service."""

    status_code: int = 500

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class UrlValidationError(PdfServiceError):
    """The target URL is missing or malformed."""

    status_code = 400

    def __init__(self, message: str, example=None):
        super().__init__(message)
        self.example = example


class RenderError(PdfServiceError):
    """Raised when page rendering or PDF export fails."""

    status_code = 500


class SessionUnavailableError(RenderError):
    """No browser session became free before the queue deadline."""

    status_code = 503


class ClientDisconnectedError(PdfServiceError):
    """The client went away while its PDF was being rendered."""

    status_code = 499
