"""Error taxonomy for the capture-and-analysis pipeline.

Every error carries the HTTP status the web layer answers with, a
human-readable message, and (where available) the underlying cause.

Navigation timeouts and consent/ad cleanup failures are deliberately absent:
they are logged by the renderer and never raised.
"""

from __future__ import annotations

from typing import Optional


class FrontPageError(Exception):
    """Base class for every error surfaced to an HTTP client."""

    status_code: int = 500

    def __init__(self, message: str, detail: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.detail = detail

    def __str__(self) -> str:
        if self.detail:
            return f"{self.message}: {self.detail}"
        return self.message

    def to_dict(self) -> dict:
        """Return the JSON error body for this error."""
        body = {"error": self.message}
        if self.detail:
            body["details"] = self.detail
        return body


class RequestValidationError(FrontPageError):
    """A required request field is missing or malformed."""

    status_code = 400


class ArtifactNotFoundError(FrontPageError):
    """The referenced screenshot is not (or no longer) in the store."""

    status_code = 404


class RenderInfrastructureError(FrontPageError):
    """The headless browser could not be launched or driven."""


class ExternalServiceError(FrontPageError):
    """The model provider call itself failed."""


class CaptureTimeoutError(FrontPageError):
    """The capture pipeline exceeded its ceiling timer."""


class CaptureCancelledError(FrontPageError):
    """Raised inside a capture worker once its ceiling timer has fired."""


class ModelResponseShapeError(FrontPageError):
    """The model's output failed JSON decoding or shape validation."""

    def __init__(self, kind: str, reason: str) -> None:
        super().__init__(f"Failed to parse {kind} response from model", reason)
        self.kind = kind
        self.reason = reason
