"""Error types for the kettlebell analysis pipeline.

CallerError and UpstreamError reach the HTTP layer as ``{error, message}``
responses. MalformedResponseError never leaves the response parser.
"""

from __future__ import annotations

from typing import Dict, Optional


class AnalysisError(Exception):
    """Base class for failures that map onto a JSON error response."""

    status_code = 500
    error = "Analysis failed"

    def __init__(self, message: str, error: Optional[str] = None):
        super().__init__(message)
        self.message = message
        if error is not None:
            self.error = error

    def to_dict(self) -> Dict[str, str]:
        return {"error": self.error, "message": self.message}


class CallerError(AnalysisError):
    """The request is missing fields or carries invalid values."""

    status_code = 400
    error = "Invalid request"


class UpstreamError(AnalysisError):
    """The Gemini call itself failed (network, auth, quota, bad media)."""

    status_code = 500
    error = "Analysis failed"


class MalformedResponseError(ValueError):
    """Gemini answered, but not with the JSON object we asked for."""
