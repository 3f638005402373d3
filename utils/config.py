"""Configuration helpers.

Loads a .env file and reads the Gemini settings the analysis agent needs.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv


DEFAULT_GEMINI_MODEL = "gemini-2.5-pro"
DEFAULT_RESPONSE_MIME_TYPE = "application/json"


def load_env() -> None:
    """Load environment variables from a .env file, if one exists.

    Variables already set in the environment take precedence.
    """
    load_dotenv()


def get_required_env(key: str) -> str:
    """Get a required environment variable or raise a helpful error.

    Args:
        key: The environment variable name to retrieve.

    Returns:
        The environment variable value.

    Raises:
        RuntimeError: If the environment variable is not set.
    """
    value: Optional[str] = os.getenv(key)
    if not value:
        raise RuntimeError(f"Required environment variable not set: {key}")
    return value


@dataclass(frozen=True)
class GeminiSettings:
    api_key: str
    model: str = DEFAULT_GEMINI_MODEL
    response_mime_type: str = DEFAULT_RESPONSE_MIME_TYPE
    temperature: float = 0.2

    @classmethod
    def from_env(cls) -> "GeminiSettings":
        """Build settings from GEMINI_* variables.

        GEMINI_API_KEY is preferred; GOOGLE_API_KEY is accepted as a fallback.

        Raises:
            RuntimeError: If neither API key variable is set.
        """
        api_key = os.getenv("GOOGLE_API_KEY")
        if os.getenv("GEMINI_API_KEY") or not api_key:
            api_key = get_required_env("GEMINI_API_KEY")
        return cls(
            api_key=api_key,
            model=os.getenv("GEMINI_MODEL", DEFAULT_GEMINI_MODEL),
            response_mime_type=os.getenv("GEMINI_RESPONSE_MIME_TYPE", DEFAULT_RESPONSE_MIME_TYPE),
            temperature=float(os.getenv("GEMINI_TEMPERATURE", "0.2")),
        )
