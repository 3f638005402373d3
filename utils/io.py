"""I/O utilities.

JSON and video file loading for the command-line analyzer.
"""

from __future__ import annotations

import base64
import json
import mimetypes
from pathlib import Path
from typing import Any, Dict, Tuple, Union


PathLike = Union[str, Path]


def load_json_file(path: PathLike) -> Dict[str, Any]:
    """Load a JSON file into a dictionary.

    Args:
        path: Path to a JSON file.

    Returns:
        Parsed JSON as a dictionary.
    """
    p = Path(path)
    with p.open("r") as f:
        return json.load(f)


def load_video_base64(path: PathLike) -> Tuple[str, str]:
    """Read a video file as the base64 payload the API expects.

    Returns:
        ``(base64_data, mime_type)``; the mime type is guessed from the
        extension and defaults to ``video/mp4``.
    """
    p = Path(path)
    mime_type, _ = mimetypes.guess_type(p.name)
    with p.open("rb") as f:
        data = base64.b64encode(f.read()).decode("ascii")
    return data, mime_type or "video/mp4"
