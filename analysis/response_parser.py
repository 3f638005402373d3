"""Turn Gemini's reply into a normalized analysis result.

Gemini is asked for bare JSON but regularly wraps it in markdown fences or adds
a sentence of commentary. ``parse_analysis_response`` strips that, parses the
object and fills every summary field, either from what Gemini reported or from
the reps themselves. It never raises: unparsable replies become a degraded
result whose coaching notes carry the start of the raw text.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Dict, Optional

from analysis.errors import MalformedResponseError
from analysis.metrics import as_number, average, invalid_rep_numbers, velocity_dropoff


logger = logging.getLogger(__name__)

DEFAULT_COACHING_NOTES = "Analysis complete. Review the rep-by-rep data for insights."
PARSE_ERROR_PREFIX = "Parse error. Gemini response: "
RAW_PREVIEW_CHARS = 300

_LEADING_FENCE_RE = re.compile(r"^```[\w-]*[ \t]*\n?")
_TRAILING_FENCE_RE = re.compile(r"\n?```$")
_JSON_OBJECT_RE = re.compile(r"\{.*\}", re.DOTALL)


def strip_code_fences(text: str) -> str:
    """Remove a leading ```/```json fence and a trailing ``` fence."""
    text = _LEADING_FENCE_RE.sub("", text, count=1)
    text = _TRAILING_FENCE_RE.sub("", text, count=1)
    return text.strip()


def extract_json_object(text: str) -> str:
    """Return the span from the first ``{`` to the last ``}``, or the text itself."""
    match = _JSON_OBJECT_RE.search(text)
    return match.group(0) if match else text


def load_payload(raw_text: Any) -> Dict[str, Any]:
    """Clean and parse the raw reply into a dict.

    Raises:
        MalformedResponseError: If no JSON object can be recovered.
    """
    if not isinstance(raw_text, str):
        raise MalformedResponseError(f"expected text, got {type(raw_text).__name__}")
    candidate = extract_json_object(strip_code_fences(raw_text.strip())).strip()
    try:
        data = json.loads(candidate)
    except (ValueError, RecursionError) as exc:
        raise MalformedResponseError(f"invalid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise MalformedResponseError(f"expected a JSON object, got {type(data).__name__}")
    return data


def _reported(summary: Dict[str, Any], *keys: str, signed: bool = False) -> Optional[float]:
    # 0 counts as not reported; negatives too unless the field is signed
    for key in keys:
        value = summary.get(key)
        if isinstance(value, bool):
            continue
        if isinstance(value, str):
            number = as_number(value)
            value = int(number) if number.is_integer() else number
        if isinstance(value, (int, float)) and (value > 0 or (signed and value < 0)):
            return value
    return None


def normalize_payload(data: Dict[str, Any]) -> Dict[str, Any]:
    """Reconcile a parsed reply into the NormalizedResult shape."""
    reps = data.get("reps")
    if not isinstance(reps, list):
        reps = []
    summary = data.get("summary")
    if not isinstance(summary, dict):
        summary = {}

    flagged = invalid_rep_numbers(reps)
    if flagged:
        logger.warning("Gemini reported inconsistent timing for reps %s", flagged)

    rep_count = len(reps)
    total_reps = _reported(summary, "totalReps")
    avg_duration = _reported(summary, "avgDuration")
    avg_velocity = _reported(summary, "avgVelocity")
    fastest = _reported(summary, "fastestRep")
    slowest = _reported(summary, "slowestRep")
    dropoff = _reported(summary, "velocityDropPercent", "velocityDropoff", signed=True)

    notes = data.get("coachingNotes")
    if not isinstance(notes, str) or not notes.strip():
        notes = DEFAULT_COACHING_NOTES

    return {
        "reps": reps,
        "totalReps": total_reps if total_reps is not None else rep_count,
        "avgDuration": avg_duration if avg_duration is not None else average(reps, "duration"),
        "avgVelocity": avg_velocity if avg_velocity is not None else average(reps, "velocityScore"),
        # Position heuristic, not a search over velocity scores
        "fastestRep": fastest if fastest is not None else 1,
        "slowestRep": slowest if slowest is not None else (rep_count or 1),
        "velocityDropoff": dropoff if dropoff is not None else velocity_dropoff(reps),
        "coachingNotes": notes,
    }


def fallback_result(raw_text: Any) -> Dict[str, Any]:
    """Degraded result returned when the reply cannot be parsed."""
    preview = raw_text[:RAW_PREVIEW_CHARS] if isinstance(raw_text, str) else repr(raw_text)[:RAW_PREVIEW_CHARS]
    return {
        "reps": [],
        "totalReps": 0,
        "avgDuration": 0,
        "avgVelocity": 0,
        "fastestRep": 0,
        "slowestRep": 0,
        "velocityDropoff": 0,
        "coachingNotes": PARSE_ERROR_PREFIX + preview,
    }


def parse_analysis_response(raw_text: Any) -> Dict[str, Any]:
    try:
        data = load_payload(raw_text)
    except MalformedResponseError as exc:
        logger.warning("Failed to parse Gemini response (%s). Raw: %.300s", exc, raw_text)
        return fallback_result(raw_text)
    return normalize_payload(data)
