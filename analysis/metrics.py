"""Summary statistics derived from a list of reps.

Reps are plain dicts as reported by Gemini. "First" and "last" always mean
array position, so reps must be in detection order.
"""

from __future__ import annotations

import re
from typing import Any, Dict, List, Optional, Sequence


Rep = Dict[str, Any]

_TIMESTAMP_RE = re.compile(r"^\s*(?:(\d+):)?(\d{1,2}):(\d{1,2}(?:\.\d+)?)\s*$")


def as_number(value: Any) -> float:
    """Coerce a reported value to float, treating junk as 0."""
    if isinstance(value, bool):
        return 0.0
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def _field(rep: Any, field: str) -> float:
    if not isinstance(rep, dict):
        return 0.0
    return as_number(rep.get(field))


def average(reps: Optional[Sequence[Rep]], field: str) -> float:
    """Mean of ``field`` over all reps, 0 for an empty sequence."""
    if not reps:
        return 0
    return sum(_field(rep, field) for rep in reps) / len(reps)


def velocity_dropoff(reps: Optional[Sequence[Rep]]) -> float:
    """Percentage drop in velocity score from the first rep to the last.

    Returns 0 with fewer than two reps or when the first score is 0.
    """
    if not reps or len(reps) < 2:
        return 0
    first = _field(reps[0], "velocityScore")
    last = _field(reps[-1], "velocityScore")
    if first == 0:
        return 0
    return (first - last) / first * 100


def parse_timestamp(value: Any) -> Optional[float]:
    """Convert ``MM:SS.s`` (or ``H:MM:SS.s``) to seconds, None if unparsable."""
    if not isinstance(value, str):
        return None
    match = _TIMESTAMP_RE.match(value)
    if not match:
        return None
    hours, minutes, seconds = match.groups()
    return int(hours or 0) * 3600 + int(minutes) * 60 + float(seconds)


def invalid_rep_numbers(reps: Sequence[Rep]) -> List[Any]:
    """Rep numbers whose reported timing cannot be right.

    A rep is flagged when its duration is negative or its end timestamp
    precedes its start timestamp. Nothing is rewritten.
    """
    flagged: List[Any] = []
    for index, rep in enumerate(reps):
        if not isinstance(rep, dict):
            continue
        start = parse_timestamp(rep.get("startTime"))
        end = parse_timestamp(rep.get("endTime"))
        duration = rep.get("duration")
        negative = isinstance(duration, (int, float)) and not isinstance(duration, bool) and duration < 0
        reversed_times = start is not None and end is not None and end < start
        if negative or reversed_times:
            flagged.append(rep.get("repNumber", index + 1))
    return flagged
