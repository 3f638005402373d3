"""Training protocol submitted alongside a kettlebell video.

The protocol is built from the ``protocol`` object of the request body
(camelCase keys, as sent by the web client) and is never persisted.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

from analysis.errors import CallerError


Number = Union[int, float]

EXERCISE_NAMES: Dict[str, str] = {
    "snatch": "kettlebell snatch",
    "swing": "kettlebell swing",
    "clean": "kettlebell clean",
    "clean-press": "kettlebell clean and press",
    "jerk": "kettlebell jerk",
}
GENERIC_EXERCISE_NAME = "kettlebell exercise"

ALTERNATING_PATTERNS = ("alternating-sets", "alternating-reps")
ARMS = ("left", "right")


@dataclass(frozen=True)
class Protocol:
    exercise: str
    weight: Number
    reps_per_set: int
    interval: Number
    arm_pattern: str = "unspecified"
    starting_arm: Optional[str] = None

    @property
    def exercise_name(self) -> str:
        return EXERCISE_NAMES.get(self.exercise, GENERIC_EXERCISE_NAME)


def _positive_number(payload: Dict[str, Any], key: str) -> Number:
    value = payload.get(key)
    if value is None or isinstance(value, bool):
        raise CallerError(f"protocol.{key} is required and must be a positive number")
    try:
        number = float(value)
    except (TypeError, ValueError) as exc:
        raise CallerError(f"protocol.{key} must be a positive number, got {value!r}") from exc
    if not number > 0 or number == float("inf"):
        raise CallerError(f"protocol.{key} must be a positive number, got {value!r}")
    # Keep integral values as ints so they print as "16", not "16.0"
    return int(number) if number.is_integer() else number


def parse_protocol(payload: Any) -> Protocol:
    """Validate a request ``protocol`` object and build a :class:`Protocol`.

    Unknown exercises and arm patterns are accepted (they compile to generic
    instructions). Alternating arm patterns require ``startingArm``.

    Raises:
        CallerError: If a required field is missing or invalid.
    """
    if not isinstance(payload, dict):
        raise CallerError("protocol must be an object")

    exercise = str(payload.get("exercise") or "").strip()
    weight = _positive_number(payload, "weight")
    reps = _positive_number(payload, "repsPerSet")
    if not isinstance(reps, int):
        raise CallerError(f"protocol.repsPerSet must be a whole number, got {reps!r}")
    interval = _positive_number(payload, "interval")

    arm_pattern = str(payload.get("armPattern") or "unspecified").strip()
    starting_arm: Optional[str] = None
    if arm_pattern in ALTERNATING_PATTERNS:
        raw_arm = payload.get("startingArm")
        starting_arm = str(raw_arm).strip().lower() if raw_arm else None
        if starting_arm not in ARMS:
            raise CallerError(
                f"protocol.startingArm must be 'left' or 'right' when armPattern is {arm_pattern}"
            )

    return Protocol(
        exercise=exercise,
        weight=weight,
        reps_per_set=reps,
        interval=interval,
        arm_pattern=arm_pattern,
        starting_arm=starting_arm,
    )
