"""Arm usage rules for the analysis prompt."""

from __future__ import annotations

from typing import Optional, Union

from analysis.errors import CallerError


UNSPECIFIED_ARM_RULE = "Identify which arm is used for each rep based on visual observation."


def describe_arm_pattern(
    arm_pattern: Optional[str],
    starting_arm: Optional[str] = None,
    interval: Optional[Union[int, float]] = None,
) -> str:
    """Return the sentence telling Gemini which arm performs each rep.

    Unknown or missing patterns fall back to visual inference rather than
    raising. Alternating patterns need ``starting_arm``.
    """
    if arm_pattern == "left-only":
        return "All reps are performed with the LEFT arm."
    if arm_pattern == "right-only":
        return "All reps are performed with the RIGHT arm."
    if arm_pattern == "both":
        return "This is a two-handed exercise (both arms used simultaneously)."

    if arm_pattern in ("alternating-sets", "alternating-reps"):
        if not starting_arm:
            raise CallerError(f"startingArm is required for arm pattern {arm_pattern}")
        arm = starting_arm.lower()
        if arm_pattern == "alternating-reps":
            return f"Arms alternate each rep. Starting arm: {arm.upper()}."
        return (
            f"Arms alternate each set (every {interval} seconds). "
            f"Starting arm: {arm.upper()}. "
            f"So sets 1,3,5... use {arm}, sets 2,4,6... use the other arm."
        )

    return UNSPECIFIED_ARM_RULE
