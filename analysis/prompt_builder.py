"""Compile a training protocol into the Gemini analysis prompt.

The prompt must stay byte-for-byte stable for a given protocol: the response
parser relies on Gemini always being asked for the same JSON shape.
"""

from __future__ import annotations

from analysis.arm_pattern import describe_arm_pattern
from analysis.protocol import Protocol


RESPONSE_TEMPLATE = """{
    "reps": [
        {"repNumber": 1, "arm": "Left", "startTime": "00:03.2", "endTime": "00:04.1", "duration": 0.9, "velocityScore": 8}
    ],
    "summary": {
        "totalReps": 0,
        "avgDuration": 0.0,
        "avgVelocity": 0.0,
        "fastestRep": 1,
        "slowestRep": 1,
        "velocityDropPercent": 0.0
    },
    "coachingNotes": "Brief observation about consistency, fatigue, technique."
}"""


def build_prompt(protocol: Protocol) -> str:
    arm_rule = describe_arm_pattern(
        protocol.arm_pattern, protocol.starting_arm, protocol.interval
    )
    lines = [
        "Analyze this kettlebell video for velocity-based training metrics.",
        "",
        "PROTOCOL:",
        f"- Exercise: {protocol.exercise_name}",
        f"- Weight: {protocol.weight}kg",
        f"- Expected: {protocol.reps_per_set} reps every {protocol.interval} seconds",
        f"- {arm_rule}",
        "",
        "TASK: For each rep, identify the start time (hip hinge/pull), end time (lockout), "
        "duration, and estimate velocity on a 1-10 scale.",
        "- Number reps sequentially across the whole video, starting at 1.",
        "- Timestamps use the format MM:SS.s and duration is endTime minus startTime in seconds.",
        "- arm is one of \"Left\", \"Right\" or \"Both\".",
        "- velocityScore is an integer from 1 to 10, where 10 is the fastest, most explosive rep.",
        "",
        "Return this exact JSON structure:",
        RESPONSE_TEMPLATE,
        "",
        "Respond with the JSON object only. Do not add any text before or after it "
        "and do not wrap it in markdown code fences.",
    ]
    return "\n".join(lines)
