"""Per-rep breakdown of a normalized analysis result.

Builds the rep table (duration deviation from the average) and the velocity
bar chart data, and renders both as plain text for the command line.
"""

from __future__ import annotations

from typing import Any, Dict, List

from analysis.metrics import as_number


TEMPO_THRESHOLD_PERCENT = 5.0
BELOW_AVERAGE_RATIO = 0.9


def build_rep_table(result: Dict[str, Any]) -> List[Dict[str, Any]]:
    """One row per rep with its duration deviation from ``avgDuration``.

    ``tempo`` is "slow" above +5 %, "fast" below -5 %, otherwise "even".
    """
    avg_duration = as_number(result.get("avgDuration"))
    rows: List[Dict[str, Any]] = []
    for rep in result.get("reps") or []:
        if not isinstance(rep, dict):
            continue
        duration = as_number(rep.get("duration"))
        diff = (duration - avg_duration) / avg_duration * 100 if avg_duration else 0.0
        if diff > TEMPO_THRESHOLD_PERCENT:
            tempo = "slow"
        elif diff < -TEMPO_THRESHOLD_PERCENT:
            tempo = "fast"
        else:
            tempo = "even"
        rows.append({
            "repNumber": rep.get("repNumber"),
            "arm": rep.get("arm", ""),
            "duration": duration,
            "velocityScore": as_number(rep.get("velocityScore")),
            "durationDiffPercent": diff,
            "tempo": tempo,
        })
    return rows


def build_velocity_chart(result: Dict[str, Any]) -> List[Dict[str, Any]]:
    """Bar heights relative to the fastest rep, flagging slow reps.

    A rep is below average when its score is under 90 % of ``avgVelocity``.
    """
    reps = [rep for rep in result.get("reps") or [] if isinstance(rep, dict)]
    scores = [as_number(rep.get("velocityScore")) for rep in reps]
    max_score = max(scores) if scores else 0.0
    avg_velocity = as_number(result.get("avgVelocity"))

    bars: List[Dict[str, Any]] = []
    for rep, score in zip(reps, scores):
        bars.append({
            "repNumber": rep.get("repNumber"),
            "heightPercent": score / max_score * 100 if max_score > 0 else 0.0,
            "belowAverage": score < avg_velocity * BELOW_AVERAGE_RATIO,
        })
    return bars


def format_report(result: Dict[str, Any]) -> str:
    lines = [
        f"Total reps: {result.get('totalReps', 0)}",
        f"Avg duration: {as_number(result.get('avgDuration')):.2f}s",
        f"Avg velocity: {as_number(result.get('avgVelocity')):.1f}/10",
        f"Velocity drop: {as_number(result.get('velocityDropoff')):.1f}%",
        f"Fastest rep: {result.get('fastestRep')}  Slowest rep: {result.get('slowestRep')}",
        "",
    ]
    rows = build_rep_table(result)
    if rows:
        lines.append(f"{'Rep':>4}  {'Arm':<6} {'Duration':>9} {'Velocity':>9} {'vs Avg':>8}")
        for row in rows:
            sign = "+" if row["durationDiffPercent"] > 0 else ""
            lines.append(
                f"{row['repNumber']!s:>4}  {row['arm']!s:<6} {row['duration']:>8.2f}s "
                f"{row['velocityScore']:>6.0f}/10 {sign}{row['durationDiffPercent']:>6.1f}%"
            )
        lines.append("")
    lines.append(f"Coaching notes: {result.get('coachingNotes', '')}")
    return "\n".join(lines)
