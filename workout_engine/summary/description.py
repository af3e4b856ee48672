from __future__ import annotations

from typing import Dict, Optional, Sequence

from ..models.types import DerivedStats, WorkoutPlan, WorkoutSegment
from .zones import classify_zone, mean_relative_intensity

METRIC_DELIMITER = " | "

_GOAL_TEMPLATES: Dict[str, str] = {
    "recovery": "Complete {minutes} minute recovery session to promote recovery",
    "endurance": "Build aerobic base with {minutes} minutes of endurance work",
    "tempo": "Develop muscular endurance with {minutes} minutes of tempo work",
    "sweet_spot": "Build aerobic capacity with {minutes} minutes of sweet spot work",
    "threshold": "Accumulate {minutes} minutes in threshold range",
    "vo2max": "Develop aerobic power with {minutes} minutes of VO2max work",
    "anaerobic": "Improve anaerobic capacity with {minutes} minutes of anaerobic work",
    "neuromuscular": "Develop neuromuscular power with {minutes} minutes of sprint work",
}
_FALLBACK_GOAL = "Complete {minutes} minutes of structured work"
_NO_WORK_GOAL = "Recovery ride as part of training block"


def _work_minutes(work_segments: Sequence[WorkoutSegment]) -> int:
    return int(round(sum(seg.duration_sec for seg in work_segments) / 60.0))


def goal_statement(plan: WorkoutPlan, segments: Optional[Sequence[WorkoutSegment]] = None) -> str:
    work = [seg for seg in (plan.segments if segments is None else segments) if seg.is_work]
    if not work:
        return _NO_WORK_GOAL
    zone = classify_zone(work, plan.ftp_watts)
    template = _GOAL_TEMPLATES.get(zone, _FALLBACK_GOAL)
    return template.format(minutes=_work_minutes(work))


def metrics_suffix(stats: DerivedStats) -> str:
    """Adherence always; other metrics only when strictly positive."""
    parts = [f"Adherence: {round(stats.adherence_pct)}%"]
    if stats.average_power > 0:
        parts.append(f"Avg Power: {round(stats.average_power)}W")
    if stats.training_stress_score > 0:
        parts.append(f"TSS: {round(stats.training_stress_score)}")
    if stats.normalized_power > 0:
        parts.append(f"NP: {round(stats.normalized_power)}W")
    return METRIC_DELIMITER.join(parts)


def describe_workout(
    plan: WorkoutPlan,
    stats: DerivedStats,
    segments: Optional[Sequence[WorkoutSegment]] = None,
) -> str:
    """Render e.g. "Accumulate 20 minutes in threshold range. Adherence: 94% | Avg Power: 285W | TSS: 65"."""
    return f"{goal_statement(plan, segments)}. {metrics_suffix(stats)}"


def short_description(plan: WorkoutPlan) -> str:
    work = plan.work_segments
    if not work:
        return "Recovery ride"
    count = len(work)
    avg_minutes = round(_work_minutes(work) / count)
    intensity = mean_relative_intensity(work, plan.ftp_watts)
    pct = round(intensity) if intensity is not None else 0
    return f"{count}x{avg_minutes}min intervals @ {pct}% FTP"
