"""Technical workout names: "{Type} - {Structure} @ {Intensity}".

Examples:
- "Sweet Spot Intervals - 4x3min @ 91% FTP"
- "Threshold Intervals - 2x20min @ 100% FTP"
- "Recovery Ride - 45min @ 55% FTP"
"""
from __future__ import annotations

from typing import Dict

from ..models.types import WorkoutPlan
from .zones import MIXED, mean_relative_intensity

_CATEGORY_BY_TYPE: Dict[str, str] = {
    "Recovery": "recovery",
    "Endurance": "endurance",
    "Tempo": "tempo",
    "Sweet Spot": "sweet_spot",
    "Threshold": "threshold",
    "VO2max": "vo2max",
    "Anaerobic": "anaerobic",
    "Neuromuscular": "neuromuscular",
}


def _format_duration(seconds: float) -> str:
    if seconds < 60:
        return f"{int(round(seconds))}s"
    hours = int(seconds // 3600)
    minutes = int((seconds % 3600) // 60)
    if hours > 0:
        return f"{hours}h{minutes if minutes > 0 else ''}"
    return f"{minutes}min"


def _workout_type(avg_intensity: int, avg_interval_s: float) -> str:
    if avg_intensity < 70:
        return "Recovery Ride"
    if avg_intensity < 80:
        return "Endurance Ride"
    if 88 <= avg_intensity <= 94:
        return "Sweet Spot Intervals"
    if 95 <= avg_intensity <= 105:
        return "Threshold Intervals"
    if avg_intensity > 120 and avg_interval_s < 60:
        return "Neuromuscular Intervals"
    if avg_intensity > 110 and avg_interval_s < 120:
        return "Anaerobic Intervals"
    if avg_intensity > 105 and avg_interval_s < 300:
        return "VO2max Intervals"
    if avg_interval_s >= 600:
        return "Tempo Intervals"
    return "Mixed Intervals"


def _avg_intensity(plan: WorkoutPlan) -> int:
    intensity = mean_relative_intensity(plan.work_segments, plan.ftp_watts)
    return int(round(intensity)) if intensity is not None else 0


def generate_workout_name(plan: WorkoutPlan) -> str:
    work = plan.work_segments
    if not work:
        return f"Recovery Ride - {_format_duration(plan.total_duration_sec)} @ 55% FTP"
    count = len(work)
    avg_interval_s = sum(seg.duration_sec for seg in work) / count
    intensity = _avg_intensity(plan)
    duration = _format_duration(avg_interval_s)
    structure = duration if count == 1 else f"{count}x{duration}"
    return f"{_workout_type(intensity, avg_interval_s)} - {structure} @ {intensity}% FTP"


def workout_category(plan: WorkoutPlan) -> str:
    """Coarse category for grouping/filtering, derived from the generated name."""
    name = generate_workout_name(plan)
    for token, category in _CATEGORY_BY_TYPE.items():
        if token in name:
            return category
    return MIXED


def is_high_intensity(plan: WorkoutPlan) -> bool:
    if not plan.work_segments:
        return False
    return _avg_intensity(plan) > 100
