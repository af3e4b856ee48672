"""Training metrics calculated from telemetry sample streams."""

from .compute import (
    adherence,
    average_cadence,
    average_heart_rate,
    average_power,
    compute_raw_stats,
    compute_stats,
    max_power,
    normalized_power,
    samples_to_frame,
    training_stress_score,
)

__all__ = [
    "adherence",
    "average_cadence",
    "average_heart_rate",
    "average_power",
    "compute_raw_stats",
    "compute_stats",
    "max_power",
    "normalized_power",
    "samples_to_frame",
    "training_stress_score",
]
