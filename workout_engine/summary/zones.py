from __future__ import annotations

from typing import Iterable, List, Optional, Tuple

from ..models.types import WorkoutSegment

MIXED = "mixed"

# Ascending upper bounds (% FTP, exclusive) for classifying aggregate work intensity
ZONE_THRESHOLDS: List[Tuple[float, str]] = [
    (70.0, "recovery"),
    (80.0, "endurance"),
    (88.0, "tempo"),
    (95.0, "sweet_spot"),
    (105.0, "threshold"),
    (110.0, "vo2max"),
    (120.0, "anaerobic"),
]
TOP_ZONE = "neuromuscular"


def mean_relative_intensity(segments: Iterable[WorkoutSegment], ftp_watts: float) -> Optional[float]:
    """Unweighted mean of each segment's midpoint target as % of FTP.

    Returns None for FTP <= 0 or no segments.
    """
    segs = list(segments)
    if ftp_watts <= 0 or not segs:
        return None
    total = sum(seg.target_range.midpoint / ftp_watts * 100.0 for seg in segs)
    return total / len(segs)


def zone_for_intensity(intensity_pct: Optional[float]) -> str:
    if intensity_pct is None:
        return MIXED
    for upper, zone in ZONE_THRESHOLDS:
        if intensity_pct < upper:
            return zone
    return TOP_ZONE


def classify_zone(work_segments: Iterable[WorkoutSegment], ftp_watts: float) -> str:
    """Bucket the work segments' average intensity into a named training zone."""
    if ftp_watts <= 0:
        return MIXED
    return zone_for_intensity(mean_relative_intensity(work_segments, ftp_watts))
