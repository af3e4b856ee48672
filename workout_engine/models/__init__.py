"""Typed domain objects for plans, diagnostics and telemetry."""

from .types import (
    ActiveSegment,
    CompileResult,
    DerivedStats,
    Diagnostic,
    IntervalKind,
    RawStats,
    SegmentPhase,
    TargetRange,
    TelemetrySample,
    WorkoutPlan,
    WorkoutSegment,
    segment_at_time,
)

__all__ = [
    "ActiveSegment",
    "CompileResult",
    "DerivedStats",
    "Diagnostic",
    "IntervalKind",
    "RawStats",
    "SegmentPhase",
    "TargetRange",
    "TelemetrySample",
    "WorkoutPlan",
    "WorkoutSegment",
    "segment_at_time",
]
