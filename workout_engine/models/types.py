from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional, Sequence, Tuple


class SegmentPhase(str, Enum):
    WARMUP = "warmup"
    WORK = "work"
    RECOVERY = "recovery"
    COOLDOWN = "cooldown"


class IntervalKind(str, Enum):
    """How a segment is rendered as an interval; decided once when the line is parsed."""
    STEADY = "steady"
    RAMP = "ramp"
    RANGED = "ranged"


@dataclass(frozen=True)
class TargetRange:
    low: float
    high: float

    def __post_init__(self) -> None:
        if self.low > self.high:
            raise ValueError(f"TargetRange low ({self.low}) must be <= high ({self.high})")

    @property
    def midpoint(self) -> float:
        return (self.low + self.high) / 2.0


@dataclass(frozen=True)
class WorkoutSegment:
    phase: SegmentPhase
    duration_sec: int
    target_range: TargetRange
    kind: IntervalKind = IntervalKind.STEADY
    ramp_to_range: Optional[TargetRange] = None  # end state of a ramp
    cadence_range: Optional[TargetRange] = None
    label: Optional[str] = None

    def __post_init__(self) -> None:
        if self.duration_sec <= 0:
            raise ValueError(f"WorkoutSegment duration must be positive, got {self.duration_sec}")
        if (self.kind == IntervalKind.RAMP) != (self.ramp_to_range is not None):
            raise ValueError("WorkoutSegment ramp_to_range must be set exactly when kind is ramp")

    @property
    def is_work(self) -> bool:
        return self.phase == SegmentPhase.WORK

    def range_at(self, offset_sec: float) -> TargetRange:
        """Target range `offset_sec` into the segment (linear for ramps)."""
        if self.ramp_to_range is None:
            return self.target_range
        frac = min(1.0, max(0.0, offset_sec / float(self.duration_sec)))
        start, end = self.target_range, self.ramp_to_range
        low = start.low + (end.low - start.low) * frac
        high = start.high + (end.high - start.high) * frac
        return TargetRange(low=min(low, high), high=max(low, high))


@dataclass(frozen=True)
class WorkoutPlan:
    name: str
    ftp_watts: float
    segments: Tuple[WorkoutSegment, ...] = ()
    description: str = ""

    @property
    def total_duration_sec(self) -> int:
        return sum(seg.duration_sec for seg in self.segments)

    @property
    def work_segments(self) -> Tuple[WorkoutSegment, ...]:
        return tuple(seg for seg in self.segments if seg.is_work)

    @property
    def subtitle(self) -> str:
        return f"{len(self.segments)} segments • {round(self.total_duration_sec / 60)} min"

    def with_name(self, name: str) -> "WorkoutPlan":
        return replace(self, name=name)


@dataclass(frozen=True)
class ActiveSegment:
    segment: WorkoutSegment
    index: int
    start_sec: int
    end_sec: int


def segment_at_time(segments: Sequence[WorkoutSegment], elapsed_sec: float) -> Optional[ActiveSegment]:
    """Locate the segment active at `elapsed_sec`; past the end, the last segment stays active."""
    if not segments:
        return None
    cursor = 0
    for index, seg in enumerate(segments):
        end = cursor + seg.duration_sec
        if elapsed_sec < end:
            return ActiveSegment(segment=seg, index=index, start_sec=cursor, end_sec=end)
        cursor = end
    last = segments[-1]
    return ActiveSegment(segment=last, index=len(segments) - 1, start_sec=cursor - last.duration_sec, end_sec=cursor)


@dataclass(frozen=True)
class Diagnostic:
    line_number: int
    text: str
    reason: str

    def __str__(self) -> str:
        return f"Line {self.line_number}: {self.reason}: '{self.text}'"


@dataclass(frozen=True)
class CompileResult:
    plan: WorkoutPlan
    diagnostics: Tuple[Diagnostic, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.diagnostics


@dataclass(frozen=True)
class TelemetrySample:
    elapsed_sec: float
    power_watts: float
    cadence_rpm: float = 0.0  # 0 = no cadence signal
    hr_bpm: float = 0.0  # 0 = no heart-rate signal


@dataclass(frozen=True)
class RawStats:
    """Metric values before the public boundary; None means no qualifying samples."""
    average_power: Optional[float] = None
    max_power: Optional[float] = None
    average_cadence: Optional[float] = None
    average_heart_rate: Optional[float] = None
    max_heart_rate: Optional[float] = None
    normalized_power: Optional[float] = None
    intensity_factor: Optional[float] = None
    variability_index: Optional[float] = None
    training_stress_score: Optional[float] = None
    adherence_pct: Optional[float] = None
    work_kj: Optional[float] = None
    duration_sec: Optional[float] = None


@dataclass(frozen=True)
class DerivedStats:
    average_power: float = 0.0
    max_power: float = 0.0
    average_cadence: float = 0.0
    average_heart_rate: float = 0.0
    max_heart_rate: float = 0.0
    normalized_power: float = 0.0
    intensity_factor: float = 0.0
    variability_index: float = 0.0
    training_stress_score: float = 0.0
    adherence_pct: float = 0.0
    work_kj: float = 0.0
    duration_sec: float = 0.0
    zone_distribution: Tuple[Tuple[str, float], ...] = field(default_factory=tuple)

    @classmethod
    def from_raw(cls, raw: RawStats, zone_distribution: Tuple[Tuple[str, float], ...] = ()) -> "DerivedStats":
        def _z(value: Optional[float]) -> float:
            return float(value) if value is not None else 0.0

        return cls(
            average_power=_z(raw.average_power),
            max_power=_z(raw.max_power),
            average_cadence=_z(raw.average_cadence),
            average_heart_rate=_z(raw.average_heart_rate),
            max_heart_rate=_z(raw.max_heart_rate),
            normalized_power=_z(raw.normalized_power),
            intensity_factor=_z(raw.intensity_factor),
            variability_index=_z(raw.variability_index),
            training_stress_score=_z(raw.training_stress_score),
            adherence_pct=_z(raw.adherence_pct),
            work_kj=_z(raw.work_kj),
            duration_sec=_z(raw.duration_sec),
            zone_distribution=zone_distribution,
        )
