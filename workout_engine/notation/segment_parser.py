from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Dict, Optional, Tuple, Union

from ..config import ParserSettings
from ..models.types import Diagnostic, IntervalKind, SegmentPhase, TargetRange, WorkoutSegment
from .tokenizer import Line

_DURATION_RE = re.compile(r"^(?:(\d+)h)?(?:(\d+)m)?(?:(\d+)s)?$", re.IGNORECASE)
_NUM = r"(\d+(?:\.\d+)?)"
_RANGE_RE = re.compile(rf"^{_NUM}-{_NUM}(w|%)$", re.IGNORECASE)
_WATTS_RE = re.compile(rf"^{_NUM}w$", re.IGNORECASE)
_PERCENT_RE = re.compile(rf"^{_NUM}%$")
_ZONE_RE = re.compile(r"^z(\d+)$", re.IGNORECASE)
_CADENCE_RE = re.compile(r"^(\d+)(?:-(\d+))?rpm$", re.IGNORECASE)

_DEFAULT_LABELS: Dict[SegmentPhase, str] = {
    SegmentPhase.WARMUP: "Warmup",
    SegmentPhase.WORK: "Interval",
    SegmentPhase.RECOVERY: "Recovery",
    SegmentPhase.COOLDOWN: "Cooldown",
}


class SegmentSyntaxError(ValueError):
    """Raised inside the segment parser for one malformed token; surfaced as a Diagnostic."""


@dataclass(frozen=True)
class PowerTarget:
    start: TargetRange
    end: Optional[TargetRange] = None  # set for ramps


def _normalize(body: str) -> str:
    # "85 - 95 rpm" -> "85-95rpm", "200 w" -> "200w"
    body = re.sub(r"(\d)\s*-\s*(\d)", r"\1-\2", body)
    body = re.sub(r"(\d)\s+(rpm|%|w)(?=\s|$)", r"\1\2", body, flags=re.IGNORECASE)
    return body


def parse_duration(token: str) -> int:
    m = _DURATION_RE.match(token)
    if not m or not any(m.groups()):
        raise SegmentSyntaxError(f"invalid duration '{token}'")
    hours, minutes, seconds = (int(g) if g else 0 for g in m.groups())
    total = hours * 3600 + minutes * 60 + seconds
    if total <= 0:
        raise SegmentSyntaxError(f"duration must be positive, got '{token}'")
    return total


def _relative(pct: float, ftp_watts: float, token: str) -> float:
    if ftp_watts <= 0:
        raise SegmentSyntaxError(f"FTP must be > 0 to resolve relative target '{token}'")
    return ftp_watts * pct / 100.0


def _point(value: float) -> TargetRange:
    return TargetRange(low=value, high=value)


def parse_target(token: str, ftp_watts: float, zones: Dict[str, Tuple[float, float]]) -> PowerTarget:
    """Resolve a power token against FTP.

    - "200w" absolute watts
    - "85%" fraction of FTP
    - "Z3" zone table expanded to a watt range
    - "80-100%" / "150-250w" ramp from the first value to the second
    """
    m = _RANGE_RE.match(token)
    if m:
        first, second, unit = float(m.group(1)), float(m.group(2)), m.group(3).lower()
        if unit == "%":
            first, second = _relative(first, ftp_watts, token), _relative(second, ftp_watts, token)
        if first == second:
            return PowerTarget(start=_point(first))
        return PowerTarget(start=_point(first), end=_point(second))

    m = _WATTS_RE.match(token)
    if m:
        return PowerTarget(start=_point(float(m.group(1))))

    m = _PERCENT_RE.match(token)
    if m:
        return PowerTarget(start=_point(_relative(float(m.group(1)), ftp_watts, token)))

    m = _ZONE_RE.match(token)
    if m:
        key = f"Z{int(m.group(1))}"
        if key not in zones:
            raise SegmentSyntaxError(f"unknown power zone '{token}'")
        low_pct, high_pct = zones[key]
        return PowerTarget(
            start=TargetRange(
                low=_relative(low_pct * 100.0, ftp_watts, token),
                high=_relative(high_pct * 100.0, ftp_watts, token),
            )
        )

    raise SegmentSyntaxError(f"invalid power target '{token}'")


def parse_cadence(token: str) -> Optional[TargetRange]:
    """Return the cadence range for "90rpm" / "85-95rpm", None if the token is not a cadence."""
    if not token.lower().endswith("rpm"):
        return None
    m = _CADENCE_RE.match(token)
    if not m:
        raise SegmentSyntaxError(f"invalid cadence '{token}'")
    low = int(m.group(1))
    high = int(m.group(2)) if m.group(2) else low
    if low > high:
        raise SegmentSyntaxError(f"cadence range '{token}' is inverted")
    return TargetRange(low=float(low), high=float(high))


def _effective_phase(phase: SegmentPhase, target: PowerTarget, ftp_watts: float, settings: ParserSettings) -> SegmentPhase:
    if phase != SegmentPhase.WORK or settings.auto_recovery_pct is None or ftp_watts <= 0:
        return phase
    if target.start.midpoint / ftp_watts <= settings.auto_recovery_pct:
        return SegmentPhase.RECOVERY
    return phase


def _interval_kind(phase: SegmentPhase, target: PowerTarget, ftp_watts: float, settings: ParserSettings) -> IntervalKind:
    if target.end is not None:
        return IntervalKind.RAMP
    if phase in (SegmentPhase.WARMUP, SegmentPhase.COOLDOWN) and ftp_watts > 0:
        spread_pct = (target.start.high - target.start.low) / ftp_watts * 100.0
        if spread_pct > settings.ranged_variance_pct:
            return IntervalKind.RANGED
    return IntervalKind.STEADY


def parse_segment_line(
    line: Line,
    phase: SegmentPhase,
    ftp_watts: float,
    settings: ParserSettings,
) -> Union[WorkoutSegment, Diagnostic]:
    """Parse "- <duration> <target>[ <cadence>][ free text]" into a segment or a diagnostic."""
    body = _normalize(line.text.lstrip("-").strip())
    tokens = body.split()
    try:
        if not tokens:
            raise SegmentSyntaxError("missing duration")
        duration_sec = parse_duration(tokens[0])
        if len(tokens) < 2:
            raise SegmentSyntaxError("missing power target")
        target = parse_target(tokens[1], ftp_watts, settings.power_zones)
        rest = tokens[2:]
        cadence = parse_cadence(rest[0]) if rest else None
        if cadence is not None:
            rest = rest[1:]
    except SegmentSyntaxError as exc:
        return Diagnostic(line_number=line.line_number, text=line.text, reason=str(exc))

    effective = _effective_phase(phase, target, ftp_watts, settings)
    return WorkoutSegment(
        phase=effective,
        duration_sec=duration_sec,
        target_range=target.start,
        kind=_interval_kind(effective, target, ftp_watts, settings),
        ramp_to_range=target.end,
        cadence_range=cadence,
        label=" ".join(rest) or _DEFAULT_LABELS[effective],
    )
