from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from pathlib import Path
from typing import List, Optional, Tuple, Union
from xml.sax.saxutils import escape

from ..config import ExportSettings, get_config
from ..models.types import IntervalKind, SegmentPhase, TargetRange, WorkoutPlan, WorkoutSegment

logger = logging.getLogger(__name__)

_ENTITIES = {'"': "&quot;", "'": "&apos;"}

_OPEN_TAG_RE = re.compile(r"<\w+")
_CLOSE_TAG_RE = re.compile(r"</\w+>")
_SELF_CLOSING_RE = re.compile(r"/>")


class ZwoExportError(ValueError):
    """Raised when a plan cannot be expressed as a ZWO file."""


@dataclass(frozen=True)
class ValidationResult:
    valid: bool
    errors: Tuple[str, ...] = ()


def _round_half_up(value: float, decimals: int) -> str:
    exponent = Decimal(1).scaleb(-decimals) if decimals > 0 else Decimal(1)
    quantized = Decimal(str(value)).quantize(exponent, rounding=ROUND_HALF_UP)
    text = format(quantized.normalize(), "f")
    return "0" if text in ("-0", "") else text


def _fraction(watts: float, ftp_watts: float, decimals: int) -> str:
    return _round_half_up(watts / ftp_watts, decimals)


def _xml_text(value: str) -> str:
    return escape(value, _ENTITIES)


def _cadence_attrs(cadence: Optional[TargetRange]) -> List[Tuple[str, str]]:
    if cadence is None:
        return []
    attrs = [("Cadence", _round_half_up(cadence.low, 0))]
    if cadence.high != cadence.low:
        attrs.append(("CadenceLow", _round_half_up(cadence.low, 0)))
        attrs.append(("CadenceHigh", _round_half_up(cadence.high, 0)))
    return attrs


def _ranged_tag(segment: WorkoutSegment, default: str) -> str:
    if segment.phase == SegmentPhase.WARMUP:
        return "Warmup"
    if segment.phase == SegmentPhase.COOLDOWN:
        return "Cooldown"
    return default


def _interval_element(segment: WorkoutSegment, ftp_watts: float, decimals: int) -> str:
    duration = _round_half_up(segment.duration_sec, 0)
    if segment.kind == IntervalKind.RAMP:
        end = segment.ramp_to_range or segment.target_range
        tag = _ranged_tag(segment, "Ramp")
        attrs = [
            ("Duration", duration),
            ("PowerLow", _fraction(segment.target_range.low, ftp_watts, decimals)),
            ("PowerHigh", _fraction(end.high, ftp_watts, decimals)),
        ]
    elif segment.kind == IntervalKind.RANGED:
        tag = _ranged_tag(segment, "SteadyState")
        attrs = [
            ("Duration", duration),
            ("PowerLow", _fraction(segment.target_range.low, ftp_watts, decimals)),
            ("PowerHigh", _fraction(segment.target_range.high, ftp_watts, decimals)),
        ]
    else:
        tag = "SteadyState"
        attrs = [
            ("Duration", duration),
            ("Power", _fraction(segment.target_range.midpoint, ftp_watts, decimals)),
        ]
    attrs.extend(_cadence_attrs(segment.cadence_range))
    rendered = " ".join(f'{key}="{value}"' for key, value in attrs)
    return f"<{tag} {rendered}/>"


def serialize_zwo(plan: WorkoutPlan, settings: Optional[ExportSettings] = None) -> str:
    """Render a plan as ZWO text with power expressed as fractions of FTP.

    Raises ZwoExportError when the plan's FTP is not a finite positive number.
    """
    settings = settings or get_config().export
    if not math.isfinite(plan.ftp_watts) or plan.ftp_watts <= 0:
        raise ZwoExportError(f"FTP must be a finite value > 0 to export a ZWO file, got {plan.ftp_watts}")

    lines = [
        '<?xml version="1.0" encoding="UTF-8"?>',
        "<workout_file>",
        f"  <author>{_xml_text(settings.author)}</author>",
        f"  <name>{_xml_text(plan.name)}</name>",
        f"  <description>{_xml_text(plan.description)}</description>",
        f"  <sportType>{_xml_text(settings.sport_type)}</sportType>",
        f"  <duration>{_round_half_up(plan.total_duration_sec, 0)}</duration>",
        "  <workout>",
    ]
    for segment in plan.segments:
        lines.append("    " + _interval_element(segment, plan.ftp_watts, settings.power_decimals))
    lines.append("  </workout>")
    lines.append("</workout_file>")
    logger.debug("Serialized '%s' to ZWO with %d intervals", plan.name, len(plan.segments))
    return "\n".join(lines) + "\n"


def validate_zwo(text: str) -> ValidationResult:
    """Structural checks only: root element, workout container and tag balance."""
    errors: List[str] = []
    if "<workout_file>" not in text:
        errors.append("Missing workout_file root element")
    if "</workout_file>" not in text:
        errors.append("Missing closing workout_file tag")
    if "<workout>" not in text:
        errors.append("Missing workout element")

    opened = len(_OPEN_TAG_RE.findall(text))
    closed = len(_CLOSE_TAG_RE.findall(text))
    self_closed = len(_SELF_CLOSING_RE.findall(text))
    if opened != closed + self_closed:
        errors.append("Potentially unbalanced tags")
    return ValidationResult(valid=not errors, errors=tuple(errors))


def write_zwo(plan: WorkoutPlan, path: Union[str, Path], settings: Optional[ExportSettings] = None) -> Path:
    out = Path(path)
    out.write_text(serialize_zwo(plan, settings), encoding="utf-8")
    logger.info("Wrote ZWO file %s", out)
    return out
