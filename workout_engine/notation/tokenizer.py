from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Tuple

from ..models.types import SegmentPhase


class LineKind(str, Enum):
    HEADER = "header"
    SEGMENT = "segment"
    UNRECOGNIZED = "unrecognized"


PHASE_KEYWORDS: Dict[str, SegmentPhase] = {
    "warmup": SegmentPhase.WARMUP,
    "warm up": SegmentPhase.WARMUP,
    "warm-up": SegmentPhase.WARMUP,
    "main set": SegmentPhase.WORK,
    "main": SegmentPhase.WORK,
    "work": SegmentPhase.WORK,
    "intervals": SegmentPhase.WORK,
    "cooldown": SegmentPhase.COOLDOWN,
    "cool down": SegmentPhase.COOLDOWN,
    "cool-down": SegmentPhase.COOLDOWN,
    "recovery": SegmentPhase.RECOVERY,
    "rest": SegmentPhase.RECOVERY,
}

# Matched against whitespace-collapsed text
_HEADER_RE = re.compile(r"^(?P<name>[a-z]+(?:[ \-]+[a-z]+)*)?(?: ?(?P<count>\d+) ?x)? ?:?$", re.IGNORECASE)
_COMMENT_PREFIXES = ("#", "//")


@dataclass(frozen=True)
class Line:
    line_number: int
    text: str
    kind: LineKind
    phase: Optional[SegmentPhase] = None  # None on a bare "<N>x" header: keep the current phase
    repeat_count: Optional[int] = None


def _parse_header(text: str) -> Optional[Tuple[Optional[SegmentPhase], Optional[int]]]:
    """Return (phase, repeat count) for a header line, None when the line is not a header."""
    m = _HEADER_RE.match(" ".join(text.split()))
    if not m:
        return None
    name = m.group("name")
    count = m.group("count")
    if name is None and count is None:
        return None
    phase: Optional[SegmentPhase] = None
    if name is not None:
        phase = PHASE_KEYWORDS.get(name.lower())
        if phase is None:
            return None
    return phase, int(count) if count is not None else None


def classify_line(text: str, line_number: int) -> Line:
    """Classify one non-blank line as a phase header, a segment line or unrecognized."""
    stripped = text.strip()
    if stripped.startswith("-"):
        return Line(line_number=line_number, text=stripped, kind=LineKind.SEGMENT)
    header = _parse_header(stripped)
    if header is not None:
        phase, repeat_count = header
        return Line(
            line_number=line_number,
            text=stripped,
            kind=LineKind.HEADER,
            phase=phase,
            repeat_count=repeat_count,
        )
    return Line(line_number=line_number, text=stripped, kind=LineKind.UNRECOGNIZED)


def tokenize(text: str) -> List[Line]:
    """Split raw workout text into classified lines.

    Blank lines and comment lines (# or //) are dropped; line numbers refer to the raw input.
    """
    lines: List[Line] = []
    for number, raw in enumerate(text.splitlines(), start=1):
        stripped = raw.strip()
        if not stripped or stripped.startswith(_COMMENT_PREFIXES):
            continue
        lines.append(classify_line(stripped, number))
    return lines
