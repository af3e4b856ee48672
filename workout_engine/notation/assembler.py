from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from ..config import ParserSettings, get_config
from ..models.types import CompileResult, Diagnostic, SegmentPhase, WorkoutPlan, WorkoutSegment
from .segment_parser import parse_segment_line
from .tokenizer import Line, LineKind, tokenize

logger = logging.getLogger(__name__)


@dataclass
class AssemblerState:
    """Per-call assembly state; created fresh by every compile_workout call."""
    phase: SegmentPhase = SegmentPhase.WORK
    repeat_count: Optional[int] = None
    repeat_buffer: List[WorkoutSegment] = field(default_factory=list)
    segments: List[WorkoutSegment] = field(default_factory=list)
    diagnostics: List[Diagnostic] = field(default_factory=list)


def _flush_repeat(state: AssemblerState) -> None:
    # Block-wise: all buffered segments for repeat 1, then all for repeat 2, ...
    if state.repeat_count is not None:
        for _ in range(state.repeat_count):
            state.segments.extend(state.repeat_buffer)
    state.repeat_buffer = []
    state.repeat_count = None


def _apply_header(state: AssemblerState, line: Line) -> None:
    _flush_repeat(state)
    if line.phase is not None:
        state.phase = line.phase
    if line.repeat_count is None:
        return
    if line.repeat_count < 1:
        state.diagnostics.append(
            Diagnostic(line_number=line.line_number, text=line.text, reason="repeat count must be at least 1")
        )
        return
    state.repeat_count = line.repeat_count


def _apply_segment(state: AssemblerState, line: Line, ftp_watts: float, settings: ParserSettings) -> None:
    parsed = parse_segment_line(line, state.phase, ftp_watts, settings)
    if isinstance(parsed, Diagnostic):
        state.diagnostics.append(parsed)
    elif state.repeat_count is not None:
        state.repeat_buffer.append(parsed)
    else:
        state.segments.append(parsed)


def compile_workout(
    text: str,
    ftp_watts: float,
    name: Optional[str] = None,
    settings: Optional[ParserSettings] = None,
) -> CompileResult:
    """Compile workout notation into a flat, time-ordered plan plus line diagnostics.

    Parse problems never raise: each bad line becomes a Diagnostic and compilation
    continues. An empty or fully invalid document yields a plan with no segments;
    deciding whether that is acceptable is left to the caller.
    """
    settings = settings or get_config().parser
    state = AssemblerState()
    for line in tokenize(text):
        if line.kind == LineKind.HEADER:
            _apply_header(state, line)
        elif line.kind == LineKind.SEGMENT:
            _apply_segment(state, line, ftp_watts, settings)
        else:
            state.diagnostics.append(
                Diagnostic(line_number=line.line_number, text=line.text, reason="unrecognized line")
            )
    _flush_repeat(state)

    plan = WorkoutPlan(
        name=name or settings.default_name,
        ftp_watts=ftp_watts,
        segments=tuple(state.segments),
    )
    logger.debug(
        "Compiled '%s': %d segments, %ds, %d diagnostics",
        plan.name,
        len(plan.segments),
        plan.total_duration_sec,
        len(state.diagnostics),
    )
    return CompileResult(plan=plan, diagnostics=tuple(state.diagnostics))
