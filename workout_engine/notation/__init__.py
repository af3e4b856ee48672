"""Workout notation compiler: tokenizer, segment parser and plan assembler."""

from .assembler import AssemblerState, compile_workout
from .segment_parser import parse_cadence, parse_duration, parse_segment_line, parse_target
from .tokenizer import LineKind, classify_line, tokenize

__all__ = [
    "AssemblerState",
    "compile_workout",
    "parse_cadence",
    "parse_duration",
    "parse_segment_line",
    "parse_target",
    "LineKind",
    "classify_line",
    "tokenize",
]
