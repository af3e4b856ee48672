import pytest

from workout_engine.config import ParserSettings
from workout_engine.models.types import Diagnostic, IntervalKind, SegmentPhase, TargetRange, WorkoutSegment
from workout_engine.notation.segment_parser import (
    SegmentSyntaxError,
    parse_cadence,
    parse_duration,
    parse_segment_line,
    parse_target,
)
from workout_engine.notation.tokenizer import classify_line

ZONES = ParserSettings().power_zones


def _parse(text, phase=SegmentPhase.WORK, ftp=200.0, settings=None):
    return parse_segment_line(classify_line(text, 1), phase, ftp, settings or ParserSettings())


@pytest.mark.parametrize(
    "token,expected",
    [("10m", 600), ("30s", 30), ("1h", 3600), ("1h30m", 5400), ("1m30s", 90), ("2M", 120)],
)
def test_parse_duration(token, expected):
    assert parse_duration(token) == expected


@pytest.mark.parametrize("token", ["10", "m", "10x", "0m", "0s"])
def test_parse_duration_rejects(token):
    with pytest.raises(SegmentSyntaxError):
        parse_duration(token)


def test_parse_target_forms():
    assert parse_target("250w", 200, ZONES).start == TargetRange(250, 250)
    assert parse_target("90%", 200, ZONES).start == TargetRange(180, 180)
    assert parse_target("87.5%", 200, ZONES).start == TargetRange(175, 175)

    z2 = parse_target("Z2", 200, ZONES).start
    assert z2.low == pytest.approx(112)
    assert z2.high == pytest.approx(150)

    ramp = parse_target("50-75%", 200, ZONES)
    assert ramp.start == TargetRange(100, 100)
    assert ramp.end == TargetRange(150, 150)

    flat = parse_target("200-200w", 200, ZONES)
    assert flat.end is None


def test_parse_target_errors():
    with pytest.raises(SegmentSyntaxError, match="unknown power zone"):
        parse_target("Z9", 200, ZONES)
    with pytest.raises(SegmentSyntaxError, match="FTP must be > 0"):
        parse_target("90%", 0, ZONES)
    with pytest.raises(SegmentSyntaxError, match="invalid power target"):
        parse_target("fast", 200, ZONES)


def test_parse_cadence():
    assert parse_cadence("90rpm") == TargetRange(90, 90)
    assert parse_cadence("85-95RPM") == TargetRange(85, 95)
    assert parse_cadence("easy") is None
    with pytest.raises(SegmentSyntaxError, match="inverted"):
        parse_cadence("95-85rpm")


def test_segment_line_full():
    seg = _parse("- 3m 90% 85-95rpm hold steady")
    assert isinstance(seg, WorkoutSegment)
    assert seg.duration_sec == 180
    assert seg.target_range == TargetRange(180, 180)
    assert seg.cadence_range == TargetRange(85, 95)
    assert seg.label == "hold steady"
    assert seg.kind == IntervalKind.STEADY
    assert seg.is_work


def test_segment_line_accepts_spaced_units():
    seg = _parse("- 5m 200 w 90 rpm")
    assert seg.target_range == TargetRange(200, 200)
    assert seg.cadence_range == TargetRange(90, 90)
    assert seg.label == "Interval"


def test_phase_default_labels():
    assert _parse("- 5m 40%", phase=SegmentPhase.COOLDOWN).label == "Cooldown"
    assert _parse("- 5m 40%", phase=SegmentPhase.RECOVERY).label == "Recovery"


def test_interval_kinds():
    ramp = _parse("- 10m 50-75%", phase=SegmentPhase.WARMUP)
    assert ramp.kind == IntervalKind.RAMP
    assert ramp.ramp_to_range == TargetRange(150, 150)

    ranged = _parse("- 10m Z2", phase=SegmentPhase.WARMUP)
    assert ranged.kind == IntervalKind.RANGED

    # same zone in a work phase stays steady
    assert _parse("- 10m Z2").kind == IntervalKind.STEADY


@pytest.mark.parametrize(
    "text,reason",
    [
        ("-", "missing duration"),
        ("- ten 90%", "invalid duration"),
        ("- 0m 90%", "duration must be positive"),
        ("- 5m", "missing power target"),
        ("- 5m hard", "invalid power target"),
        ("- 5m Z8", "unknown power zone"),
        ("- 5m 90% 100-90rpm", "inverted"),
        ("- 5m 90% fastrpm", "invalid cadence"),
    ],
)
def test_malformed_segments_become_diagnostics(text, reason):
    diag = _parse(text)
    assert isinstance(diag, Diagnostic)
    assert reason in diag.reason
    assert diag.text == text
    assert diag.line_number == 1


def test_auto_recovery_policy():
    settings = ParserSettings(auto_recovery_pct=0.55)
    easy = _parse("- 2m 50%", settings=settings)
    assert easy.phase == SegmentPhase.RECOVERY
    assert not easy.is_work
    assert easy.label == "Recovery"
    assert _parse("- 2m 90%", settings=settings).phase == SegmentPhase.WORK
    # off by default
    assert _parse("- 2m 50%").phase == SegmentPhase.WORK
