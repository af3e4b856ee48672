import pytest

from workout_engine.config import ExportSettings
from workout_engine.models.types import SegmentPhase, TargetRange, WorkoutPlan, WorkoutSegment
from workout_engine.notation.assembler import compile_workout
from workout_engine.storage.zwo import (
    ZwoExportError,
    _round_half_up,
    serialize_zwo,
    validate_zwo,
    write_zwo,
)

MIXED_WORKOUT = """Warmup
- 10m 50-75%
Main set 2x
- 3m 90% 85-95rpm
Cooldown
- 5m Z2"""

EXPECTED = """<?xml version="1.0" encoding="UTF-8"?>
<workout_file>
  <author>Workout Engine</author>
  <name>Openers</name>
  <description>Short primer</description>
  <sportType>bike</sportType>
  <duration>1260</duration>
  <workout>
    <Warmup Duration="600" PowerLow="0.5" PowerHigh="0.75"/>
    <SteadyState Duration="180" Power="0.9" Cadence="85" CadenceLow="85" CadenceHigh="95"/>
    <SteadyState Duration="180" Power="0.9" Cadence="85" CadenceLow="85" CadenceHigh="95"/>
    <Cooldown Duration="300" PowerLow="0.56" PowerHigh="0.75"/>
  </workout>
</workout_file>
"""


def _mixed_plan():
    plan = compile_workout(MIXED_WORKOUT, 200, name="Openers").plan
    return WorkoutPlan(name=plan.name, ftp_watts=plan.ftp_watts, segments=plan.segments, description="Short primer")


def test_golden_output():
    assert serialize_zwo(_mixed_plan()) == EXPECTED


def test_serialized_plan_validates(example_plan):
    report = validate_zwo(serialize_zwo(example_plan))
    assert report.valid
    assert report.errors == ()


def test_power_rounds_half_up_to_three_decimals():
    assert _round_half_up(0.0625, 3) == "0.063"
    assert _round_half_up(2.5, 0) == "3"
    assert _round_half_up(0.9, 3) == "0.9"
    plan = compile_workout("- 1m 200w", 300).plan
    assert 'Power="0.667"' in serialize_zwo(plan)


def test_ramp_in_work_phase_uses_ramp_element():
    plan = compile_workout("- 5m 100-120%", 250).plan
    assert '<Ramp Duration="300" PowerLow="1" PowerHigh="1.2"/>' in serialize_zwo(plan)


def test_single_cadence_has_no_bounds():
    plan = compile_workout("- 1m 250w 90rpm", 250).plan
    assert '<SteadyState Duration="60" Power="1" Cadence="90"/>' in serialize_zwo(plan)


def test_free_text_is_escaped():
    plan = WorkoutPlan(
        name='Tom\'s "Big" <Ride> & more',
        ftp_watts=250,
        segments=(WorkoutSegment(phase=SegmentPhase.WORK, duration_sec=60, target_range=TargetRange(250, 250)),),
    )
    text = serialize_zwo(plan)
    assert "<name>Tom&apos;s &quot;Big&quot; &lt;Ride&gt; &amp; more</name>" in text
    assert validate_zwo(text).valid


def test_export_settings():
    text = serialize_zwo(_mixed_plan(), ExportSettings(author="Coach", sport_type="run"))
    assert "<author>Coach</author>" in text
    assert "<sportType>run</sportType>" in text


@pytest.mark.parametrize("ftp", [0, -100, float("nan"), float("inf"), float("-inf")])
def test_invalid_ftp_raises(ftp):
    plan = WorkoutPlan(
        name="Bad",
        ftp_watts=ftp,
        segments=(WorkoutSegment(phase=SegmentPhase.WORK, duration_sec=60, target_range=TargetRange(200, 200)),),
    )
    with pytest.raises(ZwoExportError):
        serialize_zwo(plan)
    with pytest.raises(ValueError):
        serialize_zwo(plan)


def test_validate_reports_each_defect():
    report = validate_zwo("<root></root>")
    assert not report.valid
    assert report.errors == (
        "Missing workout_file root element",
        "Missing closing workout_file tag",
        "Missing workout element",
    )


def test_validate_unbalanced():
    report = validate_zwo("<workout_file><workout></workout>")
    assert report.errors == ("Missing closing workout_file tag", "Potentially unbalanced tags")


def test_validate_accepts_minimal_document():
    text = '<workout_file><workout><SteadyState Duration="60" Power="1"/></workout></workout_file>'
    assert validate_zwo(text).valid


def test_write_zwo(tmp_path, example_plan):
    out = write_zwo(example_plan, tmp_path / "example.zwo")
    assert out.read_text(encoding="utf-8") == serialize_zwo(example_plan)
