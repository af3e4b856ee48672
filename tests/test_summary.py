import pytest

from workout_engine.models.types import DerivedStats
from workout_engine.notation.assembler import compile_workout
from workout_engine.summary.description import describe_workout, goal_statement, metrics_suffix, short_description
from workout_engine.summary.naming import generate_workout_name, is_high_intensity, workout_category
from workout_engine.summary.zones import classify_zone, mean_relative_intensity, zone_for_intensity


def _plan(text, ftp=200):
    return compile_workout(text, ftp).plan


@pytest.mark.parametrize(
    "pct,zone",
    [
        (60, "recovery"),
        (75, "endurance"),
        (85, "tempo"),
        (90, "sweet_spot"),
        (100, "threshold"),
        (107, "vo2max"),
        (115, "anaerobic"),
        (130, "neuromuscular"),
    ],
)
def test_zone_thresholds(pct, zone):
    plan = _plan(f"- 10m {pct}%")
    assert classify_zone(plan.work_segments, plan.ftp_watts) == zone


def test_zone_boundaries_are_exclusive_upper():
    assert zone_for_intensity(69.9) == "recovery"
    assert zone_for_intensity(70.0) == "endurance"
    assert zone_for_intensity(105.0) == "vo2max"
    assert zone_for_intensity(None) == "mixed"


def test_zero_ftp_is_mixed():
    plan = _plan("- 10m 200w", ftp=0)
    assert classify_zone(plan.work_segments, 0) == "mixed"
    assert mean_relative_intensity(plan.work_segments, 0) is None
    assert goal_statement(plan) == "Complete 10 minutes of structured work"


def test_description_format(example_plan):
    stats = DerivedStats(adherence_pct=94.4, average_power=285.2, training_stress_score=65.0)
    text = describe_workout(example_plan, stats)
    assert text == (
        "Build aerobic base with 20 minutes of endurance work. "
        "Adherence: 94% | Avg Power: 285W | TSS: 65"
    )


def test_metrics_suffix_only_positive_values():
    assert metrics_suffix(DerivedStats()) == "Adherence: 0%"
    stats = DerivedStats(adherence_pct=100.0, normalized_power=210.4)
    assert metrics_suffix(stats) == "Adherence: 100% | NP: 210W"


def test_threshold_goal():
    plan = _plan("Main set 2x\n- 10m 100%")
    assert goal_statement(plan) == "Accumulate 20 minutes in threshold range"


def test_no_work_segments():
    plan = _plan("Warmup\n- 10m 50%\nCooldown\n- 5m 40%")
    assert describe_workout(plan, DerivedStats()) == "Recovery ride as part of training block. Adherence: 0%"
    assert short_description(plan) == "Recovery ride"


def test_goal_uses_supplied_segments(example_plan):
    warmup_only = example_plan.segments[:1]
    assert goal_statement(example_plan, warmup_only) == "Recovery ride as part of training block"


def test_short_description():
    plan = _plan("Main set 2x\n- 20m 100%")
    assert short_description(plan) == "2x20min intervals @ 100% FTP"


@pytest.mark.parametrize(
    "text,name",
    [
        ("Main set 2x\n- 20m 100%", "Threshold Intervals - 2x20min @ 100% FTP"),
        ("Main set 4x\n- 3m 91%", "Sweet Spot Intervals - 4x3min @ 91% FTP"),
        ("5x\n- 3m 115%", "VO2max Intervals - 5x3min @ 115% FTP"),
        ("8x\n- 1m 130%", "Anaerobic Intervals - 8x1min @ 130% FTP"),
        ("10x\n- 15s 150%", "Neuromuscular Intervals - 10x15s @ 150% FTP"),
        ("- 90m 65%", "Recovery Ride - 1h30 @ 65% FTP"),
        ("- 2h 75%", "Endurance Ride - 2h @ 75% FTP"),
        ("2x\n- 15m 85%", "Tempo Intervals - 2x15min @ 85% FTP"),
        ("3x\n- 5m 108%", "Mixed Intervals - 3x5min @ 108% FTP"),
    ],
)
def test_generate_workout_name(text, name):
    assert generate_workout_name(_plan(text)) == name


def test_recovery_name_without_work():
    plan = _plan("Warmup\n- 30m 50%\nCooldown\n- 15m 45%")
    assert generate_workout_name(plan) == "Recovery Ride - 45min @ 55% FTP"
    assert workout_category(plan) == "recovery"
    assert not is_high_intensity(plan)


def test_category_and_intensity_flags():
    vo2 = _plan("5x\n- 3m 115%")
    assert workout_category(vo2) == "vo2max"
    assert is_high_intensity(vo2)
    mixed = _plan("3x\n- 5m 108%")
    assert workout_category(mixed) == "mixed"
    sweet_spot = _plan("Main set 4x\n- 3m 91%")
    assert workout_category(sweet_spot) == "sweet_spot"
    assert not is_high_intensity(sweet_spot)
