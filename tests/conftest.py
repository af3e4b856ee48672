import numpy as np
import pytest

from workout_engine.config import reset_config
from workout_engine.models.types import TelemetrySample
from workout_engine.notation.assembler import compile_workout

EXAMPLE_WORKOUT = """Warmup
- 10m 50%

Main set 4x
- 3m 90% 85-95rpm
- 2m 50% easy spin

Cooldown
- 5m 40%"""


@pytest.fixture(autouse=True)
def _fresh_config():
    reset_config()
    yield
    reset_config()


@pytest.fixture
def example_text():
    return EXAMPLE_WORKOUT


@pytest.fixture
def example_plan():
    return compile_workout(EXAMPLE_WORKOUT, 200).plan


def make_samples(power, cadence=None, hr=None, period_s=1.0):
    n = len(power)
    cadence = np.zeros(n) if cadence is None else cadence
    hr = np.zeros(n) if hr is None else hr
    return [
        TelemetrySample(elapsed_sec=i * period_s, power_watts=float(p), cadence_rpm=float(c), hr_bpm=float(h))
        for i, (p, c, h) in enumerate(zip(power, cadence, hr))
    ]


def follow_plan(plan, noise_w=0.0, seed=42):
    """1 Hz samples riding each segment's target midpoint (ramps interpolated)."""
    rng = np.random.default_rng(seed)
    power = []
    for seg in plan.segments:
        for offset in range(seg.duration_sec):
            power.append(seg.range_at(offset).midpoint)
    power = np.asarray(power, dtype=float)
    if noise_w:
        power = np.clip(power + rng.normal(0, noise_w, len(power)), 0, None)
    return make_samples(power)
