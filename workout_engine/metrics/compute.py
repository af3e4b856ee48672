from __future__ import annotations

import logging
from typing import Callable, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from ..config import MetricsSettings, get_config
from ..models.types import DerivedStats, RawStats, TelemetrySample, WorkoutPlan

logger = logging.getLogger(__name__)

# Coggan bands by upper bound (fraction of FTP), for time-in-zone distribution
_ZONE_EDGES: List[Tuple[str, float]] = [
    ("Z1", 0.55),
    ("Z2", 0.75),
    ("Z3", 0.90),
    ("Z4", 1.05),
    ("Z5", 1.20),
    ("Z6", 1.50),
    ("Z7", float("inf")),
]

Predicate = Callable[[pd.Series], pd.Series]


def _positive(series: pd.Series) -> pd.Series:
    return series > 0


def samples_to_frame(samples: Sequence[TelemetrySample]) -> pd.DataFrame:
    """Load samples into a DataFrame with columns elapsed, power, cadence, hr.

    Order is taken as given; callers supply chronological samples.
    """
    if not samples:
        return pd.DataFrame(columns=["elapsed", "power", "cadence", "hr"], dtype=float)
    return pd.DataFrame(
        {
            "elapsed": [float(s.elapsed_sec) for s in samples],
            "power": [float(s.power_watts) for s in samples],
            "cadence": [float(s.cadence_rpm) for s in samples],
            "hr": [float(s.hr_bpm) for s in samples],
        }
    )


def _sample_period_s(frame: pd.DataFrame) -> float:
    """Median spacing of the elapsed clock; 1 s when it cannot be inferred."""
    if len(frame) < 2:
        return 1.0
    diffs = frame["elapsed"].diff().dropna()
    diffs = diffs[diffs > 0]
    if diffs.empty:
        return 1.0
    return float(diffs.median())


def _window_samples(window_s: float, period_s: float) -> int:
    return max(1, int(round(window_s / period_s)))


def _sample_weights(frame: pd.DataFrame, period_s: float) -> np.ndarray:
    """Seconds each sample stands for: gap to the next sample, one period for the last."""
    elapsed = frame["elapsed"].to_numpy(dtype=float)
    if elapsed.size == 0:
        return elapsed
    gaps = np.diff(elapsed, append=elapsed[-1] + period_s)
    return np.clip(gaps, 0.0, None)


def _fold(frame: pd.DataFrame, column: str, how: str, include: Optional[Predicate] = None) -> Optional[float]:
    """Aggregate one column over qualifying samples; None when nothing qualifies."""
    if frame.empty or column not in frame:
        return None
    series = frame[column].dropna()
    if include is not None:
        series = series[include(series)]
    if series.empty:
        return None
    if how == "mean":
        return float(series.mean())
    if how == "max":
        return float(series.max())
    raise ValueError(f"Unsupported aggregation: {how}")


def _normalized_power_w(power_series: pd.Series, window: int) -> Optional[float]:
    """Normalized Power from a rolling average of power raised to the 4th power.

    - window is a sample count (30 s at the inferred sample rate)
    - with fewer samples than one window, fall back to mean power
    """
    ps = power_series.dropna()
    if ps.empty:
        return None
    if len(ps) < window:
        return float(ps.mean())
    rolling = ps.rolling(window=window, min_periods=window).mean().dropna()
    fourth = rolling.pow(4)
    mean_fourth = fourth.mean()
    if pd.isna(mean_fourth):
        return None
    return float(np.power(mean_fourth, 1.0 / 4.0))


def _duration_s(frame: pd.DataFrame, period_s: float) -> Optional[float]:
    if frame.empty:
        return None
    return float(frame["elapsed"].iloc[-1] - frame["elapsed"].iloc[0] + period_s)


def _training_stress(duration_s: Optional[float], npw: Optional[float], ftp_watts: float) -> Optional[float]:
    if duration_s is None or npw is None or ftp_watts <= 0:
        return None
    intensity_factor = npw / ftp_watts
    return float((duration_s * npw * intensity_factor) / (ftp_watts * 3600.0) * 100.0)


def _target_bounds(plan: WorkoutPlan, elapsed: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """Active target range (low, high) at each elapsed time; ramps are interpolated."""
    segs = plan.segments
    durations = np.array([s.duration_sec for s in segs], dtype=float)
    ends = np.cumsum(durations)
    starts = ends - durations
    idx = np.searchsorted(ends, elapsed, side="right")
    idx = np.clip(idx, 0, len(segs) - 1)

    start_low = np.array([s.target_range.low for s in segs])
    start_high = np.array([s.target_range.high for s in segs])
    end_low = np.array([(s.ramp_to_range or s.target_range).low for s in segs])
    end_high = np.array([(s.ramp_to_range or s.target_range).high for s in segs])

    frac = np.clip((elapsed - starts[idx]) / durations[idx], 0.0, 1.0)
    low = start_low[idx] + (end_low[idx] - start_low[idx]) * frac
    high = start_high[idx] + (end_high[idx] - start_high[idx]) * frac
    return np.minimum(low, high), np.maximum(low, high)


def _adherence_pct(
    frame: pd.DataFrame,
    plan: Optional[WorkoutPlan],
    period_s: float,
    settings: MetricsSettings,
) -> Optional[float]:
    """Share of elapsed time with measured power inside the active target range."""
    if frame.empty or plan is None or not plan.segments:
        return None
    weights = _sample_weights(frame, period_s)
    total = float(weights.sum())
    if total <= 0:
        return None

    power = frame["power"].fillna(0.0)
    if settings.adherence_smoothing_sec > 0:
        window = _window_samples(settings.adherence_smoothing_sec, period_s)
        power = power.rolling(window=window, min_periods=1).mean()
    measured = power.to_numpy(dtype=float)

    low, high = _target_bounds(plan, frame["elapsed"].to_numpy(dtype=float))
    tol = settings.adherence_tolerance_pct / 100.0
    in_range = (measured >= low * (1.0 - tol)) & (measured <= high * (1.0 + tol))
    return float(weights[in_range].sum() / total * 100.0)


def _zone_distribution(frame: pd.DataFrame, ftp_watts: float, period_s: float) -> Tuple[Tuple[str, float], ...]:
    if frame.empty or ftp_watts <= 0:
        return ()
    weights = _sample_weights(frame, period_s)
    total = float(weights.sum())
    if total <= 0:
        return ()
    edges = [-np.inf] + [edge for _, edge in _ZONE_EDGES]
    labels = [name for name, _ in _ZONE_EDGES]
    zones = pd.cut(frame["power"] / ftp_watts, bins=edges, labels=labels, right=True)
    by_zone = pd.Series(weights, index=frame.index).groupby(zones, observed=False).sum()
    return tuple((name, float(by_zone.get(name, 0.0) / total * 100.0)) for name in labels)


def compute_raw_stats(
    samples: Sequence[TelemetrySample],
    ftp_watts: float,
    plan: Optional[WorkoutPlan] = None,
    settings: Optional[MetricsSettings] = None,
) -> RawStats:
    """Compute every metric with None for "no qualifying data"."""
    settings = settings or get_config().metrics
    frame = samples_to_frame(samples)
    if frame.empty:
        return RawStats()

    period = _sample_period_s(frame)
    avg_power = _fold(frame, "power", "mean")
    npw = _normalized_power_w(frame["power"], _window_samples(settings.np_window_sec, period))
    duration = _duration_s(frame, period)
    weights = _sample_weights(frame, period)

    intensity_factor = float(npw / ftp_watts) if (npw is not None and ftp_watts > 0) else None
    vi = float(npw / avg_power) if (npw is not None and avg_power) else None
    work_kj = float((frame["power"].fillna(0.0).to_numpy() * weights).sum() / 1000.0)

    return RawStats(
        average_power=avg_power,
        max_power=_fold(frame, "power", "max"),
        average_cadence=_fold(frame, "cadence", "mean", include=_positive),
        average_heart_rate=_fold(frame, "hr", "mean", include=_positive),
        max_heart_rate=_fold(frame, "hr", "max", include=_positive),
        normalized_power=npw,
        intensity_factor=intensity_factor,
        variability_index=vi,
        training_stress_score=_training_stress(duration, npw, ftp_watts),
        adherence_pct=_adherence_pct(frame, plan, period, settings),
        work_kj=work_kj,
        duration_sec=duration,
    )


def compute_stats(
    samples: Sequence[TelemetrySample],
    ftp_watts: float,
    plan: Optional[WorkoutPlan] = None,
    settings: Optional[MetricsSettings] = None,
) -> DerivedStats:
    """Public entry point: derived session statistics with missing values reported as 0."""
    settings = settings or get_config().metrics
    raw = compute_raw_stats(samples, ftp_watts, plan=plan, settings=settings)
    frame = samples_to_frame(samples)
    distribution = _zone_distribution(frame, ftp_watts, _sample_period_s(frame))
    stats = DerivedStats.from_raw(raw, zone_distribution=distribution)
    logger.debug(
        "Stats over %d samples: avg=%.1fW np=%.1fW tss=%.1f adherence=%.1f%%",
        len(samples),
        stats.average_power,
        stats.normalized_power,
        stats.training_stress_score,
        stats.adherence_pct,
    )
    return stats


def _or_zero(value: Optional[float]) -> float:
    return float(value) if value is not None else 0.0


def average_power(samples: Sequence[TelemetrySample]) -> float:
    return _or_zero(_fold(samples_to_frame(samples), "power", "mean"))


def max_power(samples: Sequence[TelemetrySample]) -> float:
    return _or_zero(_fold(samples_to_frame(samples), "power", "max"))


def average_cadence(samples: Sequence[TelemetrySample]) -> float:
    return _or_zero(_fold(samples_to_frame(samples), "cadence", "mean", include=_positive))


def average_heart_rate(samples: Sequence[TelemetrySample]) -> float:
    return _or_zero(_fold(samples_to_frame(samples), "hr", "mean", include=_positive))


def normalized_power(samples: Sequence[TelemetrySample], settings: Optional[MetricsSettings] = None) -> float:
    return compute_stats(samples, ftp_watts=0.0, settings=settings).normalized_power


def training_stress_score(
    samples: Sequence[TelemetrySample],
    ftp_watts: float,
    settings: Optional[MetricsSettings] = None,
) -> float:
    """TSS = duration * NP * IF / (FTP * 3600) * 100; 0 for FTP <= 0 or no samples."""
    return compute_stats(samples, ftp_watts=ftp_watts, settings=settings).training_stress_score


def adherence(
    samples: Sequence[TelemetrySample],
    plan: WorkoutPlan,
    settings: Optional[MetricsSettings] = None,
) -> float:
    return compute_stats(samples, ftp_watts=plan.ftp_watts, plan=plan, settings=settings).adherence_pct
