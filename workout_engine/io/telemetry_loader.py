from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional, Union

import pandas as pd
from fitparse import FitFile, FitParseError

from ..models.types import TelemetrySample

logger = logging.getLogger(__name__)

CSV_REQUIRED_COLUMNS = ["elapsed_sec", "power_watts"]
CSV_OPTIONAL_COLUMNS = ["cadence_rpm", "hr_bpm"]

# FIT record field -> sample column
_FIT_FIELDS = {"power": "power_watts", "cadence": "cadence_rpm", "heart_rate": "hr_bpm"}


class TelemetryLoadError(ValueError):
    """Raised when a telemetry file cannot be read or lacks required data."""


def _normalize_ts(value) -> Optional[datetime]:
    if not isinstance(value, datetime):
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def _extract_record_fields(record) -> Dict[str, Optional[float]]:
    data: Dict[str, Optional[float]] = {"timestamp": None, "power_watts": None, "cadence_rpm": None, "hr_bpm": None}
    for field in record:
        if field.name == "timestamp":
            data["timestamp"] = _normalize_ts(field.value)
        elif field.name in _FIT_FIELDS:
            data[_FIT_FIELDS[field.name]] = float(field.value) if field.value is not None else None
    return data


def samples_from_frame(df: pd.DataFrame) -> List[TelemetrySample]:
    """Convert a frame with sample columns into TelemetrySample values.

    Missing optional columns and missing values read as 0 (no signal).
    """
    missing = [col for col in CSV_REQUIRED_COLUMNS if col not in df.columns]
    if missing:
        raise TelemetryLoadError(f"Missing required columns: {', '.join(missing)}")
    frame = df.copy()
    for col in CSV_OPTIONAL_COLUMNS:
        if col not in frame.columns:
            frame[col] = 0.0
    cols = CSV_REQUIRED_COLUMNS + CSV_OPTIONAL_COLUMNS
    try:
        frame = frame[cols].apply(pd.to_numeric, errors="raise")
    except (TypeError, ValueError) as e:
        raise TelemetryLoadError(f"Non-numeric telemetry values: {e}") from e
    frame = frame.dropna(subset=["elapsed_sec"]).fillna(0.0).sort_values("elapsed_sec")
    frame["power_watts"] = frame["power_watts"].clip(lower=0.0)
    return [
        TelemetrySample(
            elapsed_sec=float(row.elapsed_sec),
            power_watts=float(row.power_watts),
            cadence_rpm=float(row.cadence_rpm),
            hr_bpm=float(row.hr_bpm),
        )
        for row in frame.itertuples(index=False)
    ]


def load_csv_samples(file_path: Union[str, Path]) -> List[TelemetrySample]:
    """Load `elapsed_sec,power_watts[,cadence_rpm,hr_bpm]` CSV telemetry."""
    try:
        df = pd.read_csv(file_path)
    except (OSError, pd.errors.ParserError, pd.errors.EmptyDataError) as e:
        logger.warning("Failed to read telemetry CSV %s (%s)", file_path, e)
        raise TelemetryLoadError(f"Cannot read telemetry CSV {file_path}: {e}") from e
    samples = samples_from_frame(df)
    logger.debug("Loaded %d samples from %s", len(samples), file_path)
    return samples


def load_fit_samples(file_path: Union[str, Path]) -> List[TelemetrySample]:
    """Load FIT 'record' messages as samples timed from the first timestamp."""
    records = []
    try:
        fit = FitFile(str(file_path))
        for message in fit.get_messages("record"):
            row = _extract_record_fields(message)
            if row["timestamp"] is not None:
                records.append(row)
    except (OSError, FitParseError) as e:
        logger.warning("Failed to parse FIT file %s (%s)", file_path, e)
        raise TelemetryLoadError(f"Cannot parse FIT file {file_path}: {e}") from e

    if not records:
        logger.warning("No timestamped records in %s", file_path)
        return []

    df = pd.DataFrame.from_records(records)
    df = df.sort_values("timestamp").drop_duplicates("timestamp").reset_index(drop=True)
    df["elapsed_sec"] = (df["timestamp"] - df["timestamp"].iloc[0]).dt.total_seconds()
    samples = samples_from_frame(df.drop(columns=["timestamp"]))
    logger.debug("Loaded %d samples from %s", len(samples), file_path)
    return samples


def load_samples(file_path: Union[str, Path]) -> List[TelemetrySample]:
    """Dispatch on extension: .fit -> FIT records, anything else -> CSV."""
    if Path(file_path).suffix.lower() == ".fit":
        return load_fit_samples(file_path)
    return load_csv_samples(file_path)
