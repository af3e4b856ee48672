from .telemetry_loader import (
    TelemetryLoadError,
    load_csv_samples,
    load_fit_samples,
    load_samples,
    samples_from_frame,
)

__all__ = [
    "TelemetryLoadError",
    "load_csv_samples",
    "load_fit_samples",
    "load_samples",
    "samples_from_frame",
]
