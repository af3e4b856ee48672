"""
Configuration module for the workout engine.
Provides default settings for compiling, analysing and exporting workouts.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

# Rider defaults
DEFAULT_FTP_WATTS: float = 250.0

# Normalized Power rolling window (seconds)
NP_WINDOW_SEC: int = 30

# Coggan power zones as fractions of FTP, used for "Z<N>" targets.
# Z1 and Z7 are open-ended in the Coggan model; the bounds below close them.
COGGAN_ZONES: Dict[str, Tuple[float, float]] = {
    "Z1": (0.40, 0.55),
    "Z2": (0.56, 0.75),
    "Z3": (0.76, 0.90),
    "Z4": (0.91, 1.05),
    "Z5": (1.06, 1.20),
    "Z6": (1.21, 1.50),
    "Z7": (1.51, 2.00),
}


@dataclass
class ParserSettings:
    """Workout notation compiler configuration."""
    default_name: str = "Custom Workout"
    power_zones: Dict[str, Tuple[float, float]] = field(default_factory=lambda: dict(COGGAN_ZONES))
    ranged_variance_pct: float = 5.0  # warmup/cooldown wider than this becomes a ranged interval
    auto_recovery_pct: Optional[float] = None  # e.g. 0.55 tags easy work-phase segments as recovery


@dataclass
class MetricsSettings:
    """Training metrics configuration."""
    np_window_sec: int = NP_WINDOW_SEC
    adherence_smoothing_sec: int = 0  # 0 = instantaneous power
    adherence_tolerance_pct: float = 0.0  # widen target ranges by this percentage


@dataclass
class ExportSettings:
    """ZWO export configuration."""
    author: str = "Workout Engine"
    sport_type: str = "bike"
    power_decimals: int = 3


class WorkoutEngineConfig:
    """Main configuration class for the workout engine."""

    def __init__(self):
        self.parser = ParserSettings()
        self.metrics = MetricsSettings()
        self.export = ExportSettings()
        self._user_inputs: Dict[str, Any] = {}

    def update_parser_settings(self, **kwargs):
        """Update notation compiler settings."""
        self._update(self.parser, "parser", kwargs)

    def update_metrics_settings(self, **kwargs):
        """Update metrics settings."""
        self._update(self.metrics, "metrics", kwargs)

    def update_export_settings(self, **kwargs):
        """Update ZWO export settings."""
        self._update(self.export, "export", kwargs)

    def _update(self, group: Any, prefix: str, values: Dict[str, Any]) -> None:
        for key, value in values.items():
            if hasattr(group, key):
                setattr(group, key, value)
                self._user_inputs[f"{prefix}_{key}"] = value
            else:
                raise ValueError(f"Unknown {prefix} setting: {key}")

    def get_summary(self) -> Dict[str, Any]:
        """Get configuration summary."""
        return {
            "parser": {
                "default_name": self.parser.default_name,
                "zones": sorted(self.parser.power_zones),
                "ranged_variance_pct": self.parser.ranged_variance_pct,
                "auto_recovery_pct": self.parser.auto_recovery_pct,
            },
            "metrics": {
                "np_window_sec": self.metrics.np_window_sec,
                "adherence_smoothing_sec": self.metrics.adherence_smoothing_sec,
                "adherence_tolerance_pct": self.metrics.adherence_tolerance_pct,
            },
            "export": {
                "author": self.export.author,
                "sport_type": self.export.sport_type,
            },
            "user_inputs": self._user_inputs,
        }


# Global configuration instance (defaults only; every operation also takes explicit settings)
config = WorkoutEngineConfig()


def get_config() -> WorkoutEngineConfig:
    """Get the global configuration instance."""
    return config


def reset_config() -> WorkoutEngineConfig:
    """Reset configuration to defaults."""
    global config
    config = WorkoutEngineConfig()
    return config
