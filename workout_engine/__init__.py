"""Workout engine: structured workout notation, training metrics and ZWO export.

Modules:
- notation: Tokenizing, parsing and assembling workout notation into plans
- models: Typed domain objects
- metrics: Training metrics from telemetry sample streams
- summary: Zone classification, descriptions and workout names
- storage: ZWO serialization and validation
- io: Loading FIT/CSV telemetry into samples
- cli: Command line interface
"""

__version__ = "1.0.0"

__all__ = [
    "notation",
    "models",
    "metrics",
    "summary",
    "storage",
    "io",
    "cli",
]
