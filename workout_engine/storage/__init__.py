"""ZWO interval-file serialization and structural validation."""

from .zwo import ValidationResult, ZwoExportError, serialize_zwo, validate_zwo, write_zwo

__all__ = ["ValidationResult", "ZwoExportError", "serialize_zwo", "validate_zwo", "write_zwo"]
