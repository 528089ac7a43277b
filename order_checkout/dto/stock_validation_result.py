"""Stock validation result."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict


@dataclass(frozen=True)
class StockValidationResult:
    valid: bool
    errors: Dict[str, str] = field(default_factory=dict)
    warnings: Dict[str, str] = field(default_factory=dict)
    details: Dict[str, Dict[str, Any]] = field(default_factory=dict)

    @classmethod
    def success(cls, details=None, warnings=None) -> 'StockValidationResult':
        return cls(True, {}, dict(warnings or {}), dict(details or {}))

    @classmethod
    def failure(cls, errors, warnings=None, details=None) -> 'StockValidationResult':
        return cls(False, dict(errors), dict(warnings or {}), dict(details or {}))

    def has_errors(self) -> bool:
        return bool(self.errors)

    def has_warnings(self) -> bool:
        return bool(self.warnings)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'valid': self.valid,
            'errors': self.errors,
            'warnings': self.warnings,
            'details': self.details,
        }
