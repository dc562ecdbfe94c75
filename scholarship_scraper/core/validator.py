"""
Schema validation for canonical scholarship records.

Validation never raises: problems are reported as structured errors
(blocking) and warnings (non-blocking).
"""

import re
from typing import Any, Iterable

from .models import (
    Scholarship,
    Severity,
    ValidationError,
    ValidationResult,
    ValidationWarning,
)


SCHOLARSHIP_SCHEMA = {
    "required": ("name", "source", "link"),
    "optional": ("country", "degree", "deadline", "description", "eligibility", "amount"),
    "constraints": {
        "name": {"min_length": 3, "max_length": 500},
        "source": {"min_length": 2, "max_length": 100},
        "link": {"pattern": re.compile(r"^https?://.+")},
        "description": {"max_length": 5000},
        "eligibility": {"max_length": 3000},
        "amount": {"max_length": 200},
        "country": {"max_length": 200},
        "degree": {"max_length": 200},
    },
}


def _is_empty(value: Any) -> bool:
    return value is None or value == "" or value == []


def _as_text(value: Any) -> str:
    if isinstance(value, (list, tuple)):
        return ",".join(str(v) for v in value)
    return value if isinstance(value, str) else str(value)


class ScholarshipValidator:
    """Validates Scholarship records against SCHOLARSHIP_SCHEMA."""

    def __init__(self, schema: dict = SCHOLARSHIP_SCHEMA):
        self.schema = schema

    def validate(self, scholarship: Scholarship) -> ValidationResult:
        """
        Validate a single record.

        Missing required fields are critical and skip the remaining checks
        for that field. Optional fields are only checked when present.
        """
        result = ValidationResult()

        for field in self.schema["required"]:
            value = getattr(scholarship, field, None)

            if _is_empty(value):
                result.errors.append(
                    ValidationError(
                        field=field,
                        message=f"Required field '{field}' is missing or empty",
                        severity=Severity.CRITICAL,
                    )
                )
                continue

            self._validate_constraints(field, value, result)

        for field in self.schema["optional"]:
            value = getattr(scholarship, field, None)
            if not _is_empty(value):
                self._validate_constraints(field, value, result)

        return result

    def validate_batch(self, scholarships: Iterable[Scholarship]) -> list[ValidationResult]:
        """Validate records independently; results follow input order."""
        return [self.validate(s) for s in scholarships]

    @property
    def required_fields(self) -> list[str]:
        return list(self.schema["required"])

    @property
    def optional_fields(self) -> list[str]:
        return list(self.schema["optional"])

    def _validate_constraints(self, field: str, value: Any, result: ValidationResult) -> None:
        constraints = self.schema["constraints"].get(field)
        if not constraints:
            return

        text = _as_text(value)

        min_length = constraints.get("min_length")
        if min_length is not None and len(text) < min_length:
            result.errors.append(
                ValidationError(
                    field=field,
                    message=f"Field '{field}' must be at least {min_length} characters",
                    severity=Severity.MAJOR,
                )
            )

        max_length = constraints.get("max_length")
        if max_length is not None and len(text) > max_length:
            result.warnings.append(
                ValidationWarning(
                    field=field,
                    message=f"Field '{field}' exceeds maximum length of {max_length} characters",
                    suggestion="Value will be truncated",
                )
            )

        pattern = constraints.get("pattern")
        if pattern is not None and not pattern.match(text):
            result.errors.append(
                ValidationError(
                    field=field,
                    message=f"Field '{field}' does not match required pattern",
                    severity=Severity.MAJOR,
                )
            )
