"""
Date Outcome Models
Result types returned by the datetime resolver and validator.

A resolve call produces exactly one of:
- ResolvedDateTime - a single, timezone-aware instant
- AmbiguousDate - two or more valid readings the user has to pick from
- ParseFailure - nothing matched, ask the user again
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional


SUPPORTED_FORMATS_HINT = (
    "Supported formats: RFC3339 (2024-12-01T14:00:00+01:00), "
    "ISO 8601 (2024-12-01T14:00:00), Date+Time (2024-12-01 14:00), "
    "German (01.12.2024 14:00), natural language (tomorrow at 14:00), "
    "or Date only (2024-12-01)"
)


@dataclass(frozen=True)
class ResolvedDateTime:
    """A parsed instant, always expressed in the target timezone."""
    value: datetime
    source: str

    @property
    def iso(self) -> str:
        return self.value.isoformat(timespec='seconds')

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": "resolved",
            "datetime": self.iso,
            "source": self.source,
        }


@dataclass(frozen=True)
class DateOption:
    key: str
    display_text: str
    iso_date: str
    date_time: datetime

    def to_dict(self) -> Dict[str, Any]:
        return {
            "key": self.key,
            "display_text": self.display_text,
            "iso_date": self.iso_date,
        }


@dataclass(frozen=True)
class AmbiguousDate:
    """
    Input with more than one valid calendar reading.

    Not an error: the caller shows the options to the user and later
    confirms one of them by key.
    """
    original_input: str
    options: List[DateOption] = field(default_factory=list)

    def get_option(self, key: str) -> Optional[DateOption]:
        """Find an option by its letter, ignoring case and whitespace."""
        if not isinstance(key, str):
            return None
        wanted = key.strip().upper()
        for option in self.options:
            if option.key == wanted:
                return option
        return None

    def to_user_message(self) -> str:
        lines = [f"The date '{self.original_input}' is ambiguous. Please choose:", ""]
        for option in self.options:
            lines.append(f"{option.key}) {option.display_text}")
        lines.append("")
        lines.append("Please specify which date you meant (A, B, etc.)")
        return "\n".join(lines)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": "ambiguous",
            "original_input": self.original_input,
            "options": [option.to_dict() for option in self.options],
            "message": self.to_user_message(),
        }


@dataclass(frozen=True)
class ParseFailure:
    message: str
    original_input: str = ''

    def to_user_message(self) -> str:
        if self.original_input:
            return f"Unable to parse datetime '{self.original_input}': {self.message}. {SUPPORTED_FORMATS_HINT}"
        return f"{self.message}. {SUPPORTED_FORMATS_HINT}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": "invalid",
            "original_input": self.original_input,
            "error": self.message,
            "message": self.to_user_message(),
        }


@dataclass(frozen=True)
class ValidationResult:
    accepted: bool
    reason: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {"accepted": self.accepted, "reason": self.reason}
