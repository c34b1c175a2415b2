# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""NumericDate conversion (RFC 7519 section 2)."""

from datetime import datetime, timezone
from typing import Any


def to_numeric_date(value: datetime) -> int:
    """Convert a datetime to whole seconds since the epoch.

    Naive datetimes are treated as UTC.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return int(value.timestamp())


def from_numeric_date(value: Any) -> datetime:
    """Convert a JSON NumericDate to a timezone-aware UTC datetime.

    Fractional seconds are truncated.

    Raises:
        TypeError: If the value is not a JSON number
        ValueError: If the value is outside the representable range
    """
    # bool is an int subclass but never a valid NumericDate
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError(f"NumericDate must be a number, got {type(value).__name__}")

    try:
        return datetime.fromtimestamp(int(value), tz=timezone.utc)
    except (OverflowError, OSError, ValueError) as e:
        raise ValueError(f"NumericDate {value} is out of range") from e
