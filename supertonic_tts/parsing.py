"""Shared parsing helpers for runtime configuration value normalization."""

from __future__ import annotations

import math


def normalize_optional_string(value: object) -> str | None:
    """Normalize an optional value to a stripped non-empty string.

    Args:
        value: Arbitrary input value.

    Returns:
        Stripped string value, or `None` when the value is empty after trimming.
    """

    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None
    return text


def parse_optional_int(value: object, field_name: str) -> int | None:
    """Parse an optional integer value from native or textual input.

    Raises:
        ValueError: If the value is present but not an integer token.
    """

    if value is None:
        return None
    if isinstance(value, bool):
        raise ValueError(f"`{field_name}` must be an integer.")
    if isinstance(value, int):
        return value
    normalized = normalize_optional_string(value)
    if normalized is None:
        return None
    try:
        return int(normalized)
    except ValueError as exc:
        raise ValueError(f"`{field_name}` must be an integer.") from exc


def parse_optional_float(value: object, field_name: str) -> float | None:
    """Parse an optional finite float value from native or textual input.

    Raises:
        ValueError: If the value is present but not a finite number.
    """

    if value is None:
        return None
    if isinstance(value, bool):
        raise ValueError(f"`{field_name}` must be a number.")
    if isinstance(value, int | float):
        parsed = float(value)
    else:
        normalized = normalize_optional_string(value)
        if normalized is None:
            return None
        try:
            parsed = float(normalized)
        except ValueError as exc:
            raise ValueError(f"`{field_name}` must be a number.") from exc
    if not math.isfinite(parsed):
        raise ValueError(f"`{field_name}` must be a finite number.")
    return parsed
