"""Request field normalisation, applied before any store access."""

from __future__ import annotations

import math
from typing import Any, Optional

from ..core.errors import InvalidInput

USERNAME_MAX_BYTES = 64

# Signed 64-bit range of the BIGINT score columns.
INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1
# Identity ids are plain INTEGER keys (32-bit on PostgreSQL).
IDENTITY_ID_MAX = 2**31 - 1


def normalize_username(value: Any) -> str:
    """Strip surrounding whitespace and enforce the 64-byte UTF-8 limit."""

    if not isinstance(value, str):
        raise InvalidInput("Username is required")
    normalized = value.strip()
    if not normalized:
        raise InvalidInput("Username is required")
    if len(normalized.encode("utf-8")) > USERNAME_MAX_BYTES:
        raise InvalidInput(f"Username must be {USERNAME_MAX_BYTES} bytes or less")
    return normalized


def coerce_int(
    value: Any,
    field: str,
    *,
    minimum: Optional[int] = None,
    maximum: Optional[int] = None,
) -> int:
    """Coerce a JSON value to an integer within the signed 64-bit range.

    Ints, integral floats and numeric strings are accepted. Booleans, NaN,
    infinities, fractional values and out-of-range values are rejected.
    """

    if value is None or isinstance(value, bool):
        raise InvalidInput(f"Valid {field} is required")

    if isinstance(value, int):
        number = value
    else:
        if isinstance(value, str):
            raw = value.strip()
            if not raw:
                raise InvalidInput(f"Valid {field} is required")
            try:
                number = int(raw)
            except ValueError:
                number = _integral_float(raw, field)
        elif isinstance(value, float):
            number = _integral_float(value, field)
        else:
            raise InvalidInput(f"Valid {field} is required")

    low = INT64_MIN if minimum is None else max(minimum, INT64_MIN)
    high = INT64_MAX if maximum is None else min(maximum, INT64_MAX)
    if number < low:
        raise InvalidInput(f"{field} must be >= {low}")
    if number > high:
        raise InvalidInput(f"{field} must be <= {high}")
    return number


def _integral_float(value: Any, field: str) -> int:
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise InvalidInput(f"Valid {field} is required") from None
    if not math.isfinite(number):
        raise InvalidInput(f"Valid {field} is required")
    if not number.is_integer():
        raise InvalidInput(f"{field} must be a whole number")
    return int(number)


def coerce_identity_id(value: Any) -> int:
    return coerce_int(value, "user_id", minimum=1, maximum=IDENTITY_ID_MAX)


__all__ = [
    "IDENTITY_ID_MAX",
    "INT64_MAX",
    "INT64_MIN",
    "USERNAME_MAX_BYTES",
    "coerce_identity_id",
    "coerce_int",
    "normalize_username",
]
