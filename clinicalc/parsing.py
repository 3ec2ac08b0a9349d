# parsing.py
"""
Typed access to the raw field map.

Every calculator receives {field_id: text}. These helpers turn a text into
float/int/bool the same way for all of them, and push the standard
three-tier messages (missing / malformed / out of range) into an error list
without ever stopping at the first problem.
"""

import math
import re
from typing import Callable, List, Mapping, Optional

_DECIMAL = re.compile(r"[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?")
_INTEGER = re.compile(r"[+-]?\d+")


def is_blank(raw: Optional[str]) -> bool:
    return raw is None or raw.strip() == ""


def to_float(raw: Optional[str]) -> Optional[float]:
    """Decimal literal -> float. None for blank, garbage, NaN or infinities."""
    if raw is None:
        return None
    text = raw.strip()
    if not _DECIMAL.fullmatch(text):
        return None
    value = float(text)
    return value if math.isfinite(value) else None


def to_int(raw: Optional[str]) -> Optional[int]:
    if raw is None:
        return None
    text = raw.strip()
    if not _INTEGER.fullmatch(text):
        return None
    return int(text)


def get_float(inputs: Mapping[str, str], key: str) -> Optional[float]:
    return to_float(inputs.get(key))


def get_int(inputs: Mapping[str, str], key: str) -> Optional[int]:
    return to_int(inputs.get(key))


def get_bool(inputs: Mapping[str, str], key: str) -> bool:
    # Only the literal "true" switches a flag on
    return inputs.get(key) == "true"


def get_text(inputs: Mapping[str, str], key: str, default: str) -> str:
    """Enumerated/free text. The default applies only when the key is absent."""
    value = inputs.get(key)
    return default if value is None else value


# --- Validation helpers ---

def check_number(inputs: Mapping[str, str], key: str, errors: List[str], *,
                 missing: Optional[str], invalid: str,
                 accept: Callable[[float], bool] = lambda v: True,
                 out_of_range: Optional[str] = None,
                 integer: bool = False) -> Optional[float]:
    """
    Validates one numeric field and returns its value when it is usable.

    missing=None marks the field optional: a blank value is then silently
    accepted. When out_of_range is None the `invalid` message covers both
    malformed and out-of-range values.
    """
    raw = inputs.get(key)
    if is_blank(raw):
        if missing is not None:
            errors.append(missing)
        return None

    value = to_int(raw) if integer else to_float(raw)
    if value is None:
        errors.append(invalid)
        return None
    if not accept(value):
        errors.append(out_of_range if out_of_range is not None else invalid)
        return None
    return value


def check_choice(inputs: Mapping[str, str], key: str, errors: List[str], *,
                 missing: str, invalid: str, choices) -> Optional[str]:
    raw = inputs.get(key)
    if is_blank(raw):
        errors.append(missing)
        return None
    if raw not in choices:
        errors.append(invalid)
        return None
    return raw
