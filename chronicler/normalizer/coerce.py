"""Defensive field extraction shared by every normalizer.

Model output is treated as untyped: every helper accepts any value and
returns the requested shape, falling back to an empty value instead of
raising.
"""

import math
import re
from typing import Any, Dict, Iterable, List, Optional, Set


def as_dict(value: Any) -> Dict[str, Any]:
    """Return value if it is a dict, otherwise an empty dict"""
    return value if isinstance(value, dict) else {}


def as_list(value: Any) -> List[Any]:
    """Return value if it is a list, otherwise an empty list"""
    return value if isinstance(value, list) else []


def pick(data: Dict[str, Any], *keys: str) -> Any:
    """First non-None value among alternative key spellings"""
    for key in keys:
        value = data.get(key)
        if value is not None:
            return value
    return None


def clean_text(value: Any) -> str:
    """Trimmed string, or empty string on type mismatch"""
    if isinstance(value, str):
        return value.strip()
    return ""


def optional_text(value: Any) -> Optional[str]:
    text = clean_text(value)
    return text or None


def to_string_list(value: Any) -> List[str]:
    """Non-empty trimmed strings, other elements discarded"""
    return [text for text in (clean_text(item) for item in as_list(value)) if text]


def finite_number(value: Any) -> Optional[float]:
    """Finite int/float or numeric string; booleans and NaN/inf are rejected"""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            return None
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    if math.isfinite(number):
        return number
    return None


def to_int(value: Any) -> Optional[int]:
    """Integer view of a finite number, truncated toward zero"""
    number = finite_number(value)
    if number is None:
        return None
    return int(number)


def to_int_list(value: Any, minimum: Optional[int] = None) -> List[int]:
    """Integers parsed from a list, dropping anything non-numeric"""
    result = []
    for item in as_list(value):
        number = to_int(item)
        if number is None:
            continue
        if minimum is not None and number < minimum:
            continue
        result.append(number)
    return result


def clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, value))


def clamp_importance(value: Any, default: int = 2) -> int:
    """Importance clamped to [1, 3]"""
    number = finite_number(value)
    if number is None:
        return default
    return clamp(int(round(number)), 1, 3)


def slugify(text: Any) -> str:
    """Kebab-case identifier derived from a human-readable title"""
    text = clean_text(text).lower()
    text = re.sub(r'[^A-Za-z0-9_\s-]', '', text)
    text = re.sub(r'[\s_-]+', '-', text)
    return text.strip('-')


class UniqueIdAllocator:
    """Issues slug ids that are unique within one batch.

    Collisions get an incrementing suffix: theme, theme-1, theme-2.
    """

    def __init__(self, fallback: str = "item", taken: Optional[Iterable[str]] = None):
        self.fallback = fallback
        self._used: Set[str] = set(taken or [])

    def allocate(self, *candidates: Any) -> str:
        """Slugify the first usable candidate and make it unique"""
        base = ""
        for candidate in candidates:
            base = slugify(candidate)
            if base:
                break
        base = base or self.fallback

        identifier = base
        suffix = 1
        while identifier in self._used:
            identifier = f"{base}-{suffix}"
            suffix += 1

        self._used.add(identifier)
        return identifier

    def __contains__(self, identifier: str) -> bool:
        return identifier in self._used


def normalize_title_key(value: Any) -> str:
    """Lowercased, whitespace-collapsed title for same-title lookups"""
    return re.sub(r'\s+', ' ', clean_text(value).lower())
