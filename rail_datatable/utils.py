"""
Type coercion helpers for request parameters.
"""

from typing import Any, List, Optional


def coerce_int(value: Any, default: int = 0) -> int:
    """
    Coerce a value to an integer.

    Examples:
        >>> coerce_int("42")
        42
        >>> coerce_int(None, default=10)
        10
        >>> coerce_int("invalid", default=0)
        0
    """
    if value is None:
        return default
    try:
        return int(value)
    except (ValueError, TypeError):
        return default


def coerce_list(value: Any, default: Optional[List] = None) -> List:
    """
    Coerce a value to a list.

    Examples:
        >>> coerce_list("a")
        ['a']
        >>> coerce_list(None)
        []
    """
    if default is None:
        default = []
    if value is None:
        return default
    if isinstance(value, list):
        return value
    if isinstance(value, (tuple, set, frozenset)):
        return list(value)
    return [value]


__all__ = ["coerce_int", "coerce_list"]
