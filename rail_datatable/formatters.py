"""
Row formatters.

A formatter turns one raw row (a mapping or any object) into an ordered
mapping of ``field -> formatted cell`` by delegating to each column.
"""

from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, Dict

if TYPE_CHECKING:
    from .tables import BaseTable


class _Missing:
    """Sentinel for a field path that does not exist in a row."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "MISSING"


MISSING = _Missing()


def resolve_field_path(row: Any, path: str) -> Any:
    """
    Return the value at a dotted ``path`` in ``row``, or ``MISSING``.

    Mappings are traversed by key and other objects by attribute, so
    ``"learner.first_name"`` works for nested dicts and related model
    instances alike. A mapping that holds the full dotted path as a key wins
    over the nested lookup.

    Examples:
        >>> resolve_field_path({"Learner": {"FirstName": "Ann"}}, "Learner.FirstName")
        'Ann'
        >>> resolve_field_path({"Learner": None}, "Learner.FirstName")
        MISSING
    """
    if isinstance(row, Mapping) and path in row:
        return row[path]

    current = row
    for segment in path.split("."):
        if current is None:
            return MISSING
        if isinstance(current, Mapping):
            if segment not in current:
                return MISSING
            current = current[segment]
            continue
        try:
            current = getattr(current, segment)
        except AttributeError:
            return MISSING
    return current


class FormatterInterface(ABC):
    @abstractmethod
    def format_row(self, row: Any, table: "BaseTable") -> Dict[str, Any]:
        """Return the formatted cells of ``row`` keyed by column field."""


class DefaultFormatter(FormatterInterface):
    """
    Formats every column of the table, in column order.

    Cells of columns whose permission is not granted are left blank so their
    values never reach the client.
    """

    def format_row(self, row: Any, table: "BaseTable") -> Dict[str, Any]:
        formatted = {}
        for field, column in table.get_columns().items():
            if not column.is_granted():
                formatted[field] = ""
                continue
            value = resolve_field_path(row, field)
            formatted[field] = column.format_cell(value, row)
        return formatted


__all__ = ["MISSING", "resolve_field_path", "FormatterInterface", "DefaultFormatter"]
