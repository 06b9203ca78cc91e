"""
Registry of table classes selectable by name.
"""

from __future__ import annotations

from typing import Callable, Dict, Iterator, Tuple, Type

from .exceptions import TableNotFoundError
from .tables import BaseTable

_TABLE_REGISTRY: Dict[str, Type[BaseTable]] = {}


def register_table(name: str) -> Callable[[Type[BaseTable]], Type[BaseTable]]:
    """
    Class decorator registering a table under ``name``.

    Example::

        @register_table("learners")
        class LearnerTable(DataSourceTable):
            ...
    """

    def decorator(table_class: Type[BaseTable]) -> Type[BaseTable]:
        if not (isinstance(table_class, type) and issubclass(table_class, BaseTable)):
            raise TypeError(f"{table_class!r} is not a BaseTable subclass")
        _TABLE_REGISTRY[name] = table_class
        return table_class

    return decorator


def get_table_class(name: str) -> Type[BaseTable]:
    try:
        return _TABLE_REGISTRY[name]
    except KeyError:
        raise TableNotFoundError(f'No table registered as "{name}".', name) from None


def iter_tables() -> Iterator[Tuple[str, Type[BaseTable]]]:
    yield from _TABLE_REGISTRY.items()


def clear_table_registry() -> None:
    _TABLE_REGISTRY.clear()


__all__ = ["register_table", "get_table_class", "iter_tables", "clear_table_registry"]
