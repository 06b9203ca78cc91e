"""
Custom exceptions for datatables.

This module defines specific exception types raised while declaring
options, columns and tables, and while formatting rows.
"""

from typing import Any, Iterable, Optional


class DataTableError(Exception):
    """Base exception for datatable errors."""


class OptionsError(DataTableError):
    """Base exception for option resolution errors."""

    def __init__(self, message: str, option_name: Optional[str] = None):
        self.option_name = option_name
        super().__init__(message)


class MissingOptionError(OptionsError):
    """Raised when a required option is absent from defaults and input."""


class InvalidOptionTypeError(OptionsError):
    """Raised when a resolved value does not match its allowed types."""

    def __init__(
        self,
        message: str,
        option_name: Optional[str] = None,
        value: Any = None,
        allowed_types: Optional[Iterable[Any]] = None,
    ):
        self.value = value
        self.allowed_types = tuple(allowed_types or ())
        super().__init__(message, option_name)


class CircularOptionDependencyError(OptionsError):
    """Raised when lazy options depend on each other in a cycle."""

    def __init__(self, message: str, chain: Optional[Iterable[str]] = None):
        self.chain = tuple(chain or ())
        super().__init__(message, self.chain[-1] if self.chain else None)


class UndefinedOptionError(OptionsError):
    """Raised when an option that was never declared is given or read."""


class ColumnError(DataTableError):
    """Base exception for column declaration and formatting errors."""

    def __init__(self, message: str, field_name: Optional[str] = None):
        self.field_name = field_name
        super().__init__(message)


class DuplicateColumnError(ColumnError):
    """Raised when two columns are declared for the same field."""


class MissingFieldError(ColumnError):
    """Raised when a row lacks a field a column needs to render."""


class TableError(DataTableError):
    """Base exception for table lifecycle errors."""

    def __init__(self, message: str, table_id: Optional[str] = None):
        self.table_id = table_id
        super().__init__(message)


class UnresolvedTableError(TableError):
    """Raised when table state is read before it has been resolved."""


class TableIdAlreadySetError(TableError):
    """Raised when a table identifier is assigned a second time."""


class FilterFormNotBuiltError(TableError):
    """Raised when filter form state is read before the form was built."""


class TableNotFoundError(TableError):
    """Raised when no table is registered under the requested name."""


__all__ = [
    "DataTableError",
    "OptionsError",
    "MissingOptionError",
    "InvalidOptionTypeError",
    "CircularOptionDependencyError",
    "UndefinedOptionError",
    "ColumnError",
    "DuplicateColumnError",
    "MissingFieldError",
    "TableError",
    "UnresolvedTableError",
    "TableIdAlreadySetError",
    "FilterFormNotBuiltError",
    "TableNotFoundError",
]
