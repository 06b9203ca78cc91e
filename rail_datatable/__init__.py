"""
Rail Datatable - server-side tables for the DataTables grid.

Tables declare typed columns, resolve layered options and turn data source
rows into a column schema, formatted rows and counts, rendered as HTML or
returned as DataTables JSON.
"""

from .builder import ColumnBuilder
from .columns import Column, DateTimeColumn, Link, get_column_type, register_column_type
from .datasources import DataSource, IterableDataSource, QuerySetDataSource
from .exceptions import (
    CircularOptionDependencyError,
    ColumnError,
    DataTableError,
    DuplicateColumnError,
    FilterFormNotBuiltError,
    InvalidOptionTypeError,
    MissingFieldError,
    MissingOptionError,
    OptionsError,
    TableError,
    TableIdAlreadySetError,
    TableNotFoundError,
    UndefinedOptionError,
    UnresolvedTableError,
)
from .formatters import MISSING, DefaultFormatter, FormatterInterface, resolve_field_path
from .options import Options, OptionsResolver, ResolvedOptions, lazy
from .paginate import PaginateRequest, SortOrder
from .tables import BaseTable, DataSourceTable

__version__ = "0.1.0"

__all__ = [
    "ColumnBuilder",
    "Column",
    "DateTimeColumn",
    "Link",
    "get_column_type",
    "register_column_type",
    "DataSource",
    "IterableDataSource",
    "QuerySetDataSource",
    "CircularOptionDependencyError",
    "ColumnError",
    "DataTableError",
    "DuplicateColumnError",
    "FilterFormNotBuiltError",
    "InvalidOptionTypeError",
    "MissingFieldError",
    "MissingOptionError",
    "OptionsError",
    "TableError",
    "TableIdAlreadySetError",
    "TableNotFoundError",
    "UndefinedOptionError",
    "UnresolvedTableError",
    "MISSING",
    "DefaultFormatter",
    "FormatterInterface",
    "resolve_field_path",
    "Options",
    "OptionsResolver",
    "ResolvedOptions",
    "lazy",
    "PaginateRequest",
    "SortOrder",
    "BaseTable",
    "DataSourceTable",
]
