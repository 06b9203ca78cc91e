"""
Ordered column registration used by ``BaseTable.build_columns``.
"""

import logging
from typing import Any, Dict, Optional, Type, Union

from .columns import Column, get_column_type
from .exceptions import ColumnError, DuplicateColumnError

logger = logging.getLogger(__name__)


class ColumnBuilder:
    """
    Collects a table's columns in declaration order.

    Example::

        builder.add("Learner.FirstName", Column("First name", {"width": "20%"}))
        builder.add("Learner.Name", "link", {"link_text_field": "Learner.Name"})

    Declaring the same field twice raises :class:`DuplicateColumnError`.
    """

    def __init__(self, authorization_checker: Any = None):
        self._columns: Dict[str, Column] = {}
        self._authorization_checker = authorization_checker

    def add(
        self,
        field: str,
        column: Union[Column, str, Type[Column], None] = None,
        options: Optional[Dict[str, Any]] = None,
    ) -> "ColumnBuilder":
        if not isinstance(field, str) or not field.strip():
            raise ValueError("Column field must be a non-empty string")
        if field in self._columns:
            raise DuplicateColumnError(f'Column "{field}" is already declared.', field_name=field)

        column = self._make_column(field, column, options)
        column.bind(field, self._authorization_checker)
        self._columns[field] = column
        logger.debug("Declared %s column %s", column.__class__.__name__, field)
        return self

    def has(self, field: str) -> bool:
        return field in self._columns

    def get_columns(self) -> Dict[str, Column]:
        return dict(self._columns)

    def __len__(self) -> int:
        return len(self._columns)

    @staticmethod
    def _make_column(field: str, column: Any, options: Optional[Dict[str, Any]]) -> Column:
        if isinstance(column, Column):
            if options:
                column.set_options(options)
            return column
        if column is None:
            column_class = Column
        elif isinstance(column, str):
            column_class = get_column_type(column)
        elif isinstance(column, type) and issubclass(column, Column):
            column_class = column
        else:
            raise ColumnError(
                f'Column "{field}" must be a Column, a Column subclass or a column type name.',
                field_name=field,
            )
        return column_class(options=options)


__all__ = ["ColumnBuilder"]
