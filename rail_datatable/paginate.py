"""
Parsing of DataTables server-side request parameters.
"""

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, List, Mapping, Optional, Tuple

from django.http import HttpRequest

from .settings import DataTableSettings, get_datatable_settings
from .utils import coerce_int

if TYPE_CHECKING:
    from .tables import BaseTable

logger = logging.getLogger(__name__)

ASC = "asc"
DESC = "desc"

DRAW_PARAM = "draw"
START_PARAM = "start"
LENGTH_PARAM = "length"
SEARCH_PARAM = "search[value]"
ORDER_COLUMN_PARAM = "order[{index}][column]"
ORDER_DIR_PARAM = "order[{index}][dir]"
COLUMN_SEARCH_PARAM = "columns[{index}][search][value]"
FILTER_SUBMIT_FIELD = "dofilter"


@dataclass(frozen=True)
class SortOrder:
    field: str
    direction: str = ASC

    @property
    def descending(self) -> bool:
        return self.direction == DESC


def _empty_mapping() -> Mapping[str, Any]:
    return MappingProxyType({})


@dataclass(frozen=True)
class PaginateRequest:
    """
    Pagination, sort and search criteria of one inbound request.

    ``length`` is ``None`` when every row was requested.
    """

    draw: int = 0
    start: int = 0
    length: Optional[int] = None
    order: Tuple[SortOrder, ...] = ()
    search: str = ""
    column_filters: Mapping[str, str] = field(default_factory=_empty_mapping)
    filter_data: Mapping[str, Any] = field(default_factory=_empty_mapping)
    searchable_fields: Tuple[str, ...] = ()

    @property
    def stop(self) -> Optional[int]:
        if self.length is None:
            return None
        return self.start + self.length

    @property
    def page(self) -> int:
        if not self.length:
            return 1
        return self.start // self.length + 1

    @property
    def is_filtered(self) -> bool:
        return bool(self.search or self.column_filters or self.filter_data)

    @classmethod
    def for_table(cls, table: "BaseTable") -> "PaginateRequest":
        """The request used when a table renders without an inbound request."""
        return cls(
            length=table.options["page_length"],
            searchable_fields=_searchable_fields(table),
        )

    @classmethod
    def from_http_request(cls, request: HttpRequest, table: "BaseTable") -> "PaginateRequest":
        params = request.POST if request.method == "POST" else request.GET
        settings = get_datatable_settings()
        columns = list(table.get_columns().items())

        return cls(
            draw=max(coerce_int(params.get(DRAW_PARAM), 0), 0),
            start=max(coerce_int(params.get(START_PARAM), 0), 0),
            length=_parse_length(params.get(LENGTH_PARAM), table.options["page_length"], settings),
            order=_parse_order(params, columns),
            search=(params.get(SEARCH_PARAM) or "").strip(),
            column_filters=MappingProxyType(_parse_column_filters(params, columns)),
            filter_data=MappingProxyType(_parse_filter_data(params, table.get_filter_form_name())),
            searchable_fields=_searchable_fields(table),
        )


def _searchable_fields(table: "BaseTable") -> Tuple[str, ...]:
    return tuple(
        name
        for name, column in table.get_columns().items()
        if column.options["searchable"] and column.is_granted()
    )


def _parse_length(raw: Any, page_length: int, settings: DataTableSettings) -> Optional[int]:
    length = coerce_int(raw, page_length)
    if length == -1:
        if settings.allow_unlimited_length:
            return None
        logger.warning("Unlimited page length requested but not allowed, using %s", page_length)
        return page_length
    if length <= 0:
        return page_length
    if length > settings.max_page_length:
        logger.warning(
            "Requested page length %s capped at %s", length, settings.max_page_length
        )
        return settings.max_page_length
    return length


def _parse_order(params: Mapping[str, Any], columns: List[Tuple[str, Any]]) -> Tuple[SortOrder, ...]:
    order: List[SortOrder] = []
    index = 0
    while ORDER_COLUMN_PARAM.format(index=index) in params:
        column_index = coerce_int(params.get(ORDER_COLUMN_PARAM.format(index=index)), -1)
        direction = (params.get(ORDER_DIR_PARAM.format(index=index)) or ASC).lower()
        index += 1
        if not 0 <= column_index < len(columns):
            logger.warning("Ignoring sort on unknown column index %s", column_index)
            continue
        name, column = columns[column_index]
        if not column.options["sortable"]:
            logger.warning("Ignoring sort on non sortable column %s", name)
            continue
        if not column.is_granted():
            logger.warning("Ignoring sort on column %s without permission", name)
            continue
        order.append(SortOrder(name, DESC if direction == DESC else ASC))
    return tuple(order)


def _parse_column_filters(params: Mapping[str, Any], columns: List[Tuple[str, Any]]) -> dict:
    filters = {}
    for index, (name, column) in enumerate(columns):
        value = (params.get(COLUMN_SEARCH_PARAM.format(index=index)) or "").strip()
        if value and column.options["searchable"] and column.is_granted():
            filters[name] = value
    return filters


def _parse_filter_data(params: Any, form_name: str) -> dict:
    prefix = f"{form_name}-"
    data = {}
    for key in params:
        if not key.startswith(prefix):
            continue
        name = key[len(prefix):]
        if not name or name == FILTER_SUBMIT_FIELD:
            continue
        values = [value for value in params.getlist(key) if value not in ("", None)]
        if not values:
            continue
        data[name] = values[0] if len(values) == 1 else values
    return data


__all__ = ["ASC", "DESC", "SortOrder", "PaginateRequest"]
