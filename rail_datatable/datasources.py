"""
Row providers for tables.

A data source applies a :class:`~rail_datatable.paginate.PaginateRequest`
(search, filters, sort, page window) and counts rows with and without the
request's criteria.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Iterable, Iterator, List, Optional, Type

from django.core.exceptions import FieldDoesNotExist
from django.db.models import Q, QuerySet
from django.db.models.constants import LOOKUP_SEP

from .formatters import MISSING, resolve_field_path
from .paginate import PaginateRequest
from .utils import coerce_list

logger = logging.getLogger(__name__)


class DataSource(ABC):
    @abstractmethod
    def iterate(self, request: PaginateRequest) -> Iterable[Any]:
        """Rows matching ``request``, sorted and limited to its page window."""

    @abstractmethod
    def count_all(self) -> int:
        """Number of rows ignoring every criterion."""

    @abstractmethod
    def count_filtered(self, request: PaginateRequest) -> Optional[int]:
        """Number of rows matching ``request``, or ``None`` when unavailable."""


def _text(value: Any) -> str:
    if value is MISSING or value is None:
        return ""
    return str(value).casefold()


def _text_exact(value: Any) -> str:
    if value is MISSING or value is None:
        return ""
    return str(value)


def _sort_key(value: Any):
    if value is MISSING or value is None:
        return (0, "")
    return (1, value)


def _text_sort_key(value: Any):
    if value is MISSING or value is None:
        return (0, "")
    return (1, str(value))


class IterableDataSource(DataSource):
    """
    Serves rows held in memory (dicts or objects).

    Search and column filters are case-insensitive substring matches; filter
    form values must equal the row value (or be one of the given values).
    """

    def __init__(self, rows: Iterable[Any]):
        self._rows = list(rows)

    def _filtered(self, request: PaginateRequest) -> List[Any]:
        rows = self._rows
        if request.search:
            term = request.search.casefold()
            rows = [
                row
                for row in rows
                if any(term in _text(resolve_field_path(row, name)) for name in request.searchable_fields)
            ]
        for name, value in request.column_filters.items():
            term = value.casefold()
            rows = [row for row in rows if term in _text(resolve_field_path(row, name))]
        for name, value in request.filter_data.items():
            accepted = {str(item) for item in coerce_list(value)}
            rows = [row for row in rows if _text_exact(resolve_field_path(row, name)) in accepted]
        return rows

    def iterate(self, request: PaginateRequest) -> Iterator[Any]:
        rows = list(self._filtered(request))
        for sort in reversed(request.order):
            values = [resolve_field_path(row, sort.field) for row in rows]
            try:
                positions = sorted(
                    range(len(rows)), key=lambda i: _sort_key(values[i]), reverse=sort.descending
                )
            except TypeError:
                logger.warning("Values of %s cannot be compared, sorting them as text", sort.field)
                positions = sorted(
                    range(len(rows)), key=lambda i: _text_sort_key(values[i]), reverse=sort.descending
                )
            rows = [rows[i] for i in positions]
        yield from rows[request.start:request.stop]

    def count_all(self) -> int:
        return len(self._rows)

    def count_filtered(self, request: PaginateRequest) -> Optional[int]:
        return len(self._filtered(request))


def _orm_lookup(field: str) -> str:
    return field.replace(".", LOOKUP_SEP)


def _resolve_model_field(model: Any, lookup: str):
    """
    Follow ``lookup`` across relations of ``model``.

    Returns the last field reached (or ``None``) and the parts left over,
    which are lookups or transforms when the path is a valid filter.
    """
    opts = model._meta
    parts = lookup.split(LOOKUP_SEP)
    field = None
    for index, part in enumerate(parts):
        if opts is None:
            return field, parts[index:]
        try:
            field = opts.get_field(part)
        except FieldDoesNotExist:
            return field, parts[index:]
        related = field.related_model if field.is_relation else None
        opts = related._meta if related is not None else None
    return field, []


class QuerySetDataSource(DataSource):
    """
    Serves model instances from a Django queryset.

    Dotted column fields map to ORM lookups (``learner.name`` becomes
    ``learner__name``). Fields that are not model fields, such as computed
    link columns or properties, are left out of search and ordering. Filter
    form values go through ``filterset_class`` (a ``django_filters.FilterSet``)
    when one is given, otherwise they are applied as exact lookups. Pass
    ``count_filtered=False`` when counting the filtered queryset is too
    expensive.
    """

    def __init__(
        self,
        queryset: QuerySet,
        filterset_class: Optional[Type[Any]] = None,
        count_filtered: bool = True,
        search_lookup: str = "icontains",
    ):
        self.queryset = queryset
        self.filterset_class = filterset_class
        self.search_lookup = search_lookup
        self._count_filtered = count_filtered

    def _is_text_field(self, name: str) -> bool:
        field, rest = _resolve_model_field(self.queryset.model, _orm_lookup(name))
        if field is None or rest or field.is_relation:
            logger.warning("Ignoring search on %s, it is not a model field", name)
            return False
        return True

    def _is_orderable(self, name: str) -> bool:
        field, rest = _resolve_model_field(self.queryset.model, _orm_lookup(name))
        if field is None or rest:
            logger.warning("Ignoring sort on %s, it is not a model field", name)
            return False
        return True

    def _is_filterable(self, name: str) -> bool:
        field, rest = _resolve_model_field(self.queryset.model, name)
        if field is not None and (
            not rest
            or field.get_lookup(rest[0]) is not None
            or (not field.is_relation and field.get_transform(rest[0]) is not None)
        ):
            return True
        logger.warning("Ignoring filter on %s, it is not a model lookup", name)
        return False

    def _filtered(self, request: PaginateRequest) -> QuerySet:
        queryset = self.queryset.all()

        if request.search:
            query = Q()
            for name in request.searchable_fields:
                if self._is_text_field(name):
                    query |= Q(**{f"{_orm_lookup(name)}__{self.search_lookup}": request.search})
            if query:
                queryset = queryset.filter(query)

        for name, value in request.column_filters.items():
            if self._is_text_field(name):
                queryset = queryset.filter(**{f"{_orm_lookup(name)}__{self.search_lookup}": value})

        if request.filter_data:
            queryset = self._apply_filter_data(queryset, dict(request.filter_data))
        return queryset

    def _apply_filter_data(self, queryset: QuerySet, data: dict) -> QuerySet:
        if self.filterset_class is not None:
            filterset = self.filterset_class(data=data, queryset=queryset)
            if not filterset.is_valid():
                logger.warning("Invalid filter form data %s: %s", data, filterset.errors)
                return queryset.none()
            return filterset.qs

        for name, value in data.items():
            lookup = _orm_lookup(name)
            if not self._is_filterable(lookup):
                continue
            if isinstance(value, (list, tuple)):
                queryset = queryset.filter(**{f"{lookup}__in": value})
            else:
                queryset = queryset.filter(**{lookup: value})
        return queryset

    def iterate(self, request: PaginateRequest) -> Iterator[Any]:
        queryset = self._filtered(request)
        ordering = [
            f"{'-' if sort.descending else ''}{_orm_lookup(sort.field)}"
            for sort in request.order
            if self._is_orderable(sort.field)
        ]
        if ordering:
            queryset = queryset.order_by(*ordering)
        if request.stop is None:
            queryset = queryset[request.start:]
        else:
            queryset = queryset[request.start:request.stop]
        return queryset.iterator()

    def count_all(self) -> int:
        return self.queryset.count()

    def count_filtered(self, request: PaginateRequest) -> Optional[int]:
        if not self._count_filtered:
            return None
        return self._filtered(request).count()


__all__ = ["DataSource", "IterableDataSource", "QuerySetDataSource"]
