"""
Table definitions.

A table declares its columns once, resolves its table-level options at
construction and turns the rows of its data source into the view-model used
by templates and the JSON payload consumed by the client grid.

Example::

    class LearnerTable(DataSourceTable):
        table_id = "learners"

        def build_columns(self, builder):
            builder.add("Learner.FirstName", Column("First name", {"width": "20%"}))
            builder.add("Learner.Name", Column("Last name"))

        def get_data_source(self):
            return QuerySetDataSource(Enrolment.objects.select_related("learner"))
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Mapping, Optional

from django import forms
from django.http import HttpRequest
from django.template.loader import render_to_string

from .builder import ColumnBuilder
from .columns import Column
from .datasources import DataSource
from .exceptions import (
    FilterFormNotBuiltError,
    TableError,
    TableIdAlreadySetError,
    UnresolvedTableError,
)
from .formatters import DefaultFormatter, FormatterInterface
from .forms import FilterButtonField, FilterFormBuilder
from .layouts import BootstrapLayout, DataTableLayout
from .options import Options, OptionsResolver, ResolvedOptions, lazy
from .paginate import FILTER_SUBMIT_FIELD, PaginateRequest
from .settings import get_datatable_settings

logger = logging.getLogger(__name__)

#: Column option name -> DataTables column option name.
CLIENT_COLUMN_KEYS = {
    "title": "title",
    "width": "width",
    "visible": "visible",
    "sortable": "orderable",
    "searchable": "searchable",
    "class_name": "className",
    "default_content": "defaultContent",
}


class BaseTable(ABC):
    """
    Base class of every table.

    Concrete tables implement :meth:`build_columns`,
    :meth:`get_data_iterator`, :meth:`get_unfiltered_count` and
    :meth:`get_filtered_count`, and may extend :meth:`configure_options` and
    :meth:`build_filter_form`.

    The table identifier comes from the ``table_id`` argument, the
    ``table_id`` class attribute, or a :meth:`set_table_id` call made before
    ``BaseTable.__init__`` runs. It is needed while options resolve because
    the filter form is named after it.
    """

    table_id: Optional[str] = None

    def __init__(
        self,
        table_id: Optional[str] = None,
        *,
        authorization_checker: Any = None,
        router: Any = None,
        formatter: Optional[FormatterInterface] = None,
        layout: Optional[DataTableLayout] = None,
    ):
        self.authorization_checker = authorization_checker
        self.router = router
        self.formatter = formatter if formatter is not None else DefaultFormatter()
        self.layout = layout if layout is not None else BootstrapLayout()
        self.settings = get_datatable_settings()
        self.current_request: Optional[PaginateRequest] = None
        self._filter_form: Optional[forms.Form] = None
        self._options: Optional[ResolvedOptions] = None
        self._columns: Optional[Dict[str, Column]] = None
        self.columns_initialized = False

        if "_table_id" not in self.__dict__:
            self._table_id: Optional[str] = None
            initial_id = table_id if table_id is not None else type(self).table_id
            if initial_id is not None:
                self.set_table_id(initial_id)
        elif table_id is not None:
            self.set_table_id(table_id)

        self.options_resolver = OptionsResolver()
        self.init_columns_definitions()
        self._set_default_options(self.options_resolver)
        self.configure_options(self.options_resolver)
        self._options = self.options_resolver.resolve()
        logger.debug("Table %s resolved with %d columns", self._table_id, len(self._columns))

    @abstractmethod
    def build_columns(self, builder: ColumnBuilder) -> None:
        """
        Declare the table's columns.

        Example::

            builder.add("Learner.FirstName", Column("First name", {"width": "20%"}))
            builder.add("Learner.Name", Column("Last name"))
        """

    @abstractmethod
    def get_data_iterator(self) -> Iterable[Any]:
        """
        Rows to display, already filtered, sorted and paginated according to
        :attr:`current_request`. Each row is a mapping or an object whose
        attributes are the column fields.
        """

    @abstractmethod
    def get_unfiltered_count(self) -> int:
        """Total number of rows regardless of filters."""

    @abstractmethod
    def get_filtered_count(self) -> Optional[int]:
        """Number of rows after filtering, ``None`` when it cannot be computed."""

    def _set_default_options(self, resolver: OptionsResolver) -> None:
        resolver.set_defaults(
            {
                "layout": self.layout,
                "client_side_filtering": False,
                "filter_reload_table_on_change": False,
                "template": self.settings.default_template,
                "data_table_custom_options": {},
                "has_filter_form": lazy(self._has_filter_form),
                "page_length": self.settings.default_page_length,
                "ajax_route": None,
                "ajax_route_params": {},
                "ajax_url": lazy(self._default_ajax_url),
            }
        )
        resolver.set_allowed_types("layout", DataTableLayout)
        resolver.set_allowed_types("client_side_filtering", bool)
        resolver.set_allowed_types("filter_reload_table_on_change", bool)
        resolver.set_allowed_types("template", str)
        resolver.set_allowed_types("data_table_custom_options", dict)
        resolver.set_allowed_types("has_filter_form", bool)
        resolver.set_allowed_types("page_length", int)
        resolver.set_allowed_types("ajax_route", (str, None))
        resolver.set_allowed_types("ajax_route_params", dict)
        resolver.set_allowed_types("ajax_url", (str, None))

    def _has_filter_form(self, options: Options) -> bool:
        # The implicit submit control is always there.
        return len(self.get_filter_form().fields) > 1

    def _default_ajax_url(self, options: Options) -> Optional[str]:
        route = options["ajax_route"]
        if route is None:
            return None
        if self.router is None:
            raise TableError(
                f'Table "{self._table_id}" has ajax_route "{route}" but no router to build it.',
                self._table_id,
            )
        return self.router.build_url(
            route, options["ajax_route_params"], self.get_ajax_additional_parameters()
        )

    def configure_options(self, resolver: OptionsResolver) -> None:
        """Declare table-specific options on top of the defaults."""

    @property
    def options(self) -> ResolvedOptions:
        if self._options is None:
            raise UnresolvedTableError(
                "Table options are read before they were resolved.", self._table_id
            )
        return self._options

    def get_options(self) -> ResolvedOptions:
        return self.options

    def set_options(self, options: Dict[str, Any]) -> None:
        """Re-resolve the options, merging ``options`` over the current ones."""
        merged = dict(self.options)
        merged.update(options)
        self._options = self.options_resolver.resolve(merged)

    def build_filter_form(self, builder: FilterFormBuilder) -> FilterFormBuilder:
        """
        Add filter fields to ``builder``.

        Example::

            return builder.add("status", forms.ChoiceField(choices=STATUSES, required=False))
        """
        return builder

    def get_ajax_additional_parameters(self) -> Dict[str, Any]:
        """Query parameters appended to the ajax URL."""
        return {}

    def get_output_rows(self) -> List[Dict[str, Any]]:
        return [self.formatter.format_row(item, self) for item in self.get_data_iterator()]

    def get_client_side_columns(self) -> Dict[str, Dict[str, Any]]:
        return {
            name: column.get_client_side_definition()
            for name, column in self.get_columns().items()
        }

    def get_client_options(self) -> Dict[str, Any]:
        """Initialisation options for the DataTables widget."""
        columns = []
        for name, definition in self.get_client_side_columns().items():
            client_column = {"name": name}
            for key, value in definition.items():
                if key in CLIENT_COLUMN_KEYS and value is not None:
                    client_column[CLIENT_COLUMN_KEYS[key]] = value
            columns.append(client_column)

        options = self.options
        client_options = dict(options["layout"].get_client_options())
        client_options.update(
            {
                "columns": columns,
                "pageLength": options["page_length"],
                "serverSide": not options["client_side_filtering"],
                "processing": True,
            }
        )
        if options["ajax_url"]:
            client_options["ajax"] = options["ajax_url"]
        client_options.update(options["data_table_custom_options"])
        return client_options

    def get_client_options_id(self) -> str:
        return f"{self.get_table_id()}_options"

    def handle_request(self, request: HttpRequest) -> PaginateRequest:
        self.current_request = PaginateRequest.from_http_request(request, self)
        logger.debug("Table %s handles request %s", self._table_id, self.current_request)
        if self.current_request.filter_data:
            self._filter_form = self._build_filter_form(self.current_request.filter_data)
        return self.current_request

    def get_current_request(self) -> Optional[PaginateRequest]:
        return self.current_request

    def get_filter_form_name(self) -> str:
        return f"{self.get_table_id()}{self.settings.filter_form_suffix}"

    def _build_filter_form(self, filter_data: Optional[Mapping[str, Any]] = None) -> forms.Form:
        name = self.get_filter_form_name()
        builder = FilterFormBuilder(name).add(FILTER_SUBMIT_FIELD, FilterButtonField())
        data = None
        if filter_data:
            data = {f"{name}-{key}": value for key, value in filter_data.items()}
        return self.build_filter_form(builder).get_form(data)

    def get_filter_form(self) -> forms.Form:
        """
        The filter form, built once. After :meth:`handle_request` received
        filter values it is bound to them, so a rendered form keeps what the
        user submitted.
        """
        if self._filter_form is None:
            self._filter_form = self._build_filter_form()
        return self._filter_form

    @property
    def filter_form(self) -> forms.Form:
        """The already built filter form; see :meth:`get_filter_form`."""
        if self._filter_form is None:
            raise FilterFormNotBuiltError(
                "The filter form has not been built yet.", self._table_id
            )
        return self._filter_form

    def build_view(self) -> Dict[str, Any]:
        """Variables handed to the table template."""
        view = {
            "columns": self.get_client_side_columns(),
            "data": self.get_output_rows(),
            "datatable": self,
            "unfiltered_rows_count": self.get_unfiltered_count(),
            "filtered_rows_count": self.get_filtered_count(),
        }
        if self.options["has_filter_form"]:
            view["filter_form"] = self.get_filter_form()
        return view

    def render(self, request: Optional[HttpRequest] = None) -> str:
        return render_to_string(self.options["template"], self.build_view(), request=request)

    def get_json_payload(self) -> Dict[str, Any]:
        """
        The DataTables server-side response. ``recordsFiltered`` stays ``None``
        when the filtered count is unavailable.
        """
        rows = self.get_output_rows()
        return {
            "draw": self.current_request.draw if self.current_request else 0,
            "recordsTotal": self.get_unfiltered_count(),
            "recordsFiltered": self.get_filtered_count(),
            "data": [list(row.values()) for row in rows],
        }

    def set_formatter(self, formatter: FormatterInterface) -> None:
        self.formatter = formatter

    def get_table_id(self) -> str:
        table_id = self.__dict__.get("_table_id")
        if table_id is None:
            raise UnresolvedTableError(
                f"{type(self).__name__} has no table id. Pass table_id or set the table_id attribute."
            )
        return table_id

    def set_table_id(self, table_id: str) -> None:
        current = self.__dict__.get("_table_id")
        if current is not None:
            raise TableIdAlreadySetError(
                f'Table id is already set to "{current}".', current
            )
        if not isinstance(table_id, str) or not table_id:
            raise ValueError("Table id must be a non-empty string")
        self._table_id = table_id

    def get_columns(self) -> Dict[str, Column]:
        if self._columns is None:
            raise UnresolvedTableError(
                "Columns are read before they were built.", self.__dict__.get("_table_id")
            )
        return self._columns

    def init_columns_definitions(self) -> None:
        if self.columns_initialized:
            return
        builder = ColumnBuilder(authorization_checker=self.authorization_checker)
        self.build_columns(builder)
        self._columns = builder.get_columns()
        self.columns_initialized = True


class DataSourceTable(BaseTable):
    """
    A table whose rows and counts come from a :class:`DataSource`.

    Without a handled request the table shows the first page with no
    criteria.
    """

    _data_source: Optional[DataSource] = None

    @abstractmethod
    def get_data_source(self) -> DataSource:
        """Return the data source rows are read from."""

    @property
    def data_source(self) -> DataSource:
        if self._data_source is None:
            self._data_source = self.get_data_source()
        return self._data_source

    def get_paginate_request(self) -> PaginateRequest:
        if self.current_request is not None:
            return self.current_request
        return PaginateRequest.for_table(self)

    def get_data_iterator(self) -> Iterable[Any]:
        return iter(self.data_source.iterate(self.get_paginate_request()))

    def get_unfiltered_count(self) -> int:
        return self.data_source.count_all()

    def get_filtered_count(self) -> Optional[int]:
        return self.data_source.count_filtered(self.get_paginate_request())


__all__ = ["BaseTable", "DataSourceTable", "CLIENT_COLUMN_KEYS"]
