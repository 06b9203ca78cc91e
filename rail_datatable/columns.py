"""
Column definitions.

A column is bound to one field path of a row. It owns its resolved options
and knows how to render one cell. Variants override
:meth:`Column.configure_options` (always calling the parent first) and
:meth:`Column.format_cell`.
"""

import datetime
import logging
from typing import Any, Callable, Dict, Optional, Tuple, Type

import bleach
from django.forms.utils import pretty_name
from django.template.defaultfilters import date as date_filter
from django.utils.functional import Promise
from django.utils.html import conditional_escape, format_html
from django.utils.safestring import mark_safe

from .exceptions import ColumnError, MissingFieldError
from .formatters import MISSING, resolve_field_path
from .options import Options, OptionsResolver, ResolvedOptions, lazy
from .settings import get_datatable_settings

logger = logging.getLogger(__name__)


def _permission_granted(permission: Optional[str], checker: Any) -> bool:
    if permission is None:
        return True
    if checker is None:
        logger.debug("No authorization checker for permission %s, hiding column", permission)
        return False
    return bool(checker.is_granted(permission))


def _default_visibility(options: Options) -> bool:
    return _permission_granted(options["permission"], options["authorization_checker"])


def _require_field(row: Any, field: str, column_field: Optional[str] = None) -> Any:
    value = resolve_field_path(row, field)
    if value is MISSING:
        raise MissingFieldError(
            f'Row has no field "{field}" required by column "{column_field or field}".',
            field_name=field,
        )
    return value


class Column:
    """
    A plain column rendering the (escaped) value found at its field.

    Example:
        Column("First name", {"width": "20%"})
    """

    #: Options exposed to the client grid, in this order.
    client_side_options: Tuple[str, ...] = (
        "title",
        "width",
        "visible",
        "sortable",
        "searchable",
        "class_name",
        "default_content",
    )

    def __init__(self, label: Optional[str] = None, options: Optional[Dict[str, Any]] = None):
        self.field: Optional[str] = None
        declared = dict(options or {})
        if label is not None:
            declared.setdefault("title", label)
        self.options: ResolvedOptions = self._resolve(declared)
        self._declared = declared

    def configure_options(self, resolver: OptionsResolver) -> None:
        resolver.set_defaults(
            {
                "title": "",
                "width": None,
                "visible": lazy(_default_visibility),
                "sortable": True,
                "searchable": True,
                "class_name": "",
                "default_content": "",
                "auto_escape": True,
                "allowed_tags": None,
                "format_value_callback": None,
                "permission": None,
                "authorization_checker": None,
            }
        )
        resolver.set_allowed_types("title", (str, Promise))
        resolver.set_allowed_types("width", (str, int, None))
        resolver.set_allowed_types("visible", bool)
        resolver.set_allowed_types("sortable", bool)
        resolver.set_allowed_types("searchable", bool)
        resolver.set_allowed_types("class_name", str)
        resolver.set_allowed_types("auto_escape", bool)
        resolver.set_allowed_types("allowed_tags", (list, tuple, set, frozenset, None))
        resolver.set_allowed_types("format_value_callback", (callable, None))
        resolver.set_allowed_types("permission", (str, None))

    def _resolve(self, declared: Dict[str, Any]) -> ResolvedOptions:
        resolver = OptionsResolver()
        self.configure_options(resolver)
        return resolver.resolve(declared)

    @property
    def label(self) -> str:
        return self.options["title"]

    def set_options(self, options: Dict[str, Any]) -> None:
        """Re-resolve this column from its declared options plus ``options``."""
        declared = dict(self._declared)
        declared.update(options)
        self.options = self._resolve(declared)
        self._declared = declared

    def bind(self, field: str, authorization_checker: Any = None) -> None:
        """Attach the column to ``field`` and to the table's authorization checker."""
        overrides: Dict[str, Any] = {}
        if authorization_checker is not None and self.options["authorization_checker"] is None:
            overrides["authorization_checker"] = authorization_checker
        if not self.options["title"]:
            overrides["title"] = pretty_name(field.rsplit(".", 1)[-1])
        self.field = field
        if overrides:
            self.set_options(overrides)

    def is_granted(self) -> bool:
        """
        Whether the row values of this column may leave the server.

        Columns without a ``permission`` are always granted. The ``visible``
        option does not change the answer.
        """
        return _permission_granted(self.options["permission"], self.options["authorization_checker"])

    def format_cell(self, value: Any, row: Any) -> str:
        """Render ``value`` taken from ``row``; missing values use ``default_content``."""
        if value is MISSING or value is None:
            value = self.options["default_content"]
        callback = self.options["format_value_callback"]
        if callback is not None:
            value = callback(value, row)
        return self._render_text(value)

    def _render_text(self, value: Any) -> str:
        allowed_tags = self.options["allowed_tags"]
        if allowed_tags is not None:
            return mark_safe(bleach.clean(str(value), tags=set(allowed_tags), strip=True))
        if self.options["auto_escape"]:
            return conditional_escape(value)
        return mark_safe(str(value))

    def get_client_side_definition(self) -> Dict[str, Any]:
        definition = {key: self.options[key] for key in self.client_side_options if key in self.options}
        if isinstance(definition.get("title"), Promise):
            definition["title"] = str(definition["title"])
        return definition

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} field={self.field!r}>"


def _default_url_callback(options: Options) -> Callable[[Any, Any], Any]:
    url_field = options["url_field"]

    def read_url(value: Any, row: Any) -> Any:
        return _require_field(row, url_field)

    return read_url


class Link(Column):
    """
    Renders ``<a href="URL" alt="TEXT">TEXT</a>``.

    ``link_text_field`` names the row field holding the anchor and alt text
    and is required. ``alt_text_field`` and ``url_field`` default to it, and
    the default ``url_callback`` reads the row's ``url_field``.
    ``alt_text_field`` is declared for templates and callbacks; the
    rendered ``alt`` always repeats the anchor text.
    """

    def configure_options(self, resolver: OptionsResolver) -> None:
        super().configure_options(resolver)
        resolver.set_required("link_text_field")
        resolver.set_default("alt_text_field", lazy(lambda options: options["link_text_field"]))
        resolver.set_default("url_field", lazy(lambda options: options["link_text_field"]))
        resolver.set_default("url_callback", lazy(_default_url_callback))
        resolver.set_allowed_types("link_text_field", str)
        resolver.set_allowed_types("alt_text_field", str)
        resolver.set_allowed_types("url_field", str)
        resolver.set_allowed_types("url_callback", callable)

    def format_cell(self, value: Any, row: Any) -> str:
        value = super().format_cell(value, row)
        text = _require_field(row, self.options["link_text_field"], self.field)
        url = self.options["url_callback"](value, row)
        if url is None or url == "":
            raise MissingFieldError(
                f'Column "{self.field}" produced no URL for its link.',
                field_name=self.options["url_field"],
            )
        return format_html('<a href="{}" alt="{}">{}</a>', url, text, text)


class DateTimeColumn(Column):
    """Renders dates and datetimes with a Django ``date`` filter format."""

    def configure_options(self, resolver: OptionsResolver) -> None:
        super().configure_options(resolver)
        resolver.set_default("format", lazy(lambda options: get_datatable_settings().datetime_format))
        resolver.set_allowed_types("format", str)

    def format_cell(self, value: Any, row: Any) -> str:
        if isinstance(value, datetime.date):
            value = date_filter(value, self.options["format"])
        return super().format_cell(value, row)


_column_types: Dict[str, Type[Column]] = {}


def register_column_type(name: str, column_class: Type[Column]) -> Type[Column]:
    if not (isinstance(column_class, type) and issubclass(column_class, Column)):
        raise ColumnError(f"Column type {name!r} must be a Column subclass.")
    _column_types[name] = column_class
    return column_class


def get_column_type(name: str) -> Type[Column]:
    try:
        return _column_types[name]
    except KeyError:
        raise ColumnError(
            f"Unknown column type {name!r}. Registered types: {', '.join(sorted(_column_types))}."
        ) from None


register_column_type("column", Column)
register_column_type("link", Link)
register_column_type("datetime", DateTimeColumn)


__all__ = [
    "Column",
    "Link",
    "DateTimeColumn",
    "register_column_type",
    "get_column_type",
]
