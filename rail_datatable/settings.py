"""
DataTableSettings implementation.
"""

from dataclasses import dataclass

from django.conf import settings as django_settings

from .defaults import LIBRARY_DEFAULTS, merge_settings


@dataclass(frozen=True)
class DataTableSettings:
    """Settings controlling pagination limits and rendering defaults."""

    default_page_length: int = 10
    max_page_length: int = 100
    allow_unlimited_length: bool = False
    default_template: str = "rail_datatable/default_table.html"
    datetime_format: str = "Y-m-d H:i"
    filter_form_suffix: str = "_filter"

    @classmethod
    def from_django_settings(cls) -> "DataTableSettings":
        overrides = getattr(django_settings, "RAIL_DATATABLE", None) or {}
        merged = merge_settings(LIBRARY_DEFAULTS, overrides)
        valid_fields = set(cls.__dataclass_fields__.keys())
        return cls(**{k: v for k, v in merged.items() if k in valid_fields})


def get_datatable_settings() -> DataTableSettings:
    return DataTableSettings.from_django_settings()
