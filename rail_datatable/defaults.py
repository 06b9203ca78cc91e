"""
Default configuration for the rail-datatable library.

Every setting the library reads lives here. Projects override any of them
through the ``RAIL_DATATABLE`` dictionary in their Django settings.
"""

from __future__ import annotations

from typing import Any

LIBRARY_DEFAULTS: dict[str, Any] = {
    # Rows per page when the request does not ask for a length.
    "default_page_length": 10,
    "max_page_length": 100,
    # ``length=-1`` is the DataTables way of asking for every row.
    "allow_unlimited_length": False,
    "default_template": "rail_datatable/default_table.html",
    # Django ``date`` filter format used by datetime columns.
    "datetime_format": "Y-m-d H:i",
    "filter_form_suffix": "_filter",
}


def merge_settings(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Return ``base`` updated with ``override`` without touching either."""
    merged = dict(base)
    if override:
        merged.update(override)
    return merged
