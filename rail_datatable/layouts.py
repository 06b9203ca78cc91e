"""
Layouts describe how the client grid arranges its controls.
"""

from typing import Any, Dict


class DataTableLayout:
    """Base layout: the DataTables default ``dom`` and no extra classes."""

    name = "default"
    dom = "lfrtip"
    table_class = "display"

    def get_client_options(self) -> Dict[str, Any]:
        return {"dom": self.dom}

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} {self.name}>"


class BootstrapLayout(DataTableLayout):
    name = "bootstrap"
    dom = (
        "<'row'<'col-sm-6'l><'col-sm-6'f>>"
        "<'row'<'col-sm-12'tr>>"
        "<'row'<'col-sm-5'i><'col-sm-7'p>>"
    )
    table_class = "table table-striped table-bordered"


__all__ = ["DataTableLayout", "BootstrapLayout"]
