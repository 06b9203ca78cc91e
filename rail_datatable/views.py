"""
Datatable views and URLs.
"""

import logging
from typing import Any, Dict, Optional, Type

from django.http import Http404, HttpRequest, HttpResponse, JsonResponse
from django.views import View

from .exceptions import TableNotFoundError
from .registry import get_table_class
from .routing import DjangoRouter
from .security import UserAuthorizationChecker
from .tables import BaseTable

logger = logging.getLogger(__name__)


class DataTableView(View):
    """
    Render a table as HTML, or as DataTables JSON for ajax requests.

    The table comes from ``table_class`` or, when it is not set, from the
    registry entry named by the ``table_name`` URL argument.
    """

    http_method_names = ["get", "post"]
    table_class: Optional[Type[BaseTable]] = None
    table_kwargs: Dict[str, Any] = {}

    def get_table_class(self) -> Type[BaseTable]:
        if self.table_class is not None:
            return self.table_class
        name = self.kwargs.get("table_name")
        try:
            return get_table_class(name)
        except TableNotFoundError as exc:
            raise Http404(str(exc)) from exc

    def get_table_kwargs(self) -> Dict[str, Any]:
        kwargs = {
            "authorization_checker": UserAuthorizationChecker(getattr(self.request, "user", None)),
            "router": DjangoRouter(),
        }
        kwargs.update(self.table_kwargs)
        return kwargs

    def get_table(self) -> BaseTable:
        table_class = self.get_table_class()
        kwargs = self.get_table_kwargs()
        if table_class.table_id is None and "table_id" not in kwargs:
            kwargs["table_id"] = self.kwargs.get("table_name")
        return table_class(**kwargs)

    @staticmethod
    def is_ajax(request: HttpRequest) -> bool:
        if request.headers.get("x-requested-with") == "XMLHttpRequest":
            return True
        params = request.POST if request.method == "POST" else request.GET
        return params.get("format") == "json"

    def get(self, request: HttpRequest, *args: Any, **kwargs: Any) -> HttpResponse:
        table = self.get_table()
        table.handle_request(request)
        if self.is_ajax(request):
            return JsonResponse(table.get_json_payload())
        return HttpResponse(table.render(request))

    def post(self, request: HttpRequest, *args: Any, **kwargs: Any) -> HttpResponse:
        return self.get(request, *args, **kwargs)


def get_datatable_urls():
    from django.urls import path

    return [
        path("datatables/<str:table_name>/", DataTableView.as_view(), name="datatable"),
    ]


__all__ = ["DataTableView", "get_datatable_urls"]
