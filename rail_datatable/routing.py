"""
URL building for ajax endpoints.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional
from urllib.parse import urlencode

from django.urls import reverse


class Router(ABC):
    @abstractmethod
    def build_url(
        self,
        route_name: str,
        params: Optional[Dict[str, Any]] = None,
        query: Optional[Dict[str, Any]] = None,
    ) -> str:
        """Return the URL of ``route_name``; ``query`` becomes the query string."""


class DjangoRouter(Router):
    """Thin wrapper around :func:`django.urls.reverse`."""

    def __init__(self, urlconf: Optional[str] = None, current_app: Optional[str] = None):
        self.urlconf = urlconf
        self.current_app = current_app

    def build_url(
        self,
        route_name: str,
        params: Optional[Dict[str, Any]] = None,
        query: Optional[Dict[str, Any]] = None,
    ) -> str:
        url = reverse(
            route_name,
            urlconf=self.urlconf,
            kwargs=params or None,
            current_app=self.current_app,
        )
        if query:
            url = f"{url}?{urlencode(query, doseq=True)}"
        return url


__all__ = ["Router", "DjangoRouter"]
