"""
Django app configuration for rail-datatable.
"""

import logging

from django.apps import AppConfig as BaseAppConfig

logger = logging.getLogger(__name__)


class AppConfig(BaseAppConfig):
    """Registers the package so its templates are found."""

    name = "rail_datatable"
    verbose_name = "Rail Datatable"
    label = "rail_datatable"

    def ready(self):
        from .settings import get_datatable_settings

        settings = get_datatable_settings()
        if settings.default_page_length > settings.max_page_length:
            logger.warning(
                "RAIL_DATATABLE default_page_length (%s) exceeds max_page_length (%s)",
                settings.default_page_length,
                settings.max_page_length,
            )
