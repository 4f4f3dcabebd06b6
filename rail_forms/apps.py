"""
Django app configuration for the rail-forms library.
"""

import logging

from django.apps import AppConfig as BaseAppConfig

logger = logging.getLogger(__name__)


class AppConfig(BaseAppConfig):
    """Django app configuration for rail-forms."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "rail_forms"
    verbose_name = "Rail Forms"
    label = "rail_forms"

    def ready(self):
        """Validate library settings once Django has loaded."""
        from .config_proxy import get_settings_proxy

        results = get_settings_proxy().validate()
        for warning in results["warnings"]:
            logger.warning("RAIL_FORMS: %s", warning)
        if not results["valid"]:
            for error in results["errors"]:
                logger.error("RAIL_FORMS: %s", error)
            if self._is_debug_mode():
                from django.core.exceptions import ImproperlyConfigured

                raise ImproperlyConfigured("; ".join(results["errors"]))
        logger.debug("Rail Forms initialized")

    def _is_debug_mode(self) -> bool:
        from django.conf import settings as django_settings

        return getattr(django_settings, "DEBUG", False)
