"""
Configuration management for Rail Forms.

This module provides a settings proxy that resolves configuration from
runtime overrides, the Django ``RAIL_FORMS`` setting and library defaults.
"""

from typing import Any, Optional

from django.conf import settings

from .defaults import LIBRARY_DEFAULTS

# Runtime storage for settings overrides (avoids modifying Django settings)
_RUNTIME_SETTINGS: dict[str, Any] = {}


class SettingsProxy:
    """
    Proxy for accessing Rail Forms settings with hierarchical resolution.

    Settings are resolved in the following order:
    1. Runtime overrides (via configure_settings)
    2. Django settings (RAIL_FORMS)
    3. Library defaults (LIBRARY_DEFAULTS)
    """

    def __init__(self):
        self._cache: dict[str, Any] = {}

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a setting value with hierarchical resolution and caching.

        Args:
            key: Setting key to retrieve, dot notation for nested access
            default: Default value if setting is not found

        Returns:
            The setting value from the highest priority source
        """
        if key in self._cache:
            return self._cache[key]

        for source in (
            _RUNTIME_SETTINGS,
            getattr(settings, "RAIL_FORMS", {}),
            LIBRARY_DEFAULTS,
        ):
            value = self._get_nested_value(source, key)
            if value is not None:
                self._cache[key] = value
                return value

        # Defaults for absent keys are not cached, callers may pass different ones
        return default

    def section(self, name: str) -> dict[str, Any]:
        """Return one settings section merged across every source."""
        merged: dict[str, Any] = {}
        for source in (
            LIBRARY_DEFAULTS,
            getattr(settings, "RAIL_FORMS", {}),
            _RUNTIME_SETTINGS,
        ):
            value = self._get_nested_value(source, name)
            if isinstance(value, dict):
                merged.update(value)
        return merged

    def _get_nested_value(self, data: dict[str, Any], key: str) -> Any:
        if not isinstance(data, dict):
            return None

        current: Any = data
        for part in key.split("."):
            if not isinstance(current, dict) or part not in current:
                return None
            current = current[part]
        return current

    def clear_cache(self) -> None:
        self._cache.clear()

    def validate(self) -> dict[str, Any]:
        """
        Validate the current settings configuration.

        Returns:
            Dictionary with validation results
        """
        results = {"valid": True, "errors": [], "warnings": []}

        configured = getattr(settings, "RAIL_FORMS", {})
        if not isinstance(configured, dict):
            results["valid"] = False
            results["errors"].append("RAIL_FORMS must be a dictionary")
            return results

        for section in configured:
            if section not in LIBRARY_DEFAULTS:
                results["warnings"].append(f"Unknown RAIL_FORMS section '{section}'")

        for key in ("finder_settings.default_page_size", "finder_settings.max_page_size"):
            value = self.get(key)
            if not isinstance(value, int) or value <= 0:
                results["valid"] = False
                results["errors"].append(f"Setting '{key}' must be a positive integer")

        return results


settings_proxy = SettingsProxy()


def get_settings_proxy() -> SettingsProxy:
    return settings_proxy


def get_setting(key: str, default: Any = None) -> Any:
    """Get a setting value using the hierarchical settings system."""
    return settings_proxy.get(key, default)


def configure_settings(**overrides: Any) -> None:
    """
    Apply runtime settings overrides.

    Keys are section names, values are dictionaries merged into the section:
    ``configure_settings(form_settings={"discard_keys_on_rollback": False})``.
    """
    for section, values in overrides.items():
        if isinstance(values, dict):
            _RUNTIME_SETTINGS.setdefault(section, {}).update(values)
        else:
            _RUNTIME_SETTINGS[section] = values
    settings_proxy.clear_cache()


def clear_runtime_settings(section: Optional[str] = None) -> None:
    """Clear runtime overrides, for one section or all of them."""
    if section:
        _RUNTIME_SETTINGS.pop(section, None)
    else:
        _RUNTIME_SETTINGS.clear()
    settings_proxy.clear_cache()
