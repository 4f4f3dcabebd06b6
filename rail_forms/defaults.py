"""
Default configuration for the rail-forms library.

Single source of truth for every setting the library consumes. Each section
mirrors one of the dataclasses defined in ``rail_forms.core.settings``.
"""

from __future__ import annotations

from typing import Any

LIBRARY_DEFAULTS: dict[str, Any] = {
    "form_settings": {
        # Database alias used for the transaction scope; None means the
        # router's write database for the root model.
        "database_alias": None,
        # Reset generated primary keys on models inserted in a rolled back scope.
        "discard_keys_on_rollback": True,
        "association_error_code": "association_error",
    },
    "finder_settings": {
        "default_page_size": 20,
        "max_page_size": 100,
    },
}
