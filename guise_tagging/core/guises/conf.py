"""
Project-level settings for guise tagging.

All keys of the ``GUISE_TAGGING`` settings dict are optional::

    GUISE_TAGGING = {
        "DEFAULT_ASSOCIATION_NAME": "guises",
        "DEFAULT_ATTRIBUTE_NAME": "value",
        "ALLOW_REDEFINITION": False,
    }
"""
from __future__ import annotations

from typing import Any

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured

DEFAULTS: dict[str, Any] = {
    # Name of the reverse relation from a source model to its guise records.
    "DEFAULT_ASSOCIATION_NAME": "guises",
    # Field of the guise record model that stores the guise value.
    "DEFAULT_ATTRIBUTE_NAME": "value",
    # Whether declaring guises twice for the same source replaces the first
    # definition instead of raising DuplicateDefinition.
    "ALLOW_REDEFINITION": False,
}


def get_setting(name: str) -> Any:
    """
    Returns the configured value for ``name``, falling back to DEFAULTS.
    """
    if name not in DEFAULTS:
        raise KeyError(name)
    return getattr(settings, "GUISE_TAGGING", {}).get(name, DEFAULTS[name])


def check_settings():
    """
    Raises ImproperlyConfigured if GUISE_TAGGING contains unknown keys.
    """
    configured = getattr(settings, "GUISE_TAGGING", {})
    if not isinstance(configured, dict):
        raise ImproperlyConfigured("The GUISE_TAGGING setting must be a dict.")
    unknown = sorted(set(configured) - set(DEFAULTS))
    if unknown:
        raise ImproperlyConfigured(
            f"Unknown GUISE_TAGGING settings: {', '.join(unknown)}. "
            f"Valid settings are: {', '.join(sorted(DEFAULTS))}."
        )
