"""
Exceptions raised while declaring or querying guises
"""
from __future__ import annotations

from typing import Any

from django.utils.translation import gettext as _


class GuiseError(Exception):
    """
    Base exception for guise tagging
    """

    def __init__(self, message: str = ""):
        super().__init__()
        self.message = message

    def __str__(self):
        return str(self.message)

    def __repr__(self):
        return f"{self.__class__.__name__}({str(self)})"


class DefinitionNotFound(GuiseError):
    """
    Raised when no guises were declared for the requested source
    """

    def __init__(self, name: str, **kargs):
        super().__init__(**kargs)
        self.name = name
        self.message = _("no guises defined for {name!r}").format(name=name)


class DuplicateDefinition(GuiseError):
    """
    Raised when guises are declared a second time for the same source
    """

    def __init__(self, name: str, **kargs):
        super().__init__(**kargs)
        self.name = name
        self.message = _("guise definition for {name!r} already exists").format(name=name)


class InvalidGuiseValue(GuiseError, ValueError):
    """
    Raised when a value is not one of the guises declared for a source
    """

    def __init__(self, guise_value: Any, source: Any, **kargs):
        super().__init__(**kargs)
        self.guise_value = guise_value
        self.source = source
        source_name = getattr(source, "__name__", source)
        self.message = _(
            "'{value}' is not a defined guise value for {source}"
        ).format(value=guise_value, source=source_name)


class ScopeNameCollision(GuiseError, ValueError):
    """
    Raised when a generated scope or predicate name is already taken
    """

    def __init__(self, name: str, source: Any, reason: str, **kargs):
        super().__init__(**kargs)
        self.name = name
        source_name = getattr(source, "__name__", source)
        self.message = _(
            "cannot define '{name}' on {source}: {reason}"
        ).format(name=name, source=source_name, reason=reason)
