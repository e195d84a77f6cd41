"""
Registry of guise definitions, keyed by source model name
"""
from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING, Any, Iterator

from .conf import get_setting
from .exceptions import DefinitionNotFound, DuplicateDefinition
from .utils import source_name

if TYPE_CHECKING:
    from .options import GuiseOptions

log = logging.getLogger(__name__)


def normalize_key(name: Any) -> str:
    """
    Registry key for a source: ``User``, ``"User"``, ``"user"`` and
    ``"app_label.User"`` all map to ``"user"``.
    """
    return source_name(name).lower()


class Registry:
    """
    Maps source model names to their GuiseOptions.

    Definitions are written once per source model while models are imported,
    and only read afterwards.
    """

    def __init__(self, allow_redefinition: bool | None = None):
        """
        ``allow_redefinition`` overrides the ALLOW_REDEFINITION setting when given.
        """
        self._definitions: dict[str, GuiseOptions] = {}
        self._allow_redefinition = allow_redefinition
        self._lock = threading.Lock()

    @property
    def allow_redefinition(self) -> bool:
        if self._allow_redefinition is None:
            return bool(get_setting("ALLOW_REDEFINITION"))
        return self._allow_redefinition

    def get(self, name: Any) -> GuiseOptions:
        """
        Returns the definition registered for ``name``.

        Raises DefinitionNotFound if there is none.
        """
        try:
            return self._definitions[normalize_key(name)]
        except KeyError as exc:
            raise DefinitionNotFound(source_name(name)) from exc

    def register(self, name: Any, options: GuiseOptions) -> None:
        """
        Stores ``options`` under ``name``.

        Raises DuplicateDefinition if ``name`` is already registered, unless
        redefinition is allowed, in which case the old definition is replaced.
        """
        key = normalize_key(name)
        with self._lock:
            if key in self._definitions:
                if not self.allow_redefinition:
                    raise DuplicateDefinition(source_name(name))
                log.warning("Replacing guise definition for %s", source_name(name))
            self._definitions[key] = options
        log.debug("Registered guises %s for %s", ", ".join(options.values), source_name(name))

    def unregister(self, name: Any) -> None:
        """
        Removes the definition for ``name``; raises DefinitionNotFound if there is none.
        """
        with self._lock:
            try:
                del self._definitions[normalize_key(name)]
            except KeyError as exc:
                raise DefinitionNotFound(source_name(name)) from exc

    __getitem__ = get
    __setitem__ = register

    def __contains__(self, name: Any) -> bool:
        return normalize_key(name) in self._definitions

    def __iter__(self) -> Iterator[GuiseOptions]:
        return iter(list(self._definitions.values()))

    def __len__(self) -> int:
        return len(self._definitions)


# Global registry, used by the declarations unless another one is passed in.
registry = Registry()
