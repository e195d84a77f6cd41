"""
Per-source guise configuration
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Any

import inflection
from attrs import define, field
from django.core.exceptions import ImproperlyConfigured
from django.db import models
from typing_extensions import Self  # Until we upgrade to python 3.11

from .conf import get_setting
from .exceptions import InvalidGuiseValue
from .utils import canonicalize

if TYPE_CHECKING:
    from .scopes import GuiseScope


@define(eq=False)
class GuiseOptions:
    """
    Everything declared by ``has_guises`` for one source model.

    Only the guise record model is bound later, once, by ``guise_for``.
    """

    source_class: type[models.Model]
    values: tuple[str, ...]
    association_name: str
    attribute: str
    association_options: dict[str, Any]
    validate: bool = True
    _association_class: type[models.Model] | None = field(default=None, init=False)
    _scopes: dict[str, dict[str, GuiseScope]] = field(factory=dict, init=False)

    def __attrs_post_init__(self):
        for value in self.values:
            self._scopes[value] = {}

    @classmethod
    def from_declaration(
        cls,
        source_class: type[models.Model],
        *values: Any,
        association: str | None = None,
        attribute: str | None = None,
        foreign_key: str | None = None,
        validate: bool = True,
        **association_options: Any,
    ) -> Self:
        """
        Builds the options for ``has_guises(*values, **options)`` on ``source_class``.

        Guise values are canonicalized and de-duplicated, keeping their order.
        """
        if not values:
            raise ValueError("must specify values in `has_guises`")

        options = cls(
            source_class=source_class,
            values=tuple(dict.fromkeys(canonicalize(value) for value in values)),
            association_name=str(association or get_setting("DEFAULT_ASSOCIATION_NAME")),
            attribute=str(attribute or get_setting("DEFAULT_ATTRIBUTE_NAME")),
            association_options={},
            validate=validate,
        )
        if foreign_key:
            association_options["foreign_key"] = str(foreign_key)
        options.association_options = {**options.default_association_options, **association_options}
        return options

    @property
    def association_name_singular(self) -> str:
        return inflection.singularize(self.association_name)

    @property
    def source_association_name(self) -> str:
        """
        Name of the foreign key field on the guise record model, e.g. "user".
        """
        return inflection.underscore(self.source_class.__name__)

    @property
    def default_association_options(self) -> dict[str, Any]:
        return {"foreign_key": f"{self.source_association_name}_id"}

    @property
    def foreign_key(self) -> str:
        """
        Database column of the foreign key from guise records to the source.
        """
        return self.association_options["foreign_key"]

    @property
    def association_class(self) -> type[models.Model]:
        """
        The guise record model. Only available once ``guise_for`` was declared on it.
        """
        if self._association_class is None:
            raise ImproperlyConfigured(
                f"`guise_for` was not declared for {self.source_class.__name__}'s guise records"
            )
        return self._association_class

    @property
    def is_bound(self) -> bool:
        return self._association_class is not None

    def bind_association(self, association_class: type[models.Model]):
        """
        Binds the guise record model. A source's guise records live in exactly one model.
        """
        if self._association_class not in (None, association_class):
            raise ImproperlyConfigured(
                f"{self.source_class.__name__} guises are already stored in "
                f"{self._association_class.__name__}, not {association_class.__name__}"
            )
        self._association_class = association_class

    def canonical_value(self, value: Any) -> str:
        """
        Returns the canonical form of ``value``; raises InvalidGuiseValue if it isn't declared.
        """
        canonical = canonicalize(value)
        if canonical not in self._scopes:
            raise InvalidGuiseValue(value, self.source_class)
        return canonical

    def scope(self, guise_value: Any, scope_type: str) -> GuiseScope:
        """
        Returns the scope of the given type registered for ``guise_value``.
        """
        value_scopes = self._scopes[self.canonical_value(guise_value)]
        try:
            return value_scopes[scope_type]
        except KeyError as exc:
            raise ValueError(f"'{scope_type}' is not a valid type of scope") from exc

    def register_scope(self, guise_value: Any, scope: GuiseScope):
        value_scopes = self._scopes[self.canonical_value(guise_value)]
        if scope.scope_type in value_scopes:
            raise ImproperlyConfigured(
                f"'{scope.scope_type}' scope already defined for {self.source_class.__name__}"
            )
        value_scopes[scope.scope_type] = scope
