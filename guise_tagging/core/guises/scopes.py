"""
Query scopes generated for each guise value.

Each scope is exposed as an extra manager on the model, so that
``User.technicians.all()`` returns the users holding the "Technician" guise and
``UserRole.technicians.all()`` returns the matching guise records.
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Any

from django.db import models
from django.db.models.query import QuerySet

if TYPE_CHECKING:
    from .options import GuiseOptions


class GuiseScope:
    """
    A named filter for one guise value, registered in the source's GuiseOptions.
    """

    scope_type = ""

    def __init__(self, value: str, options: GuiseOptions):
        self.value = value
        self.options = options
        options.register_scope(value, self)

    def __repr__(self):
        return f"<{self.__class__.__name__}> {self.options.source_class.__name__}.{self.value}"

    def apply(self, queryset: QuerySet) -> QuerySet:
        raise NotImplementedError

    def initialize(self, instance: models.Model):
        """
        Prepares a new instance created through this scope so that it falls inside it.
        """
        raise NotImplementedError


class HasGuisesScope(GuiseScope):
    """
    Source records with at least one guise record holding the value.
    """

    scope_type = "has_guises"

    @property
    def lookup(self) -> str:
        # Touching association_class fails clearly if guise_for is missing.
        self.options.association_class  # pylint: disable=pointless-statement
        return f"{self.options.association_name}__{self.options.attribute}"

    def apply(self, queryset: QuerySet) -> QuerySet:
        # The join yields a row per matching guise record.
        return queryset.filter(**{self.lookup: self.value}).distinct()

    def initialize(self, instance: models.Model):
        instance.guise_records.ensure(self.value)


class GuiseOfScope(HasGuisesScope):
    """
    Default filter of a guise proxy model.

    Filters on primary keys instead of joining, so the resulting querysets
    still support update() and delete().
    """

    scope_type = "guise_of"

    def apply(self, queryset: QuerySet) -> QuerySet:
        source_class = self.options.source_class
        matching = source_class._base_manager.filter(**{self.lookup: self.value})
        return queryset.filter(pk__in=matching.values("pk"))


class GuiseForScope(GuiseScope):
    """
    Guise records holding the value.
    """

    scope_type = "guise_for"

    def apply(self, queryset: QuerySet) -> QuerySet:
        return queryset.filter(**{self.options.attribute: self.value})

    def initialize(self, instance: models.Model):
        setattr(instance, self.options.attribute, self.value)


class GuiseScopeQuerySet(QuerySet):
    """
    QuerySet that remembers its GuiseScope, so that every create through it
    (``create``, ``get_or_create``, ``update_or_create``) returns an
    instance inside the scope.
    """

    scope: GuiseScope | None = None

    def _clone(self):
        clone = super()._clone()
        clone.scope = self.scope
        return clone

    def create(self, **kwargs: Any) -> models.Model:
        if self.scope is None:
            return super().create(**kwargs)
        instance = self.model(**kwargs)
        self.scope.initialize(instance)
        self._for_write = True
        instance.save(force_insert=True, using=self.db)
        return instance


class GuiseScopeManager(models.Manager.from_queryset(GuiseScopeQuerySet)):
    """
    Manager whose querysets are restricted to a GuiseScope.
    """

    def __init__(self, scope: GuiseScope):
        self.scope = scope
        super().__init__()

    def get_queryset(self) -> QuerySet:
        queryset = super().get_queryset()
        queryset.scope = self.scope
        return self.scope.apply(queryset)
