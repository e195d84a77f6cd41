"""
Guise Tagging API

Anyone using the guises app should use these APIs instead of reaching into
GuiseOptions or the generated managers directly.

The declarations (``has_guises``, ``guise_for``, ``guise_of`` and
``scoped_guise_for``) are applied to model classes; the other functions work
on models and instances declared that way. No permissions are enforced here;
see rules.py for predicates that can be used to do so.
"""
from __future__ import annotations

from typing import Any, Iterable

from django.db import models, transaction
from django.db.models import QuerySet

from .declarations import guise_for, guise_of, has_guises, scoped_guise_for  # pylint: disable=unused-import
from .exceptions import (  # pylint: disable=unused-import
    DefinitionNotFound,
    DuplicateDefinition,
    GuiseError,
    InvalidGuiseValue,
    ScopeNameCollision,
)
from .options import GuiseOptions
from .registry import Registry
from .registry import registry as default_registry
from .scopes import GuiseForScope, HasGuisesScope
from .utils import canonicalize  # pylint: disable=unused-import


def get_guise_options(source: Any, registry: Registry | None = None) -> GuiseOptions:
    """
    Returns the guise options declared for ``source`` (a model, model instance, or model name).

    Raises DefinitionNotFound if ``source`` has no guises.
    """
    if isinstance(source, models.Model):
        source = type(source)
    if isinstance(source, type) and hasattr(source, "guise_options") and registry is None:
        return source.guise_options
    if registry is None:
        registry = default_registry
    return registry.get(source)


def get_guise_values(source: Any) -> tuple[str, ...]:
    """
    Returns the guise values declared for ``source``, in declaration order.
    """
    return get_guise_options(source).values


def get_sources_with_guise(source: Any, value: Any) -> QuerySet:
    """
    Returns a QuerySet of the ``source`` records holding the guise ``value``.

    Raises InvalidGuiseValue if ``value`` isn't declared for ``source``.
    """
    options = get_guise_options(source)
    scope = options.scope(value, HasGuisesScope.scope_type)
    return scope.apply(options.source_class._default_manager.all())


def get_guise_records(source: Any, value: Any) -> QuerySet:
    """
    Returns a QuerySet of the guise records holding ``value`` for any ``source`` record.
    """
    options = get_guise_options(source)
    scope = options.scope(value, GuiseForScope.scope_type)
    return scope.apply(options.association_class._default_manager.all())


def _save_records(instance: models.Model):
    # Unsaved instances keep their changes until they are saved.
    if not instance._state.adding:
        instance.guise_records.save()


def add_guise(instance: models.Model, value: Any) -> models.Model:
    """
    Gives ``instance`` the guise ``value``, returning its guise record.

    Does nothing if the instance already holds the guise.
    """
    value = instance.guise_options.canonical_value(value)
    record = instance.guise_records.ensure(value)
    _save_records(instance)
    return record


def remove_guise(instance: models.Model, value: Any) -> bool:
    """
    Takes the guise ``value`` away from ``instance``.

    Returns False if the instance didn't hold it.
    """
    value = instance.guise_options.canonical_value(value)
    attribute = instance.guise_options.attribute
    records = [record for record in instance.guise_records if getattr(record, attribute) == value]
    for record in records:
        instance.guise_records.mark_for_deletion(record)
    _save_records(instance)
    return bool(records)


def set_guises(instance: models.Model, values: Iterable[Any]):
    """
    Replaces the guises of ``instance`` with ``values``.
    """
    options = instance.guise_options
    values = [options.canonical_value(value) for value in values]
    with transaction.atomic():
        for record in list(instance.guise_records):
            if getattr(record, options.attribute) not in values:
                instance.guise_records.mark_for_deletion(record)
        for value in values:
            instance.guise_records.ensure(value)
        _save_records(instance)
