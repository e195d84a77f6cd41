"""
Class decorators that declare guises on Django models.

Given these models::

    @has_guises("Technician", "Supervisor", association="user_roles", attribute="name")
    class User(models.Model):
        email = models.EmailField()

    @guise_for(User)
    class UserRole(models.Model):
        name = models.CharField(max_length=255)

    @guise_of(User)
    class Technician(User):
        class Meta:
            proxy = True

    @scoped_guise_for(User)
    class TechnicianUserRole(UserRole):
        class Meta:
            proxy = True

the following is set up:

* ``UserRole.user``, a foreign key to ``User`` whose reverse accessor is
  ``User.user_roles``.
* ``User.technicians`` and ``User.supervisors`` managers, listing users holding
  each guise, and ``UserRole.technicians`` / ``UserRole.supervisors`` managers
  listing the matching guise records.
* ``user.has_guise(value)``, ``user.has_guises(*values)``,
  ``user.has_any_guises(*values)`` and the ``user.is_technician`` /
  ``user.is_supervisor`` properties, plus ``has_user_role`` / ``has_user_roles``
  / ``has_any_user_roles`` aliases and a ``guises`` alias of ``user_roles``.
* Validation of ``UserRole.name`` on save: present, unique per user, and one of
  the declared guises.
* ``Technician.objects`` only lists users with the "Technician" guise, and new
  ``Technician`` instances get a "Technician" guise record, saved along with them.
* ``TechnicianUserRole.objects`` only lists "Technician" guise records, and new
  ``TechnicianUserRole`` instances get ``name = "Technician"``.
"""
from __future__ import annotations

import logging
from typing import Any, Callable, TypeVar

from django.core.exceptions import FieldDoesNotExist, ImproperlyConfigured
from django.db import models
from django.db.models.signals import post_init, post_save, pre_save

from . import introspection
from .callbacks import AssociationCallback, SourceCallback, persist_guise_records, validate_guise_records
from .exceptions import ScopeNameCollision
from .options import GuiseOptions
from .registry import Registry
from .registry import registry as default_registry
from .scopes import GuiseForScope, GuiseOfScope, GuiseScopeManager, HasGuisesScope
from .utils import derive_guise_value, predicate_name, scope_name, source_name
from .validators import GuiseRecordValidator

log = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=type[models.Model])

# Attributes added to every source model and every guise record model.
SOURCE_ATTRIBUTES = ["guise_options", "has_guise", "has_guises", "has_any_guises", "guise_records"]
RECORD_ATTRIBUTES = ["guise_options", "mark_for_deletion", "marked_for_deletion"]


def _check_available(model: type[models.Model], names: list[str]):
    """
    Raises ScopeNameCollision if a name repeats or is already an attribute of ``model``.
    """
    seen: set[str] = set()
    for name in names:
        if name in seen:
            raise ScopeNameCollision(name, model, "two guise values produce this name")
        if hasattr(model, name):
            raise ScopeNameCollision(name, model, "the name is already in use")
        seen.add(name)


def _check_proxy_of(model: type[models.Model], parent: type[models.Model], declaration: str):
    if not (issubclass(model, parent) and model._meta.proxy):
        raise ImproperlyConfigured(
            f"`{declaration}` requires {model.__name__} to be a proxy model of {parent.__name__}"
        )
    if any(manager.name == "objects" for manager in model._meta.local_managers):
        raise ImproperlyConfigured(
            f"`{declaration}` provides {model.__name__}.objects; remove the manager declared on the class"
        )


class HasGuisesBuilder:
    """
    Adds scopes, introspection and the guise record collection to a source model.
    """

    def __init__(self, options: GuiseOptions):
        self.options = options

    @property
    def source_class(self) -> type[models.Model]:
        return self.options.source_class

    def introspection_aliases(self) -> dict[str, Callable]:
        if self.options.association_name == "guises":
            return {}
        singular = self.options.association_name_singular
        return {
            f"has_{singular}": introspection.has_guise,
            f"has_{self.options.association_name}": introspection.has_guises,
            f"has_any_{self.options.association_name}": introspection.has_any_guises,
        }

    def check_names(self):
        names = [scope_name(value) for value in self.options.values]
        names += [predicate_name(value) for value in self.options.values]
        names += list(self.introspection_aliases())
        names += SOURCE_ATTRIBUTES
        _check_available(self.source_class, names)

    def build(self):
        self.source_class.guise_options = self.options
        self.define_scopes()
        self.define_introspection()
        self.define_guise_records()
        log.debug(
            "Declared guises %s on %s", ", ".join(self.options.values), self.source_class.__name__
        )

    def define_scopes(self):
        for value in self.options.values:
            scope = HasGuisesScope(value, self.options)
            self.source_class.add_to_class(scope_name(value), GuiseScopeManager(scope))
            setattr(self.source_class, predicate_name(value), introspection.guise_predicate(value))

    def define_introspection(self):
        self.source_class.has_guise = introspection.has_guise
        self.source_class.has_guises = introspection.has_guises
        self.source_class.has_any_guises = introspection.has_any_guises
        for alias, method in self.introspection_aliases().items():
            setattr(self.source_class, alias, method)

        association_name = self.options.association_name
        if association_name != "guises" and not hasattr(self.source_class, "guises"):
            self.source_class.guises = property(
                lambda instance: getattr(instance, association_name),
                doc=f"Alias of {association_name}.",
            )

    def define_guise_records(self):
        self.source_class.guise_records = introspection.GuiseRecordsDescriptor(self.options)
        pre_save.connect(
            validate_guise_records,
            weak=False,
            dispatch_uid="guise_tagging.validate_guise_records",
        )
        post_save.connect(
            persist_guise_records,
            weak=False,
            dispatch_uid="guise_tagging.persist_guise_records",
        )


class GuiseForBuilder:
    """
    Sets up a model to store the guise records of a source model.
    """

    def __init__(self, association_class: type[models.Model], options: GuiseOptions, association_options: dict):
        self.association_class = association_class
        self.options = options
        self.association_options = {**options.association_options, **association_options}
        self.define_validations = self.association_options.pop("validate", options.validate)

    def build(self):
        names = [scope_name(value) for value in self.options.values] + RECORD_ATTRIBUTES
        if self.define_validations:
            names.append("guise_validator")
        _check_available(self.association_class, names)
        self.options.bind_association(self.association_class)
        self.association_class.guise_options = self.options
        self.define_association()
        self.define_scopes()
        self.define_deletion_marks()
        if self.define_validations:
            self.define_validators()
        log.debug(
            "Declared %s as guise records of %s",
            self.association_class.__name__,
            self.options.source_class.__name__,
        )

    def define_association(self):
        name = self.options.source_association_name
        try:
            field = self.association_class._meta.get_field(name)
        except FieldDoesNotExist:
            field = None

        if field is not None:
            # A foreign key declared on the class is used as-is, if it matches.
            # related_model is not available until every model is loaded.
            if not (
                field.many_to_one
                and source_name(field.remote_field.model) == self.options.source_class.__name__
                and field.remote_field.related_name == self.options.association_name
            ):
                raise ImproperlyConfigured(
                    f"{self.association_class.__name__}.{name} must be a ForeignKey to "
                    f"{self.options.source_class.__name__} with related_name='{self.options.association_name}'"
                )
            return

        field_options = dict(self.association_options)
        foreign_key = field_options.pop("foreign_key")
        field_options.setdefault("on_delete", models.CASCADE)
        if foreign_key != f"{name}_id":
            field_options.setdefault("db_column", foreign_key)
        self.association_class.add_to_class(
            name,
            models.ForeignKey(
                self.options.source_class,
                related_name=self.options.association_name,
                **field_options,
            ),
        )

    def define_scopes(self):
        for value in self.options.values:
            scope = GuiseForScope(value, self.options)
            self.association_class.add_to_class(scope_name(value), GuiseScopeManager(scope))

    def define_deletion_marks(self):
        self.association_class.mark_for_deletion = introspection.mark_for_deletion
        self.association_class.marked_for_deletion = property(introspection.marked_for_deletion)

    def define_validators(self):
        validator = GuiseRecordValidator(self.options)
        self.association_class.guise_validator = validator
        self.association_class.clean = validator.wrap_clean(self.association_class.clean)
        pre_save.connect(
            validator,
            weak=False,
            dispatch_uid=f"guise_tagging.validate.{self.association_class._meta.label}",
        )


class GuiseOfBuilder:
    """
    Narrows a proxy of a source model to one guise.
    """

    def __init__(self, proxy_class: type[models.Model], options: GuiseOptions, value: Any = None):
        self.proxy_class = proxy_class
        self.options = options
        if value is None:
            value = derive_guise_value(proxy_class.__name__, options.source_class.__name__)
        self.value = options.canonical_value(value)

    def build(self):
        _check_proxy_of(self.proxy_class, self.options.source_class, "guise_of")
        scope = GuiseOfScope(self.value, self.options)
        self.proxy_class.guise_value = self.value
        self.proxy_class.add_to_class("objects", GuiseScopeManager(scope))
        post_init.connect(
            SourceCallback(self.value),
            sender=self.proxy_class,
            weak=False,
            dispatch_uid=f"guise_tagging.guise_of.{self.proxy_class._meta.label}",
        )
        log.debug("Declared %s as the %s guise of %s", self.proxy_class.__name__, self.value,
                  self.options.source_class.__name__)


class ScopedGuiseForBuilder:
    """
    Narrows a proxy of a guise record model to the records of one guise.
    """

    def __init__(self, proxy_class: type[models.Model], options: GuiseOptions, value: Any = None):
        self.proxy_class = proxy_class
        self.options = options
        if value is None:
            value = derive_guise_value(proxy_class.__name__, options.association_class.__name__)
        self.value = options.canonical_value(value)

    def build(self):
        _check_proxy_of(self.proxy_class, self.options.association_class, "scoped_guise_for")
        scope = self.options.scope(self.value, GuiseForScope.scope_type)
        self.proxy_class.guise_value = self.value
        self.proxy_class.add_to_class("objects", GuiseScopeManager(scope))
        post_init.connect(
            AssociationCallback(self.value, self.options.attribute),
            sender=self.proxy_class,
            weak=False,
            dispatch_uid=f"guise_tagging.scoped_guise_for.{self.proxy_class._meta.label}",
        )
        log.debug("Declared %s as the %s records of %s", self.proxy_class.__name__, self.value,
                  self.options.association_class.__name__)


def has_guises(*values: Any, registry: Registry | None = None, **options: Any) -> Callable[[ModelT], ModelT]:
    """
    Declares the guises that instances of the decorated model may hold.

    Options:
      association: name of the reverse relation to the guise records (default "guises")
      attribute: guise record field storing the guise value (default "value")
      foreign_key: column of the guise records' foreign key (default "<source>_id")
      validate: set False to skip validating guise records
    Other options are passed on to the ForeignKey created by ``guise_for``.
    """
    if not values:
        raise ValueError("must specify values in `has_guises`")
    if len(values) == 1 and isinstance(values[0], type):
        raise TypeError("`has_guises` must be called with guise values, e.g. @has_guises('Admin')")
    if registry is None:
        registry = default_registry

    def decorator(source_class: ModelT) -> ModelT:
        guise_options = GuiseOptions.from_declaration(source_class, *values, **options)
        builder = HasGuisesBuilder(guise_options)
        builder.check_names()
        registry.register(source_class, guise_options)
        try:
            builder.build()
        except Exception:
            registry.unregister(source_class)
            raise
        return source_class

    return decorator


def guise_for(source: Any, registry: Registry | None = None, **association_options: Any) -> Callable[[ModelT], ModelT]:
    """
    Declares the decorated model as the store of guise records for ``source``.

    ``source`` is the model declared with ``has_guises``, or its name.
    Options:
      foreign_key: column of the foreign key to the source
      validate: set False to skip validating guise records
    Other options are passed on to the ForeignKey, e.g. ``on_delete``.

    Raises DefinitionNotFound if ``source`` has no guises.
    """
    if registry is None:
        registry = default_registry

    def decorator(association_class: ModelT) -> ModelT:
        options = registry.get(source)
        GuiseForBuilder(association_class, options, association_options).build()
        return association_class

    return decorator


def guise_of(source: Any, value: Any = None, registry: Registry | None = None) -> Callable[[ModelT], ModelT]:
    """
    Declares the decorated proxy model as the guise ``value`` of ``source``.

    ``value`` defaults to the proxy's class name, minus the source's name if
    it ends with it (``Technician`` or ``TechnicianUser`` for ``User``).
    """
    if registry is None:
        registry = default_registry

    def decorator(proxy_class: ModelT) -> ModelT:
        options = registry.get(source)
        GuiseOfBuilder(proxy_class, options, value).build()
        return proxy_class

    return decorator


def scoped_guise_for(source: Any, value: Any = None, registry: Registry | None = None) -> Callable[[ModelT], ModelT]:
    """
    Declares the decorated proxy of ``source``'s guise record model as holding
    only the records of guise ``value``.

    ``value`` defaults to the proxy's class name minus the guise record
    model's name (``TechnicianUserRole`` for ``UserRole``).
    """
    if registry is None:
        registry = default_registry

    def decorator(proxy_class: ModelT) -> ModelT:
        options = registry.get(source)
        ScopedGuiseForBuilder(proxy_class, options, value).build()
        return proxy_class

    return decorator
