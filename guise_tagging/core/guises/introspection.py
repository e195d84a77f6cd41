"""
Instance-level guise checks.

Guise checks look at an in-memory collection of guise records (GuiseRecords)
rather than querying the database on every call. The collection holds the
records loaded from the database plus records staged on the instance but not
saved yet, and it honors records marked for deletion. That way callers can
edit an instance's guises in memory and see the result right away:

    >>> user.guise_records.mark_for_deletion(role)
    >>> user.is_technician
    False
    >>> user.save()  # deletes role
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Any, Iterator

from django.core.exceptions import ValidationError
from django.db import models, transaction

if TYPE_CHECKING:
    from .options import GuiseOptions

# Key of the GuiseRecords collection in a model instance's __dict__.
RECORDS_CACHE_NAME = "_guise_records_cache"


def is_marked_for_deletion(record: models.Model) -> bool:
    return getattr(record, "_guise_marked_for_deletion", False)


class GuiseRecords:
    """
    The guise records of one source instance, as currently held in memory.
    """

    def __init__(self, instance: models.Model, options: GuiseOptions):
        self.instance = instance
        self.options = options
        self._loaded: list[models.Model] | None = None
        self._staged: list[models.Model] = []

    def __repr__(self):
        return f"<{self.__class__.__name__}> {self.values()}"

    def __iter__(self) -> Iterator[models.Model]:
        """
        Iterates over the records that are not marked for deletion.
        """
        return (record for record in self.all() if not is_marked_for_deletion(record))

    def __len__(self) -> int:
        return len(list(iter(self)))

    def _load(self) -> list[models.Model]:
        if self._loaded is None:
            if self.instance._state.adding:
                self._loaded = []
            else:
                self._loaded = list(getattr(self.instance, self.options.association_name).all())
        return self._loaded

    def all(self) -> list[models.Model]:
        """
        Every record held in memory: loaded ones, then staged ones, including
        records marked for deletion.
        """
        return self._load() + self._staged

    @property
    def staged(self) -> list[models.Model]:
        return list(self._staged)

    def values(self) -> list[str]:
        attribute = self.options.attribute
        return [getattr(record, attribute) for record in self]

    def build(self, value: Any) -> models.Model:
        """
        Stages a new, unsaved guise record for ``value``.

        The record is saved together with the instance. The value is stored
        as given and checked by the record validations when it is saved.
        """
        record = self.options.association_class(**{self.options.attribute: value})
        setattr(record, self.options.source_association_name, self.instance)
        self._staged.append(record)
        return record

    def ensure(self, value: Any) -> models.Model:
        """
        Returns the held record for ``value``, staging one if there is none.
        """
        for record in self:
            if getattr(record, self.options.attribute) == value:
                return record
        return self.build(value)

    def mark_for_deletion(self, record: models.Model):
        """
        Marks a held record to be deleted when the instance is next saved.
        """
        if not any(record is held for held in self.all()):
            raise ValueError(f"{record!r} is not one of the guise records of {self.instance!r}")
        record.mark_for_deletion()

    def validate(self):
        """
        Raises ValidationError, keyed by the guise attribute, if a staged record
        is invalid or repeats a value already held.
        """
        validator = getattr(self.options.association_class, "guise_validator", None)
        if validator is None:
            return
        attribute = self.options.attribute
        held = [getattr(record, attribute) for record in self._load() if not is_marked_for_deletion(record)]
        errors = []
        for record in self._staged:
            if is_marked_for_deletion(record):
                continue
            value = getattr(record, attribute)
            errors += validator.errors(record, unique=False)
            if value in held:
                errors.append(validator.duplicate_error(record))
            held.append(value)
        if errors:
            raise ValidationError({attribute: errors})

    def save(self):
        """
        Saves staged records and deletes records marked for deletion.
        """
        self.validate()
        kept = []
        with transaction.atomic():
            for record in self._load():
                if is_marked_for_deletion(record):
                    record.delete()
                else:
                    kept.append(record)
            for record in self._staged:
                if is_marked_for_deletion(record):
                    continue
                # Picks up the primary key of an instance saved after staging.
                setattr(record, self.options.source_association_name, self.instance)
                record.save()
                kept.append(record)
        self._loaded = kept
        self._staged = []

    def reload(self):
        """
        Forgets staged records and deletion marks; records are loaded again on next use.
        """
        self._loaded = None
        self._staged = []


class GuiseRecordsDescriptor:
    """
    Gives each source instance its own GuiseRecords, created on first access.
    """

    def __init__(self, options: GuiseOptions):
        self.options = options

    def __get__(self, instance, cls=None):
        if instance is None:
            return self
        try:
            return instance.__dict__[RECORDS_CACHE_NAME]
        except KeyError:
            records = instance.__dict__[RECORDS_CACHE_NAME] = GuiseRecords(instance, self.options)
            return records


def has_guise(self, value: Any) -> bool:
    """
    Does this instance hold the guise ``value``?

    Raises InvalidGuiseValue if ``value`` isn't one of the declared guises.
    """
    value = self.guise_options.canonical_value(value)
    return value in self.guise_records.values()


def has_guises(self, *values: Any) -> bool:
    """
    Does this instance hold every one of the given guises?
    """
    # Every value is checked, so an undeclared one always raises.
    results = [self.has_guise(value) for value in values]
    return all(results)


def has_any_guises(self, *values: Any) -> bool:
    """
    Does this instance hold at least one of the given guises?
    """
    results = [self.has_guise(value) for value in values]
    return any(results)


def guise_predicate(value: str) -> property:
    """
    Read-only property checking a single guise, e.g. ``user.is_technician``.
    """
    def check(self) -> bool:
        return self.has_guise(value)

    check.__doc__ = f"Does this instance hold the {value} guise?"
    return property(check)


def mark_for_deletion(self):
    """
    Marks this guise record for deletion the next time its source instance is saved.
    """
    self._guise_marked_for_deletion = True


def marked_for_deletion(self) -> bool:
    return is_marked_for_deletion(self)
