"""
Validation of guise records
"""
from __future__ import annotations

import functools
from typing import Callable

from django.core.exceptions import ValidationError
from django.db import models
from django.utils.translation import gettext_lazy as _

from .options import GuiseOptions


class GuiseRecordValidator:
    """
    Checks the guise attribute of a guise record before it is saved.

    The attribute must be present, be one of the declared guise values, and be
    unique among the records of the same source instance.
    """

    def __init__(self, options: GuiseOptions):
        self.options = options

    def __call__(self, sender, instance: models.Model, raw=False, **kwargs):
        """
        pre_save receiver. Fixture loading (``raw``) is not validated.
        """
        if raw or not isinstance(instance, self.options.association_class):
            return
        self.validate(instance)

    def errors(self, instance: models.Model, unique: bool = True) -> list[ValidationError]:
        """
        Returns the validation errors of ``instance``'s guise attribute.

        ``unique=False`` skips the check against the records already saved.
        """
        attribute = self.options.attribute
        field = instance._meta.get_field(attribute)
        value = getattr(instance, attribute)

        if value in field.empty_values:
            return [ValidationError(field.error_messages["blank"], code="blank")]

        errors = []
        if value not in self.options.values:
            errors.append(ValidationError(
                _("Value %(value)r is not a valid choice."),
                code="invalid_choice",
                params={"value": value},
            ))
        if unique and self._is_duplicate(instance, value):
            errors.append(self.duplicate_error(instance))
        return errors

    def duplicate_error(self, instance: models.Model) -> ValidationError:
        return instance.unique_error_message(
            self.options.association_class,
            (self.options.source_association_name, self.options.attribute),
        )

    def validate(self, instance: models.Model):
        """
        Raises ValidationError, keyed by the guise attribute, if ``instance`` is invalid.
        """
        errors = self.errors(instance)
        if errors:
            raise ValidationError({self.options.attribute: errors})

    def wrap_clean(self, clean: Callable[[models.Model], None]) -> Callable[[models.Model], None]:
        """
        Returns a model ``clean()`` that also validates the guise attribute, so
        that ``full_clean()`` and model forms report guise errors.
        """
        @functools.wraps(clean)
        def clean_guise(instance: models.Model):
            clean(instance)
            self.validate(instance)

        return clean_guise

    def _is_duplicate(self,instance: models.Model, value: str) -> bool:
        source_field = instance._meta.get_field(self.options.source_association_name)
        source_id = getattr(instance, source_field.attname)
        if source_id is None:
            return False
        others = self.options.association_class._base_manager.filter(
            **{source_field.attname: source_id, self.options.attribute: value}
        )
        if instance.pk is not None:
            others = others.exclude(pk=instance.pk)
        return others.exists()
