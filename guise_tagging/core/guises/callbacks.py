"""
Signal receivers that give new instances of guise proxy models their guise.
"""
from __future__ import annotations

import logging

from django.db import models

from .introspection import RECORDS_CACHE_NAME

log = logging.getLogger(__name__)


class Callback:
    """
    Base for post_init receivers bound to a single guise value.
    """

    def __init__(self, guise: str):
        self.guise = guise

    def __repr__(self):
        return f"<{self.__class__.__name__}> {self.guise}"

    def __call__(self, sender, instance: models.Model, **kwargs):
        # Instances loaded from the database already carry a primary key.
        if instance.pk is None:
            self.after_initialize(instance)

    def after_initialize(self, instance: models.Model):
        raise NotImplementedError


class SourceCallback(Callback):
    """
    Stages the guise record on new instances of a ``guise_of`` proxy.

    The record is saved when the instance is saved.
    """

    def after_initialize(self, instance: models.Model):
        instance.guise_records.ensure(self.guise)


class AssociationCallback(Callback):
    """
    Sets the guise attribute on new instances of a ``scoped_guise_for`` proxy.
    """

    def __init__(self, guise: str, attribute: str):
        super().__init__(guise)
        self.attribute = attribute

    def after_initialize(self, instance: models.Model):
        setattr(instance, self.attribute, self.guise)


def persist_guise_records(sender, instance: models.Model, raw=False, **kwargs):
    """
    post_save receiver: saves the in-memory guise record changes of a source instance.
    """
    if raw:
        return
    records = instance.__dict__.get(RECORDS_CACHE_NAME)
    if records is not None:
        log.debug("Saving guise records of %r", instance)
        records.save()


def validate_guise_records(sender, instance: models.Model, raw=False, **kwargs):
    """
    pre_save receiver: an invalid staged guise record stops its source instance from being saved.
    """
    if raw:
        return
    records = instance.__dict__.get(RECORDS_CACHE_NAME)
    if records is not None:
        records.validate()
