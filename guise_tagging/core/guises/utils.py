"""
Naming helpers shared by every guise entry point.

Guise values are compared in a single canonical, class-like form, so that
``"technician"``, ``"technicians"``, ``"Technician"`` and the ``Technician``
proxy model all refer to the same guise.
"""
from __future__ import annotations

from typing import Any

import inflection


def canonicalize(value: Any) -> str:
    """
    Returns the canonical form of a guise name, e.g. "desk_worker" -> "DeskWorker".

    Accepts strings and classes (the class name is used).
    """
    if isinstance(value, type):
        value = value.__name__
    name = str(value).strip().replace(" ", "_")
    return inflection.camelize(inflection.singularize(inflection.underscore(name)))


def method_name(value: str) -> str:
    """
    Snake-case name used for per-guise attributes, e.g. "DeskWorker" -> "desk_worker".
    """
    return inflection.underscore(value)


def scope_name(value: str) -> str:
    """
    Name of the scope manager for a guise, e.g. "DeskWorker" -> "desk_workers".
    """
    return inflection.pluralize(method_name(value))


def predicate_name(value: str) -> str:
    """
    Name of the instance predicate for a guise, e.g. "DeskWorker" -> "is_desk_worker".
    """
    return f"is_{method_name(value)}"


def source_name(source: Any) -> str:
    """
    Returns the name a source was declared with: a model's class name, or the
    last component of a dotted "app_label.ModelName" string.
    """
    if isinstance(source, type):
        return source.__name__
    return str(source).rsplit(".", 1)[-1]


def derive_guise_value(class_name: str, parent_name: str) -> str:
    """
    Guise value implied by a subclass name, e.g. ("TechnicianUserRole", "UserRole") -> "Technician".
    """
    if class_name != parent_name and class_name.endswith(parent_name):
        class_name = class_name[: -len(parent_name)]
    return canonicalize(class_name)
