"""
Django rules predicates based on guises

    import rules
    from guise_tagging.core.guises.rules import guise_predicate

    rules.add_perm("support.close_ticket", guise_predicate("Technician") | rules.is_staff)

The user model must be declared with ``has_guises``; other users (e.g.
anonymous users) never hold a guise.
"""
from __future__ import annotations

from typing import Any

# typing support in rules depends on https://github.com/dfunckt/django-rules/pull/177
import rules  # type: ignore[import]

from .utils import canonicalize, method_name


def _holds_guises(user: Any, values: tuple[str, ...], check: str) -> bool:
    checker = getattr(user, check, None)
    if checker is None:
        return False
    return checker(*values)


def guise_predicate(value: Any) -> rules.Predicate:
    """
    Predicate that is true for users holding the guise ``value``.
    """
    value = canonicalize(value)
    return rules.Predicate(
        lambda user: _holds_guises(user, (value,), "has_guises"),
        name=f"has_guise:{method_name(value)}",
    )


def any_guise_predicate(*values: Any) -> rules.Predicate:
    """
    Predicate that is true for users holding at least one of the guises ``values``.
    """
    values = tuple(canonicalize(value) for value in values)
    return rules.Predicate(
        lambda user: _holds_guises(user, values, "has_any_guises"),
        name=f"has_any_guise:{','.join(method_name(value) for value in values)}",
    )
