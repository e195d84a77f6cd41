"""
Tests guise rules predicates
"""
import ddt  # type: ignore[import]
import rules  # type: ignore[import]
from django.contrib.auth.models import AnonymousUser
from django.test.testcases import TestCase

from guise_tagging.core.guises.rules import any_guise_predicate, guise_predicate

from .test_declarations import GuiseTestMixin


@ddt.ddt
class TestGuiseRules(GuiseTestMixin, TestCase):
    """
    Tests that guise predicates can be used in rules.
    """

    def setUp(self):
        super().setUp()
        self.rules = rules.RuleSet()
        self.rules.add_rule("support.close_ticket", guise_predicate("technicians"))
        self.rules.add_rule(
            "support.view_ticket",
            any_guise_predicate("Technician", "Supervisor") | rules.is_superuser,
        )

    @ddt.data(
        ("user", False, False),
        ("technician", True, True),
        ("supervisor", False, True),
        ("both", True, True),
    )
    @ddt.unpack
    def test_rules(self, attr, can_close, can_view):
        user = getattr(self, attr)
        assert self.rules.test_rule("support.close_ticket", user) == can_close
        assert self.rules.test_rule("support.view_ticket", user) == can_view

    def test_anonymous_user(self):
        user = AnonymousUser()
        assert not guise_predicate("Technician")(user)
        assert not any_guise_predicate("Technician", "Supervisor")(user)
        assert not self.rules.test_rule("support.view_ticket", user)

    def test_predicate_names(self):
        assert guise_predicate("desk worker").name == "has_guise:desk_worker"
        assert any_guise_predicate("Technician", "Supervisor").name == "has_any_guise:technician,supervisor"
