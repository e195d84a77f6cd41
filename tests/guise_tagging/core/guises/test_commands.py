"""
Tests for the guise_definitions management command
"""
from io import StringIO
from unittest.mock import patch

import pytest
from django.core.management import CommandError, call_command
from django.test import TestCase

from guise_tagging.core.guises.options import GuiseOptions
from guise_tagging.core.guises.registry import Registry
from test_utils.guise_models.models import User

COMMAND_REGISTRY = "guise_tagging.core.guises.management.commands.guise_definitions.registry"


class TestGuiseDefinitionsCommand(TestCase):
    """
    Test listing the declared guises.
    """

    def call(self, *args) -> str:
        out = StringIO()
        call_command("guise_definitions", *args, stdout=out, no_color=True)
        return out.getvalue()

    def test_all_definitions(self):
        output = self.call()
        assert "guise_models.User\n" in output
        assert "association: user_roles -> guise_models.UserRole" in output
        assert "attribute: name" in output
        assert "values: Technician, Supervisor, Explorer" in output
        assert "guise_models.Person\n" in output
        assert "foreign key: employee_id" in output
        assert "association: guises -> guise_models.TeamGuise" in output
        assert output.index("guise_models.Person") < output.index("guise_models.Team") < output.index(
            "guise_models.User"
        )

    def test_single_source(self):
        output = self.call("--source", "guise_models.Person")
        assert "guise_models.Person" in output
        assert "values: Admin, Manager, Reviewer" in output
        assert "guise_models.User" not in output

    def test_unknown_source(self):
        with pytest.raises(CommandError) as exc:
            self.call("--source", "Organization")
        assert "Organization" in str(exc.value)

    def test_missing_guise_for(self):
        local_registry = Registry()
        local_registry.register(User, GuiseOptions.from_declaration(User, "Technician"))
        with patch(COMMAND_REGISTRY, local_registry):
            output = self.call()
        assert "missing guise_for declaration" in output
        assert "foreign key: user_id" in output

    def test_no_definitions(self):
        with patch(COMMAND_REGISTRY, Registry()):
            assert self.call() == "No guises declared.\n"
