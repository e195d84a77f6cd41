"""
Tests for instance-level guise checks
"""
import ddt  # type: ignore[import]
import pytest
from django.test import TestCase

from guise_tagging.core.guises.exceptions import InvalidGuiseValue
from test_utils.guise_models.models import Technician, User, UserRole

from .test_declarations import GuiseTestMixin


@ddt.ddt
class TestGuiseChecks(GuiseTestMixin, TestCase):
    """
    Test has_guise, has_guises, has_any_guises and the guise predicates.
    """

    @ddt.data(
        (1, False, False),
        (2, True, False),
        (3, False, True),
        (4, True, True),
    )
    @ddt.unpack
    def test_predicates(self, pk, is_technician, is_supervisor):
        user = User.objects.get(pk=pk)
        assert user.is_technician == is_technician
        assert user.is_supervisor == is_supervisor
        assert not user.is_explorer

    @ddt.data("Technician", "technician", "technicians", Technician)
    def test_has_guise_forms(self, value):
        assert self.technician.has_guise(value)
        assert not self.supervisor.has_guise(value)

    def test_has_guise_undeclared(self):
        with pytest.raises(InvalidGuiseValue) as exc:
            self.technician.has_guise("Accountant")
        assert exc.value.guise_value == "Accountant"

    def test_has_guises(self):
        assert self.both.has_guises("Supervisor", Technician)
        assert not self.technician.has_guises("Supervisor", "Technician")
        assert self.technician.has_guises("Technician")

    def test_has_any_guises(self):
        assert self.technician.has_any_guises("supervisor", "technician")
        assert self.supervisor.has_any_guises("supervisor", "technician")
        assert not self.user.has_any_guises("supervisor", "technician")

    def test_every_value_is_checked(self):
        with pytest.raises(InvalidGuiseValue):
            self.both.has_any_guises("Technician", "Accountant")
        with pytest.raises(InvalidGuiseValue):
            self.user.has_guises("Technician", "Accountant")

    def test_records_loaded_once(self):
        with self.assertNumQueries(1):
            assert self.both.is_technician
            assert self.both.is_supervisor
            assert self.both.has_guises("Technician", "Supervisor")

    def test_unsaved_instance(self):
        user = User(email="unsaved@example.com")
        with self.assertNumQueries(0):
            assert not user.is_technician
            assert len(user.guise_records) == 0


class TestGuiseRecords(GuiseTestMixin, TestCase):
    """
    Test editing guises in memory before saving.
    """

    def _record(self, user, value):
        return next(record for record in user.guise_records if record.name == value)

    def test_iterate(self):
        assert len(self.both.guise_records) == 2
        assert sorted(self.both.guise_records.values()) == ["Supervisor", "Technician"]
        assert not self.both.guise_records.staged

    def test_staged_record(self):
        record = self.user.guise_records.build("Explorer")
        assert record.pk is None
        assert record.user == self.user
        assert self.user.is_explorer
        assert self.user.guise_records.staged == [record]
        assert not User.explorers.exists()

        self.user.save()
        assert record.pk is not None
        assert not self.user.guise_records.staged
        assert list(User.explorers.all()) == [self.user]
        assert User.objects.get(pk=1).is_explorer

    def test_ensure(self):
        record = self.technician.guise_records.ensure("Technician")
        assert record.pk == 1
        assert not self.technician.guise_records.staged

    def test_staged_on_unsaved_instance(self):
        user = User(email="new@example.com")
        user.guise_records.build("Supervisor")
        assert user.is_supervisor
        user.save()
        assert UserRole.objects.filter(user=user, name="Supervisor").exists()

    def test_mark_for_deletion(self):
        record = self._record(self.both, "Technician")
        self.both.guise_records.mark_for_deletion(record)
        assert record.marked_for_deletion
        assert not self.both.is_technician
        assert self.both.is_supervisor
        assert len(self.both.guise_records) == 1
        assert UserRole.objects.filter(pk=record.pk).exists()

        self.both.save()
        assert not UserRole.objects.filter(pk=record.pk).exists()
        assert not self.both.is_technician
        assert not User.objects.get(pk=4).is_technician
        assert User.objects.get(pk=4).is_supervisor

    def test_record_marks_itself(self):
        record = self._record(self.technician, "Technician")
        record.mark_for_deletion()
        assert not self.technician.is_technician
        self.technician.save()
        assert not User.technicians.filter(pk=2).exists()

    def test_mark_staged_record(self):
        record = self.user.guise_records.build("Explorer")
        self.user.guise_records.mark_for_deletion(record)
        assert not self.user.is_explorer
        self.user.save()
        assert not User.explorers.exists()
        assert record.pk is None

    def test_mark_record_not_held(self):
        record = UserRole.objects.get(pk=3)
        with pytest.raises(ValueError):
            self.both.guise_records.mark_for_deletion(record)
        assert not record.marked_for_deletion

    def test_reload(self):
        self.user.guise_records.build("Explorer")
        record = self._record(self.both, "Technician")
        self.both.guise_records.mark_for_deletion(record)

        self.user.guise_records.reload()
        self.both.guise_records.reload()
        assert not self.user.is_explorer
        assert self.both.is_technician
