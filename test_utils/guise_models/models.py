"""
Models used to test guise declarations.

These have no migrations; the test runner creates their tables directly.
"""
from django.db import models

from guise_tagging.core.guises.api import guise_for, guise_of, has_guises, scoped_guise_for


@has_guises("Technician", "Supervisor", "Explorer", association="user_roles", attribute="name")
class User(models.Model):
    """
    A source model whose guises are stored in UserRole.
    """
    email = models.EmailField(blank=True)

    def __str__(self):
        return f"<{self.__class__.__name__}> ({self.id}) {self.email}"


@guise_of(User)
class Technician(User):
    """
    Users holding the Technician guise.
    """

    class Meta:
        proxy = True


@guise_of(User)
class Supervisor(User):
    """
    Users holding the Supervisor guise.
    """

    class Meta:
        proxy = True


@guise_for(User)
class UserRole(models.Model):
    """
    One guise held by one User.
    """
    name = models.CharField(max_length=255, blank=True)


@scoped_guise_for(User)
class TechnicianUserRole(UserRole):
    """
    Technician guise records only.
    """

    class Meta:
        proxy = True


@has_guises(
    "Admin",
    "Manager",
    "Reviewer",
    association="permissions",
    attribute="privilege",
    foreign_key="employee_id",
)
class Person(models.Model):
    """
    A source model with a custom foreign key column and no record validation.
    """


@guise_for(Person, foreign_key="employee_id", validate=False)
class Permission(models.Model):
    """
    One guise held by one Person, stored in the "privileges" table.
    """
    privilege = models.CharField(max_length=255, blank=True)

    class Meta:
        db_table = "privileges"


@has_guises("Lead", "Member")
class Team(models.Model):
    """
    A source model using the default association and attribute names.
    """
    name = models.CharField(max_length=255)


@guise_for("guise_models.Team")
class TeamGuise(models.Model):
    """
    Guise records of a Team, with the foreign key declared on the class.
    """
    team = models.ForeignKey(Team, on_delete=models.CASCADE, related_name="guises")
    value = models.CharField(max_length=100)
