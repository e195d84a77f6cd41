"""
Test-only Django application with models declared with guises.
"""
from django.apps import AppConfig


class GuiseModelsConfig(AppConfig):
    """
    Configuration for the guise test models application.
    """

    name = "test_utils.guise_models"
    verbose_name = "Guise Tagging: test models"
    default_auto_field = "django.db.models.BigAutoField"
    label = "guise_models"
