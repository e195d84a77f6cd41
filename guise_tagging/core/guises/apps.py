"""
guises Django application initialization.
"""

from django.apps import AppConfig


class GuisesConfig(AppConfig):
    """
    Configuration for the guises Django application.
    """

    name = "guise_tagging.core.guises"
    verbose_name = "Guise Tagging"
    default_auto_field = "django.db.models.BigAutoField"
    label = "guise_tagging"

    def ready(self):
        """
        Fail early on a misspelled GUISE_TAGGING setting.
        """
        from .conf import check_settings

        check_settings()
