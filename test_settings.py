"""
These settings are here to use during tests, because django requires them.

In a real-world use case, the guises app is installed into other Django
applications, so these settings will not be used.
"""

from os.path import abspath, dirname, join


def root(*args):
    """
    Get the absolute path of the given path relative to the project root.
    """
    return join(abspath(dirname(__file__)), *args)


DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": "default.db",
        "USER": "",
        "PASSWORD": "",
        "HOST": "",
        "PORT": "",
    }
}

INSTALLED_APPS = [
    "django.contrib.auth",
    "django.contrib.contenttypes",
    # django-rules based authorization
    'rules.apps.AutodiscoverRulesConfig',
    # Our own apps
    "guise_tagging.core.guises.apps.GuisesConfig",
    # Models declared with guises, for testing
    "test_utils.guise_models.apps.GuiseModelsConfig",
]

AUTHENTICATION_BACKENDS = [
    'rules.permissions.ObjectPermissionBackend',
]

SECRET_KEY = "insecure-secret-key"

USE_TZ = True

######################### GUISE TAGGING SETTINGS #########################

GUISE_TAGGING = {
    "DEFAULT_ASSOCIATION_NAME": "guises",
    "DEFAULT_ATTRIBUTE_NAME": "value",
    "ALLOW_REDEFINITION": False,
}
