from .base import REST_FRAMEWORK as BASE_REST_FRAMEWORK
from .base import *  # noqa

# Test settings: force SQLite for reliability and speed
DEBUG = False

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": BASE_DIR / "test_db.sqlite3",  # noqa: F405
    }
}

PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]

# Plain static storage: tests never run collectstatic
STORAGES = {
    "default": {"BACKEND": "django.core.files.storage.FileSystemStorage"},
    "staticfiles": {"BACKEND": "django.contrib.staticfiles.storage.StaticFilesStorage"},
}

# Relax throttling for tests to reduce flakiness
REST_FRAMEWORK = {**BASE_REST_FRAMEWORK}
REST_FRAMEWORK["DEFAULT_THROTTLE_RATES"] = {
    **BASE_REST_FRAMEWORK.get("DEFAULT_THROTTLE_RATES", {}),
    "user": "10000/min",
    "anon": "10000/min",
    "inventario": "10000/min",
    "inventario_write": "10000/min",
}

INVENTARIO_RESERVA_TTL_HOURS = 48
INVENTARIO_RESERVA_RELEASE_LIMIT = 100
INVENTARIO_SYSTEM_USER_ID = None
