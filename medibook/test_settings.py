# medibook/test_settings.py
import os

os.environ.setdefault("DJANGO_SECRET_KEY", "medibook-test-secret")
os.environ.setdefault("DATABASE_URL", "sqlite://:memory:")

from .settings import *  # noqa: E402,F401,F403

PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]

LOGGING["loggers"]["appointments"]["level"] = "WARNING"  # noqa: F405
