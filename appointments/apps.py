# appointments/apps.py
from django.apps import AppConfig
from django.core.exceptions import ImproperlyConfigured

REQUIRED_SETTINGS = [
    'SECRET_KEY',
    'DATABASE_URL',
]


class AppointmentsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "appointments"
    verbose_name = "Appointment Booking"

    def ready(self):
        """
        Initialize app when Django starts
        """
        # Missing configuration is fatal before anything is served
        self.validate_settings()

        from . import signals  # noqa: F401

    def validate_settings(self):
        """
        Validate required settings for the app
        """
        from django.conf import settings

        missing_settings = [
            name for name in REQUIRED_SETTINGS
            if not getattr(settings, name, None)
        ]

        if missing_settings:
            raise ImproperlyConfigured(
                f"Missing required settings: {', '.join(missing_settings)}. "
                f"Set DJANGO_SECRET_KEY and DATABASE_URL in the environment or .env file."
            )
