"""
App configuration for the core app.
"""
import logging
import os
import sys

from django.apps import AppConfig
from django.conf import settings

logger = logging.getLogger(__name__)


class CoreConfig(AppConfig):
    """App configuration for core."""

    name = "core"
    verbose_name = "Core"

    def ready(self):
        """Called when Django starts."""
        # Skip for management commands that never serve traffic
        if len(sys.argv) > 1 and sys.argv[1] in [
            "migrate",
            "makemigrations",
            "collectstatic",
            "check",
            "createsuperuser",
        ]:
            return

        # Django's reloader imports the project twice
        if os.environ.get("RUN_MAIN") == "false":
            return

        if getattr(self, "_initialized", False):
            return

        self.register_event_handlers()
        if getattr(settings, "OTEL_ENABLED", False):
            self.setup_observability()
        self._initialized = True

    def setup_observability(self):
        """Setup OpenTelemetry after apps are ready."""
        from core.instrumentation import setup_opentelemetry

        try:
            setup_opentelemetry()
        except Exception as e:  # pylint: disable=broad-exception-caught
            logger.warning(f"Failed to setup OpenTelemetry: {e}")

    def register_event_handlers(self):
        """Register event handlers after apps are ready."""
        from core.infrastructure.event_handlers import register_event_handlers as register

        register()
