import logging

from django.apps import AppConfig

logger = logging.getLogger(__name__)


class EventiConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "eventi"
    verbose_name = "Eventi"

    def ready(self):
        """Registra Evento nel SearchRegistry."""
        from core.search import SearchRegistry

        from .models import Evento

        SearchRegistry.register(
            model=Evento,
            category="Eventi",
            icon="bi-calendar-event",
            priority=10,
        )
