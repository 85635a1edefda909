from django.apps import AppConfig


class OspitiConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "ospiti"
    verbose_name = "Ospiti"

    def ready(self):
        """Registra Ospite nel SearchRegistry."""
        from core.search import SearchRegistry

        from .models import Ospite

        SearchRegistry.register(
            model=Ospite,
            category="Ospiti",
            icon="bi-person",
            priority=8,
        )
