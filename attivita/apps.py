from django.apps import AppConfig


class AttivitaConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "attivita"
    verbose_name = "Attività"
