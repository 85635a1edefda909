from django.apps import AppConfig


class InvitiConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "inviti"
    verbose_name = "Inviti"
