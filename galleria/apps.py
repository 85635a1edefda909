from django.apps import AppConfig


class GalleriaConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "galleria"
    verbose_name = "Galleria"
