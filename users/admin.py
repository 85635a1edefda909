"""
Admin configuration per l'app users.
"""

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin

from .models import PermessoCategoria, PermessoPagina, User


class PermessoPaginaInline(admin.TabularInline):
    model = PermessoPagina
    extra = 0


class PermessoCategoriaInline(admin.TabularInline):
    model = PermessoCategoria
    extra = 0


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    list_display = [
        "username",
        "get_full_name",
        "email",
        "ruolo",
        "edizione",
        "scadenza_edizione",
        "is_active",
    ]
    list_filter = ["ruolo", "edizione", "is_active", "is_superuser"]
    search_fields = ["username", "first_name", "last_name", "email"]
    fieldsets = BaseUserAdmin.fieldsets + (
        (
            "Ruolo ed edizione",
            {"fields": ("ruolo", "edizione", "scadenza_edizione", "telefono")},
        ),
        (
            "Collaborazione",
            {"fields": ("utente_principale", "categoria_principale")},
        ),
    )
    inlines = [PermessoPaginaInline, PermessoCategoriaInline]
