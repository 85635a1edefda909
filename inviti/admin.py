"""
Admin per app inviti.
"""

from django.contrib import admin

from ospiti.models import Accompagnatore

from .models import Invito, ModelloEmail


class AccompagnatoreInline(admin.TabularInline):
    model = Accompagnatore
    extra = 0
    fields = ["nome", "cognome", "email", "arrivato_il"]


@admin.register(ModelloEmail)
class ModelloEmailAdmin(admin.ModelAdmin):
    list_display = ["nome", "lingua", "categoria", "is_default", "is_active"]
    list_filter = ["lingua", "is_default", "categoria"]
    search_fields = ["nome", "oggetto"]


@admin.register(Invito)
class InvitoAdmin(admin.ModelAdmin):
    list_display = ["ospite", "evento", "risposta", "inviato_il", "aperto_il", "risposto_il"]
    list_filter = ["risposta", "lingua", "evento"]
    search_fields = ["ospite__nome", "ospite__email", "oggetto"]
    readonly_fields = [
        "token_accetta",
        "token_rifiuta",
        "token_tracking",
        "inviato_il",
        "aperto_il",
        "risposto_il",
        "created_at",
        "updated_at",
    ]
    inlines = [AccompagnatoreInline]
