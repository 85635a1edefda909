"""
Admin per app ospiti.
"""

from django.contrib import admin

from .models import Accompagnatore, Ospite


@admin.register(Ospite)
class OspiteAdmin(admin.ModelAdmin):
    list_display = ["nome", "evento", "organizzazione", "stato", "numero_tavolo", "is_vip", "is_active"]
    list_filter = ["stato", "is_vip", "richiede_accoglienza", "evento"]
    search_fields = ["nome", "email", "organizzazione", "titolo"]
    readonly_fields = ["token_checkin", "created_at", "updated_at", "created_by", "updated_by"]

    fieldsets = (
        ("Ospite", {"fields": ("evento", "nome", "email", "telefono", "titolo", "organizzazione", "stato")}),
        (
            "Tavolo e accoglienza",
            {
                "fields": (
                    "numero_tavolo",
                    "is_vip",
                    "richiede_accoglienza",
                    "accoglienza_da",
                    "data_arrivo",
                    "ora_arrivo",
                )
            },
        ),
        ("Altro", {"fields": ("note", "dati_aggiuntivi", "token_checkin")}),
        (
            "Sistema",
            {
                "fields": ("is_active", "created_at", "updated_at", "created_by", "updated_by"),
                "classes": ("collapse",),
            },
        ),
    )


@admin.register(Accompagnatore)
class AccompagnatoreAdmin(admin.ModelAdmin):
    list_display = ["nome_completo", "invito", "email", "arrivato_il"]
    search_fields = ["nome", "cognome", "email"]
    readonly_fields = ["token_checkin", "created_at", "updated_at"]
