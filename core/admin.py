from django.contrib import admin

from .models import AuditLog


@admin.register(AuditLog)
class AuditLogAdmin(admin.ModelAdmin):
    """Admin in sola lettura per l'audit log"""

    list_display = [
        "created_at",
        "azione",
        "tipo_entita",
        "id_entita",
        "email_utente",
        "evento",
        "indirizzo_ip",
    ]
    list_filter = ["azione", "tipo_entita", "created_at"]
    search_fields = ["descrizione", "email_utente", "id_entita"]
    date_hierarchy = "created_at"

    fieldsets = (
        ("Operazione", {"fields": ("azione", "tipo_entita", "id_entita", "descrizione")}),
        ("Contesto", {"fields": ("utente", "email_utente", "evento", "categoria")}),
        (
            "Valori",
            {
                "fields": ("valori_precedenti", "valori_nuovi", "metadata"),
                "classes": ("collapse",),
            },
        ),
        (
            "Richiesta",
            {
                "fields": ("indirizzo_ip", "user_agent", "url", "created_at"),
                "classes": ("collapse",),
            },
        ),
    )

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False
