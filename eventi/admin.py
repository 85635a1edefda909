"""
Admin per app eventi.
"""

from django.contrib import admin

from .models import Categoria, Edizione, Evento, Nota, PuntoProgramma


# ============================================================================
# INLINE ADMINS
# ============================================================================


class PuntoProgrammaInline(admin.TabularInline):
    model = PuntoProgramma
    extra = 0
    fields = ["ora", "titolo", "responsabile", "ordine"]


class NotaInline(admin.TabularInline):
    model = Nota
    extra = 0
    fields = ["titolo", "categoria", "autore"]
    readonly_fields = ["autore"]


# ============================================================================
# MODEL ADMINS
# ============================================================================


@admin.register(Evento)
class EventoAdmin(admin.ModelAdmin):
    list_display = ["codice", "titolo", "data", "luogo", "proprietario", "is_active"]
    list_filter = ["is_active", "data"]
    search_fields = ["codice", "titolo", "luogo"]
    date_hierarchy = "data"
    filter_horizontal = ["membri"]
    readonly_fields = ["codice", "created_at", "updated_at", "created_by", "updated_by"]
    inlines = [PuntoProgrammaInline, NotaInline]


@admin.register(Categoria)
class CategoriaAdmin(admin.ModelAdmin):
    list_display = ["slug", "nome", "responsabile", "ordine", "attiva"]
    list_filter = ["attiva"]
    list_editable = ["ordine", "attiva"]
    search_fields = ["slug", "nome"]


@admin.register(Edizione)
class EdizioneAdmin(admin.ModelAdmin):
    list_display = ["codice", "nome", "prezzo_annuale_cents", "ordine"]
    filter_horizontal = ["categorie"]
