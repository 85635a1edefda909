"""
Admin per app galleria.
"""

from django.contrib import admin

from .models import MediaFile


@admin.register(MediaFile)
class MediaFileAdmin(admin.ModelAdmin):
    list_display = ["nome_originale", "evento", "tipo", "dimensione", "caricato_da", "created_at", "is_active"]
    list_filter = ["tipo", "evento"]
    search_fields = ["nome_originale", "descrizione"]
    readonly_fields = ["mime_type", "dimensione", "created_at", "updated_at", "created_by", "updated_by"]
