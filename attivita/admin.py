"""
Admin per app attivita.
"""

from django.contrib import admin

from .models import ChecklistItem, Task


class ChecklistItemInline(admin.TabularInline):
    model = ChecklistItem
    extra = 0
    fields = ["titolo", "stato", "scadenza", "assegnato_a"]


@admin.register(Task)
class TaskAdmin(admin.ModelAdmin):
    list_display = ["titolo", "evento", "categoria", "stato", "priorita", "scadenza", "assegnato_a"]
    list_filter = ["stato", "priorita", "categoria"]
    search_fields = ["titolo", "descrizione"]
    date_hierarchy = "scadenza"
    readonly_fields = ["completato_il", "created_at", "updated_at"]
    inlines = [ChecklistItemInline]


@admin.register(ChecklistItem)
class ChecklistItemAdmin(admin.ModelAdmin):
    list_display = ["titolo", "evento", "categoria", "stato", "scadenza", "assegnato_a"]
    list_filter = ["stato", "categoria"]
    search_fields = ["titolo"]
