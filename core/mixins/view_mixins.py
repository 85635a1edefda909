"""
View Mixins per Gestione Eventi

Mixins riutilizzabili per Class-Based Views.
"""

from django.contrib import messages
from django.contrib.auth.mixins import PermissionRequiredMixin as DjangoPermissionMixin
from django.core.exceptions import PermissionDenied
from django.db.models import Q
from django.http import JsonResponse


# ============================================================================
# PERMISSION MIXINS
# ============================================================================


class PermissionRequiredMixin(DjangoPermissionMixin):
    """
    PermissionRequiredMixin con 403 per utenti autenticati.

    Gli utenti con ruolo admin passano sempre; gli anonimi vengono
    rediretti al login.

    Usage:
        class MiaView(PermissionRequiredMixin, ListView):
            permission_required = 'users.view_user'
    """

    def has_permission(self):
        if getattr(self.request.user, "is_amministratore", False):
            return True
        return super().has_permission()

    def handle_no_permission(self):
        if self.raise_exception or self.request.user.is_authenticated:
            raise PermissionDenied(
                f"Non hai i permessi necessari per accedere a questa risorsa. "
                f"Permessi richiesti: {self.get_permission_required()}"
            )
        return super().handle_no_permission()


# ============================================================================
# AJAX MIXINS
# ============================================================================


class JSONResponseMixin:
    """
    Mixin per restituire risposte JSON.

    Usage:
        class MiaView(JSONResponseMixin, View):
            def post(self, request):
                return self.render_to_json_response({'ok': True})
    """

    def render_to_json_response(self, context, **response_kwargs):
        return JsonResponse(context, **response_kwargs)

    def render_to_json_error(self, error_message, status=400):
        """Body {"error": ...} con lo status indicato (default 400)."""
        return JsonResponse({"error": error_message}, status=status)


# ============================================================================
# FORM MIXINS
# ============================================================================


class FormValidMessageMixin:
    """
    Aggiunge un messaggio di successo dopo form valid.

    Usage:
        class MiaView(FormValidMessageMixin, CreateView):
            success_message = "Ospite creato!"
    """

    success_message = ""

    def form_valid(self, form):
        response = super().form_valid(form)
        if self.success_message:
            messages.success(self.request, self.success_message)
        return response


class FormInvalidMessageMixin:
    """Aggiunge un messaggio di errore dopo form invalid."""

    error_message = "Errore nel salvataggio. Controlla i campi."

    def form_invalid(self, form):
        messages.error(self.request, self.error_message)
        return super().form_invalid(form)


class SetCreatedByMixin:
    """
    Imposta created_by (in creazione) e updated_by sul form.instance.

    Usage:
        class MiaView(SetCreatedByMixin, CreateView):
            pass
    """

    def form_valid(self, form):
        instance = form.instance
        if hasattr(instance, "created_by") and instance._state.adding:
            instance.created_by = self.request.user
        if hasattr(instance, "updated_by"):
            instance.updated_by = self.request.user
        return super().form_valid(form)


# ============================================================================
# PAGINATION MIXINS
# ============================================================================


class CustomPaginationMixin:
    """
    Pagination con page size variabile da query string.

    Usage:
        class MiaView(CustomPaginationMixin, ListView):
            default_page_size = 25
            max_page_size = 100

        # URL: ?page_size=50
    """

    default_page_size = 20
    max_page_size = 100
    page_size_query_param = "page_size"

    def get_paginate_by(self, queryset):
        page_size = self.request.GET.get(self.page_size_query_param)

        if page_size:
            try:
                page_size = int(page_size)
            except ValueError:
                return self.default_page_size
            if page_size < 1:
                return self.default_page_size
            return min(page_size, self.max_page_size)

        return self.default_page_size


# ============================================================================
# FILTER MIXINS
# ============================================================================


class SearchMixin:
    """
    Ricerca icontains su search_fields.

    Usage:
        class MiaView(SearchMixin, ListView):
            search_fields = ['titolo', 'descrizione']

        # URL: ?q=termine
    """

    search_fields = []
    search_query_param = "q"

    def get_queryset(self):
        queryset = super().get_queryset()
        query = self.request.GET.get(self.search_query_param, "").strip()

        if query and self.search_fields:
            q_objects = Q()
            for field in self.search_fields:
                q_objects |= Q(**{f"{field}__icontains": query})
            queryset = queryset.filter(q_objects)

        return queryset

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        context["search_query"] = self.request.GET.get(self.search_query_param, "")
        return context
