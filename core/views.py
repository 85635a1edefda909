"""
Views dell'app Core: QR code al volo, ricerca globale, audit log.
"""

import logging

from django.contrib.auth.decorators import login_required
from django.core.paginator import Paginator
from django.http import HttpResponse, JsonResponse
from django.shortcuts import render
from django.views.decorators.http import require_http_methods

from users.permissions import admin_richiesto, can_access_event

from .models import AuditLog
from .qr_code_generator import parametri_qr, qr_png
from .search import SearchRegistry

logger = logging.getLogger(__name__)


# ============================================================================
# QR CODE
# ============================================================================


@require_http_methods(["GET"])
def serve_qr_code(request):
    """
    Genera e serve un QR Code PNG tramite query parameter.

    Esempio: /core/qrcode/?data=https://example.com&size=10
    """
    data = request.GET.get("data")
    if not data:
        return HttpResponse("Parametro 'data' mancante", status=400)

    try:
        box_size, border = parametri_qr(request.GET.get("size", 10), request.GET.get("border", 4))
    except ValueError as e:
        return HttpResponse(f"Parametri non validi: {e}", status=400)

    return HttpResponse(qr_png(data, box_size=box_size, border=border), content_type="image/png")


# ============================================================================
# RICERCA GLOBALE (AJAX)
# ============================================================================


@login_required
@require_http_methods(["GET"])
def global_search(request):
    """
    Ricerca in tutti i model registrati nel SearchRegistry.

    Gli oggetti legati a un evento sono restituiti solo se l'utente
    ha accesso a quell'evento.
    """
    query = request.GET.get("q", "").strip()

    if len(query) < 2:
        return JsonResponse(
            {"success": False, "error": "Query troppo corta (minimo 2 caratteri)"},
            status=400,
        )

    from eventi.models import Evento

    def accessibile(obj):
        evento = obj if isinstance(obj, Evento) else getattr(obj, "evento", None)
        return evento is None or can_access_event(request.user, evento)

    results = SearchRegistry.search_all(query, max_results_per_model=5, filtro=accessibile)

    return JsonResponse(
        {
            "success": True,
            "query": query,
            "results": results,
            "total_categories": len(results),
            "total_results": sum(len(cat["items"]) for cat in results),
        }
    )


# ============================================================================
# AUDIT LOG
# ============================================================================


@login_required
@admin_richiesto
def audit_log_list_view(request):
    """
    Lista audit log con filtri (azione, tipo entità, utente, evento)
    e paginazione.
    """
    logs = AuditLog.objects.select_related("utente", "evento").order_by("-created_at")

    azione = request.GET.get("azione")
    if azione:
        logs = logs.filter(azione=azione)

    tipo_entita = request.GET.get("tipo_entita")
    if tipo_entita:
        logs = logs.filter(tipo_entita=tipo_entita)

    utente = request.GET.get("utente")
    if utente:
        logs = logs.filter(utente_id=utente)

    evento = request.GET.get("evento")
    if evento:
        logs = logs.filter(evento_id=evento)

    try:
        page_size = min(max(int(request.GET.get("page_size", 50)), 1), 200)
    except ValueError:
        page_size = 50

    paginator = Paginator(logs, page_size)
    logs_page = paginator.get_page(request.GET.get("page"))

    context = {
        "logs": logs_page,
        "total": paginator.count,
        "azioni": AuditLog.AZIONE_CHOICES,
        "tipi_entita": AuditLog.objects.order_by("tipo_entita")
        .values_list("tipo_entita", flat=True)
        .distinct(),
        "filtro_azione": azione or "",
        "filtro_tipo_entita": tipo_entita or "",
        "filtro_utente": utente or "",
        "filtro_evento": evento or "",
    }
    return render(request, "core/audit_log_list.html", context)
