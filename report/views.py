"""
Views per app report.

GET /report/pdf/?type=...&evento=<uuid>[&utente=<id>][&categoria=<slug>][&responsabile=<id>]

Parametri mancanti o non validi -> 400 JSON {"error": ...}.
"""

import logging
import uuid

from django.contrib.auth import get_user_model
from django.contrib.auth.decorators import login_required
from django.core.exceptions import PermissionDenied, ValidationError
from django.http import JsonResponse
from django.shortcuts import get_object_or_404, render

from core.audit import registra_audit
from core.pdf_generator import pdf_response
from eventi.models import Categoria, Evento
from eventi.utils import get_evento_corrente, verifica_accesso_evento
from users.permissions import get_cached_allow_list, pagina_richiesta

from .reports import ALL_BY_USER, CATEGORY, RESPONSIBLE, TIPI, USER, genera_report

logger = logging.getLogger(__name__)

User = get_user_model()

ETICHETTE_TIPI = {
    ALL_BY_USER: "Tutte le attività per utente",
    USER: "Attività di un utente",
    CATEGORY: "Area",
    RESPONSIBLE: "Aree di un responsabile",
}


def _errore(messaggio):
    return JsonResponse({"error": messaggio}, status=400)


def _utente(valore):
    if not valore:
        return None
    if not str(valore).isdigit():
        raise ValidationError("utente non valido")
    return get_object_or_404(User, pk=valore, is_active=True)


@login_required
@pagina_richiesta("report")
def report_view(request):
    """Pagina di scelta del report."""
    evento = get_evento_corrente(request)
    allow_list = get_cached_allow_list(request)
    categorie = [
        c
        for c in Categoria.objects.filter(is_active=True, attiva=True).order_by("ordine", "nome")
        if allow_list.consente_categoria(c.slug)
    ]
    context = {
        "evento": evento,
        "tipi": [(tipo, ETICHETTE_TIPI[tipo]) for tipo in TIPI],
        "utenti": User.objects.filter(is_active=True).order_by("first_name", "last_name", "username"),
        "categorie": categorie,
    }
    return render(request, "report/report.html", context)


@login_required
@pagina_richiesta("report")
def report_pdf_view(request):
    tipo = request.GET.get("type") or ALL_BY_USER
    evento_id = request.GET.get("evento")
    if not evento_id:
        return _errore("evento mancante")
    try:
        uuid.UUID(str(evento_id))
    except ValueError:
        return _errore("evento non valido")

    evento = get_object_or_404(Evento, pk=evento_id, is_active=True)
    verifica_accesso_evento(request.user, evento)

    if tipo not in TIPI:
        return _errore(f"Tipo di report sconosciuto: {tipo}")

    categoria = None
    slug = request.GET.get("categoria")
    if tipo == CATEGORY and slug:
        categoria = get_object_or_404(Categoria, slug=slug, is_active=True)
        if not get_cached_allow_list(request).consente_categoria(slug):
            raise PermissionDenied(f"Area '{slug}' non consentita")

    try:
        report = genera_report(
            evento,
            tipo,
            utente=_utente(request.GET.get("utente")) if tipo == USER else None,
            categoria=categoria,
            responsabile=_utente(request.GET.get("responsabile")) if tipo == RESPONSIBLE else None,
        )
    except ValidationError as e:
        return _errore(" ".join(e.messages))

    registra_audit(
        request,
        "EXPORT",
        "Report",
        evento=evento,
        categoria=slug or "",
        descrizione=report.titolo,
        metadata={"tipo": tipo, "filename": report.filename},
    )
    return pdf_response(report.pdf, report.filename)
