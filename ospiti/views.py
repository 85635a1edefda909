"""
Views per app ospiti.

Tutte le pagine lavorano sull'evento corrente:
- lista ospiti con colonne dinamiche, ricerca e filtri
- piano tavoli
- check-in (scansione QR e conferma manuale)

Il link di check-in pubblico (pubblico/<token>/) funziona senza login.
- badge VIP
"""

import json
import logging

from django.contrib import messages
from django.contrib.auth.decorators import login_required
from django.core.exceptions import PermissionDenied, ValidationError
from django.http import Http404, HttpResponse, JsonResponse
from django.shortcuts import get_object_or_404, redirect, render
from django.urls import reverse
from django.utils import timezone
from django.views import View
from django.views.decorators.http import require_http_methods

from core.audit import registra_audit
from core.mixins import JSONResponseMixin
from core.pdf_generator import generate_pdf_response, pdf_response
from eventi.utils import richiedi_evento_corrente, verifica_gestione_evento
from users.permissions import pagina_richiesta

from . import colonne as col
from .badge import genera_badge_docx, genera_badge_pdf
from .categorie import categoria_ospite, scelte_categoria
from .checkin import (
    annulla_presenza,
    cambia_presenza,
    esegui_checkin,
    evento_da_token_pubblico,
    ospiti_confermati,
    presenze_pdf,
    segna_presente,
)
from .forms import AssegnazioneCasualeForm, BadgeForm, OspiteForm, ScambiaTavoliForm
from .models import Ospite
from .tavoli import (
    assegna_tavoli_casuale,
    assegna_tavolo,
    lista_tavoli_pdf,
    raggruppa_per_tavolo,
    reset_tavoli,
    scambia_tavoli,
)

logger = logging.getLogger(__name__)

PREFISSO_FILTRO = "f_"
DOCX_CONTENT_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"


def _messaggio(errore):
    """Testo leggibile di una ValidationError."""
    return " ".join(errore.messages)


def _get_ospite(evento, pk):
    return get_object_or_404(Ospite, pk=pk, evento=evento, is_active=True)


# ============================================================================
# LISTA OSPITI
# ============================================================================


def _ospiti_filtrati(request, evento):
    """
    Ospiti dell'evento filtrati dalla query string.

    Query string:
    - q: ricerca libera
    - f_<colonna>: filtro per colonna
    - categoria: chiave categoria ospite
    """
    ospiti = list(evento.ospiti.filter(is_active=True).order_by("nome"))
    tutte, visibili = col.colonne_evento(evento, ospiti)

    q = request.GET.get("q", "").strip()
    filtri = {
        chiave[len(PREFISSO_FILTRO):]: valore
        for chiave, valore in request.GET.items()
        if chiave.startswith(PREFISSO_FILTRO)
    }
    categoria = request.GET.get("categoria", "")

    risultati = col.filtra(col.cerca(ospiti, q), filtri)
    if categoria:
        risultati = [o for o in risultati if categoria_ospite(o) == categoria]

    return {
        "ospiti": ospiti,
        "tutte": tutte,
        "visibili": visibili,
        "risultati": risultati,
        "q": q,
        "filtri": filtri,
        "categoria": categoria,
    }


@login_required
@pagina_richiesta("ospiti")
def ospite_list_view(request):
    """Lista ospiti dell'evento corrente (filtri: vedi _ospiti_filtrati)."""
    evento = richiedi_evento_corrente(request)
    lista = _ospiti_filtrati(request, evento)
    visibili, filtri = lista["visibili"], lista["filtri"]

    context = {
        "evento": evento,
        "colonne": visibili,
        "tutte_colonne": lista["tutte"],
        "colonne_nascoste": evento.colonne_nascoste or [],
        "colonne_standard": col.COLONNE_STANDARD,
        "righe": col.righe(lista["risultati"], visibili),
        "totale": len(lista["ospiti"]),
        "filtrati": len(lista["risultati"]),
        "q": lista["q"],
        "filtri": filtri,
        "colonne_filtri": [(c, filtri.get(c, "")) for c in visibili],
        "categoria": lista["categoria"],
        "categorie": scelte_categoria(),
    }
    return render(request, "ospiti/ospite_list.html", context)


@login_required
@pagina_richiesta("ospiti")
def ospite_export_pdf_view(request):
    """PDF della lista filtrata con le colonne visibili."""
    evento = richiedi_evento_corrente(request)
    lista = _ospiti_filtrati(request, evento)
    visibili = lista["visibili"]

    dati = [dict(zip(visibili, valori)) for _, valori in col.righe(lista["risultati"], visibili)]
    registra_audit(
        request,
        "EXPORT",
        "Ospite",
        evento=evento,
        descrizione=f"PDF lista ospiti ({len(dati)} righe)",
    )
    return generate_pdf_response(dati, "lista-ospiti", title=f"Ospiti - {evento.titolo}", headers=visibili)


@login_required
@pagina_richiesta("ospiti")
@require_http_methods(["POST"])
def colonne_salva_view(request):
    """Salva ordine e colonne nascoste della lista (campi ripetuti 'ordine' e 'nascoste')."""
    evento = richiedi_evento_corrente(request)
    col.salva_preferenze_colonne(
        evento, request.POST.getlist("ordine"), request.POST.getlist("nascoste")
    )
    messages.success(request, "Preferenze colonne salvate.")
    return redirect("ospiti:ospite_list")


@login_required
@pagina_richiesta("ospiti")
@require_http_methods(["POST"])
def colonna_delete_view(request):
    evento = richiedi_evento_corrente(request)
    colonna = request.POST.get("colonna", "").strip()
    if not colonna:
        messages.error(request, "Nessuna colonna indicata.")
        return redirect("ospiti:ospite_list")

    try:
        aggiornati = col.elimina_colonna(evento, colonna)
    except ValidationError as e:
        messages.error(request, _messaggio(e))
        return redirect("ospiti:ospite_list")

    registra_audit(
        request,
        "UPDATE",
        "Ospite",
        evento=evento,
        descrizione=f"Colonna '{colonna}' eliminata da {aggiornati} ospiti",
        metadata={"colonna": colonna, "ospiti": aggiornati},
    )
    messages.success(request, f"Colonna '{colonna}' eliminata ({aggiornati} ospiti aggiornati).")
    return redirect("ospiti:ospite_list")


# ============================================================================
# CRUD OSPITE
# ============================================================================


@login_required
@pagina_richiesta("ospiti")
@require_http_methods(["GET", "POST"])
def ospite_form_view(request, pk=None):
    """Creazione (pk=None) o modifica di un ospite."""
    evento = richiedi_evento_corrente(request)
    ospite = _get_ospite(evento, pk) if pk else None

    if request.method == "POST":
        form = OspiteForm(request.POST, instance=ospite)
        if form.is_valid():
            ospite = form.save(commit=False)
            ospite.evento = evento
            if ospite._state.adding:
                ospite.created_by = request.user
            ospite.updated_by = request.user
            ospite.save()

            registra_audit(
                request,
                "UPDATE" if pk else "CREATE",
                "Ospite",
                id_entita=ospite.pk,
                evento=evento,
                descrizione=f"Ospite '{ospite.nome}' {'modificato' if pk else 'creato'}",
                valori_nuovi={f: str(form.cleaned_data.get(f)) for f in form.changed_data} if pk else None,
            )
            messages.success(request, f"Ospite {ospite.nome} salvato.")
            return redirect("ospiti:ospite_list")
        messages.error(request, "Ospite non valido. Controlla i campi.")
    else:
        form = OspiteForm(instance=ospite)

    context = {"form": form, "evento": evento, "ospite": ospite}
    return render(request, "ospiti/ospite_form.html", context)


@login_required
@pagina_richiesta("ospiti")
@require_http_methods(["POST"])
def ospite_delete_view(request, pk):
    evento = richiedi_evento_corrente(request)
    ospite = _get_ospite(evento, pk)

    ospite.soft_delete(user=request.user)
    registra_audit(
        request,
        "DELETE",
        "Ospite",
        id_entita=ospite.pk,
        evento=evento,
        descrizione=f"Ospite '{ospite.nome}' eliminato",
    )
    messages.success(request, f"Ospite {ospite.nome} eliminato.")
    return redirect("ospiti:ospite_list")


# ============================================================================
# TAVOLI
# ============================================================================


@login_required
@pagina_richiesta("tavoli")
def tavoli_view(request):
    """Piano tavoli: ospiti raggruppati per tavolo e ospiti senza tavolo."""
    evento = richiedi_evento_corrente(request)
    context = {
        "evento": evento,
        "tavoli": raggruppa_per_tavolo(evento),
        "senza_tavolo": evento.ospiti.filter(is_active=True, numero_tavolo__isnull=True).order_by("nome"),
        "ospiti": evento.ospiti.filter(is_active=True).order_by("nome"),
        "form_casuale": AssegnazioneCasualeForm(),
        "form_scambia": ScambiaTavoliForm(),
    }
    return render(request, "ospiti/tavoli.html", context)


@login_required
@pagina_richiesta("tavoli")
@require_http_methods(["POST"])
def tavoli_casuale_view(request):
    evento = richiedi_evento_corrente(request)
    form = AssegnazioneCasualeForm(request.POST)
    if not form.is_valid():
        messages.error(request, "Numero di tavoli e posti devono essere interi positivi.")
        return redirect("ospiti:tavoli")

    esito = assegna_tavoli_casuale(
        evento, form.cleaned_data["num_tavoli"], form.cleaned_data["posti_per_tavolo"]
    )
    registra_audit(
        request,
        "UPDATE",
        "Ospite",
        evento=evento,
        descrizione="Assegnazione casuale tavoli",
        metadata=esito,
    )
    messages.success(
        request,
        f"{esito['assegnati']} ospiti assegnati a {esito['tavoli']} tavoli "
        f"({esito['vip_saltati']} VIP non spostati).",
    )
    return redirect("ospiti:tavoli")


@login_required
@pagina_richiesta("tavoli")
@require_http_methods(["POST"])
def tavoli_scambia_view(request):
    evento = richiedi_evento_corrente(request)
    form = ScambiaTavoliForm(request.POST)
    if not form.is_valid():
        for errore in form.non_field_errors():
            messages.error(request, errore)
        if not form.non_field_errors():
            messages.error(request, "Indica due numeri di tavolo validi.")
        return redirect("ospiti:tavoli")

    a, b = form.cleaned_data["tavolo_a"], form.cleaned_data["tavolo_b"]
    esito = scambia_tavoli(evento, a, b)
    registra_audit(
        request,
        "UPDATE",
        "Ospite",
        evento=evento,
        descrizione=f"Scambio tavoli {a} e {b}",
        metadata=esito,
    )
    messages.success(
        request,
        f"Tavoli {a} e {b} scambiati ({esito['spostati_da_a']} + {esito['spostati_da_b']} ospiti).",
    )
    return redirect("ospiti:tavoli")


@login_required
@pagina_richiesta("tavoli")
@require_http_methods(["POST"])
def tavoli_reset_view(request):
    evento = richiedi_evento_corrente(request)
    aggiornati = reset_tavoli(evento)
    registra_audit(
        request, "UPDATE", "Ospite", evento=evento, descrizione=f"Reset tavoli ({aggiornati} ospiti)"
    )
    messages.success(request, f"Tavoli azzerati per {aggiornati} ospiti.")
    return redirect("ospiti:tavoli")


@login_required
@pagina_richiesta("tavoli")
@require_http_methods(["POST"])
def tavolo_assegna_view(request, pk):
    """Assegna il tavolo a un ospite. Risponde JSON alle richieste AJAX."""
    evento = richiedi_evento_corrente(request)
    ospite = _get_ospite(evento, pk)
    ajax = request.headers.get("x-requested-with") == "XMLHttpRequest"

    try:
        numero = assegna_tavolo(ospite, request.POST.get("numero_tavolo", "").strip())
    except ValidationError as e:
        if ajax:
            return JsonResponse({"success": False, "error": _messaggio(e)}, status=400)
        messages.error(request, _messaggio(e))
        return redirect("ospiti:tavoli")

    registra_audit(
        request,
        "UPDATE",
        "Ospite",
        id_entita=ospite.pk,
        evento=evento,
        descrizione=f"Ospite '{ospite.nome}' al tavolo {numero or '-'}",
        valori_nuovi={"numero_tavolo": numero},
    )
    if ajax:
        return JsonResponse({"success": True, "id": str(ospite.pk), "numero_tavolo": numero})
    messages.success(request, f"{ospite.nome}: tavolo {numero or 'nessuno'}.")
    return redirect("ospiti:tavoli")


@login_required
@pagina_richiesta("tavoli")
def tavoli_pdf_view(request):
    evento = richiedi_evento_corrente(request)
    pdf = lista_tavoli_pdf(evento)
    registra_audit(request, "EXPORT", "Ospite", evento=evento, descrizione="PDF liste tavoli")
    return pdf_response(pdf, "liste-tavoli.pdf")


# ============================================================================
# CHECK-IN
# ============================================================================


@login_required
@pagina_richiesta("checkin")
def checkin_view(request):
    """Pagina check-in: scanner QR e lista ospiti con stato presenza."""
    evento = richiedi_evento_corrente(request)
    ospiti = list(evento.ospiti.filter(is_active=True).order_by("nome"))
    presenti = sum(1 for o in ospiti if o.presente)
    context = {
        "evento": evento,
        "ospiti": ospiti,
        "presenti": presenti,
        "totale": len(ospiti),
        "link_pubblico": link_checkin_pubblico(request, evento),
    }
    return render(request, "ospiti/checkin.html", context)


def _token_da_request(request):
    if request.method == "GET":
        return request.GET.get("t", "")
    token = request.POST.get("token")
    if token is None and request.content_type == "application/json":
        try:
            token = json.loads(request.body or b"{}").get("token")
        except (ValueError, AttributeError):
            token = None
    return token or ""


@login_required
@pagina_richiesta("checkin")
@require_http_methods(["GET", "POST"])
def checkin_scan_view(request):
    """
    Check-in tramite token.

    POST (scanner): risposta JSON, 400 token mancante, 404 token sconosciuto.
    GET ?t=<token> (link del QR code): pagina di esito.
    """
    evento = richiedi_evento_corrente(request)
    token = _token_da_request(request)

    try:
        risultato = esegui_checkin(token, evento=evento)
    except ValidationError as e:
        errore, status = _messaggio(e), 400
        risultato = None
    else:
        errore, status = ("Token non trovato", 404) if risultato is None else ("", 200)

    if risultato is not None:
        registra_audit(
            request,
            "CHECKIN",
            risultato.oggetto.__class__.__name__,
            id_entita=risultato.oggetto.pk,
            evento=evento,
            descrizione=f"Check-in {risultato.tipo} {risultato.nome}",
        )

    if request.method == "POST":
        if risultato is None:
            return JsonResponse({"success": False, "error": errore}, status=status)
        return JsonResponse(risultato.as_dict())

    context = {"evento": evento, "risultato": risultato, "errore": errore}
    return render(request, "ospiti/checkin_esito.html", context, status=status)


@login_required
@pagina_richiesta("checkin")
@require_http_methods(["POST"])
def checkin_toggle_view(request, pk):
    """Conferma o annulla manualmente la presenza di un ospite."""
    evento = richiedi_evento_corrente(request)
    ospite = _get_ospite(evento, pk)

    if ospite.presente:
        annulla_presenza(ospite)
        descrizione = f"Presenza annullata per {ospite.nome}"
    else:
        segna_presente(ospite, timezone.now())
        descrizione = f"Check-in manuale {ospite.nome}"

    registra_audit(
        request, "CHECKIN", "Ospite", id_entita=ospite.pk, evento=evento, descrizione=descrizione
    )

    if request.headers.get("x-requested-with") == "XMLHttpRequest":
        return JsonResponse({"success": True, "id": str(ospite.pk), "presente": ospite.presente})
    messages.success(request, descrizione)
    return redirect("ospiti:checkin")


@login_required
@pagina_richiesta("checkin")
def checkin_pdf_view(request):
    evento = richiedi_evento_corrente(request)
    pdf = presenze_pdf(evento)
    registra_audit(request, "EXPORT", "Ospite", evento=evento, descrizione="PDF lista presenze")
    return pdf_response(pdf, "lista-presenze.pdf")


# ============================================================================
# CHECK-IN PUBBLICO
# ============================================================================


def link_checkin_pubblico(request, evento):
    return request.build_absolute_uri(
        reverse("ospiti:checkin_pubblico", kwargs={"token": evento.token_checkin_pubblico})
    )


@login_required
@pagina_richiesta("checkin")
@require_http_methods(["POST"])
def checkin_link_rigenera_view(request):
    """Nuovo link pubblico; quello precedente smette di funzionare."""
    evento = richiedi_evento_corrente(request)
    verifica_gestione_evento(request.user, evento)

    evento.rigenera_token_pubblico()
    registra_audit(
        request,
        "UPDATE",
        "Evento",
        id_entita=evento.pk,
        evento=evento,
        descrizione="Link check-in pubblico rigenerato",
    )
    messages.success(request, "Link check-in pubblico rigenerato.")
    return redirect("ospiti:checkin")


def _evento_pubblico(token):
    evento = evento_da_token_pubblico(token)
    if evento is None:
        raise PermissionDenied("Codice di accesso non valido")
    return evento


@require_http_methods(["GET"])
def checkin_pubblico_view(request, token):
    """
    Lista all'ingresso senza login.

    Query string: q (ricerca), vip=1 (solo VIP).
    """
    evento = _evento_pubblico(token)
    testo = request.GET.get("q", "")
    solo_vip = request.GET.get("vip") == "1"
    righe = ospiti_confermati(evento, testo, solo_vip=solo_vip)
    context = {
        "evento": evento,
        "token": token,
        "righe": righe,
        "q": testo,
        "solo_vip": solo_vip,
        "presenti": sum(1 for r in righe if r["presente"]),
    }
    return render(request, "ospiti/checkin_pubblico.html", context)


class CheckinPubblicoOspitiView(JSONResponseMixin, View):
    """Ospiti confermati in JSON per il link pubblico; 403 con token non valido."""

    def get(self, request, token):
        evento = evento_da_token_pubblico(token)
        if evento is None:
            return self.render_to_json_error("Codice di accesso non valido", status=403)
        righe = ospiti_confermati(
            evento, request.GET.get("q", ""), solo_vip=request.GET.get("vip") == "1"
        )
        return self.render_to_json_response({"evento": evento.titolo, "ospiti": righe})


@require_http_methods(["POST"])
def checkin_pubblico_presenza_view(request, token, pk):
    """Segna o annulla la presenza dal link pubblico."""
    evento = _evento_pubblico(token)
    ospite = cambia_presenza(evento, pk)
    if ospite is None:
        raise Http404("Ospite non trovato")

    registra_audit(
        request,
        "CHECKIN",
        "Ospite",
        id_entita=ospite.pk,
        evento=evento,
        descrizione=f"{'Check-in' if ospite.presente else 'Presenza annullata'} {ospite.nome} (link pubblico)",
    )

    if request.headers.get("x-requested-with") == "XMLHttpRequest":
        return JsonResponse({"success": True, "id": str(ospite.pk), "presente": ospite.presente})
    url = reverse("ospiti:checkin_pubblico", kwargs={"token": token})
    ritorno = request.POST.get("ritorno", "")
    return redirect(f"{url}?{ritorno}" if ritorno else url)


# ============================================================================
# BADGE
# ============================================================================


@login_required
@pagina_richiesta("badge")
@require_http_methods(["GET", "POST"])
def badge_view(request):
    """
    Generazione badge VIP.

    GET: form con gli ospiti VIP preselezionati.
    POST: PDF o DOCX; selezione vuota o non valida -> 400 con il form.
    """
    evento = richiedi_evento_corrente(request)

    if request.method == "POST":
        form = BadgeForm(request.POST, request.FILES, evento=evento)
        if form.is_valid():
            ospiti = list(form.cleaned_data["ospiti"])
            per_pagina = form.cleaned_data["per_pagina"]
            registra_audit(
                request,
                "EXPORT",
                "Ospite",
                evento=evento,
                descrizione=f"Badge {form.cleaned_data['formato'].upper()} per {len(ospiti)} ospiti",
            )

            if form.cleaned_data["formato"] == "docx":
                response = HttpResponse(
                    genera_badge_docx(ospiti, per_pagina), content_type=DOCX_CONTENT_TYPE
                )
                response["Content-Disposition"] = 'attachment; filename="badge.docx"'
                return response

            logo = form.cleaned_data.get("logo")
            pdf = genera_badge_pdf(ospiti, per_pagina, logo=logo.read() if logo else None)
            return pdf_response(pdf, "badge.pdf")

        logger.warning(f"Richiesta badge non valida: {form.errors.as_json()}")
        return render(request, "ospiti/badge.html", {"form": form, "evento": evento}, status=400)

    form = BadgeForm(evento=evento)
    return render(request, "ospiti/badge.html", {"form": form, "evento": evento})
