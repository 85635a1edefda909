"""
Views per app inviti.

Staff (pagina "inviti", evento corrente):
- lista inviti con contatori delle risposte
- creazione per gli ospiti selezionati, invio in blocco (Celery), reinvio
- dettaglio con anteprima dell'e-mail, accompagnatori, QR PDF
- template e-mail

Pubbliche (senza login), raggiunte dai link dell'e-mail:
- accetta / rifiuta
- pixel di tracking
- QR PDF dell'invito accettato, scaricabile o inviato via e-mail
"""

import logging
import uuid

from django.conf import settings
from django.contrib import messages
from django.contrib.auth.decorators import login_required
from django.core.exceptions import ValidationError
from django.db.models import Count, Q
from django.http import Http404, HttpResponse
from django.shortcuts import get_object_or_404, redirect, render
from django.views.decorators.cache import never_cache
from django.views.decorators.http import require_http_methods

from core.audit import registra_audit
from core.pdf_generator import pdf_response
from eventi.utils import richiedi_evento_corrente, verifica_gestione_evento
from users.permissions import pagina_richiesta

from .forms import AccompagnatoreForm, CreaInvitiForm, ModelloEmailForm
from .models import Invito, ModelloEmail
from .services import (
    accetta,
    accetta_per_conto,
    annulla_risposte,
    crea_invito,
    invia_invito,
    invia_qr_pdf,
    qr_pdf,
    renderizza,
    rifiuta,
    rigenera_qr,
    traccia_apertura,
)
from .tasks import invia_inviti_task

logger = logging.getLogger(__name__)


def _base_url(request):
    """Base assoluta dei link: SITE_URL se configurato, altrimenti l'host della richiesta."""
    return getattr(settings, "SITE_URL", "") or request.build_absolute_uri("/").rstrip("/")


def _get_invito(evento, pk):
    return get_object_or_404(
        Invito.objects.select_related("ospite", "evento"), pk=pk, evento=evento, is_active=True
    )


def _audit(request, azione, invito, descrizione, **kwargs):
    registra_audit(
        request,
        azione,
        "Invito",
        id_entita=invito.pk,
        evento=invito.evento,
        descrizione=descrizione,
        **kwargs,
    )


# ============================================================================
# LISTA E CREAZIONE
# ============================================================================


@login_required
@pagina_richiesta("inviti")
def invito_list_view(request):
    """Inviti dell'evento corrente, filtrabili per risposta."""
    evento = richiedi_evento_corrente(request)
    inviti = Invito.objects.filter(evento=evento, is_active=True).select_related("ospite", "modello")

    contatori = inviti.aggregate(
        totale=Count("pk"),
        inviati=Count("pk", filter=Q(inviato_il__isnull=False)),
        aperti=Count("pk", filter=Q(aperto_il__isnull=False)),
        accettati=Count("pk", filter=Q(risposta=Invito.ACCEPTED)),
        rifiutati=Count("pk", filter=Q(risposta=Invito.DECLINED)),
        in_attesa=Count("pk", filter=Q(risposta=Invito.PENDING)),
        errori=Count("pk", filter=~Q(errore_invio="")),
    )

    risposta = request.GET.get("risposta", "")
    if risposta:
        inviti = inviti.filter(risposta=risposta)

    context = {
        "evento": evento,
        "inviti": inviti,
        "contatori": contatori,
        "risposte": Invito.RISPOSTA_CHOICES,
        "filtro_risposta": risposta,
        "form": CreaInvitiForm(evento=evento),
    }
    return render(request, "inviti/invito_list.html", context)


@login_required
@pagina_richiesta("inviti")
@require_http_methods(["POST"])
def invito_crea_view(request):
    evento = richiedi_evento_corrente(request)
    form = CreaInvitiForm(request.POST, evento=evento)
    if not form.is_valid():
        messages.error(request, "Seleziona almeno un ospite.")
        return redirect("inviti:invito_list")

    creati = 0
    for ospite in form.cleaned_data["ospiti"]:
        try:
            invito, creato = crea_invito(
                ospite, evento, lingua=form.cleaned_data["lingua"], utente=request.user
            )
        except ValidationError as e:
            messages.error(request, " ".join(e.messages))
            break
        if creato:
            creati += 1
            _audit(request, "CREATE", invito, f"Invito creato per {ospite.nome}")

    if creati:
        messages.success(request, f"{creati} inviti creati.")
    return redirect("inviti:invito_list")


@login_required
@pagina_richiesta("inviti")
@require_http_methods(["POST"])
def invito_invia_view(request):
    """
    Invio in blocco tramite Celery.

    POST 'inviti': pk selezionati; senza selezione si inviano tutti gli
    inviti dell'evento non ancora spediti.
    """
    evento = richiedi_evento_corrente(request)
    inviti = Invito.objects.filter(evento=evento, is_active=True)
    selezionati = request.POST.getlist("inviti")
    if selezionati:
        try:
            selezionati = [uuid.UUID(str(pk)) for pk in selezionati]
        except ValueError:
            messages.error(request, "Selezione inviti non valida.")
            return redirect("inviti:invito_list")
        inviti = inviti.filter(pk__in=selezionati)
    else:
        inviti = inviti.filter(inviato_il__isnull=True)

    ids = [str(pk) for pk in inviti.values_list("pk", flat=True)]
    if not ids:
        messages.warning(request, "Nessun invito da inviare.")
        return redirect("inviti:invito_list")

    dimensione = getattr(settings, "INVITI_BATCH_SIZE", 50)
    base_url = _base_url(request)
    for inizio in range(0, len(ids), dimensione):
        invia_inviti_task.delay(ids[inizio : inizio + dimensione], base_url)

    registra_audit(
        request,
        "SEND",
        "Invito",
        evento=evento,
        descrizione=f"Invio di {len(ids)} inviti avviato",
        metadata={"inviti": len(ids)},
    )
    logger.info(f"Evento {evento.pk}: accodati {len(ids)} inviti")
    messages.success(request, f"Invio di {len(ids)} inviti avviato.")
    return redirect("inviti:invito_list")


@login_required
@pagina_richiesta("inviti")
@require_http_methods(["POST"])
def invito_reinvia_view(request, pk):
    evento = richiedi_evento_corrente(request)
    invito = _get_invito(evento, pk)

    esito = invia_invito(invito, base_url=_base_url(request))
    if esito["success"]:
        _audit(request, "SEND", invito, f"Invito reinviato a {invito.ospite.nome}")
        messages.success(request, f"Invito reinviato a {invito.ospite.nome}.")
    else:
        messages.error(request, f"Invio non riuscito: {esito['error']}")
    return redirect("inviti:invito_detail", pk=invito.pk)


@login_required
@require_http_methods(["POST"])
def annulla_risposte_view(request):
    """Azzera tutte le risposte dell'evento (proprietario o admin)."""
    evento = richiedi_evento_corrente(request)
    verifica_gestione_evento(request.user, evento)

    azzerati = annulla_risposte(evento)
    registra_audit(
        request, "UPDATE", "Invito", evento=evento, descrizione=f"Annullate {azzerati} risposte"
    )
    messages.success(request, f"{azzerati} risposte riportate in attesa.")
    return redirect("inviti:invito_list")


# ============================================================================
# DETTAGLIO
# ============================================================================


@login_required
@pagina_richiesta("inviti")
def invito_detail_view(request, pk):
    """Dettaglio con anteprima dell'e-mail e accompagnatori."""
    evento = richiedi_evento_corrente(request)
    invito = _get_invito(evento, pk)
    context = {
        "evento": evento,
        "invito": invito,
        "anteprima": renderizza(invito, base_url=_base_url(request)),
        "accompagnatori": invito.accompagnatori.filter(is_active=True),
        "form_accompagnatore": AccompagnatoreForm(),
    }
    return render(request, "inviti/invito_detail.html", context)


@login_required
@pagina_richiesta("inviti")
@require_http_methods(["POST"])
def invito_accetta_per_conto_view(request, pk):
    evento = richiedi_evento_corrente(request)
    invito = _get_invito(evento, pk)

    accetta_per_conto(invito, request.user)
    _audit(request, "UPDATE", invito, f"Invito di {invito.ospite.nome} accettato per conto dell'ospite")
    messages.success(request, f"Partecipazione di {invito.ospite.nome} confermata.")
    return redirect("inviti:invito_detail", pk=invito.pk)


@login_required
@pagina_richiesta("inviti")
@require_http_methods(["POST"])
def invito_rigenera_qr_view(request, pk):
    evento = richiedi_evento_corrente(request)
    invito = _get_invito(evento, pk)

    rigenera_qr(invito)
    _audit(request, "UPDATE", invito, f"Nuovo QR di check-in per {invito.ospite.nome}")
    messages.success(request, "QR code rigenerato. Il codice precedente non è più valido.")
    return redirect("inviti:invito_detail", pk=invito.pk)


@login_required
@pagina_richiesta("inviti")
def invito_qr_pdf_view(request, pk):
    evento = richiedi_evento_corrente(request)
    invito = _get_invito(evento, pk)
    pdf = qr_pdf(invito, base_url=_base_url(request))
    _audit(request, "EXPORT", invito, f"PDF QR per {invito.ospite.nome}")
    return pdf_response(pdf, f"qr-checkin-{invito.ospite.pk}.pdf")


@login_required
@pagina_richiesta("inviti")
@require_http_methods(["POST"])
def accompagnatore_create_view(request, pk):
    evento = richiedi_evento_corrente(request)
    invito = _get_invito(evento, pk)

    form = AccompagnatoreForm(request.POST)
    if form.is_valid():
        accompagnatore = form.save(commit=False)
        accompagnatore.invito = invito
        accompagnatore.created_by = request.user
        accompagnatore.save()
        invito.numero_accompagnatori = invito.accompagnatori.filter(is_active=True).count()
        invito.save(update_fields=["numero_accompagnatori", "updated_at"])
        _audit(request, "CREATE", invito, f"Accompagnatore {accompagnatore.nome_completo} aggiunto")
        messages.success(request, f"Accompagnatore {accompagnatore.nome_completo} aggiunto.")
    else:
        messages.error(request, "Accompagnatore non valido. Il nome è obbligatorio.")
    return redirect("inviti:invito_detail", pk=invito.pk)


# ============================================================================
# PAGINE PUBBLICHE
# ============================================================================


def _pagina_risposta(request, risultato, tipo):
    if risultato is None:
        context = {"errore": "Invito non trovato o link non più valido."}
        return render(request, "inviti/risposta.html", context, status=404)

    invito, gia = risultato
    if not gia:
        registra_audit(
            request,
            "UPDATE",
            "Invito",
            id_entita=invito.pk,
            evento=invito.evento,
            descrizione=f"Invito {tipo} da {invito.ospite.nome}",
        )
    context = {"invito": invito, "evento": invito.evento, "tipo": tipo, "gia": gia}
    return render(request, "inviti/risposta.html", context)


@require_http_methods(["GET"])
def accetta_view(request, token):
    return _pagina_risposta(request, accetta(token), "accettato")


@require_http_methods(["GET"])
def rifiuta_view(request, token):
    return _pagina_risposta(request, rifiuta(token), "rifiutato")


@never_cache
def traccia_view(request, token):
    response = HttpResponse(traccia_apertura(token), content_type="image/gif")
    response["Pragma"] = "no-cache"
    return response


def qr_pdf_pubblico_view(request, token):
    """QR PDF scaricabile dall'ospite dopo aver accettato."""
    invito = get_object_or_404(Invito, token_accetta=token, is_active=True)
    if invito.risposta != Invito.ACCEPTED:
        raise Http404("Invito non accettato")
    return pdf_response(qr_pdf(invito, base_url=_base_url(request)), "qr-checkin.pdf")


@require_http_methods(["POST"])
def invia_qr_pdf_view(request, token):
    """Spedisce all'ospite il PDF dei QR code; 400 se manca l'indirizzo."""
    invito = get_object_or_404(
        Invito.objects.select_related("ospite", "evento"), token_accetta=token, is_active=True
    )
    if invito.risposta != Invito.ACCEPTED:
        raise Http404("Invito non accettato")

    esito = invia_qr_pdf(invito, base_url=_base_url(request))
    if esito["success"]:
        registra_audit(
            request,
            "SEND",
            "Invito",
            id_entita=invito.pk,
            evento=invito.evento,
            descrizione=f"PDF QR inviato a {invito.ospite.nome}",
        )
    context = {
        "invito": invito,
        "evento": invito.evento,
        "tipo": "accettato",
        "gia": True,
        "esito_qr": esito,
    }
    return render(request, "inviti/risposta.html", context, status=200 if esito["success"] else 400)


# ============================================================================
# TEMPLATE E-MAIL
# ============================================================================


@login_required
@pagina_richiesta("inviti")
def modello_list_view(request):
    modelli = ModelloEmail.objects.filter(is_active=True)
    return render(request, "inviti/modello_list.html", {"modelli": modelli})


@login_required
@pagina_richiesta("inviti")
@require_http_methods(["GET", "POST"])
def modello_form_view(request, pk=None):
    """Creazione (pk=None) o modifica di un template."""
    modello = get_object_or_404(ModelloEmail, pk=pk, is_active=True) if pk else None

    if request.method == "POST":
        form = ModelloEmailForm(request.POST, instance=modello)
        if form.is_valid():
            modello = form.save(commit=False)
            if modello._state.adding:
                modello.created_by = request.user
            modello.updated_by = request.user
            modello.save()
            registra_audit(
                request,
                "UPDATE" if pk else "CREATE",
                "ModelloEmail",
                id_entita=modello.pk,
                descrizione=f"Template '{modello.nome}' salvato",
            )
            messages.success(request, f"Template {modello.nome} salvato.")
            return redirect("inviti:modello_list")
        messages.error(request, "Template non valido. Controlla i campi.")
    else:
        form = ModelloEmailForm(instance=modello)

    return render(request, "inviti/modello_form.html", {"form": form, "modello": modello})


@login_required
@pagina_richiesta("inviti")
@require_http_methods(["POST"])
def modello_delete_view(request, pk):
    modello = get_object_or_404(ModelloEmail, pk=pk, is_active=True)
    modello.soft_delete(user=request.user)
    registra_audit(
        request,
        "DELETE",
        "ModelloEmail",
        id_entita=modello.pk,
        descrizione=f"Template '{modello.nome}' eliminato",
    )
    messages.success(request, f"Template {modello.nome} eliminato.")
    return redirect("inviti:modello_list")
