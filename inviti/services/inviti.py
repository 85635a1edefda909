"""
Logica degli inviti.

Creazione, composizione e invio dell'e-mail, risposte pubbliche
(accetta/rifiuta), tracking delle aperture e operazioni dello staff.
"""

import base64
import logging
import re

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import transaction
from django.urls import reverse
from django.utils import timezone
from django.utils.formats import date_format
from django.utils.html import escape, strip_tags

from ospiti.categorie import ETICHETTE_CATEGORIA, categoria_ospite
from ospiti.models import Ospite

from ..models import LINGUA_DEFAULT, Invito, ModelloEmail
from .email_service import InvitiEmailService

logger = logging.getLogger(__name__)

# GIF trasparente 1x1
PIXEL_GIF = base64.b64decode("R0lGODlhAQABAIAAAAAAAP///yH5BAEAAAAALAAAAAABAAEAAAIBRAA7")

SEGNAPOSTO_RE = re.compile(r"\{\{\s*(\w+)\s*\}\}")

# colonne della lista importata con un indirizzo alternativo
CHIAVI_EMAIL = ("E-Mail", "E-mail", "E-Mail kurumsal", "E-Mail privat", "Email")


def base_url_default():
    return getattr(settings, "SITE_URL", "").rstrip("/")


def email_ospite(ospite):
    """Indirizzo dell'ospite: campo email, altrimenti le colonne importate."""
    if ospite.email:
        return ospite.email.strip()
    dati = ospite.dati_aggiuntivi or {}
    for chiave in CHIAVI_EMAIL:
        valore = str(dati.get(chiave) or "").strip()
        if "@" in valore:
            return valore
    return ""


# ============================================================================
# CREAZIONE
# ============================================================================


def scegli_modello(ospite, lingua=LINGUA_DEFAULT):
    """
    Template per l'ospite.

    Ordine: template della sua categoria nella lingua, template della
    categoria in qualsiasi lingua, template predefinito della lingua.
    """
    modelli = ModelloEmail.objects.filter(is_active=True)
    categoria = categoria_ospite(ospite)
    if categoria:
        per_categoria = modelli.filter(categoria=categoria)
        modello = per_categoria.filter(lingua=lingua).first() or per_categoria.first()
        if modello is not None:
            return modello
    return modelli.filter(lingua=lingua, is_default=True).first()


def crea_invito(ospite, evento=None, lingua=LINGUA_DEFAULT, utente=None):
    """
    Invito per la coppia (ospite, evento); se esiste già viene restituito.

    Returns:
        tuple: (invito, creato)

    Raises:
        ValidationError: nessun template disponibile
    """
    evento = evento or ospite.evento
    esistente = Invito.objects.filter(ospite=ospite, evento=evento).first()
    if esistente is not None:
        return esistente, False

    modello = scegli_modello(ospite, lingua)
    if modello is None:
        raise ValidationError(f"Nessun template e-mail predefinito per la lingua '{lingua}'")

    invito = Invito.objects.create(
        ospite=ospite,
        evento=evento,
        modello=modello,
        lingua=modello.lingua,
        oggetto=modello.oggetto,
        corpo=modello.corpo,
        created_by=utente,
        updated_by=utente,
    )
    logger.info(f"Creato invito {invito.pk} per {ospite.nome} ({evento.titolo})")
    return invito, True


# ============================================================================
# COMPOSIZIONE
# ============================================================================


def link_invito(invito, base_url=None):
    base = (base_url or base_url_default()).rstrip("/")
    return {
        "link_accetta": base + reverse("inviti:accetta", kwargs={"token": invito.token_accetta}),
        "link_rifiuta": base + reverse("inviti:rifiuta", kwargs={"token": invito.token_rifiuta}),
        "link_tracking": base + reverse("inviti:traccia", kwargs={"token": invito.token_tracking}),
    }


def _sostituisci(testo, valori, html):
    def sostituzione(match):
        chiave = match.group(1)
        if chiave not in valori:
            return match.group(0)
        valore = str(valori[chiave])
        if html and not chiave.startswith("link_"):
            valore = escape(valore)
        return valore

    return SEGNAPOSTO_RE.sub(sostituzione, testo or "")


def renderizza(invito, base_url=None):
    """
    Oggetto e corpo personalizzati.

    Returns:
        dict: oggetto, html (con pixel di tracking), testo
    """
    link = link_invito(invito, base_url)
    categoria = categoria_ospite(invito.ospite)
    etichette = ETICHETTE_CATEGORIA.get(categoria)
    valori = {
        "nome": invito.ospite.nome,
        "evento": invito.evento.titolo,
        "data": date_format(invito.evento.data, "j F Y"),
        "luogo": invito.evento.luogo,
        "categoria": etichette[3] if etichette else categoria,
        "link_accetta": link["link_accetta"],
        "link_rifiuta": link["link_rifiuta"],
    }

    corpo = _sostituisci(invito.corpo, valori, html=True)
    pixel = f'<img src="{link["link_tracking"]}" width="1" height="1" style="display:none;" alt="" />'
    return {
        "oggetto": _sostituisci(invito.oggetto, valori, html=False),
        "html": corpo + pixel,
        "testo": " ".join(strip_tags(_sostituisci(invito.corpo, valori, html=False)).split()),
    }


# ============================================================================
# INVIO
# ============================================================================


def _registra_errore(invito, errore):
    invito.errore_invio = errore
    invito.save(update_fields=["errore_invio", "updated_at"])
    return {"success": False, "error": errore}


def invia_invito(invito, base_url=None, servizio=None):
    """
    Invia l'e-mail dell'invito.

    Returns:
        dict: {'success': bool, 'error': str}
    """
    destinatario = email_ospite(invito.ospite)
    if not destinatario:
        logger.warning(f"Invito {invito.pk}: ospite {invito.ospite.nome} senza e-mail")
        return _registra_errore(invito, "Nessun indirizzo e-mail per l'ospite")

    contenuto = renderizza(invito, base_url)
    servizio = servizio or InvitiEmailService()
    esito = servizio.send_email(
        destinatario, contenuto["oggetto"], contenuto["html"], body_text=contenuto["testo"]
    )
    if not esito["success"]:
        return _registra_errore(invito, esito["error"])

    adesso = timezone.now()
    invito.inviato_il = adesso
    invito.errore_invio = ""
    invito.save(update_fields=["inviato_il", "errore_invio", "updated_at"])

    ospite = invito.ospite
    dati = dict(ospite.dati_aggiuntivi or {})
    dati["Invito inviato"] = True
    dati["Invito inviato il"] = adesso.isoformat()
    ospite.dati_aggiuntivi = dati
    ospite.save(update_fields=["dati_aggiuntivi", "updated_at"])
    return {"success": True, "error": ""}


# ============================================================================
# RISPOSTE
# ============================================================================


def _rispondi(invito, risposta, stato_ospite):
    invito.risposta = risposta
    invito.risposto_il = timezone.now()
    invito.save(update_fields=["risposta", "risposto_il", "updated_at"])
    Ospite.objects.filter(pk=invito.ospite_id).update(stato=stato_ospite, updated_at=timezone.now())


@transaction.atomic
def accetta(token):
    """
    Accetta l'invito del token.

    Un invito rifiutato può essere cambiato in accettato.

    Returns:
        tuple (invito, gia_accettato) oppure None se il token non esiste
    """
    invito = Invito.objects.select_for_update().filter(token_accetta=token, is_active=True).first()
    if invito is None:
        return None
    if invito.risposta == Invito.ACCEPTED:
        return invito, True

    _rispondi(invito, Invito.ACCEPTED, Ospite.CONFIRMED)
    logger.info(f"Invito {invito.pk} accettato")
    return invito, False


@transaction.atomic
def rifiuta(token):
    """Come accetta(): (invito, gia_rifiutato) oppure None."""
    invito = Invito.objects.select_for_update().filter(token_rifiuta=token, is_active=True).first()
    if invito is None:
        return None
    if invito.risposta == Invito.DECLINED:
        return invito, True

    _rispondi(invito, Invito.DECLINED, Ospite.DECLINED)
    logger.info(f"Invito {invito.pk} rifiutato")
    return invito, False


def traccia_apertura(token):
    """Segna la prima apertura dell'e-mail. Restituisce sempre la GIF 1x1."""
    aggiornati = Invito.objects.filter(token_tracking=token, aperto_il__isnull=True).update(
        aperto_il=timezone.now()
    )
    if aggiornati:
        logger.info(f"Invito con token {token[:8]}... aperto")
    return PIXEL_GIF


# ============================================================================
# OPERAZIONI STAFF
# ============================================================================


def accetta_per_conto(invito, utente):
    """Lo staff registra l'accettazione al posto dell'ospite."""
    _rispondi(invito, Invito.ACCEPTED, Ospite.CONFIRMED)
    Invito.objects.filter(pk=invito.pk).update(updated_by=utente)
    logger.info(f"Invito {invito.pk} accettato da {utente} per conto dell'ospite")
    return invito


@transaction.atomic
def annulla_risposte(evento):
    """
    Riporta tutte le risposte dell'evento a "in attesa" e gli ospiti a
    "invitato" (i presenti restano presenti).

    Returns:
        int: inviti azzerati
    """
    inviti = Invito.objects.filter(evento=evento).exclude(risposta=Invito.PENDING)
    ospiti_ids = list(inviti.values_list("ospite_id", flat=True))
    azzerati = inviti.update(risposta=Invito.PENDING, risposto_il=None, updated_at=timezone.now())
    Ospite.objects.filter(pk__in=ospiti_ids).exclude(stato=Ospite.ATTENDED).update(
        stato=Ospite.INVITED, updated_at=timezone.now()
    )
    logger.info(f"Evento {evento.pk}: annullate {azzerati} risposte")
    return azzerati


def rigenera_qr(invito):
    """Nuovo token di check-in per l'ospite dell'invito."""
    token = invito.ospite.rigenera_token()
    logger.info(f"Invito {invito.pk}: rigenerato token check-in")
    return token
