"""
PDF con i QR code di check-in di un invito.

Un codice per l'ospite e uno per ogni accompagnatore, due per riga, con
il nome sopra il codice. Il QR contiene il link alla scansione:
<SITE_URL>/ospiti/checkin/scan/?t=<token>

invia_qr_pdf spedisce lo stesso PDF all'ospite dopo l'accettazione.
"""

import logging
from io import BytesIO

from django.core.exceptions import ValidationError
from django.urls import reverse
from django.utils.html import escape
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from core.pdf_generator import sanitize
from core.qr_code_generator import generate_qr_code

from ..models import Invito
from .email_service import InvitiEmailService
from .inviti import base_url_default, email_ospite

logger = logging.getLogger(__name__)

QR_SIZE = 120
COLONNE = 2
MARGINE = 50
SPAZIO_ETICHETTA = 18
SPAZIO_RIGA = 40


def link_checkin(token, base_url=None):
    base = (base_url or base_url_default()).rstrip("/")
    return f"{base}{reverse('ospiti:checkin_scan')}?t={token}"


def partecipanti(invito):
    """[(nome, token)] per ospite e accompagnatori."""
    voci = [(invito.ospite.nome, invito.ospite.token_checkin)]
    voci.extend(
        (a.nome_completo, a.token_checkin) for a in invito.accompagnatori.filter(is_active=True)
    )
    return voci


def qr_pdf(invito, base_url=None):
    """
    Genera il PDF dei QR code.

    Returns:
        bytes
    """
    evento = invito.evento
    larghezza, altezza = A4
    buffer = BytesIO()
    c = canvas.Canvas(buffer, pagesize=A4)
    c.setTitle(f"Check-in {evento.titolo}")

    def intestazione():
        y = altezza - 60
        c.setFont("Helvetica-Bold", 18)
        c.setFillColor(colors.Color(0.2, 0.2, 0.4))
        c.drawString(MARGINE, y, "Check-in e informazioni evento")
        c.setFillColor(colors.black)
        c.setFont("Helvetica", 12)
        y -= 26
        c.drawString(MARGINE, y, sanitize(evento.titolo))
        y -= 16
        dettagli = f"{evento.data:%d/%m/%Y}" + (f" - {sanitize(evento.luogo)}" if evento.luogo else "")
        c.drawString(MARGINE, y, dettagli)
        return y - 40

    y = intestazione()
    larghezza_colonna = (larghezza - 2 * MARGINE) / COLONNE
    voci = partecipanti(invito)

    for indice, (nome, token) in enumerate(voci):
        colonna = indice % COLONNE
        if colonna == 0 and indice:
            y -= QR_SIZE + SPAZIO_ETICHETTA + SPAZIO_RIGA
        if colonna == 0 and y - QR_SIZE - SPAZIO_ETICHETTA < MARGINE:
            c.showPage()
            y = intestazione()

        x = MARGINE + colonna * larghezza_colonna + (larghezza_colonna - QR_SIZE) / 2
        c.setFont("Helvetica-Bold", 11)
        c.drawCentredString(x + QR_SIZE / 2, y, sanitize(nome)[:60])
        immagine = ImageReader(generate_qr_code(link_checkin(token, base_url), box_size=10, border=2))
        c.drawImage(immagine, x, y - SPAZIO_ETICHETTA / 2 - QR_SIZE, width=QR_SIZE, height=QR_SIZE)

    c.showPage()
    c.save()
    logger.info(f"Generato PDF QR per invito {invito.pk} ({len(voci)} codici)")
    return buffer.getvalue()


# ============================================================================
# INVIO PER E-MAIL
# ============================================================================


def invia_qr_pdf(invito, base_url=None, servizio=None):
    """
    Invia all'ospite il PDF dei QR code come allegato.

    Returns:
        dict: {'success': bool, 'error': str}

    Raises:
        ValidationError: invito non accettato
    """
    if invito.risposta != Invito.ACCEPTED:
        raise ValidationError("Invito non ancora accettato")

    destinatario = email_ospite(invito.ospite)
    if "@" not in destinatario:
        return {"success": False, "error": "Nessun indirizzo e-mail valido per l'ospite"}

    evento = invito.evento
    nome = escape(invito.ospite.nome)
    titolo = escape(evento.titolo)
    corpo = (
        f"<p>Gentile {nome},</p>"
        f"<p>in allegato trovi i QR code per l'ingresso a <strong>{titolo}</strong> "
        f"del {evento.data:%d/%m/%Y}.</p>"
        "<p>Mostra all'ingresso il codice di ciascuna persona: ognuno ha il proprio.</p>"
        "<p>Puoi stampare il PDF o tenerlo sullo smartphone.</p>"
        "<p>Cordiali saluti<br/>Lo staff dell'evento</p>"
    )
    pdf = qr_pdf(invito, base_url)

    servizio = servizio or InvitiEmailService()
    esito = servizio.send_email(
        destinatario,
        f"Check-in e informazioni - {evento.titolo}",
        corpo,
        attachments=[("qr-checkin.pdf", pdf, "application/pdf")],
    )
    if esito["success"]:
        logger.info(f"Invito {invito.pk}: PDF QR inviato a {destinatario}")
    return esito
