"""
Badge (segnaposto pieghevoli) per gli ospiti VIP.

I campi si leggono da dati_aggiuntivi con le stesse intestazioni delle
liste importate (Vorname, Name, Anrede 1-4, Staat/Institution,
Tisch-Nummer) o dai corrispondenti italiani; se mancano si ricavano dai
campi del model.

Output:
- PDF (reportlab canvas), N badge per pagina A4
- DOCX (python-docx), una cella di tabella per badge
"""

import logging
from io import BytesIO

from docx import Document
from docx.enum.text import WD_ALIGN_PARAGRAPH
from docx.shared import Pt
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from core.pdf_generator import sanitize

logger = logging.getLogger(__name__)

MARGINE = 20
SPAZIATURA = 10
LOGO_SIZE = 30
FONT_SIZE = 10
NOME_FONT_SIZE = 14
INTERLINEA = 16

LAYOUT_BADGE = {
    2: (1, 2),
    4: (2, 2),
    6: (2, 3),
    8: (2, 4),
}
PER_PAGINA_DEFAULT = 4

CAMPI_NOME = ("Vorname", "Nome")
CAMPI_COGNOME = ("Name", "Cognome")
CAMPI_TAVOLO = ("Tisch-Nummer", "Tischnummer", "Tavolo")
CAMPI_ISTITUZIONE = ("Staat/Institution", "Staat / Institution", "Istituzione")
CAMPI_SALUTO = ("Anrede 1", "Anrede 2", "Anrede 3", "Anrede 4")


def valore_campo(ospite, campo):
    """Valore di un campo del badge: prima dati_aggiuntivi, poi i campi del model."""
    dati = ospite.dati_aggiuntivi or {}
    if campo in dati:
        valore = dati[campo]
        return "" if valore is None else str(valore)

    parti = (ospite.nome or "").split()
    if campo in CAMPI_NOME:
        return parti[0] if parti else ""
    if campo in CAMPI_COGNOME:
        return " ".join(parti[1:]) or ospite.nome or ""
    if campo in CAMPI_TAVOLO:
        return str(ospite.numero_tavolo) if ospite.numero_tavolo else ""
    if campo in CAMPI_ISTITUZIONE:
        return ospite.organizzazione or ""
    return ""


def _primo_valore(ospite, campi):
    """Primo campo presente in dati_aggiuntivi, altrimenti il valore ricavato dal model."""
    dati = ospite.dati_aggiuntivi or {}
    for campo in campi:
        if campo in dati and sanitize(dati[campo]):
            return sanitize(dati[campo])
    return sanitize(valore_campo(ospite, campi[0]))


def contenuto_badge(ospite):
    """Testi del badge: saluto, nome, istituzione, tavolo."""
    saluto = " ".join(
        v for v in (sanitize(valore_campo(ospite, c)) for c in CAMPI_SALUTO) if v
    )
    nome = " ".join(
        v for v in (_primo_valore(ospite, CAMPI_NOME), _primo_valore(ospite, CAMPI_COGNOME)) if v
    )
    return {
        "saluto": saluto,
        "nome": nome,
        "istituzione": _primo_valore(ospite, CAMPI_ISTITUZIONE),
        "tavolo": _primo_valore(ospite, CAMPI_TAVOLO),
    }


def layout_badge(per_pagina):
    """(colonne, righe) per il numero di badge per pagina."""
    per_pagina = int(per_pagina)
    if per_pagina <= 0:
        raise ValueError("Il numero di badge per pagina deve essere positivo")
    return LAYOUT_BADGE.get(per_pagina, (1, per_pagina))


# ============================================================================
# PDF
# ============================================================================


def _testo_centrato(c, testo, x_centro, y, font, size, colore):
    c.setFont(font, size)
    c.setFillColor(colore)
    c.drawCentredString(x_centro, y, testo)


def _disegna_badge(c, ospite, x, y, larghezza, altezza, logo=None):
    # cornice
    c.setStrokeColor(colors.Color(0.8, 0.8, 0.8))
    c.setLineWidth(1)
    c.rect(x, y, larghezza, altezza, stroke=1, fill=0)

    # linea di piega tratteggiata
    piega_x = x + larghezza / 2
    c.setStrokeColor(colors.Color(0.7, 0.7, 0.7))
    c.setLineWidth(0.5)
    c.setDash(5, 5)
    c.line(piega_x, y, piega_x, y + altezza)
    c.setDash()

    if logo is not None:
        c.drawImage(
            logo,
            x + 10,
            y + altezza - LOGO_SIZE - 10,
            width=LOGO_SIZE,
            height=LOGO_SIZE,
            preserveAspectRatio=True,
            mask="auto",
        )

    testi = contenuto_badge(ospite)
    centro = x + larghezza / 2
    corrente_y = y + altezza - 40

    if testi["saluto"]:
        _testo_centrato(
            c, testi["saluto"], centro, corrente_y, "Helvetica", FONT_SIZE - 2, colors.Color(0.4, 0.4, 0.4)
        )
        corrente_y -= INTERLINEA
    if testi["nome"]:
        _testo_centrato(c, testi["nome"], centro, corrente_y, "Helvetica-Bold", NOME_FONT_SIZE, colors.black)
        corrente_y -= INTERLINEA + 5
    if testi["istituzione"]:
        _testo_centrato(
            c, testi["istituzione"], centro, corrente_y, "Helvetica", FONT_SIZE - 1, colors.Color(0.3, 0.3, 0.3)
        )
    if testi["tavolo"]:
        _testo_centrato(
            c, f"Tavolo {testi['tavolo']}", centro, y + 15, "Helvetica", FONT_SIZE, colors.Color(0.5, 0.5, 0.5)
        )


def genera_badge_pdf(ospiti, per_pagina=PER_PAGINA_DEFAULT, logo=None):
    """
    Genera il PDF dei badge.

    Args:
        ospiti: sequenza di Ospite
        per_pagina: badge per pagina (2, 4, 6, 8 o qualsiasi n -> 1 colonna)
        logo: file immagine opzionale (file-like o bytes)

    Returns:
        bytes
    """
    colonne, righe = layout_badge(per_pagina)
    larghezza_pagina, altezza_pagina = A4
    larghezza = (larghezza_pagina - MARGINE * 2 - SPAZIATURA * (colonne - 1)) / colonne
    altezza = (altezza_pagina - MARGINE * 2 - SPAZIATURA * (righe - 1)) / righe

    immagine_logo = None
    if logo is not None:
        if isinstance(logo, bytes):
            logo = BytesIO(logo)
        immagine_logo = ImageReader(logo)

    buffer = BytesIO()
    c = canvas.Canvas(buffer, pagesize=A4)
    c.setTitle("Badge")

    ospiti = list(ospiti)
    for inizio in range(0, len(ospiti), colonne * righe):
        pagina = ospiti[inizio : inizio + colonne * righe]
        for indice, ospite in enumerate(pagina):
            riga, colonna = divmod(indice, colonne)
            x = MARGINE + colonna * (larghezza + SPAZIATURA)
            y = altezza_pagina - MARGINE - (riga + 1) * altezza - riga * SPAZIATURA
            _disegna_badge(c, ospite, x, y, larghezza, altezza, immagine_logo)
        c.showPage()

    c.save()
    logger.info(f"Generati {len(ospiti)} badge PDF ({per_pagina} per pagina)")
    return buffer.getvalue()


# ============================================================================
# DOCX
# ============================================================================


def genera_badge_docx(ospiti, per_pagina=PER_PAGINA_DEFAULT):
    """DOCX modificabile: una tabella per pagina, una cella per badge."""
    colonne, righe = layout_badge(per_pagina)
    documento = Document()

    ospiti = list(ospiti)
    for inizio in range(0, len(ospiti), colonne * righe):
        if inizio:
            documento.add_page_break()
        pagina = ospiti[inizio : inizio + colonne * righe]
        tabella = documento.add_table(rows=righe, cols=colonne)
        tabella.style = "Table Grid"

        for indice, ospite in enumerate(pagina):
            riga, colonna = divmod(indice, colonne)
            cella = tabella.cell(riga, colonna)
            testi = contenuto_badge(ospite)

            paragrafo = cella.paragraphs[0]
            paragrafo.alignment = WD_ALIGN_PARAGRAPH.CENTER
            if testi["saluto"]:
                run = paragrafo.add_run(testi["saluto"])
                run.font.size = Pt(FONT_SIZE - 2)
                paragrafo = cella.add_paragraph()
                paragrafo.alignment = WD_ALIGN_PARAGRAPH.CENTER

            run = paragrafo.add_run(testi["nome"])
            run.bold = True
            run.font.size = Pt(NOME_FONT_SIZE)

            for testo in (testi["istituzione"], f"Tavolo {testi['tavolo']}" if testi["tavolo"] else ""):
                if testo:
                    extra = cella.add_paragraph(testo)
                    extra.alignment = WD_ALIGN_PARAGRAPH.CENTER

    buffer = BytesIO()
    documento.save(buffer)
    logger.info(f"Generati {len(ospiti)} badge DOCX ({per_pagina} per pagina)")
    return buffer.getvalue()
