"""
CORE PDF GENERATOR - Gestione Eventi
====================================

Generazione PDF con ReportLab (platypus).

PDFReport costruisce documenti A4 composti da titolo, sottotitolo e
sezioni; ogni sezione ha un'intestazione, paragrafi opzionali e una
tabella opzionale. È usato dai report attività, dalla lista tavoli e
dall'export presenze.

Usage:
    report = PDFReport("Report: Area Catering", subtitle="Gala — 12/06/2026")
    report.add_section(
        "Attività",
        table=(["Attività", "Nota", "Stato", "Scadenza", "Prio", "Fatto"], righe),
    )
    report.add_section("Note", paragraphs=["- Menu: confermato"])
    return pdf_response(report.render(), "report-area-catering.pdf")
"""

import re
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from io import BytesIO
from typing import Any, Dict, List, Optional, Sequence, Tuple
from xml.sax.saxutils import escape

from django.http import HttpResponse
from django.utils import timezone
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.platypus import (
    Flowable,
    Paragraph,
    SimpleDocTemplate,
    Spacer,
    Table,
    TableStyle,
)

# Intestazione della colonna "spunta" (checkbox vuota da compilare a mano)
DONE_LABEL = "Fatto"

PAGE_SIZE = A4
MARGIN_X = 40
MARGIN_Y = 50
CHECKBOX_SIZE = 10
DONE_WIDTH = 36
TASK_RATIOS = (150, 170, 70, 60, 65)
FIVE_COLUMN_RATIOS = (170, 210, 70, 60, 90)
PARAGRAPH_MAX_CHARS = 110

HEADER_BACKGROUND = colors.Color(0.95, 0.95, 0.95)
HEADER_BORDER = colors.Color(0.2, 0.2, 0.2)
ROW_BORDER = colors.Color(0.8, 0.8, 0.8)

_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f-\x9f]")
_ZERO_WIDTH_CHARS = re.compile("[\u200b-\u200f\u2028\u2029\u2060\ufeff]")
_WHITESPACE = re.compile(r"\s+")


# ============================================================================
# TESTO
# ============================================================================


def sanitize(text) -> str:
    """
    Normalizza un valore per il PDF: rimuove caratteri di controllo e
    zero-width, comprime gli spazi.
    """
    if text is None:
        return ""
    text = _CONTROL_CHARS.sub("", str(text))
    text = _ZERO_WIDTH_CHARS.sub("", text)
    return _WHITESPACE.sub(" ", text).strip()


def wrap_text(text, max_chars: int) -> List[str]:
    """
    A capo greedy per parole.

    Una parola più lunga di max_chars resta su una riga propria.
    Testo vuoto restituisce [""].
    """
    cleaned = sanitize(text)
    if not cleaned:
        return [""]

    lines = []
    line = ""
    for word in cleaned.split(" "):
        candidate = f"{line} {word}" if line else word
        if len(candidate) <= max_chars:
            line = candidate
        else:
            if line:
                lines.append(line)
            line = word
    if line:
        lines.append(line)
    return lines


# ============================================================================
# LAYOUT TABELLE
# ============================================================================


def column_widths(headers: Sequence[str], total_width: float) -> List[float]:
    """
    Larghezze colonne per le tabelle dei report, in proporzione a total_width.

    - 6 colonne con ultima colonna DONE_LABEL: la spunta ha DONE_WIDTH,
      le altre si dividono il resto come 150:170:70:60:65
    - 5 colonne: 170:210:70:60:90
    - altrimenti larghezze uguali
    """
    count = len(headers)
    if count == 0:
        return []
    if count == 6 and headers[-1] == DONE_LABEL:
        return _proporzionali(TASK_RATIOS, total_width - DONE_WIDTH) + [DONE_WIDTH]
    if count == 5:
        return _proporzionali(FIVE_COLUMN_RATIOS, total_width)
    return [total_width / count] * count


def _proporzionali(ratios, width):
    total = sum(ratios)
    return [width * ratio / total for ratio in ratios]


class Checkbox(Flowable):
    """Quadrato vuoto da spuntare a mano."""

    def __init__(self, size=CHECKBOX_SIZE):
        super().__init__()
        self.size = size

    def wrap(self, available_width, available_height):
        return self.size, self.size

    def draw(self):
        self.canv.setStrokeColor(colors.black)
        self.canv.setLineWidth(1)
        self.canv.rect(0, 0, self.size, self.size, stroke=1, fill=0)


# ============================================================================
# REPORT
# ============================================================================


@dataclass
class PDFSection:
    heading: str
    paragraphs: List[str] = field(default_factory=list)
    headers: Optional[List[str]] = None
    rows: List[List[Any]] = field(default_factory=list)

    @property
    def has_table(self):
        return self.headers is not None


class PDFReport:
    """
    Builder di un report PDF A4 a sezioni.

    Le tabelle hanno intestazione grigia in grassetto ripetuta a ogni
    cambio pagina, bordi sottili su ogni riga e celle che vanno a capo
    sulla larghezza della colonna.
    """

    def __init__(self, title: str, subtitle: Optional[str] = None, page_size=PAGE_SIZE):
        self.title = sanitize(title)
        self.subtitle = sanitize(subtitle) if subtitle else None
        self.page_size = page_size
        self.sections: List[PDFSection] = []

        styles = getSampleStyleSheet()
        self.styles = {
            "title": ParagraphStyle(
                "ReportTitle", parent=styles["Heading1"], fontName="Helvetica-Bold",
                fontSize=18, leading=22, spaceAfter=4,
            ),
            "subtitle": ParagraphStyle(
                "ReportSubtitle", parent=styles["Normal"], fontSize=11, leading=14,
                textColor=colors.Color(0.3, 0.3, 0.3), spaceAfter=10,
            ),
            "heading": ParagraphStyle(
                "ReportHeading", parent=styles["Heading2"], fontName="Helvetica-Bold",
                fontSize=13, leading=16, spaceBefore=8, spaceAfter=6,
            ),
            "paragraph": ParagraphStyle(
                "ReportParagraph", parent=styles["Normal"], fontSize=10, leading=14,
            ),
            "header_cell": ParagraphStyle(
                "ReportHeaderCell", parent=styles["Normal"], fontName="Helvetica-Bold",
                fontSize=9, leading=11,
            ),
            "cell": ParagraphStyle(
                "ReportCell", parent=styles["Normal"], fontName="Helvetica",
                fontSize=9, leading=11,
            ),
        }

    @property
    def content_width(self):
        return self.page_size[0] - 2 * MARGIN_X

    def add_section(self, heading, paragraphs=None, table: Optional[Tuple[list, list]] = None):
        """
        Aggiunge una sezione.

        Args:
            heading: titolo della sezione
            paragraphs: lista di stringhe
            table: tupla (headers, rows)
        """
        section = PDFSection(heading=sanitize(heading), paragraphs=list(paragraphs or []))
        if table is not None:
            headers, rows = table
            section.headers = [sanitize(h) for h in headers]
            section.rows = [list(row) for row in rows]
        self.sections.append(section)
        return section

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def _paragraph(self, text, style):
        return Paragraph(escape(sanitize(text)), self.styles[style])

    def build_table(self, headers, rows):
        """Table platypus per una sezione."""
        widths = column_widths(headers, self.content_width)
        data = [[self._paragraph(h, "header_cell") for h in headers]]

        for row in rows:
            cells = []
            for index, header in enumerate(headers):
                if header == DONE_LABEL:
                    cells.append(Checkbox())
                    continue
                value = row[index] if index < len(row) else ""
                cells.append(self._paragraph(value, "cell"))
            data.append(cells)

        table = Table(data, colWidths=widths, repeatRows=1)
        done_columns = [
            cmd
            for index, header in enumerate(headers)
            if header == DONE_LABEL
            for cmd in (
                ("LEFTPADDING", (index, 1), (index, -1), 0),
                ("RIGHTPADDING", (index, 1), (index, -1), 0),
                ("ALIGN", (index, 1), (index, -1), "CENTER"),
            )
        ]
        table.setStyle(
            TableStyle(
                [
                    ("BACKGROUND", (0, 0), (-1, 0), HEADER_BACKGROUND),
                    ("BOX", (0, 0), (-1, 0), 1, HEADER_BORDER),
                    ("LINEBELOW", (0, 1), (-1, -1), 0.5, ROW_BORDER),
                    ("BOX", (0, 1), (-1, -1), 0.5, ROW_BORDER),
                    ("VALIGN", (0, 0), (-1, -1), "TOP"),
                    ("LEFTPADDING", (0, 0), (-1, -1), 6),
                    ("RIGHTPADDING", (0, 0), (-1, -1), 2),
                    ("TOPPADDING", (0, 0), (-1, -1), 3),
                    ("BOTTOMPADDING", (0, 0), (-1, -1), 3),
                ]
                + done_columns
            )
        )
        return table

    def build_story(self):
        story = [self._paragraph(self.title, "title")]
        if self.subtitle:
            story.append(self._paragraph(self.subtitle, "subtitle"))
        else:
            story.append(Spacer(1, 6))

        for section in self.sections:
            story.append(self._paragraph(section.heading, "heading"))
            for text in section.paragraphs:
                lines = wrap_text(text, PARAGRAPH_MAX_CHARS)
                story.append(
                    Paragraph("<br/>".join(escape(line) for line in lines), self.styles["paragraph"])
                )
            if section.paragraphs:
                story.append(Spacer(1, 6))
            if section.has_table:
                story.append(self.build_table(section.headers, section.rows))
                story.append(Spacer(1, 8))
        return story

    def render(self) -> bytes:
        """Genera il PDF e restituisce i bytes."""
        buffer = BytesIO()
        doc = SimpleDocTemplate(
            buffer,
            pagesize=self.page_size,
            leftMargin=MARGIN_X,
            rightMargin=MARGIN_X,
            topMargin=MARGIN_Y,
            bottomMargin=MARGIN_Y,
            title=self.title,
        )
        doc.build(self.build_story())
        pdf = buffer.getvalue()
        buffer.close()
        return pdf


# ============================================================================
# RESPONSE
# ============================================================================


def pdf_response(pdf_bytes: bytes, filename: str) -> HttpResponse:
    """HttpResponse con il PDF come allegato."""
    response = HttpResponse(pdf_bytes, content_type="application/pdf")
    response["Content-Disposition"] = f'attachment; filename="{filename}"'
    return response


def format_value(value) -> str:
    """Formatta un valore per una cella (date italiane, decimali a 2 cifre)."""
    if isinstance(value, datetime):
        if timezone.is_aware(value):
            value = timezone.localtime(value)
        return value.strftime("%d/%m/%Y %H:%M")
    if isinstance(value, date):
        return value.strftime("%d/%m/%Y")
    if isinstance(value, Decimal):
        return f"{float(value):.2f}"
    if isinstance(value, bool):
        return "Sì" if value else "No"
    if value is None:
        return "-"
    return str(value)


def generate_pdf_response(
    data: List[Dict[str, Any]],
    filename: str,
    title: str = "Report",
    headers: List[str] = None,
) -> HttpResponse:
    """
    Esporta una lista di dizionari come tabella PDF.

    Args:
        data: Lista di dizionari con i dati
        filename: Nome del file (senza estensione)
        title: Titolo del documento
        headers: Colonne da esportare (default: chiavi del primo record)
    """
    report = PDFReport(
        title,
        subtitle=f"Generato il {timezone.localtime().strftime('%d/%m/%Y alle %H:%M')}",
    )

    if not data:
        report.add_section("Dati", paragraphs=["Nessun dato disponibile"])
    else:
        if headers is None:
            headers = list(data[0].keys())
        rows = [[format_value(record.get(h)) for h in headers] for record in data]
        report.add_section("Dati", table=(headers, rows))

    return pdf_response(report.render(), f"{filename}.pdf")
