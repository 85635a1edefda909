"""
Costruzione dei report PDF.

Tipi:
- all_by_user: tutte le attività raggruppate per assegnatario
- user: attività di un utente
- category: attività, checklist e note di un'area
- responsible: le aree di cui un utente è responsabile

A ogni report vengono accodate le liste ospiti (totale e VIP).
"""

import logging
from collections import defaultdict
from dataclasses import dataclass

from django.core.exceptions import ValidationError

from attivita.models import ChecklistItem, Task
from core.pdf_generator import DONE_LABEL, PDFReport, format_value
from eventi.models import Categoria

logger = logging.getLogger(__name__)

ALL_BY_USER = "all_by_user"
USER = "user"
CATEGORY = "category"
RESPONSIBLE = "responsible"
TIPI = (ALL_BY_USER, USER, CATEGORY, RESPONSIBLE)

NON_ASSEGNATO = "Non assegnato"

HEADERS_TASK_AREA = ["Attività", "Nota", "Area", "Scadenza", "Prio", DONE_LABEL]
HEADERS_TASK = ["Attività", "Nota", "Stato", "Scadenza", "Prio", DONE_LABEL]
HEADERS_CHECKLIST = ["Punto", "Nota", "Stato", "Scadenza", DONE_LABEL]
HEADERS_OSPITI = ["Nome", "Titolo/Org.", "Telefono", "Tavolo", "Dettagli"]
HEADERS_OSPITI_VIP = ["Nome", "Titolo/Org.", "Telefono", "Tavolo", "Note"]


@dataclass
class Report:
    pdf: bytes
    filename: str
    titolo: str


def _data(valore):
    return format_value(valore) if valore else ""


# ============================================================================
# DATI
# ============================================================================


def tasks_evento(evento, categoria=None):
    tasks = (
        Task.objects.filter(evento=evento, is_active=True)
        .select_related("categoria", "assegnato_a")
        .order_by("scadenza", "titolo")
    )
    if categoria is not None:
        tasks = tasks.filter(categoria=categoria)
    return tasks


def checklist_evento(evento, categoria):
    return ChecklistItem.objects.filter(evento=evento, categoria=categoria, is_active=True).order_by(
        "scadenza", "titolo"
    )


def note_evento(evento, categoria):
    return evento.note.filter(categoria=categoria, is_active=True).order_by("created_at")


def riga_task_area(task):
    return [
        task.titolo,
        task.descrizione or "",
        task.categoria.nome,
        _data(task.scadenza),
        task.get_priorita_display(),
        "",
    ]


def riga_task(task):
    return [
        task.titolo,
        task.descrizione or "",
        task.get_stato_display(),
        _data(task.scadenza),
        task.get_priorita_display(),
        "",
    ]


def riga_checklist(item):
    return [item.titolo, item.descrizione or "", item.get_stato_display(), _data(item.scadenza), ""]


def paragrafi_note(note):
    return [f"- {nota.titolo}: {nota.contenuto}" for nota in note]


# ============================================================================
# OSPITI
# ============================================================================


def _titolo_org(ospite):
    return " / ".join(v for v in (ospite.titolo, ospite.organizzazione) if v)


def dettagli_ospite(ospite):
    """'Accoglienza: <da|Sì> | Arrivo: <data>' con le sole parti presenti."""
    parti = []
    if ospite.richiede_accoglienza:
        parti.append(f"Accoglienza: {ospite.accoglienza_da or 'Sì'}")
    if ospite.data_arrivo:
        parti.append(f"Arrivo: {format_value(ospite.data_arrivo)}")
    return " | ".join(parti)


def _tavolo(ospite):
    return str(ospite.numero_tavolo) if ospite.numero_tavolo is not None else ""


def sezioni_ospiti(report, evento):
    ospiti = list(evento.ospiti.filter(is_active=True).order_by("nome"))
    tutti = [[o.nome, _titolo_org(o), o.telefono, _tavolo(o), dettagli_ospite(o)] for o in ospiti]
    vip = [[o.nome, _titolo_org(o), o.telefono, _tavolo(o), o.note] for o in ospiti if o.vip]

    report.add_section(f"Lista ospiti (totale) ({len(tutti)})", table=(HEADERS_OSPITI, tutti))
    report.add_section(f"Lista ospiti (VIP) ({len(vip)})", table=(HEADERS_OSPITI_VIP, vip))


# ============================================================================
# TIPI DI REPORT
# ============================================================================


def _report_tutti(report, evento):
    gruppi = defaultdict(list)
    for task in tasks_evento(evento):
        nome = task.assegnato_a.nome_visualizzato if task.assegnato_a else NON_ASSEGNATO
        gruppi[nome].append(riga_task_area(task))

    for nome in sorted(gruppi, key=str.lower):
        righe = gruppi[nome]
        report.add_section(f"Utente: {nome} ({len(righe)})", table=(HEADERS_TASK_AREA, righe))


def _report_utente(report, evento, utente):
    righe = [riga_task_area(t) for t in tasks_evento(evento).filter(assegnato_a=utente)]
    report.add_section("Attività", table=(HEADERS_TASK_AREA, righe))


def _sezioni_area(report, evento, categoria, con_nome=False):
    suffisso = f": {categoria.nome}" if con_nome else ""
    report.add_section(
        f"Attività{suffisso}",
        table=(HEADERS_TASK, [riga_task(t) for t in tasks_evento(evento, categoria)]),
    )
    report.add_section(
        f"Checklist{suffisso}",
        table=(HEADERS_CHECKLIST, [riga_checklist(c) for c in checklist_evento(evento, categoria)]),
    )
    note = paragrafi_note(note_evento(evento, categoria))
    if note:
        report.add_section(f"Note{suffisso}", paragraphs=note)


def _report_responsabile(report, evento, responsabile):
    aree = Categoria.objects.filter(responsabile=responsabile, is_active=True).order_by("ordine", "nome")
    if not aree:
        report.add_section("Avviso", paragraphs=["Nessuna area assegnata."])
    for categoria in aree:
        _sezioni_area(report, evento, categoria, con_nome=True)


def genera_report(evento, tipo=ALL_BY_USER, utente=None, categoria=None, responsabile=None):
    """
    Genera un report.

    Args:
        evento: Evento
        tipo: uno di TIPI
        utente: User (tipo user)
        categoria: Categoria (tipo category)
        responsabile: User (tipo responsible)

    Returns:
        Report

    Raises:
        ValidationError: tipo sconosciuto o parametro mancante
    """
    sottotitolo = f"{evento.titolo} — {evento.data:%d/%m/%Y}"

    if tipo == ALL_BY_USER:
        titolo = "Report: tutte le attività (per utente)"
        filename = "report-tutte-attivita.pdf"
        report = PDFReport(titolo, subtitle=sottotitolo)
        _report_tutti(report, evento)
    elif tipo == USER:
        if utente is None:
            raise ValidationError("utente mancante")
        titolo = f"Report: attività di {utente.nome_visualizzato}"
        filename = "report-attivita-utente.pdf"
        report = PDFReport(titolo, subtitle=sottotitolo)
        _report_utente(report, evento, utente)
    elif tipo == CATEGORY:
        if categoria is None:
            raise ValidationError("categoria mancante")
        titolo = f"Report: area {categoria.nome}"
        filename = f"report-area-{categoria.slug}.pdf"
        report = PDFReport(titolo, subtitle=sottotitolo)
        _sezioni_area(report, evento, categoria)
    elif tipo == RESPONSIBLE:
        if responsabile is None:
            raise ValidationError("responsabile mancante")
        titolo = f"Report: responsabile {responsabile.nome_visualizzato}"
        filename = "report-responsabile.pdf"
        report = PDFReport(titolo, subtitle=sottotitolo)
        _report_responsabile(report, evento, responsabile)
    else:
        raise ValidationError(f"Tipo di report sconosciuto: {tipo}")

    sezioni_ospiti(report, evento)
    pdf = report.render()
    logger.info(f"Generato report {tipo} per evento {evento.pk} ({len(pdf)} byte)")
    return Report(pdf=pdf, filename=filename, titolo=titolo)
