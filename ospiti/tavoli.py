"""
Piano tavoli.

Le operazioni che spostano più ospiti girano in una transazione; gli
ospiti VIP non vengono toccati dall'assegnazione casuale.
"""

import logging
import random
from collections import OrderedDict

from django.core.exceptions import ValidationError
from django.db import transaction

from core.pdf_generator import PDFReport

logger = logging.getLogger(__name__)


def _intero_positivo(valore, nome):
    try:
        numero = int(valore)
    except (TypeError, ValueError):
        raise ValidationError(f"{nome} deve essere un numero intero positivo")
    if numero <= 0:
        raise ValidationError(f"{nome} deve essere un numero intero positivo")
    return numero


def ospiti_evento(evento):
    return evento.ospiti.filter(is_active=True)


def assegna_tavoli_casuale(evento, num_tavoli, posti_per_tavolo, rng=None):
    """
    Distribuisce a caso gli ospiti non VIP sui tavoli.

    I primi num_tavoli * posti_per_tavolo ospiti mescolati vanno al tavolo
    indice // posti + 1; gli altri mantengono il tavolo attuale.

    Returns:
        dict: assegnati, vip_saltati, tavoli, posti
    """
    num_tavoli = _intero_positivo(num_tavoli, "Numero tavoli")
    posti_per_tavolo = _intero_positivo(posti_per_tavolo, "Posti per tavolo")
    rng = rng or random.Random()

    with transaction.atomic():
        ospiti = list(ospiti_evento(evento).select_for_update().order_by("nome"))
        vip = [o for o in ospiti if o.vip]
        altri = [o for o in ospiti if not o.vip]
        rng.shuffle(altri)

        capienza = num_tavoli * posti_per_tavolo
        for indice, ospite in enumerate(altri[:capienza]):
            ospite.numero_tavolo = indice // posti_per_tavolo + 1
            ospite.save(update_fields=["numero_tavolo", "updated_at"])

    assegnati = min(len(altri), capienza)
    logger.info(
        f"Evento {evento.pk}: {assegnati} ospiti assegnati a {num_tavoli} tavoli "
        f"da {posti_per_tavolo} posti ({len(vip)} VIP esclusi)"
    )
    return {
        "assegnati": assegnati,
        "vip_saltati": len(vip),
        "tavoli": num_tavoli,
        "posti": posti_per_tavolo,
    }


def scambia_tavoli(evento, tavolo_a, tavolo_b):
    """
    Scambia gli ospiti di due tavoli.

    Returns:
        dict: spostati_da_a (A -> B), spostati_da_b (B -> A)
    """
    tavolo_a = _intero_positivo(tavolo_a, "Tavolo A")
    tavolo_b = _intero_positivo(tavolo_b, "Tavolo B")
    if tavolo_a == tavolo_b:
        raise ValidationError("I due tavoli devono essere diversi")

    with transaction.atomic():
        qs = ospiti_evento(evento)
        ids_a = list(qs.filter(numero_tavolo=tavolo_a).values_list("pk", flat=True))
        ids_b = list(qs.filter(numero_tavolo=tavolo_b).values_list("pk", flat=True))
        qs.filter(pk__in=ids_a).update(numero_tavolo=tavolo_b)
        qs.filter(pk__in=ids_b).update(numero_tavolo=tavolo_a)

    logger.info(f"Evento {evento.pk}: scambiati tavoli {tavolo_a} e {tavolo_b}")
    return {"spostati_da_a": len(ids_a), "spostati_da_b": len(ids_b)}


def reset_tavoli(evento):
    """Toglie il tavolo a tutti gli ospiti. Restituisce quanti ne aveva uno."""
    aggiornati = ospiti_evento(evento).filter(numero_tavolo__isnull=False).update(numero_tavolo=None)
    logger.info(f"Evento {evento.pk}: reset tavoli ({aggiornati} ospiti)")
    return aggiornati


def assegna_tavolo(ospite, numero):
    """Assegna (o toglie con None/'') il tavolo di un singolo ospite."""
    if numero in (None, ""):
        ospite.numero_tavolo = None
    else:
        ospite.numero_tavolo = _intero_positivo(numero, "Tavolo")
    ospite.save(update_fields=["numero_tavolo", "updated_at"])
    return ospite.numero_tavolo


def raggruppa_per_tavolo(evento):
    """OrderedDict tavolo -> nomi, tavoli e nomi in ordine crescente."""
    gruppi = {}
    for numero, nome in (
        ospiti_evento(evento)
        .filter(numero_tavolo__isnull=False)
        .values_list("numero_tavolo", "nome")
    ):
        gruppi.setdefault(numero, []).append(nome)
    return OrderedDict(
        (numero, sorted(gruppi[numero], key=str.lower)) for numero in sorted(gruppi)
    )


def lista_tavoli_pdf(evento):
    """PDF "Liste tavoli": una sezione per tavolo."""
    report = PDFReport("Liste tavoli", subtitle=f"{evento.titolo} — {evento.data:%d/%m/%Y}")
    gruppi = raggruppa_per_tavolo(evento)
    if not gruppi:
        report.add_section("Tavoli", paragraphs=["Nessun ospite assegnato a un tavolo."])
    for numero, nomi in gruppi.items():
        report.add_section(
            f"Tavolo {numero} ({len(nomi)})",
            table=(["#", "Nome"], [[str(i), nome] for i, nome in enumerate(nomi, start=1)]),
        )
    return report.render()
