"""
Colonne della lista ospiti.

Le colonne standard corrispondono ai campi del model Ospite; le altre
sono le chiavi di dati_aggiuntivi trovate negli ospiti dell'evento.
L'evento memorizza l'ordine scelto (ordine_colonne_ospiti) e le colonne
nascoste (colonne_nascoste).
"""

import logging

from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone

logger = logging.getLogger(__name__)

COL_NOME = "Nome"
COL_ORGANIZZAZIONE = "Organizzazione"
COL_FUNZIONE = "Funzione"
COL_EMAIL = "E-mail"
COL_STATO = "Stato"
COL_TAVOLO = "Tavolo"
COL_PRESENTE = "Presente"
COL_ACCOGLIENZA = "Accoglienza VIP"
COL_ACCOMPAGNATORE = "Accompagnatore VIP"
COL_ARRIVO = "Arrivo VIP"
COL_NOTA = "Nota"

COLONNE_STANDARD = [
    COL_NOME,
    COL_ORGANIZZAZIONE,
    COL_FUNZIONE,
    COL_EMAIL,
    COL_STATO,
    COL_TAVOLO,
    COL_PRESENTE,
    COL_ACCOGLIENZA,
    COL_ACCOMPAGNATORE,
    COL_ARRIVO,
    COL_NOTA,
]
COLONNE_BOOLEANE = {COL_PRESENTE, COL_ACCOGLIENZA}

VALORI_SI = {"sì", "si", "yes", "ja", "true", "1"}
VALORI_NO = {"no", "nein", "false", "0"}


# ============================================================================
# SCOPERTA E ORDINAMENTO
# ============================================================================


def scopri_colonne(ospiti):
    """
    Colonne standard seguite dalle chiavi di dati_aggiuntivi nell'ordine
    in cui compaiono. Chiavi vuote o uguali a una colonna standard sono
    ignorate.
    """
    colonne = list(COLONNE_STANDARD)
    viste = set(colonne)
    for ospite in ospiti:
        for chiave in (ospite.dati_aggiuntivi or {}).keys():
            if not chiave or not str(chiave).strip() or chiave in viste:
                continue
            viste.add(chiave)
            colonne.append(chiave)
    return colonne


def ordina_colonne(colonne, ordine_salvato=None, nascoste=None):
    """
    Applica l'ordine salvato e rimuove le colonne nascoste.

    Le voci salvate che non esistono più vengono scartate, le colonne
    nuove finiscono in coda.
    """
    disponibili = set(colonne)
    ordinate = []
    for colonna in ordine_salvato or []:
        if colonna in disponibili and colonna not in ordinate:
            ordinate.append(colonna)
    ordinate.extend(c for c in colonne if c not in ordinate)

    nascoste = set(nascoste or [])
    return [c for c in ordinate if c not in nascoste]


def colonne_evento(evento, ospiti):
    """
    Returns:
        tuple: (tutte le colonne scoperte, colonne visibili ordinate)
    """
    tutte = scopri_colonne(ospiti)
    visibili = ordina_colonne(tutte, evento.ordine_colonne_ospiti, evento.colonne_nascoste)
    return tutte, visibili


def salva_preferenze_colonne(evento, ordine, nascoste):
    """Salva ordine e colonne nascoste. La colonna Nome resta sempre visibile."""
    evento.ordine_colonne_ospiti = [c for c in ordine if c]
    evento.colonne_nascoste = [c for c in nascoste if c and c != COL_NOME]
    evento.save(update_fields=["ordine_colonne_ospiti", "colonne_nascoste", "updated_at"])


# ============================================================================
# VALORI
# ============================================================================


def _si_no(valore):
    return "Sì" if valore else "No"


def _data(valore):
    if not valore:
        return ""
    if timezone.is_aware(valore):
        valore = timezone.localtime(valore)
    return valore.strftime("%d/%m/%Y %H:%M")


def valore_cella(ospite, colonna):
    """Valore testuale di una cella della lista."""
    if colonna == COL_NOME:
        return ospite.nome
    if colonna == COL_ORGANIZZAZIONE:
        return ospite.organizzazione
    if colonna == COL_FUNZIONE:
        return ospite.titolo
    if colonna == COL_EMAIL:
        return ospite.email
    if colonna == COL_STATO:
        return ospite.get_stato_display()
    if colonna == COL_TAVOLO:
        return str(ospite.numero_tavolo) if ospite.numero_tavolo else ""
    if colonna == COL_PRESENTE:
        return _si_no(ospite.presente)
    if colonna == COL_ACCOGLIENZA:
        return _si_no(ospite.richiede_accoglienza)
    if colonna == COL_ACCOMPAGNATORE:
        return ospite.accoglienza_da
    if colonna == COL_ARRIVO:
        return _data(ospite.data_arrivo)
    if colonna == COL_NOTA:
        return ospite.note

    valore = (ospite.dati_aggiuntivi or {}).get(colonna)
    if valore is None:
        return ""
    if isinstance(valore, bool):
        return _si_no(valore)
    return str(valore)


def righe(ospiti, colonne):
    """[(ospite, [valori nell'ordine delle colonne]), ...] per il template."""
    return [(ospite, [valore_cella(ospite, c) for c in colonne]) for ospite in ospiti]


# ============================================================================
# RICERCA E FILTRI
# ============================================================================


def cerca(ospiti, testo):
    """Ricerca case-insensitive su nome, e-mail, funzione, organizzazione e dati aggiuntivi."""
    testo = (testo or "").strip().lower()
    if not testo:
        return list(ospiti)

    risultati = []
    for ospite in ospiti:
        campi = [ospite.nome, ospite.email, ospite.titolo, ospite.organizzazione]
        campi.extend(str(v) for v in (ospite.dati_aggiuntivi or {}).values() if v is not None)
        if any(testo in (c or "").lower() for c in campi):
            risultati.append(ospite)
    return risultati


def _passa_filtro(ospite, colonna, filtro):
    if colonna in COLONNE_BOOLEANE:
        valore = valore_cella(ospite, colonna)
        if filtro in VALORI_SI:
            return valore == "Sì"
        if filtro in VALORI_NO:
            return valore == "No"
        return filtro in valore.lower()

    if colonna not in COLONNE_STANDARD and colonna not in (ospite.dati_aggiuntivi or {}):
        return True

    return filtro in valore_cella(ospite, colonna).lower()


def filtra(ospiti, filtri):
    """
    Filtri per colonna (sottostringa case-insensitive).

    Args:
        filtri: dict colonna -> testo; i testi vuoti sono ignorati
    """
    attivi = {c: f.strip().lower() for c, f in (filtri or {}).items() if f and f.strip()}
    if not attivi:
        return list(ospiti)
    return [
        o for o in ospiti if all(_passa_filtro(o, c, f) for c, f in attivi.items())
    ]


# ============================================================================
# ELIMINAZIONE COLONNA
# ============================================================================


@transaction.atomic
def elimina_colonna(evento, colonna):
    """
    Rimuove una colonna aggiuntiva da tutti gli ospiti dell'evento.

    Returns:
        int: numero di ospiti aggiornati

    Raises:
        ValidationError: se la colonna è standard
    """
    if colonna in COLONNE_STANDARD:
        raise ValidationError(f"La colonna '{colonna}' è standard e non può essere eliminata")

    aggiornati = 0
    for ospite in evento.ospiti.select_for_update():
        dati = ospite.dati_aggiuntivi or {}
        if colonna in dati:
            dati.pop(colonna)
            ospite.dati_aggiuntivi = dati
            ospite.save(update_fields=["dati_aggiuntivi", "updated_at"])
            aggiornati += 1

    if colonna in (evento.ordine_colonne_ospiti or []) or colonna in (evento.colonne_nascoste or []):
        evento.ordine_colonne_ospiti = [c for c in evento.ordine_colonne_ospiti if c != colonna]
        evento.colonne_nascoste = [c for c in evento.colonne_nascoste if c != colonna]
        evento.save(update_fields=["ordine_colonne_ospiti", "colonne_nascoste", "updated_at"])

    logger.info(f"Colonna '{colonna}' eliminata da {aggiornati} ospiti dell'evento {evento.pk}")
    return aggiornati
