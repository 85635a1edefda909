"""
Check-in ospiti tramite token (QR code) o conferma manuale.

Un token può appartenere a un ospite o a un accompagnatore: si cerca
prima tra gli ospiti. Il link pubblico dell'evento (senza login) mostra
gli ospiti confermati e permette di segnarne la presenza.
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional

from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone

from core.pdf_generator import PDFReport, format_value
from eventi.models import Evento

from .categorie import categoria_grezza
from .models import Accompagnatore, Ospite

logger = logging.getLogger(__name__)

TIPO_OSPITE = "ospite"
TIPO_ACCOMPAGNATORE = "accompagnatore"


@dataclass
class RisultatoCheckin:
    tipo: str
    nome: str
    evento: Any
    oggetto: Any

    def as_dict(self):
        return {
            "success": True,
            "tipo": self.tipo,
            "nome": self.nome,
            "evento": self.evento.titolo,
        }


def segna_presente(ospite, quando=None):
    quando = quando or timezone.now()
    dati = dict(ospite.dati_aggiuntivi or {})
    dati["Presente"] = True
    dati["Presente il"] = quando.isoformat()
    ospite.dati_aggiuntivi = dati
    ospite.stato = Ospite.ATTENDED
    ospite.save(update_fields=["dati_aggiuntivi", "stato", "updated_at"])


def annulla_presenza(ospite):
    """Toglie la presenza; l'ospite torna confermato."""
    dati = dict(ospite.dati_aggiuntivi or {})
    dati["Presente"] = False
    dati.pop("Presente il", None)
    ospite.dati_aggiuntivi = dati
    if ospite.stato == Ospite.ATTENDED:
        ospite.stato = Ospite.CONFIRMED
    ospite.save(update_fields=["dati_aggiuntivi", "stato", "updated_at"])


@transaction.atomic
def esegui_checkin(token, evento=None) -> Optional[RisultatoCheckin]:
    """
    Registra l'arrivo del titolare del token.

    Args:
        token: token di check-in
        evento: se indicato, il token deve appartenere a questo evento

    Returns:
        RisultatoCheckin, oppure None se il token non esiste

    Raises:
        ValidationError: token vuoto
    """
    token = (token or "").strip()
    if not token:
        raise ValidationError("Token mancante")

    ospiti = Ospite.objects.select_for_update().filter(token_checkin=token, is_active=True)
    if evento is not None:
        ospiti = ospiti.filter(evento=evento)
    ospite = ospiti.select_related("evento").first()
    if ospite is not None:
        segna_presente(ospite)
        logger.info(f"Check-in ospite {ospite.pk} ({ospite.nome})")
        return RisultatoCheckin(TIPO_OSPITE, ospite.nome, ospite.evento, ospite)

    accompagnatori = Accompagnatore.objects.filter(token_checkin=token, is_active=True)
    if evento is not None:
        accompagnatori = accompagnatori.filter(invito__evento=evento)
    accompagnatore = accompagnatori.select_related("invito__evento").first()
    if accompagnatore is not None:
        accompagnatore.arrivato_il = timezone.now()
        accompagnatore.save(update_fields=["arrivato_il", "updated_at"])
        logger.info(f"Check-in accompagnatore {accompagnatore.pk} ({accompagnatore.nome_completo})")
        return RisultatoCheckin(
            TIPO_ACCOMPAGNATORE,
            accompagnatore.nome_completo,
            accompagnatore.invito.evento,
            accompagnatore,
        )

    logger.warning(f"Check-in con token sconosciuto {token[:8]}...")
    return None


# ============================================================================
# CHECK-IN PUBBLICO
# ============================================================================


def evento_da_token_pubblico(token):
    """Evento del link di check-in pubblico, None se il token non è valido."""
    token = (token or "").strip()
    if not token:
        return None
    return Evento.objects.filter(token_checkin_pubblico=token, is_active=True).first()


def riga_pubblica(ospite):
    return {
        "id": str(ospite.pk),
        "nome": ospite.nome,
        "organizzazione": ospite.organizzazione,
        "tavolo": ospite.numero_tavolo,
        "categoria": categoria_grezza(ospite.dati_aggiuntivi),
        "vip": ospite.vip,
        "presente": ospite.presente,
    }


def ospiti_confermati(evento, testo="", solo_vip=False):
    """
    Ospiti confermati o già presenti, per la lista all'ingresso.

    testo cerca in nome, organizzazione, tavolo e categoria.
    """
    ospiti = evento.ospiti.filter(
        is_active=True, stato__in=[Ospite.CONFIRMED, Ospite.ATTENDED]
    ).order_by("nome")
    righe = [riga_pubblica(o) for o in ospiti]
    if solo_vip:
        righe = [r for r in righe if r["vip"]]

    testo = (testo or "").strip().lower()
    if testo:
        righe = [
            r
            for r in righe
            if any(
                testo in str(r[campo] or "").lower()
                for campo in ("nome", "organizzazione", "tavolo", "categoria")
            )
        ]
    return righe


@transaction.atomic
def cambia_presenza(evento, ospite_id):
    """
    Inverte la presenza di un ospite confermato dell'evento.

    Returns:
        Ospite, oppure None se l'ospite non è nella lista
    """
    ospite = (
        Ospite.objects.select_for_update()
        .filter(
            pk=ospite_id,
            evento=evento,
            is_active=True,
            stato__in=[Ospite.CONFIRMED, Ospite.ATTENDED],
        )
        .first()
    )
    if ospite is None:
        return None
    if ospite.presente:
        annulla_presenza(ospite)
    else:
        segna_presente(ospite)
    return ospite


def presenze_pdf(evento):
    """PDF con la lista presenze dell'evento (ospiti e accompagnatori)."""
    ospiti = evento.ospiti.filter(is_active=True).order_by("nome")
    presenti = [o for o in ospiti if o.presente]

    report = PDFReport(
        "Lista presenze",
        subtitle=f"{evento.titolo} — {evento.data:%d/%m/%Y} ({len(presenti)}/{len(ospiti)} presenti)",
    )
    report.add_section(
        f"Ospiti ({len(ospiti)})",
        table=(
            ["Nome", "Organizzazione", "Tavolo", "Presente", "Check-in"],
            [
                [
                    o.nome,
                    o.organizzazione,
                    o.numero_tavolo or "",
                    "Sì" if o.presente else "No",
                    (o.dati_aggiuntivi or {}).get("Presente il", ""),
                ]
                for o in ospiti
            ],
        ),
    )

    accompagnatori = Accompagnatore.objects.filter(
        invito__evento=evento, is_active=True
    ).select_related("invito__ospite")
    if accompagnatori:
        report.add_section(
            f"Accompagnatori ({len(accompagnatori)})",
            table=(
                ["Nome", "Ospite", "E-mail", "Arrivato il"],
                [
                    [
                        a.nome_completo,
                        a.invito.ospite.nome,
                        a.email,
                        format_value(a.arrivato_il) if a.arrivato_il else "",
                    ]
                    for a in accompagnatori
                ],
            ),
        )
    return report.render()
