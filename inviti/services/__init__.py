"""
Inviti Services Package
"""

from .email_service import InvitiEmailService
from .inviti import (
    accetta,
    accetta_per_conto,
    annulla_risposte,
    crea_invito,
    email_ospite,
    invia_invito,
    renderizza,
    rifiuta,
    rigenera_qr,
    scegli_modello,
    traccia_apertura,
)
from .qr_pdf import invia_qr_pdf, qr_pdf

__all__ = [
    "InvitiEmailService",
    "accetta",
    "accetta_per_conto",
    "annulla_risposte",
    "crea_invito",
    "email_ospite",
    "invia_invito",
    "invia_qr_pdf",
    "qr_pdf",
    "renderizza",
    "rifiuta",
    "rigenera_qr",
    "scegli_modello",
    "traccia_apertura",
]
