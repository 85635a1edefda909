"""
Celery tasks per app inviti.
"""

import logging

from celery import shared_task

from .models import Invito
from .services import invia_invito

logger = logging.getLogger(__name__)


@shared_task
def invia_inviti_task(invito_ids, base_url=None):
    """
    Invia un blocco di inviti.

    Gli errori di un singolo invio restano registrati sull'invito e non
    interrompono il blocco.

    Args:
        invito_ids: lista di pk (stringhe)
        base_url: base assoluta dei link (default SITE_URL)

    Returns:
        dict: {'inviati': n, 'errori': n}
    """
    inviati = 0
    errori = 0
    inviti = Invito.objects.filter(pk__in=invito_ids, is_active=True).select_related("ospite", "evento")
    for invito in inviti:
        esito = invia_invito(invito, base_url=base_url)
        if esito["success"]:
            inviati += 1
        else:
            errori += 1

    logger.info(f"Invio inviti completato: {inviati} inviati, {errori} errori")
    return {"inviati": inviati, "errori": errori}
