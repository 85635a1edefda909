"""
Registrazione audit log.

Usage:
    from core.audit import registra_audit

    registra_audit(
        request, "UPDATE", "Task",
        id_entita=task.pk, evento=task.evento,
        descrizione=f"Task '{task.titolo}' aggiornato",
    )

La scrittura dell'audit non deve mai interrompere l'operazione che la
richiede: gli errori vengono solo loggati.
"""

import logging

from django.db import DatabaseError, transaction

logger = logging.getLogger(__name__)


def get_client_ip(request):
    """
    Restituisce l'IP del client.

    Ordine: primo valore di X-Forwarded-For, X-Real-IP, CF-Connecting-IP,
    infine REMOTE_ADDR.
    """
    if request is None:
        return ""

    forwarded = request.META.get("HTTP_X_FORWARDED_FOR", "")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first

    for header in ("HTTP_X_REAL_IP", "HTTP_CF_CONNECTING_IP", "REMOTE_ADDR"):
        value = request.META.get(header, "").strip()
        if value:
            return value
    return ""


def registra_audit(
    request,
    azione,
    tipo_entita,
    id_entita="",
    evento=None,
    categoria="",
    descrizione="",
    valori_precedenti=None,
    valori_nuovi=None,
    metadata=None,
    utente=None,
):
    """
    Crea una voce AuditLog.

    Args:
        request: HttpRequest corrente (può essere None, es. nei task Celery)
        azione: una delle AuditLog.AZIONE_CHOICES
        tipo_entita: nome dell'entità ("Ospite", "Task", ...)
        id_entita: pk dell'entità
        evento: Evento di riferimento (opzionale)
        utente: utente esplicito, altrimenti request.user

    Returns:
        AuditLog creato, oppure None se la scrittura fallisce
    """
    from .models import AuditLog

    if utente is None and request is not None:
        user = getattr(request, "user", None)
        if user is not None and user.is_authenticated:
            utente = user

    try:
        with transaction.atomic():
            return AuditLog.objects.create(
                utente=utente,
                email_utente=(utente.email or "") if utente else "",
                azione=azione,
                tipo_entita=tipo_entita,
                id_entita=str(id_entita) if id_entita else "",
                evento=evento,
                categoria=categoria or "",
                descrizione=descrizione or "",
                valori_precedenti=valori_precedenti,
                valori_nuovi=valori_nuovi,
                indirizzo_ip=get_client_ip(request),
                user_agent=request.META.get("HTTP_USER_AGENT", "") if request else "",
                url=request.get_full_path()[:500] if request else "",
                metadata=metadata or {},
            )
    except (DatabaseError, TypeError, ValueError) as e:
        logger.error(f"Errore scrittura audit log ({azione} {tipo_entita}): {e}")
        return None
