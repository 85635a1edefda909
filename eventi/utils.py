"""
Evento corrente in sessione.

La maggior parte delle pagine (ospiti, attività, inviti, galleria) lavora
sull'evento selezionato nello switcher, salvato in sessione.
"""

import logging

from django.db.models import Q
from django.core.exceptions import PermissionDenied
from django.http import Http404

from users.permissions import can_access_event, is_admin

from .models import Evento

logger = logging.getLogger(__name__)

SESSION_KEY = "evento_corrente_id"


def eventi_accessibili(user):
    """QuerySet degli eventi attivi visibili all'utente."""
    if not user or not user.is_authenticated:
        return Evento.objects.none()
    qs = Evento.objects.filter(is_active=True)
    if is_admin(user):
        return qs
    return qs.filter(Q(proprietario=user) | Q(membri=user)).distinct()


def get_evento_corrente(request):
    """
    Evento corrente della sessione.

    Se la sessione non ne ha uno valido si usa l'evento accessibile più
    recente (che viene salvato in sessione). None se non ce ne sono.
    """
    cached = getattr(request, "_evento_corrente", None)
    if cached is not None:
        return cached

    user = request.user
    evento = None
    evento_id = request.session.get(SESSION_KEY)
    if evento_id:
        evento = Evento.objects.filter(pk=evento_id, is_active=True).first()
        if evento is not None and not can_access_event(user, evento):
            evento = None

    if evento is None:
        evento = eventi_accessibili(user).order_by("-data", "-created_at").first()
        if evento is not None:
            request.session[SESSION_KEY] = str(evento.pk)
        else:
            request.session.pop(SESSION_KEY, None)

    request._evento_corrente = evento
    return evento


def imposta_evento_corrente(request, evento):
    """Salva l'evento in sessione dopo aver verificato l'accesso."""
    if not can_access_event(request.user, evento):
        logger.warning(
            f"Utente {request.user.pk} ha tentato di selezionare l'evento {evento.pk} senza accesso"
        )
        return False
    request.session[SESSION_KEY] = str(evento.pk)
    request._evento_corrente = evento
    return True


def richiedi_evento_corrente(request):
    """Come get_evento_corrente ma 404 se non c'è alcun evento."""
    evento = get_evento_corrente(request)
    if evento is None:
        raise Http404("Nessun evento selezionato")
    return evento


def verifica_accesso_evento(user, evento):
    """PermissionDenied se l'utente non può accedere all'evento."""
    if not can_access_event(user, evento):
        raise PermissionDenied("Non hai accesso a questo evento")


def verifica_gestione_evento(user, evento):
    """Solo proprietario o admin possono modificare l'evento."""
    if not (is_admin(user) or evento.proprietario_id == user.pk):
        raise PermissionDenied("Solo il proprietario può modificare l'evento")
