"""
Permessi di pagina e di area.

Un utente può usare una pagina (inviti, check-in, report, ...) o un'area
(Categoria) se:
- è admin (ruolo admin o superuser): tutto
- altrimenti: pagine/aree della sua edizione non scaduta, modificate
  dagli override PermessoPagina / PermessoCategoria

Usage:
    @login_required
    @pagina_richiesta("report")
    def report_view(request): ...

    class TavoliView(PaginaRichiestaMixin, TemplateView):
        pagina_richiesta = "tavoli"
"""

from dataclasses import dataclass
from functools import wraps

from django.contrib.auth.mixins import AccessMixin
from django.core.exceptions import PermissionDenied

PAGINE = [
    ("inviti", "Inviti"),
    ("checkin", "Check-in"),
    ("report", "Report"),
    ("audit_log", "Audit log"),
    ("badge", "Badge VIP"),
    ("tavoli", "Piano tavoli"),
    ("galleria", "Foto e video"),
    ("ospiti", "Lista ospiti"),
    ("programma", "Programma"),
]
PAGINE_IDS = [pagina for pagina, _ in PAGINE]


@dataclass(frozen=True)
class AllowList:
    pagine: frozenset
    categorie: frozenset
    is_admin: bool = False

    def consente_pagina(self, pagina):
        return self.is_admin or pagina in self.pagine

    def consente_categoria(self, slug):
        return self.is_admin or slug in self.categorie


ALLOW_LIST_VUOTA = AllowList(pagine=frozenset(), categorie=frozenset())


def is_admin(user):
    return bool(user and user.is_authenticated and user.is_amministratore)


def get_allow_list(user):
    """
    Calcola pagine e aree consentite all'utente.

    Returns:
        AllowList
    """
    from eventi.models import Categoria

    if not user or not user.is_authenticated:
        return ALLOW_LIST_VUOTA

    if is_admin(user):
        return AllowList(
            pagine=frozenset(PAGINE_IDS),
            categorie=frozenset(
                Categoria.objects.filter(attiva=True).values_list("slug", flat=True)
            ),
            is_admin=True,
        )

    pagine = set()
    categorie = set()

    if user.edizione_attiva():
        edizione = user.edizione
        pagine.update(p for p in (edizione.pagine or []) if p in PAGINE_IDS)
        categorie.update(
            edizione.categorie.filter(attiva=True).values_list("slug", flat=True)
        )

    for permesso in user.permessi_pagina.all():
        if permesso.consentito:
            pagine.add(permesso.pagina)
        else:
            pagine.discard(permesso.pagina)

    for permesso in user.permessi_categoria.select_related("categoria"):
        if permesso.consentito:
            categorie.add(permesso.categoria.slug)
        else:
            categorie.discard(permesso.categoria.slug)

    return AllowList(pagine=frozenset(pagine), categorie=frozenset(categorie))


def get_cached_allow_list(request):
    """AllowList memorizzata sulla request per la durata della richiesta."""
    allow_list = getattr(request, "_allow_list", None)
    if allow_list is None:
        allow_list = get_allow_list(request.user)
        request._allow_list = allow_list
    return allow_list


def can_access_event(user, evento):
    """Admin, proprietario o membro dell'evento."""
    if not user or not user.is_authenticated or evento is None:
        return False
    if is_admin(user):
        return True
    if evento.proprietario_id == user.pk:
        return True
    return evento.membri.filter(pk=user.pk).exists()


# ============================================================================
# DECORATOR / MIXIN
# ============================================================================


def pagina_richiesta(pagina):
    """
    Decorator per FBV: 403 se la pagina non è nella allow list.

    Va usato dopo @login_required.
    """

    def decorator(view_func):
        @wraps(view_func)
        def _wrapped(request, *args, **kwargs):
            if not get_cached_allow_list(request).consente_pagina(pagina):
                raise PermissionDenied(f"Pagina '{pagina}' non consentita")
            return view_func(request, *args, **kwargs)

        return _wrapped

    return decorator


def admin_richiesto(view_func):
    """Decorator per FBV riservate agli amministratori."""

    @wraps(view_func)
    def _wrapped(request, *args, **kwargs):
        if not is_admin(request.user):
            raise PermissionDenied("Funzione riservata agli amministratori")
        return view_func(request, *args, **kwargs)

    return _wrapped


class PaginaRichiestaMixin(AccessMixin):
    """
    Mixin per CBV: anonimi al login, 403 se la pagina non è consentita.
    """

    pagina_richiesta = None

    def dispatch(self, request, *args, **kwargs):
        if not request.user.is_authenticated:
            return self.handle_no_permission()
        if self.pagina_richiesta and not get_cached_allow_list(request).consente_pagina(
            self.pagina_richiesta
        ):
            raise PermissionDenied(f"Pagina '{self.pagina_richiesta}' non consentita")
        return super().dispatch(request, *args, **kwargs)
