from users.permissions import get_cached_allow_list

from .utils import eventi_accessibili, get_evento_corrente


def evento_corrente(request):
    """Evento corrente, eventi per lo switcher e allow list per il menu."""
    user = getattr(request, "user", None)
    if user is None or not user.is_authenticated:
        return {}
    return {
        "evento_corrente": get_evento_corrente(request),
        "eventi_switcher": eventi_accessibili(user).order_by("-data")[:20],
        "allow_list": get_cached_allow_list(request),
    }
