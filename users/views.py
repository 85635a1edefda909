"""
Views per l'app users.
"""

import logging

from django.contrib import messages
from django.contrib.auth import login, logout
from django.contrib.auth.decorators import login_required
from django.core.paginator import Paginator
from django.db.models import Count, Q
from django.shortcuts import get_object_or_404, redirect, render
from django.utils import timezone
from django.utils.http import url_has_allowed_host_and_scheme
from django.views.decorators.http import require_http_methods

from core.audit import registra_audit
from eventi.utils import get_evento_corrente

from .forms import LoginForm, UserCreateForm, UserProfiloForm, UserUpdateForm
from .forms_permissions import UserPermissionsForm
from .models import User
from .permissions import admin_richiesto, get_cached_allow_list

logger = logging.getLogger(__name__)

REMEMBER_ME_SECONDS = 60 * 60 * 24 * 30


# ============================================================================
# AUTENTICAZIONE
# ============================================================================


@require_http_methods(["GET", "POST"])
def login_view(request):
    """
    Vista login.

    - GET: mostra form login
    - POST: autentica e redirect a next o dashboard

    Remember me: sessione di 30 giorni, altrimenti scade alla chiusura del browser.
    """
    if request.user.is_authenticated:
        return redirect("dashboard")

    if request.method == "POST":
        form = LoginForm(request, data=request.POST)

        if form.is_valid():
            user = form.get_user()
            login(request, user)

            if form.cleaned_data.get("remember_me"):
                request.session.set_expiry(REMEMBER_ME_SECONDS)
            else:
                request.session.set_expiry(0)

            registra_audit(request, "LOGIN", "User", id_entita=user.pk, descrizione="Login")
            messages.success(request, f"Benvenuto, {user.nome_visualizzato}!")

            next_url = request.POST.get("next") or request.GET.get("next")
            if next_url and url_has_allowed_host_and_scheme(
                next_url, allowed_hosts={request.get_host()}
            ):
                return redirect(next_url)
            return redirect("dashboard")

        logger.warning(f"Login fallito per username '{request.POST.get('username', '')}'")
        messages.error(request, "Credenziali non valide. Riprova.")
    else:
        form = LoginForm()

    return render(request, "login.html", {"form": form, "next": request.GET.get("next", "")})


@require_http_methods(["GET", "POST"])
def logout_view(request):
    """Logout (registrato nell'audit log prima di chiudere la sessione)."""
    if request.user.is_authenticated:
        registra_audit(request, "LOGOUT", "User", id_entita=request.user.pk, descrizione="Logout")
    logout(request)
    messages.info(request, "Logout effettuato con successo.")
    return redirect("users:login")


# ============================================================================
# DASHBOARD
# ============================================================================


@login_required
def dashboard_view(request):
    """
    Dashboard dell'evento corrente.

    Visualizza:
    - Ospiti totali e confermati
    - Task aperti e completati, checklist aperte
    - Prossime scadenze
    - Aree consentite all'utente
    """
    from attivita.models import ChecklistItem, Task
    from ospiti.models import Ospite

    evento = get_evento_corrente(request)
    allow_list = get_cached_allow_list(request)
    stats = {}
    prossime_scadenze = []

    if evento is not None:
        ospiti = Ospite.objects.filter(evento=evento, is_active=True).aggregate(
            totale=Count("id"),
            confermati=Count("id", filter=Q(stato__in=[Ospite.CONFIRMED, Ospite.ATTENDED])),
            presenti=Count("id", filter=Q(stato=Ospite.ATTENDED)),
        )
        tasks = Task.objects.filter(evento=evento, is_active=True)
        aperti = tasks.filter(stato__in=[Task.PENDING, Task.IN_PROGRESS])
        stats = {
            "ospiti_totali": ospiti["totale"],
            "ospiti_confermati": ospiti["confermati"],
            "ospiti_presenti": ospiti["presenti"],
            "task_aperti": aperti.count(),
            "task_completati": tasks.filter(stato=Task.COMPLETED).count(),
            "checklist_aperte": ChecklistItem.objects.filter(evento=evento, is_active=True)
            .exclude(stato=ChecklistItem.COMPLETED)
            .count(),
        }
        prossime_scadenze = (
            aperti.filter(scadenza__gte=timezone.localdate())
            .select_related("categoria", "assegnato_a")
            .order_by("scadenza")[:5]
        )

    from eventi.models import Categoria

    categorie = Categoria.objects.filter(is_active=True, attiva=True)
    if not allow_list.is_admin:
        categorie = categorie.filter(slug__in=allow_list.categorie)

    context = {
        "evento": evento,
        "stats": stats,
        "prossime_scadenze": prossime_scadenze,
        "categorie": categorie,
        "today": timezone.localdate(),
    }
    return render(request, "dashboard.html", context)


# ============================================================================
# CRUD USERS (solo admin)
# ============================================================================


@login_required
@admin_richiesto
def user_list_view(request):
    """
    Lista utenti con filtri e paginazione.

    Filtri:
    - Ruolo
    - Edizione
    - Ricerca testuale (username, nome, e-mail)
    """
    users = User.objects.select_related("edizione").order_by("-date_joined")

    ruolo = request.GET.get("ruolo")
    if ruolo:
        users = users.filter(ruolo=ruolo)

    edizione = request.GET.get("edizione")
    if edizione:
        users = users.filter(edizione_id=edizione)

    q = request.GET.get("q")
    if q:
        users = users.filter(
            Q(username__icontains=q)
            | Q(first_name__icontains=q)
            | Q(last_name__icontains=q)
            | Q(email__icontains=q)
        )

    paginator = Paginator(users, 25)
    users_page = paginator.get_page(request.GET.get("page"))

    context = {
        "users": users_page,
        "total": paginator.count,
        "ruoli": User.RUOLO_CHOICES,
    }
    return render(request, "users/user_list.html", context)


@login_required
@admin_richiesto
@require_http_methods(["GET", "POST"])
def user_create_view(request):
    if request.method == "POST":
        form = UserCreateForm(request.POST)

        if form.is_valid():
            user = form.save()
            registra_audit(
                request,
                "CREATE",
                "User",
                id_entita=user.pk,
                descrizione=f"Utente {user.username} creato",
                valori_nuovi={"username": user.username, "ruolo": user.ruolo},
            )
            messages.success(request, f"Utente {user.username} creato con successo!")
            return redirect("users:user_list")
        messages.error(request, "Errore nella creazione dell'utente. Controlla i campi.")
    else:
        form = UserCreateForm()

    return render(request, "users/user_form.html", {"form": form, "title": "Nuovo utente"})


@login_required
@admin_richiesto
@require_http_methods(["GET", "POST"])
def user_update_view(request, pk):
    user_obj = get_object_or_404(User, pk=pk)

    if request.method == "POST":
        form = UserUpdateForm(request.POST, instance=user_obj)

        if form.is_valid():
            precedenti = {field: str(form.initial.get(field)) for field in form.changed_data}
            user_obj = form.save()
            registra_audit(
                request,
                "UPDATE",
                "User",
                id_entita=user_obj.pk,
                descrizione=f"Utente {user_obj.username} modificato",
                valori_precedenti=precedenti,
                valori_nuovi={
                    field: str(form.cleaned_data.get(field)) for field in form.changed_data
                },
            )
            messages.success(request, f"Utente {user_obj.username} aggiornato.")
            return redirect("users:user_list")
        messages.error(request, "Errore nel salvataggio. Controlla i campi.")
    else:
        form = UserUpdateForm(instance=user_obj)

    context = {
        "form": form,
        "user_obj": user_obj,
        "title": f"Modifica {user_obj.nome_visualizzato}",
    }
    return render(request, "users/user_form.html", context)


@login_required
@admin_richiesto
@require_http_methods(["GET", "POST"])
def user_permissions_manage_view(request, pk):
    """
    Override di pagine e aree per un utente.

    Le scelte "Da edizione" eliminano l'override, le altre lo creano o
    aggiornano.
    """
    user_obj = get_object_or_404(User, pk=pk)

    if request.method == "POST":
        form = UserPermissionsForm(request.POST, user_obj=user_obj)

        if form.is_valid():
            totale = form.save()
            registra_audit(
                request,
                "UPDATE",
                "PermessiUtente",
                id_entita=user_obj.pk,
                descrizione=f"Permessi di {user_obj.username} aggiornati ({totale} override)",
                valori_nuovi={k: v for k, v in form.cleaned_data.items() if v},
            )
            messages.success(request, f"Permessi di {user_obj.nome_visualizzato} aggiornati.")
            return redirect("users:user_list")
        messages.error(request, "Errore nella validazione form. Verifica i campi.")
    else:
        form = UserPermissionsForm(user_obj=user_obj)

    context = {
        "form": form,
        "user_obj": user_obj,
        "title": f"Permessi - {user_obj.nome_visualizzato}",
    }
    return render(request, "users/user_permissions_form.html", context)


# ============================================================================
# PROFILO
# ============================================================================


@login_required
@require_http_methods(["GET", "POST"])
def profilo_view(request):
    """Visualizza e modifica il profilo dell'utente corrente."""
    if request.method == "POST":
        form = UserProfiloForm(request.POST, instance=request.user)
        if form.is_valid():
            form.save()
            messages.success(request, "Profilo aggiornato con successo!")
            return redirect("users:profilo")
    else:
        form = UserProfiloForm(instance=request.user)

    context = {
        "form": form,
        "allow_list": get_cached_allow_list(request),
    }
    return render(request, "users/profilo.html", context)
