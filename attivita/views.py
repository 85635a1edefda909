"""
Views per app attivita.

Tutte le pagine lavorano sull'evento corrente e su un'area (/attivita/<slug>/)
che deve essere nella allow list dell'utente.
"""

import json
import logging

from django.contrib import messages
from django.contrib.auth.decorators import login_required
from django.core.exceptions import PermissionDenied
from django.http import JsonResponse
from django.shortcuts import get_object_or_404, redirect, render
from django.views.decorators.http import require_http_methods

from core.audit import registra_audit
from eventi.models import Categoria
from eventi.utils import richiedi_evento_corrente
from users.permissions import get_cached_allow_list

from .forms import ChecklistItemForm, TaskForm
from .models import ChecklistItem, Task

logger = logging.getLogger(__name__)


def get_categoria_consentita(request, slug):
    """Area attiva e consentita all'utente, altrimenti 404/403."""
    categoria = get_object_or_404(Categoria, slug=slug, is_active=True)
    if not get_cached_allow_list(request).consente_categoria(slug):
        raise PermissionDenied(f"Area '{slug}' non consentita")
    return categoria


def _audit(request, azione, oggetto, evento, categoria, descrizione, **kwargs):
    registra_audit(
        request,
        azione,
        oggetto.__class__.__name__,
        id_entita=oggetto.pk,
        evento=evento,
        categoria=categoria.slug,
        descrizione=descrizione,
        **kwargs,
    )


# ============================================================================
# PAGINA AREA
# ============================================================================


@login_required
def categoria_view(request, slug):
    """
    Pagina di un'area: task con filtri e checklist.

    Filtri task:
    - stato
    - assegnato (id utente, "me" per l'utente corrente, "nessuno")
    """
    categoria = get_categoria_consentita(request, slug)
    evento = richiedi_evento_corrente(request)

    tasks = (
        Task.objects.filter(evento=evento, categoria=categoria, is_active=True)
        .select_related("assegnato_a")
        .order_by("stato", "scadenza")
    )

    stato = request.GET.get("stato")
    if stato:
        tasks = tasks.filter(stato=stato)

    assegnato = request.GET.get("assegnato")
    if assegnato == "me":
        tasks = tasks.filter(assegnato_a=request.user)
    elif assegnato == "nessuno":
        tasks = tasks.filter(assegnato_a__isnull=True)
    elif assegnato:
        tasks = tasks.filter(assegnato_a_id=assegnato)

    checklist = (
        ChecklistItem.objects.filter(evento=evento, categoria=categoria, is_active=True)
        .select_related("assegnato_a", "task")
    )

    context = {
        "categoria": categoria,
        "evento": evento,
        "tasks": tasks,
        "checklist": checklist,
        "note": evento.note.filter(categoria=categoria, is_active=True),
        "stati_task": Task.STATO_CHOICES,
        "filtro_stato": stato or "",
        "filtro_assegnato": assegnato or "",
        "task_form": TaskForm(evento=evento),
        "checklist_form": ChecklistItemForm(evento=evento, categoria=categoria),
    }
    return render(request, "attivita/categoria.html", context)


# ============================================================================
# TASK
# ============================================================================


@login_required
@require_http_methods(["GET", "POST"])
def task_form_view(request, slug, pk=None):
    """Creazione (pk=None) o modifica di un task."""
    categoria = get_categoria_consentita(request, slug)
    evento = richiedi_evento_corrente(request)
    task = (
        get_object_or_404(Task, pk=pk, evento=evento, categoria=categoria, is_active=True)
        if pk
        else None
    )

    if request.method == "POST":
        stato_precedente = task.stato if task else None
        form = TaskForm(request.POST, instance=task, evento=evento)
        if form.is_valid():
            task = form.save(commit=False)
            task.evento = evento
            task.categoria = categoria
            if task._state.adding:
                task.created_by = request.user
            task.updated_by = request.user
            task.save()

            if pk:
                _audit(
                    request,
                    "UPDATE",
                    task,
                    evento,
                    categoria,
                    f"Task '{task.titolo}' modificato",
                    valori_precedenti={"stato": stato_precedente},
                    valori_nuovi={f: str(form.cleaned_data.get(f)) for f in form.changed_data},
                )
                messages.success(request, "Task aggiornato.")
            else:
                _audit(request, "CREATE", task, evento, categoria, f"Task '{task.titolo}' creato")
                messages.success(request, "Task creato.")
            return redirect("attivita:categoria", slug=slug)
        messages.error(request, "Task non valido. Controlla i campi.")
    else:
        form = TaskForm(instance=task, evento=evento)

    context = {"form": form, "categoria": categoria, "evento": evento, "task": task}
    return render(request, "attivita/task_form.html", context)


@login_required
@require_http_methods(["POST"])
def task_delete_view(request, slug, pk):
    categoria = get_categoria_consentita(request, slug)
    evento = richiedi_evento_corrente(request)
    task = get_object_or_404(Task, pk=pk, evento=evento, categoria=categoria, is_active=True)

    task.soft_delete(user=request.user)
    _audit(request, "DELETE", task, evento, categoria, f"Task '{task.titolo}' eliminato")
    messages.success(request, f"Task {task.titolo} eliminato.")
    return redirect("attivita:categoria", slug=slug)


def _stato_da_request(request):
    """Legge 'stato' da form-encoded o da body JSON."""
    stato = request.POST.get("stato")
    if stato is None and request.content_type == "application/json":
        try:
            stato = json.loads(request.body or b"{}").get("stato")
        except (ValueError, AttributeError):
            stato = None
    return stato


@login_required
@require_http_methods(["POST"])
def task_stato_view(request, slug, pk):
    """Cambio stato AJAX. Risponde JSON con stato e completato_il."""
    categoria = get_categoria_consentita(request, slug)
    evento = richiedi_evento_corrente(request)
    task = get_object_or_404(Task, pk=pk, evento=evento, categoria=categoria, is_active=True)

    stato = _stato_da_request(request)
    if stato not in dict(Task.STATO_CHOICES):
        return JsonResponse({"success": False, "error": "Stato non valido"}, status=400)

    precedente = task.stato
    task.stato = stato
    task.updated_by = request.user
    task.save()
    _audit(
        request,
        "UPDATE",
        task,
        evento,
        categoria,
        f"Task '{task.titolo}': {precedente} -> {stato}",
        valori_precedenti={"stato": precedente},
        valori_nuovi={"stato": stato},
    )

    return JsonResponse(
        {
            "success": True,
            "id": str(task.pk),
            "stato": task.stato,
            "stato_display": task.get_stato_display(),
            "completato_il": task.completato_il.isoformat() if task.completato_il else None,
        }
    )


# ============================================================================
# CHECKLIST
# ============================================================================


@login_required
@require_http_methods(["GET", "POST"])
def checklist_form_view(request, slug, pk=None):
    """Creazione (pk=None) o modifica di un punto checklist."""
    categoria = get_categoria_consentita(request, slug)
    evento = richiedi_evento_corrente(request)
    item = (
        get_object_or_404(ChecklistItem, pk=pk, evento=evento, categoria=categoria, is_active=True)
        if pk
        else None
    )

    if request.method == "POST":
        form = ChecklistItemForm(request.POST, instance=item, evento=evento, categoria=categoria)
        if form.is_valid():
            item = form.save(commit=False)
            item.evento = evento
            item.categoria = categoria
            if item._state.adding:
                item.created_by = request.user
            item.updated_by = request.user
            item.save()
            _audit(
                request,
                "UPDATE" if pk else "CREATE",
                item,
                evento,
                categoria,
                f"Checklist '{item.titolo}' {'modificata' if pk else 'creata'}",
            )
            messages.success(request, "Checklist aggiornata.")
            return redirect("attivita:categoria", slug=slug)
        messages.error(request, "Punto checklist non valido. Controlla i campi.")
    else:
        form = ChecklistItemForm(instance=item, evento=evento, categoria=categoria)

    context = {"form": form, "categoria": categoria, "evento": evento, "item": item}
    return render(request, "attivita/checklist_form.html", context)


@login_required
@require_http_methods(["POST"])
def checklist_delete_view(request, slug, pk):
    categoria = get_categoria_consentita(request, slug)
    evento = richiedi_evento_corrente(request)
    item = get_object_or_404(ChecklistItem, pk=pk, evento=evento, categoria=categoria, is_active=True)

    item.soft_delete(user=request.user)
    _audit(request, "DELETE", item, evento, categoria, f"Checklist '{item.titolo}' eliminata")
    messages.success(request, "Punto checklist eliminato.")
    return redirect("attivita:categoria", slug=slug)


@login_required
@require_http_methods(["POST"])
def checklist_toggle_view(request, slug, pk):
    """
    Checkbox della checklist: completato <-> non iniziato.

    Se la richiesta indica uno 'stato' esplicito si usa quello.
    """
    categoria = get_categoria_consentita(request, slug)
    evento = richiedi_evento_corrente(request)
    item = get_object_or_404(ChecklistItem, pk=pk, evento=evento, categoria=categoria, is_active=True)

    stato = _stato_da_request(request)
    if stato is None:
        item.toggle()
    elif stato in dict(ChecklistItem.STATO_CHOICES):
        item.stato = stato
    else:
        return JsonResponse({"success": False, "error": "Stato non valido"}, status=400)

    item.updated_by = request.user
    item.save()
    _audit(request, "UPDATE", item, evento, categoria, f"Checklist '{item.titolo}': {item.stato}")

    return JsonResponse(
        {
            "success": True,
            "id": str(item.pk),
            "stato": item.stato,
            "completato": item.stato == ChecklistItem.COMPLETED,
        }
    )
