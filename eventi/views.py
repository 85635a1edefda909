"""
Views per app eventi.

STRUTTURA:
- Eventi: lista, creazione, modifica, dettaglio, switch evento corrente, membri
- Aree (Categoria): CRUD riservato agli amministratori
- Edizioni: lista e modifica (solo admin)
- Note e programma dell'evento corrente
"""

import logging

from django.contrib import messages
from django.contrib.auth.decorators import login_required
from django.contrib.auth.mixins import LoginRequiredMixin
from django.shortcuts import get_object_or_404, redirect, render
from django.urls import reverse_lazy
from django.utils.http import url_has_allowed_host_and_scheme
from django.views.decorators.http import require_http_methods
from django.views.generic import CreateView, DetailView, ListView, UpdateView

from core.audit import registra_audit
from core.mixins.view_mixins import (
    CustomPaginationMixin,
    FormInvalidMessageMixin,
    FormValidMessageMixin,
    PermissionRequiredMixin,
    SearchMixin,
    SetCreatedByMixin,
)
from users.permissions import admin_richiesto, get_cached_allow_list, is_admin, pagina_richiesta

from .forms import (
    CategoriaForm,
    EdizioneForm,
    EventoForm,
    MembriEventoForm,
    NotaForm,
    PuntoProgrammaForm,
)
from .models import Categoria, Edizione, Evento, Nota, PuntoProgramma
from .utils import (
    eventi_accessibili,
    imposta_evento_corrente,
    richiedi_evento_corrente,
    verifica_accesso_evento,
    verifica_gestione_evento,
)

logger = logging.getLogger(__name__)


def redirect_next(request, default, *args, **kwargs):
    """Redirect al parametro next (se sicuro) oppure a default."""
    next_url = request.POST.get("next") or request.GET.get("next")
    if next_url and url_has_allowed_host_and_scheme(next_url, allowed_hosts={request.get_host()}):
        return redirect(next_url)
    return redirect(default, *args, **kwargs)


# ============================================================================
# EVENTI
# ============================================================================


class EventoListView(LoginRequiredMixin, SearchMixin, CustomPaginationMixin, ListView):
    """Eventi accessibili all'utente, con ricerca."""

    model = Evento
    template_name = "eventi/evento_list.html"
    context_object_name = "eventi"
    search_fields = ["codice", "titolo", "luogo"]
    default_page_size = 20

    def get_queryset(self):
        accessibili = eventi_accessibili(self.request.user).values("pk")
        return (
            super()
            .get_queryset()
            .filter(pk__in=accessibili)
            .select_related("proprietario")
            .order_by("-data", "titolo")
        )


class EventoCreateView(
    LoginRequiredMixin,
    SetCreatedByMixin,
    FormValidMessageMixin,
    FormInvalidMessageMixin,
    CreateView,
):
    """
    Creazione evento. Il creatore ne diventa proprietario e l'evento
    diventa quello corrente.
    """

    model = Evento
    form_class = EventoForm
    template_name = "eventi/evento_form.html"
    success_message = "Evento creato con successo!"

    def form_valid(self, form):
        form.instance.proprietario = self.request.user
        response = super().form_valid(form)
        imposta_evento_corrente(self.request, self.object)
        registra_audit(
            self.request,
            "CREATE",
            "Evento",
            id_entita=self.object.pk,
            evento=self.object,
            descrizione=f"Evento '{self.object.titolo}' creato",
            valori_nuovi={"titolo": self.object.titolo, "data": self.object.data},
        )
        logger.info(f"Evento {self.object.codice} creato da {self.request.user}")
        return response

    def get_success_url(self):
        return self.object.get_absolute_url()


class EventoUpdateView(
    LoginRequiredMixin,
    SetCreatedByMixin,
    FormValidMessageMixin,
    FormInvalidMessageMixin,
    UpdateView,
):
    model = Evento
    form_class = EventoForm
    template_name = "eventi/evento_form.html"
    success_message = "Evento aggiornato con successo!"

    def get_object(self, queryset=None):
        evento = super().get_object(queryset)
        verifica_gestione_evento(self.request.user, evento)
        return evento

    def form_valid(self, form):
        precedenti = {field: form.initial.get(field) for field in form.changed_data}
        response = super().form_valid(form)
        registra_audit(
            self.request,
            "UPDATE",
            "Evento",
            id_entita=self.object.pk,
            evento=self.object,
            descrizione=f"Evento '{self.object.titolo}' modificato",
            valori_precedenti=precedenti,
            valori_nuovi={field: form.cleaned_data.get(field) for field in form.changed_data},
        )
        return response

    def get_success_url(self):
        return self.object.get_absolute_url()


class EventoDetailView(LoginRequiredMixin, DetailView):
    """Riepilogo evento: membri, note, programma."""

    model = Evento
    template_name = "eventi/evento_detail.html"
    context_object_name = "evento"

    def get_object(self, queryset=None):
        evento = super().get_object(queryset)
        verifica_accesso_evento(self.request.user, evento)
        return evento

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        evento = self.object
        context["membri"] = evento.membri.all()
        context["note"] = evento.note.filter(is_active=True).select_related("categoria", "autore")
        context["programma"] = evento.programma.filter(is_active=True)
        context["nota_form"] = NotaForm()
        context["puo_modificare"] = is_admin(self.request.user) or (
            evento.proprietario_id == self.request.user.pk
        )
        return context


@login_required
@require_http_methods(["POST"])
def evento_switch_view(request, pk):
    """Seleziona l'evento corrente (switcher nella navbar)."""
    evento = get_object_or_404(Evento, pk=pk, is_active=True)
    if not imposta_evento_corrente(request, evento):
        messages.error(request, "Non hai accesso a questo evento.")
        return redirect("eventi:evento_list")
    messages.info(request, f"Evento corrente: {evento.titolo}")
    return redirect_next(request, "dashboard")


@login_required
@require_http_methods(["GET", "POST"])
def evento_membri_view(request, pk):
    """Gestione membri (solo proprietario o admin)."""
    evento = get_object_or_404(Evento, pk=pk, is_active=True)
    verifica_gestione_evento(request.user, evento)

    if request.method == "POST":
        form = MembriEventoForm(request.POST, evento=evento)
        if form.is_valid():
            membri = form.cleaned_data["membri"]
            evento.membri.set(membri)
            registra_audit(
                request,
                "UPDATE",
                "Evento",
                id_entita=evento.pk,
                evento=evento,
                descrizione="Membri evento aggiornati",
                valori_nuovi={"membri": [u.username for u in membri]},
            )
            messages.success(request, "Membri aggiornati.")
            return redirect(evento.get_absolute_url())
    else:
        form = MembriEventoForm(evento=evento)

    return render(request, "eventi/evento_membri.html", {"form": form, "evento": evento})


# ============================================================================
# AREE (CATEGORIE)
# ============================================================================


class CategoriaListView(LoginRequiredMixin, ListView):
    """Aree visibili: tutte per l'admin, quelle consentite per gli altri."""

    model = Categoria
    template_name = "eventi/categoria_list.html"
    context_object_name = "categorie"

    def get_queryset(self):
        qs = Categoria.objects.filter(is_active=True).select_related("responsabile")
        allow_list = get_cached_allow_list(self.request)
        if not allow_list.is_admin:
            qs = qs.filter(slug__in=allow_list.categorie, attiva=True)
        return qs


class CategoriaCreateView(
    PermissionRequiredMixin,
    SetCreatedByMixin,
    FormValidMessageMixin,
    FormInvalidMessageMixin,
    CreateView,
):
    model = Categoria
    form_class = CategoriaForm
    template_name = "eventi/categoria_form.html"
    permission_required = "eventi.add_categoria"
    success_message = "Area creata con successo!"
    success_url = reverse_lazy("eventi:categoria_list")

    def form_valid(self, form):
        response = super().form_valid(form)
        registra_audit(
            self.request,
            "CREATE",
            "Categoria",
            id_entita=self.object.pk,
            categoria=self.object.slug,
            descrizione=f"Area '{self.object.nome}' creata",
        )
        return response


class CategoriaUpdateView(
    PermissionRequiredMixin,
    SetCreatedByMixin,
    FormValidMessageMixin,
    FormInvalidMessageMixin,
    UpdateView,
):
    model = Categoria
    form_class = CategoriaForm
    template_name = "eventi/categoria_form.html"
    permission_required = "eventi.change_categoria"
    success_message = "Area aggiornata con successo!"
    success_url = reverse_lazy("eventi:categoria_list")

    def form_valid(self, form):
        response = super().form_valid(form)
        registra_audit(
            self.request,
            "UPDATE",
            "Categoria",
            id_entita=self.object.pk,
            categoria=self.object.slug,
            descrizione=f"Area '{self.object.nome}' modificata",
            valori_nuovi={field: str(form.cleaned_data.get(field)) for field in form.changed_data},
        )
        return response


@login_required
@admin_richiesto
@require_http_methods(["POST"])
def categoria_delete_view(request, pk):
    """Disattiva un'area (soft delete): task e checklist restano nello storico."""
    categoria = get_object_or_404(Categoria, pk=pk, is_active=True)
    categoria.attiva = False
    categoria.soft_delete(user=request.user)
    registra_audit(
        request,
        "DELETE",
        "Categoria",
        id_entita=categoria.pk,
        categoria=categoria.slug,
        descrizione=f"Area '{categoria.nome}' eliminata",
    )
    messages.success(request, f"Area {categoria.nome} eliminata.")
    return redirect("eventi:categoria_list")


# ============================================================================
# EDIZIONI (solo admin)
# ============================================================================


@login_required
@admin_richiesto
def edizione_list_view(request):
    edizioni = Edizione.objects.filter(is_active=True).prefetch_related("categorie")
    return render(request, "eventi/edizione_list.html", {"edizioni": edizioni})


@login_required
@admin_richiesto
@require_http_methods(["GET", "POST"])
def edizione_update_view(request, pk):
    """
    Modifica nome, prezzo, aree e pagine di un'edizione.

    Le pagine vengono salvate senza duplicati e senza id vuoti.
    """
    edizione = get_object_or_404(Edizione, pk=pk)

    if request.method == "POST":
        form = EdizioneForm(request.POST, instance=edizione)
        if form.is_valid():
            form.instance.updated_by = request.user
            edizione = form.save()
            registra_audit(
                request,
                "UPDATE",
                "Edizione",
                id_entita=edizione.pk,
                descrizione=f"Edizione '{edizione.nome}' modificata",
                valori_nuovi={
                    "nome": edizione.nome,
                    "prezzo_annuale_cents": edizione.prezzo_annuale_cents,
                    "categorie": list(edizione.categorie.values_list("slug", flat=True)),
                    "pagine": edizione.pagine,
                },
            )
            messages.success(request, f"Edizione {edizione.nome} aggiornata.")
            return redirect("eventi:edizione_list")
        messages.error(request, "Errore nel salvataggio. Controlla i campi.")
    else:
        form = EdizioneForm(instance=edizione)

    return render(request, "eventi/edizione_form.html", {"form": form, "edizione": edizione})


# ============================================================================
# NOTE
# ============================================================================


@login_required
@require_http_methods(["POST"])
def nota_create_view(request):
    """Aggiunge una nota all'evento corrente (opzionalmente su area/task)."""
    evento = richiedi_evento_corrente(request)
    form = NotaForm(request.POST)

    if form.is_valid():
        nota = form.save(commit=False)
        nota.evento = evento
        nota.autore = request.user
        nota.created_by = request.user

        task_id = request.POST.get("task")
        if task_id:
            from attivita.models import Task

            nota.task = get_object_or_404(Task, pk=task_id, evento=evento)
            if nota.categoria is None:
                nota.categoria = nota.task.categoria

        nota.save()
        registra_audit(
            request,
            "CREATE",
            "Nota",
            id_entita=nota.pk,
            evento=evento,
            categoria=nota.categoria.slug if nota.categoria else "",
            descrizione=f"Nota '{nota.titolo}' aggiunta",
        )
        messages.success(request, "Nota aggiunta.")
    else:
        messages.error(request, "Nota non valida: il titolo è obbligatorio.")

    return redirect_next(request, "eventi:evento_detail", pk=evento.pk)


@login_required
@require_http_methods(["POST"])
def nota_delete_view(request, pk):
    """Elimina una nota (autore o admin)."""
    nota = get_object_or_404(Nota, pk=pk, is_active=True)
    verifica_accesso_evento(request.user, nota.evento)
    if not (is_admin(request.user) or nota.autore_id == request.user.pk):
        messages.error(request, "Puoi eliminare solo le tue note.")
    else:
        nota.soft_delete(user=request.user)
        registra_audit(
            request,
            "DELETE",
            "Nota",
            id_entita=nota.pk,
            evento=nota.evento,
            descrizione=f"Nota '{nota.titolo}' eliminata",
        )
        messages.success(request, "Nota eliminata.")
    return redirect_next(request, "eventi:evento_detail", pk=nota.evento_id)


# ============================================================================
# PROGRAMMA
# ============================================================================


@login_required
@pagina_richiesta("programma")
def programma_list_view(request):
    """Scaletta dell'evento corrente, ordinata per ora e ordine."""
    evento = richiedi_evento_corrente(request)
    punti = evento.programma.filter(is_active=True).order_by("ora", "ordine")
    return render(
        request,
        "eventi/programma_list.html",
        {"evento": evento, "punti": punti, "form": PuntoProgrammaForm()},
    )


@login_required
@pagina_richiesta("programma")
@require_http_methods(["GET", "POST"])
def programma_form_view(request, pk=None):
    """Creazione (pk=None) o modifica di un punto programma."""
    evento = richiedi_evento_corrente(request)
    punto = get_object_or_404(PuntoProgramma, pk=pk, evento=evento, is_active=True) if pk else None

    if request.method == "POST":
        form = PuntoProgrammaForm(request.POST, instance=punto)
        if form.is_valid():
            punto = form.save(commit=False)
            punto.evento = evento
            if punto._state.adding:
                punto.created_by = request.user
            punto.updated_by = request.user
            punto.save()
            registra_audit(
                request,
                "UPDATE" if pk else "CREATE",
                "PuntoProgramma",
                id_entita=punto.pk,
                evento=evento,
                descrizione=f"Programma: {punto}",
            )
            messages.success(request, "Programma aggiornato.")
            return redirect("eventi:programma_list")
    else:
        form = PuntoProgrammaForm(instance=punto)

    return render(
        request, "eventi/programma_form.html", {"form": form, "evento": evento, "punto": punto}
    )


@login_required
@pagina_richiesta("programma")
@require_http_methods(["POST"])
def programma_delete_view(request, pk):
    evento = richiedi_evento_corrente(request)
    punto = get_object_or_404(PuntoProgramma, pk=pk, evento=evento, is_active=True)
    punto.soft_delete(user=request.user)
    registra_audit(
        request,
        "DELETE",
        "PuntoProgramma",
        id_entita=punto.pk,
        evento=evento,
        descrizione=f"Programma: {punto} eliminato",
    )
    messages.success(request, "Punto eliminato.")
    return redirect("eventi:programma_list")
