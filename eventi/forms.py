"""
Forms per app eventi.
"""

from crispy_forms.helper import FormHelper
from crispy_forms.layout import Column, Layout, Row, Submit
from django import forms
from django.contrib.auth import get_user_model
from django_select2.forms import Select2MultipleWidget

from users.permissions import PAGINE

from .models import Categoria, Edizione, Evento, Nota, PuntoProgramma

User = get_user_model()


def _utenti_attivi():
    return User.objects.filter(is_active=True).order_by("first_name", "last_name", "username")


# ============================================================================
# EVENTO
# ============================================================================


class EventoForm(forms.ModelForm):
    """Creazione/modifica evento. Il proprietario è impostato dalla view."""

    class Meta:
        model = Evento
        fields = ["titolo", "data", "luogo", "descrizione"]
        widgets = {
            "data": forms.DateInput(attrs={"type": "date", "class": "form-control"}, format="%Y-%m-%d"),
            "descrizione": forms.Textarea(attrs={"rows": 3}),
        }

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.helper = FormHelper()
        self.helper.form_method = "post"
        self.helper.layout = Layout(
            "titolo",
            Row(
                Column("data", css_class="col-md-4"),
                Column("luogo", css_class="col-md-8"),
            ),
            "descrizione",
            Submit("submit", "Salva", css_class="btn btn-primary"),
        )


class MembriEventoForm(forms.Form):
    """Gestione membri dell'evento."""

    membri = forms.ModelMultipleChoiceField(
        label="Membri",
        queryset=User.objects.none(),
        widget=Select2MultipleWidget(attrs={"data-placeholder": "Seleziona utenti..."}),
        required=False,
    )

    def __init__(self, *args, evento=None, **kwargs):
        super().__init__(*args, **kwargs)
        qs = _utenti_attivi()
        if evento is not None:
            qs = qs.exclude(pk=evento.proprietario_id)
            self.fields["membri"].initial = evento.membri.all()
        self.fields["membri"].queryset = qs
        self.fields["membri"].label_from_instance = lambda obj: obj.nome_visualizzato
        self.helper = FormHelper()
        self.helper.form_method = "post"
        self.helper.add_input(Submit("submit", "Salva membri"))


# ============================================================================
# CATEGORIE
# ============================================================================


class CategoriaForm(forms.ModelForm):
    class Meta:
        model = Categoria
        fields = ["slug", "nome", "icona", "colore", "descrizione", "responsabile", "ordine", "attiva"]
        widgets = {
            "colore": forms.TextInput(attrs={"type": "color"}),
            "descrizione": forms.Textarea(attrs={"rows": 2}),
        }
        help_texts = {
            "slug": "Identificativo stabile (es. catering). Non modificabile dopo la creazione.",
        }

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields["responsabile"].queryset = _utenti_attivi()
        if not self.instance._state.adding:
            self.fields["slug"].disabled = True
        self.helper = FormHelper()
        self.helper.form_method = "post"
        self.helper.layout = Layout(
            Row(
                Column("slug", css_class="col-md-4"),
                Column("nome", css_class="col-md-8"),
            ),
            Row(
                Column("icona", css_class="col-md-4"),
                Column("colore", css_class="col-md-2"),
                Column("ordine", css_class="col-md-2"),
                Column("responsabile", css_class="col-md-4"),
            ),
            "descrizione",
            "attiva",
            Submit("submit", "Salva", css_class="btn btn-primary"),
        )


# ============================================================================
# EDIZIONI
# ============================================================================


class EdizioneForm(forms.ModelForm):
    """Modifica edizione (solo admin): nome, prezzo, aree e pagine."""

    pagine = forms.MultipleChoiceField(
        label="Pagine incluse",
        choices=PAGINE,
        widget=forms.CheckboxSelectMultiple,
        required=False,
    )

    class Meta:
        model = Edizione
        fields = ["nome", "prezzo_annuale_cents", "categorie"]
        widgets = {
            "categorie": forms.CheckboxSelectMultiple,
        }

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields["categorie"].queryset = Categoria.objects.filter(is_active=True)
        self.fields["categorie"].required = False
        if not self.instance._state.adding:
            self.fields["pagine"].initial = self.instance.pagine
        self.helper = FormHelper()
        self.helper.form_method = "post"
        self.helper.layout = Layout(
            Row(
                Column("nome", css_class="col-md-8"),
                Column("prezzo_annuale_cents", css_class="col-md-4"),
            ),
            Row(
                Column("categorie", css_class="col-md-6"),
                Column("pagine", css_class="col-md-6"),
            ),
            Submit("submit", "Salva", css_class="btn btn-primary"),
        )

    def save(self, commit=True):
        self.instance.imposta_pagine(self.cleaned_data.get("pagine"))
        return super().save(commit=commit)


# ============================================================================
# NOTE E PROGRAMMA
# ============================================================================


class NotaForm(forms.ModelForm):
    class Meta:
        model = Nota
        fields = ["titolo", "contenuto", "categoria"]
        widgets = {"contenuto": forms.Textarea(attrs={"rows": 3})}

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields["categoria"].queryset = Categoria.objects.filter(attiva=True, is_active=True)
        self.helper = FormHelper()
        self.helper.form_method = "post"
        self.helper.add_input(Submit("submit", "Aggiungi nota"))


class PuntoProgrammaForm(forms.ModelForm):
    class Meta:
        model = PuntoProgramma
        fields = ["ora", "titolo", "descrizione", "responsabile", "ordine"]
        widgets = {
            "ora": forms.TimeInput(attrs={"type": "time"}, format="%H:%M"),
            "descrizione": forms.Textarea(attrs={"rows": 2}),
        }

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.helper = FormHelper()
        self.helper.form_method = "post"
        self.helper.layout = Layout(
            Row(
                Column("ora", css_class="col-md-3"),
                Column("titolo", css_class="col-md-9"),
            ),
            "descrizione",
            Row(
                Column("responsabile", css_class="col-md-9"),
                Column("ordine", css_class="col-md-3"),
            ),
            Submit("submit", "Salva", css_class="btn btn-primary"),
        )
