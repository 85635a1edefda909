"""
Forms per app attivita.
"""

from crispy_forms.helper import FormHelper
from crispy_forms.layout import Column, Layout, Row, Submit
from django import forms
from django.contrib.auth import get_user_model

from .models import ChecklistItem, Task

User = get_user_model()

DATE_INPUT = forms.DateInput(attrs={"type": "date"}, format="%Y-%m-%d")


def _assegnabili(evento):
    """Proprietario e membri dell'evento."""
    qs = User.objects.filter(is_active=True)
    if evento is None:
        return qs
    return qs.filter(pk__in=[evento.proprietario_id, *evento.membri.values_list("pk", flat=True)])


class TaskForm(forms.ModelForm):
    class Meta:
        model = Task
        fields = ["titolo", "descrizione", "stato", "priorita", "scadenza", "assegnato_a"]
        widgets = {
            "descrizione": forms.Textarea(attrs={"rows": 3}),
            "scadenza": DATE_INPUT,
        }

    def __init__(self, *args, evento=None, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields["assegnato_a"].queryset = _assegnabili(evento)
        self.fields["assegnato_a"].label_from_instance = lambda obj: obj.nome_visualizzato
        self.helper = FormHelper()
        self.helper.form_method = "post"
        self.helper.layout = Layout(
            "titolo",
            "descrizione",
            Row(
                Column("stato", css_class="col-md-3"),
                Column("priorita", css_class="col-md-3"),
                Column("scadenza", css_class="col-md-3"),
                Column("assegnato_a", css_class="col-md-3"),
            ),
            Submit("submit", "Salva", css_class="btn btn-primary"),
        )


class ChecklistItemForm(forms.ModelForm):
    class Meta:
        model = ChecklistItem
        fields = ["titolo", "descrizione", "task", "stato", "scadenza", "assegnato_a"]
        widgets = {
            "descrizione": forms.Textarea(attrs={"rows": 2}),
            "scadenza": DATE_INPUT,
        }

    def __init__(self, *args, evento=None, categoria=None, **kwargs):
        super().__init__(*args, **kwargs)
        tasks = Task.objects.filter(is_active=True)
        if evento is not None:
            tasks = tasks.filter(evento=evento)
        if categoria is not None:
            tasks = tasks.filter(categoria=categoria)
        self.fields["task"].queryset = tasks
        self.fields["assegnato_a"].queryset = _assegnabili(evento)
        self.fields["assegnato_a"].label_from_instance = lambda obj: obj.nome_visualizzato
        self.helper = FormHelper()
        self.helper.form_method = "post"
        self.helper.layout = Layout(
            Row(
                Column("titolo", css_class="col-md-8"),
                Column("task", css_class="col-md-4"),
            ),
            "descrizione",
            Row(
                Column("stato", css_class="col-md-4"),
                Column("scadenza", css_class="col-md-4"),
                Column("assegnato_a", css_class="col-md-4"),
            ),
            Submit("submit", "Salva", css_class="btn btn-primary"),
        )
