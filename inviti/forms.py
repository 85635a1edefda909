"""
Forms per app inviti.
"""

from crispy_forms.helper import FormHelper
from crispy_forms.layout import Column, Layout, Row, Submit
from django import forms
from django_select2.forms import Select2MultipleWidget

from ospiti.models import Accompagnatore, Ospite

from .models import LINGUA_CHOICES, LINGUA_DEFAULT, ModelloEmail


class ModelloEmailForm(forms.ModelForm):
    class Meta:
        model = ModelloEmail
        fields = ["nome", "lingua", "categoria", "is_default", "oggetto", "corpo"]
        widgets = {
            "corpo": forms.Textarea(attrs={"rows": 12, "class": "font-monospace"}),
        }
        help_texts = {
            "corpo": "Segnaposto: {{nome}}, {{evento}}, {{data}}, {{luogo}}, {{categoria}}, "
            "{{link_accetta}}, {{link_rifiuta}}",
        }

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.helper = FormHelper()
        self.helper.form_method = "post"
        self.helper.layout = Layout(
            Row(
                Column("nome", css_class="col-md-5"),
                Column("lingua", css_class="col-md-2"),
                Column("categoria", css_class="col-md-3"),
                Column("is_default", css_class="col-md-2"),
            ),
            "oggetto",
            "corpo",
            Submit("submit", "Salva", css_class="btn btn-primary"),
        )


class CreaInvitiForm(forms.Form):
    """Selezione degli ospiti da invitare."""

    ospiti = forms.ModelMultipleChoiceField(
        label="Ospiti",
        queryset=Ospite.objects.none(),
        widget=Select2MultipleWidget(attrs={"data-placeholder": "Seleziona ospiti..."}),
        error_messages={"required": "Seleziona almeno un ospite"},
    )
    lingua = forms.ChoiceField(label="Lingua", choices=LINGUA_CHOICES, initial=LINGUA_DEFAULT)

    def __init__(self, *args, evento=None, **kwargs):
        super().__init__(*args, **kwargs)
        if evento is not None:
            self.fields["ospiti"].queryset = (
                evento.ospiti.filter(is_active=True).exclude(inviti__evento=evento).order_by("nome")
            )
        self.helper = FormHelper()
        self.helper.form_method = "post"
        self.helper.layout = Layout(
            Row(
                Column("ospiti", css_class="col-md-9"),
                Column("lingua", css_class="col-md-3"),
            ),
            Submit("submit", "Crea inviti", css_class="btn btn-primary"),
        )


class AccompagnatoreForm(forms.ModelForm):
    class Meta:
        model = Accompagnatore
        fields = ["nome", "cognome", "email"]

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.helper = FormHelper()
        self.helper.form_method = "post"
        self.helper.layout = Layout(
            Row(
                Column("nome", css_class="col-md-4"),
                Column("cognome", css_class="col-md-4"),
                Column("email", css_class="col-md-4"),
            ),
            Submit("submit", "Aggiungi accompagnatore", css_class="btn btn-secondary"),
        )
