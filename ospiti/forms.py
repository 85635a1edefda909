"""
Forms per app ospiti.
"""

from crispy_forms.helper import FormHelper
from crispy_forms.layout import Column, Fieldset, Layout, Row, Submit
from django import forms
from django_select2.forms import Select2MultipleWidget

from .badge import PER_PAGINA_DEFAULT
from .models import Ospite


class OspiteForm(forms.ModelForm):
    class Meta:
        model = Ospite
        fields = [
            "nome",
            "email",
            "telefono",
            "titolo",
            "organizzazione",
            "stato",
            "numero_tavolo",
            "is_vip",
            "richiede_accoglienza",
            "accoglienza_da",
            "data_arrivo",
            "ora_arrivo",
            "note",
            "dati_aggiuntivi",
        ]
        widgets = {
            "data_arrivo": forms.DateTimeInput(attrs={"type": "datetime-local"}, format="%Y-%m-%dT%H:%M"),
            "note": forms.Textarea(attrs={"rows": 2}),
            "dati_aggiuntivi": forms.Textarea(attrs={"rows": 4, "class": "font-monospace"}),
        }
        help_texts = {
            "dati_aggiuntivi": 'Colonne aggiuntive in formato JSON, es. {"Kategorie": "Protokoll"}',
        }

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields["data_arrivo"].input_formats = ["%Y-%m-%dT%H:%M", "%Y-%m-%d %H:%M"]
        self.helper = FormHelper()
        self.helper.form_method = "post"
        self.helper.layout = Layout(
            Fieldset(
                "Ospite",
                Row(
                    Column("nome", css_class="col-md-6"),
                    Column("email", css_class="col-md-4"),
                    Column("telefono", css_class="col-md-2"),
                ),
                Row(
                    Column("titolo", css_class="col-md-4"),
                    Column("organizzazione", css_class="col-md-4"),
                    Column("stato", css_class="col-md-2"),
                    Column("numero_tavolo", css_class="col-md-2"),
                ),
            ),
            Fieldset(
                "VIP",
                Row(
                    Column("is_vip", css_class="col-md-2"),
                    Column("richiede_accoglienza", css_class="col-md-2"),
                    Column("accoglienza_da", css_class="col-md-4"),
                    Column("data_arrivo", css_class="col-md-2"),
                    Column("ora_arrivo", css_class="col-md-2"),
                ),
            ),
            "note",
            "dati_aggiuntivi",
            Submit("submit", "Salva", css_class="btn btn-primary"),
        )

    def clean_dati_aggiuntivi(self):
        dati = self.cleaned_data.get("dati_aggiuntivi")
        if dati in (None, ""):
            return {}
        if not isinstance(dati, dict):
            raise forms.ValidationError("I dati aggiuntivi devono essere un oggetto JSON")
        return dati


# ============================================================================
# TAVOLI
# ============================================================================


class AssegnazioneCasualeForm(forms.Form):
    num_tavoli = forms.IntegerField(label="Numero tavoli", min_value=1)
    posti_per_tavolo = forms.IntegerField(label="Posti per tavolo", min_value=1)

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.helper = FormHelper()
        self.helper.form_method = "post"
        self.helper.layout = Layout(
            Row(
                Column("num_tavoli", css_class="col-md-6"),
                Column("posti_per_tavolo", css_class="col-md-6"),
            ),
            Submit("submit", "Assegna a caso", css_class="btn btn-warning"),
        )


class ScambiaTavoliForm(forms.Form):
    tavolo_a = forms.IntegerField(label="Tavolo A", min_value=1)
    tavolo_b = forms.IntegerField(label="Tavolo B", min_value=1)

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.helper = FormHelper()
        self.helper.form_method = "post"
        self.helper.layout = Layout(
            Row(
                Column("tavolo_a", css_class="col-md-6"),
                Column("tavolo_b", css_class="col-md-6"),
            ),
            Submit("submit", "Scambia", css_class="btn btn-secondary"),
        )

    def clean(self):
        cleaned = super().clean()
        if cleaned.get("tavolo_a") and cleaned.get("tavolo_a") == cleaned.get("tavolo_b"):
            raise forms.ValidationError("I due tavoli devono essere diversi")
        return cleaned


# ============================================================================
# BADGE
# ============================================================================


class BadgeForm(forms.Form):
    FORMATO_CHOICES = [("pdf", "PDF"), ("docx", "Word (DOCX)")]

    ospiti = forms.ModelMultipleChoiceField(
        label="Ospiti",
        queryset=Ospite.objects.none(),
        widget=Select2MultipleWidget(attrs={"data-placeholder": "Seleziona ospiti..."}),
        error_messages={"required": "Seleziona almeno un ospite"},
    )
    per_pagina = forms.IntegerField(
        label="Badge per pagina", min_value=1, max_value=20, initial=PER_PAGINA_DEFAULT
    )
    formato = forms.ChoiceField(label="Formato", choices=FORMATO_CHOICES, initial="pdf")
    logo = forms.ImageField(label="Logo (opzionale)", required=False)

    def __init__(self, *args, evento=None, **kwargs):
        super().__init__(*args, **kwargs)
        if evento is not None:
            qs = evento.ospiti.filter(is_active=True).order_by("nome")
            self.fields["ospiti"].queryset = qs
            if not self.is_bound:
                self.fields["ospiti"].initial = [o.pk for o in qs if o.vip]
        self.helper = FormHelper()
        self.helper.form_method = "post"
        self.helper.form_tag = True
        self.helper.attrs = {"enctype": "multipart/form-data"}
        self.helper.layout = Layout(
            "ospiti",
            Row(
                Column("per_pagina", css_class="col-md-4"),
                Column("formato", css_class="col-md-4"),
                Column("logo", css_class="col-md-4"),
            ),
            Submit("submit", "Genera badge", css_class="btn btn-primary"),
        )
