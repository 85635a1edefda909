"""
Forms per app galleria.
"""

import os

from crispy_forms.helper import FormHelper
from crispy_forms.layout import Layout, Submit
from django import forms
from django.conf import settings
from django.core.exceptions import ValidationError
from django.urls import reverse_lazy

from .models import ESTENSIONI_CONSENTITE

MAX_FILE_SIZE_DEFAULT = 50 * 1024 * 1024


def max_file_size():
    return getattr(settings, "GALLERIA_MAX_FILE_SIZE", MAX_FILE_SIZE_DEFAULT)


def valida_file(file):
    """
    Controlla estensione e dimensione del file.

    Raises:
        ValidationError: formato non consentito o file troppo grande
    """
    estensione = os.path.splitext(file.name)[1].lower()
    if estensione not in ESTENSIONI_CONSENTITE:
        formati = ", ".join(sorted(ESTENSIONI_CONSENTITE))
        raise ValidationError(f"{file.name}: tipo file non consentito. Formati permessi: {formati}")

    limite = max_file_size()
    if file.size > limite:
        raise ValidationError(
            f"{file.name}: file troppo grande ({file.size / (1024 * 1024):.1f}MB). "
            f"Dimensione massima: {limite / (1024 * 1024):.0f}MB"
        )


class MultipleFileInput(forms.ClearableFileInput):
    allow_multiple_selected = True


class MultipleFileField(forms.FileField):
    def __init__(self, *args, **kwargs):
        kwargs.setdefault("widget", MultipleFileInput())
        super().__init__(*args, **kwargs)

    def clean(self, data, initial=None):
        single_clean = super().clean
        if isinstance(data, (list, tuple)):
            return [single_clean(d, initial) for d in data]
        return [single_clean(data, initial)]


class UploadForm(forms.Form):
    files = MultipleFileField(label="File")
    descrizione = forms.CharField(label="Descrizione", required=False, widget=forms.Textarea(attrs={"rows": 2}))

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.helper = FormHelper()
        self.helper.form_method = "post"
        self.helper.form_action = reverse_lazy("galleria:upload")
        self.helper.attrs = {"enctype": "multipart/form-data"}
        self.helper.layout = Layout("files", "descrizione", Submit("submit", "Carica", css_class="btn btn-primary"))

    def clean_files(self):
        files = self.cleaned_data["files"]
        errori = []
        for file in files:
            try:
                valida_file(file)
            except ValidationError as e:
                errori.extend(e.messages)
        if errori:
            raise ValidationError(errori)
        return files
