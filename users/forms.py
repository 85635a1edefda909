"""
Forms per l'app users.
"""

from crispy_forms.helper import FormHelper
from crispy_forms.layout import Column, Fieldset, Layout, Row, Submit
from django import forms
from django.contrib.auth.forms import AuthenticationForm, UserChangeForm, UserCreationForm

from .models import User


class LoginForm(AuthenticationForm):
    """
    Form di login personalizzato.

    Supporta:
    - Remember me (30 giorni)
    - Username ripulito dagli spazi
    """

    username = forms.CharField(
        label="Username",
        max_length=150,
        widget=forms.TextInput(
            attrs={
                "class": "form-control",
                "placeholder": "Username",
                "autofocus": True,
            }
        ),
    )

    password = forms.CharField(
        label="Password",
        strip=False,
        widget=forms.PasswordInput(
            attrs={
                "class": "form-control",
                "placeholder": "Password",
                "autocomplete": "current-password",
            }
        ),
    )

    remember_me = forms.BooleanField(
        label="Ricordami (30 giorni)",
        required=False,
        widget=forms.CheckboxInput(attrs={"class": "form-check-input"}),
    )

    error_messages = {
        "invalid_login": (
            "Username o password non corretti. "
            "Nota che entrambi i campi potrebbero essere case-sensitive."
        ),
        "inactive": "Questo account è stato disattivato.",
    }

    def clean_username(self):
        username = self.cleaned_data.get("username")
        if username:
            username = username.strip()
        return username


# ============================================================================
# FORMS GESTIONE USERS
# ============================================================================

ACCOUNT_FIELDS = [
    "username",
    "email",
    "first_name",
    "last_name",
    "telefono",
]
RUOLO_FIELDS = [
    "ruolo",
    "edizione",
    "scadenza_edizione",
    "utente_principale",
    "categoria_principale",
]
DATE_WIDGETS = {
    "scadenza_edizione": forms.DateInput(attrs={"type": "date"}, format="%Y-%m-%d"),
}


def _layout_utente(*extra):
    return Layout(
        Fieldset(
            "Account",
            Row(
                Column("username", css_class="col-md-6"),
                Column("email", css_class="col-md-6"),
            ),
            Row(
                Column("first_name", css_class="col-md-5"),
                Column("last_name", css_class="col-md-5"),
                Column("telefono", css_class="col-md-2"),
            ),
            *extra,
        ),
        Fieldset(
            "Ruolo ed edizione",
            Row(
                Column("ruolo", css_class="col-md-4"),
                Column("edizione", css_class="col-md-4"),
                Column("scadenza_edizione", css_class="col-md-4"),
            ),
            Row(
                Column("utente_principale", css_class="col-md-6"),
                Column("categoria_principale", css_class="col-md-6"),
            ),
        ),
        Submit("submit", "Salva", css_class="btn btn-primary"),
    )


class UserCreateForm(UserCreationForm):
    """Creazione nuovo utente (solo admin)."""

    class Meta:
        model = User
        fields = ACCOUNT_FIELDS + RUOLO_FIELDS
        widgets = DATE_WIDGETS

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields["utente_principale"].queryset = User.objects.filter(is_active=True)
        self.helper = FormHelper()
        self.helper.form_method = "post"
        self.helper.layout = _layout_utente(
            Row(
                Column("password1", css_class="col-md-6"),
                Column("password2", css_class="col-md-6"),
            )
        )


class UserUpdateForm(UserChangeForm):
    """
    Modifica utente esistente (solo admin).

    La password si cambia con il flusso standard di Django.
    """

    password = None

    class Meta:
        model = User
        fields = ACCOUNT_FIELDS + RUOLO_FIELDS + ["is_active"]
        widgets = DATE_WIDGETS

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields["utente_principale"].queryset = User.objects.filter(is_active=True).exclude(
            pk=self.instance.pk
        )
        self.helper = FormHelper()
        self.helper.form_method = "post"
        self.helper.layout = _layout_utente("is_active")


class UserProfiloForm(forms.ModelForm):
    """Dati che l'utente può modificare da sé."""

    class Meta:
        model = User
        fields = ["first_name", "last_name", "email", "telefono"]

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.helper = FormHelper()
        self.helper.form_method = "post"
        self.helper.layout = Layout(
            Row(
                Column("first_name", css_class="col-md-6"),
                Column("last_name", css_class="col-md-6"),
            ),
            Row(
                Column("email", css_class="col-md-8"),
                Column("telefono", css_class="col-md-4"),
            ),
            Submit("submit", "Aggiorna profilo", css_class="btn btn-primary"),
        )
