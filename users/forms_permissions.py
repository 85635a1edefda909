"""
Form per gli override di pagine e aree di un utente.

Per ogni pagina e ogni area attiva si sceglie tra:
- eredita dall'edizione (nessun override salvato)
- consenti (override consentito=True)
- nega (override consentito=False)
"""

from django import forms
from django.db import transaction

from eventi.models import Categoria

from .models import PermessoCategoria, PermessoPagina
from .permissions import PAGINE

EREDITA = ""
CONSENTI = "1"
NEGA = "0"

SCELTE_OVERRIDE = [
    (EREDITA, "Da edizione"),
    (CONSENTI, "Consenti"),
    (NEGA, "Nega"),
]


def _valore_override(permesso):
    if permesso is None:
        return EREDITA
    return CONSENTI if permesso.consentito else NEGA


class UserPermissionsForm(forms.Form):
    """
    Form dinamico: un campo pagina_<id> per ogni pagina e un campo
    categoria_<slug> per ogni area attiva.
    """

    def __init__(self, *args, **kwargs):
        self.user_obj = kwargs.pop("user_obj")
        super().__init__(*args, **kwargs)

        override_pagine = {p.pagina: p for p in self.user_obj.permessi_pagina.all()}
        override_categorie = {
            p.categoria_id: p for p in self.user_obj.permessi_categoria.all()
        }

        for pagina, label in PAGINE:
            name = f"pagina_{pagina}"
            self.fields[name] = forms.ChoiceField(
                label=label, choices=SCELTE_OVERRIDE, required=False
            )
            self.fields[name].gruppo = "pagine"
            self.initial[name] = _valore_override(override_pagine.get(pagina))

        self.categorie = list(Categoria.objects.filter(is_active=True))
        for categoria in self.categorie:
            name = f"categoria_{categoria.slug}"
            self.fields[name] = forms.ChoiceField(
                label=categoria.nome, choices=SCELTE_OVERRIDE, required=False
            )
            self.fields[name].gruppo = "categorie"
            self.initial[name] = _valore_override(override_categorie.get(categoria.pk))

    def campi_pagine(self):
        return [self[name] for name, f in self.fields.items() if f.gruppo == "pagine"]

    def campi_categorie(self):
        return [self[name] for name, f in self.fields.items() if f.gruppo == "categorie"]

    @transaction.atomic
    def save(self):
        """Crea, aggiorna o elimina gli override. Restituisce il numero di override attivi."""
        for pagina, _ in PAGINE:
            valore = self.cleaned_data.get(f"pagina_{pagina}") or EREDITA
            if valore == EREDITA:
                PermessoPagina.objects.filter(utente=self.user_obj, pagina=pagina).delete()
            else:
                PermessoPagina.objects.update_or_create(
                    utente=self.user_obj,
                    pagina=pagina,
                    defaults={"consentito": valore == CONSENTI},
                )

        for categoria in self.categorie:
            valore = self.cleaned_data.get(f"categoria_{categoria.slug}") or EREDITA
            if valore == EREDITA:
                PermessoCategoria.objects.filter(utente=self.user_obj, categoria=categoria).delete()
            else:
                PermessoCategoria.objects.update_or_create(
                    utente=self.user_obj,
                    categoria=categoria,
                    defaults={"consentito": valore == CONSENTI},
                )

        return (
            self.user_obj.permessi_pagina.count() + self.user_obj.permessi_categoria.count()
        )
