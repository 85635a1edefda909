"""
Models per app inviti.

- ModelloEmail: template dell'invito per lingua ed eventualmente per
  categoria dell'ospite (vedi ospiti.categorie)
- Invito: un invito per coppia (ospite, evento), con i token per
  accettare, rifiutare e tracciare l'apertura dell'e-mail
"""

import secrets

from django.db import models

from core.models import BaseModel
from ospiti.categorie import scelte_categoria

IT = "it"
DE = "de"
TR = "tr"
EN = "en"
LINGUA_CHOICES = [
    (IT, "Italiano"),
    (DE, "Deutsch"),
    (TR, "Türkçe"),
    (EN, "English"),
]
LINGUA_DEFAULT = IT


def genera_token():
    return secrets.token_hex(32)


class ModelloEmail(BaseModel):
    """
    Template e-mail dell'invito.

    Segnaposto disponibili nell'oggetto e nel corpo:
    {{nome}}, {{evento}}, {{data}}, {{luogo}}, {{categoria}},
    {{link_accetta}}, {{link_rifiuta}}
    """

    nome = models.CharField("Nome", max_length=200)
    lingua = models.CharField("Lingua", max_length=5, choices=LINGUA_CHOICES, default=LINGUA_DEFAULT)
    oggetto = models.CharField("Oggetto", max_length=300)
    corpo = models.TextField("Corpo (HTML)")
    is_default = models.BooleanField(
        "Predefinito", default=False, help_text="Template usato per la lingua quando non c'è un template di categoria"
    )
    categoria = models.CharField(
        "Categoria ospite", max_length=50, blank=True, choices=scelte_categoria()
    )

    class Meta:
        verbose_name = "Modello e-mail"
        verbose_name_plural = "Modelli e-mail"
        ordering = ["lingua", "-is_default", "nome"]

    def __str__(self):
        return f"{self.nome} ({self.get_lingua_display()})"

    def save(self, *args, **kwargs):
        super().save(*args, **kwargs)
        # un solo predefinito per lingua
        if self.is_default:
            ModelloEmail.objects.filter(lingua=self.lingua, is_default=True).exclude(pk=self.pk).update(
                is_default=False
            )


class Invito(BaseModel):
    """Invito di un ospite a un evento."""

    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    DECLINED = "DECLINED"
    RISPOSTA_CHOICES = [
        (PENDING, "In attesa"),
        (ACCEPTED, "Accettato"),
        (DECLINED, "Rifiutato"),
    ]

    ospite = models.ForeignKey(
        "ospiti.Ospite", on_delete=models.CASCADE, related_name="inviti", verbose_name="Ospite"
    )
    evento = models.ForeignKey(
        "eventi.Evento", on_delete=models.CASCADE, related_name="inviti", verbose_name="Evento"
    )
    modello = models.ForeignKey(
        ModelloEmail,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="inviti",
        verbose_name="Modello",
    )
    lingua = models.CharField("Lingua", max_length=5, choices=LINGUA_CHOICES, default=LINGUA_DEFAULT)
    oggetto = models.CharField("Oggetto", max_length=300)
    corpo = models.TextField("Corpo")

    token_accetta = models.CharField(max_length=64, unique=True, default=genera_token, editable=False)
    token_rifiuta = models.CharField(max_length=64, unique=True, default=genera_token, editable=False)
    token_tracking = models.CharField(max_length=64, unique=True, default=genera_token, editable=False)

    risposta = models.CharField(
        "Risposta", max_length=10, choices=RISPOSTA_CHOICES, default=PENDING, db_index=True
    )
    inviato_il = models.DateTimeField("Inviato il", null=True, blank=True)
    aperto_il = models.DateTimeField("Aperto il", null=True, blank=True)
    risposto_il = models.DateTimeField("Risposto il", null=True, blank=True)
    errore_invio = models.TextField("Errore invio", blank=True)
    numero_accompagnatori = models.PositiveIntegerField("Accompagnatori", default=0)

    class Meta:
        verbose_name = "Invito"
        verbose_name_plural = "Inviti"
        ordering = ["ospite__nome"]
        constraints = [
            models.UniqueConstraint(fields=["ospite", "evento"], name="invito_unico_per_ospite_evento"),
        ]

    def __str__(self):
        return f"Invito {self.ospite} - {self.evento.titolo}"

    @property
    def inviato(self):
        return self.inviato_il is not None

    @property
    def aperto(self):
        return self.aperto_il is not None
