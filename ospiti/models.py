"""
Models per app ospiti.

ARCHITETTURA:
- Ospite: invitato di un evento. I campi fissi coprono anagrafica,
  tavolo e accoglienza VIP; tutto il resto arriva dalle liste importate
  e vive in dati_aggiuntivi (colonne dinamiche, vedi colonne.py)
- Accompagnatore: persona che accompagna l'ospite di un invito, con
  token di check-in proprio
"""

import secrets

from django.db import models
from django.urls import reverse

from core.mixins import ModelSearchMixin
from core.models import BaseModel

VALORI_VIP = ("true", "1", "sì", "ja")


def genera_token_checkin():
    return secrets.token_hex(16)


class Ospite(ModelSearchMixin, BaseModel):
    """Ospite dell'evento."""

    INVITED = "INVITED"
    CONFIRMED = "CONFIRMED"
    DECLINED = "DECLINED"
    ATTENDED = "ATTENDED"
    STATO_CHOICES = [
        (INVITED, "Invitato"),
        (CONFIRMED, "Confermato"),
        (DECLINED, "Declinato"),
        (ATTENDED, "Presente"),
    ]

    evento = models.ForeignKey(
        "eventi.Evento", on_delete=models.CASCADE, related_name="ospiti", verbose_name="Evento"
    )
    nome = models.CharField("Nome", max_length=200)
    email = models.EmailField("E-mail", blank=True)
    telefono = models.CharField("Telefono", max_length=50, blank=True)
    titolo = models.CharField("Funzione", max_length=200, blank=True)
    organizzazione = models.CharField("Organizzazione", max_length=200, blank=True)

    numero_tavolo = models.PositiveIntegerField("Tavolo", null=True, blank=True, db_index=True)
    is_vip = models.BooleanField("VIP", default=False)
    richiede_accoglienza = models.BooleanField("Accoglienza VIP", default=False)
    accoglienza_da = models.CharField("Accompagnatore VIP", max_length=200, blank=True)
    data_arrivo = models.DateTimeField("Arrivo VIP", null=True, blank=True)
    ora_arrivo = models.CharField("Ora arrivo", max_length=20, blank=True)
    note = models.TextField("Nota", blank=True)

    stato = models.CharField(
        "Stato", max_length=20, choices=STATO_CHOICES, default=INVITED, db_index=True
    )
    dati_aggiuntivi = models.JSONField("Dati aggiuntivi", default=dict, blank=True)
    token_checkin = models.CharField(
        "Token check-in", max_length=64, unique=True, default=genera_token_checkin, editable=False
    )

    class Meta:
        verbose_name = "Ospite"
        verbose_name_plural = "Ospiti"
        ordering = ["nome"]

    def __str__(self):
        return self.nome

    def get_absolute_url(self):
        return reverse("ospiti:ospite_update", kwargs={"pk": self.pk})

    @classmethod
    def get_search_fields(cls):
        return ["nome", "email", "organizzazione"]

    @classmethod
    def get_search_queryset(cls):
        return cls.objects.filter(is_active=True).select_related("evento")

    def get_search_result_display(self):
        return f"{self.nome} ({self.evento.titolo})"

    @property
    def vip(self):
        """VIP dal flag o dalla colonna VIP della lista importata."""
        if self.is_vip:
            return True
        dati = self.dati_aggiuntivi or {}
        valore = dati.get("VIP", dati.get("vip"))
        if valore is True:
            return True
        if isinstance(valore, bool):
            return False
        if isinstance(valore, (int, float)):
            return valore == 1
        if isinstance(valore, str):
            return valore.strip().lower() in VALORI_VIP
        return False

    @property
    def presente(self):
        return self.stato == self.ATTENDED or bool((self.dati_aggiuntivi or {}).get("Presente"))

    def rigenera_token(self):
        self.token_checkin = genera_token_checkin()
        self.save(update_fields=["token_checkin", "updated_at"])
        return self.token_checkin


class Accompagnatore(BaseModel):
    """Accompagnatore registrato su un invito."""

    invito = models.ForeignKey(
        "inviti.Invito",
        on_delete=models.CASCADE,
        related_name="accompagnatori",
        verbose_name="Invito",
    )
    nome = models.CharField("Nome", max_length=100)
    cognome = models.CharField("Cognome", max_length=100, blank=True)
    email = models.EmailField("E-mail", blank=True)
    token_checkin = models.CharField(
        "Token check-in", max_length=64, unique=True, default=genera_token_checkin, editable=False
    )
    arrivato_il = models.DateTimeField("Arrivato il", null=True, blank=True)

    class Meta:
        verbose_name = "Accompagnatore"
        verbose_name_plural = "Accompagnatori"
        ordering = ["cognome", "nome"]

    def __str__(self):
        return self.nome_completo

    @property
    def nome_completo(self):
        return " ".join(p for p in [self.nome, self.cognome] if p).strip() or "Accompagnatore"
