"""
Models per app eventi.

ARCHITETTURA:
- Edizione: pacchetto commerciale (aree e pagine incluse) assegnato agli utenti
- Categoria: area di lavoro (catering, location, ...) con responsabile
- Evento: l'evento organizzato; ha proprietario, membri e preferenze
  della lista ospiti (ordine e visibilità colonne)
- Nota: appunti per evento/area/task
- PuntoProgramma: scaletta della giornata
"""

import secrets

from django.conf import settings
from django.db import models
from django.urls import reverse

from core.mixins import ModelSearchMixin
from core.models import BaseModel, BaseModelWithCode


# ============================================================================
# CATEGORIE (AREE)
# ============================================================================


class Categoria(BaseModel):
    """
    Area di lavoro. Lo slug è l'identificativo stabile usato negli URL,
    nei permessi e nelle edizioni.
    """

    slug = models.SlugField(
        "ID area",
        max_length=60,
        unique=True,
        error_messages={"unique": "ID area già presente"},
    )
    nome = models.CharField("Nome", max_length=100)
    icona = models.CharField("Icona", max_length=50, default="bi-folder")
    colore = models.CharField("Colore", max_length=20, default="#5585b5")
    descrizione = models.TextField("Descrizione", blank=True)
    responsabile = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="categorie_responsabile",
        verbose_name="Responsabile",
    )
    ordine = models.PositiveIntegerField("Ordine", default=0)
    attiva = models.BooleanField("Attiva", default=True)

    class Meta:
        verbose_name = "Area"
        verbose_name_plural = "Aree"
        ordering = ["ordine", "nome"]

    def __str__(self):
        return self.nome

    def get_absolute_url(self):
        return reverse("attivita:categoria", kwargs={"slug": self.slug})


# ============================================================================
# EDIZIONI
# ============================================================================


class Edizione(BaseModel):
    """
    Edizione (pacchetto) con le aree e le pagine che concede agli utenti.
    """

    codice = models.CharField("Codice", max_length=30, unique=True)
    nome = models.CharField("Nome", max_length=100)
    prezzo_annuale_cents = models.PositiveIntegerField("Prezzo annuale (centesimi)", default=0)
    ordine = models.PositiveIntegerField("Ordine", default=0)
    categorie = models.ManyToManyField(
        Categoria, blank=True, related_name="edizioni", verbose_name="Aree"
    )
    pagine = models.JSONField("Pagine", default=list, blank=True)

    class Meta:
        verbose_name = "Edizione"
        verbose_name_plural = "Edizioni"
        ordering = ["ordine", "nome"]

    def __str__(self):
        return self.nome

    @property
    def prezzo_annuale(self):
        return self.prezzo_annuale_cents / 100

    def imposta_pagine(self, pagine):
        """Salva le pagine senza duplicati né id vuoti, mantenendo l'ordine."""
        pulite = []
        for pagina in pagine or []:
            pagina = (pagina or "").strip()
            if pagina and pagina not in pulite:
                pulite.append(pagina)
        self.pagine = pulite


# ============================================================================
# EVENTI
# ============================================================================


def genera_token_pubblico():
    return secrets.token_urlsafe(18)


class Evento(ModelSearchMixin, BaseModelWithCode):
    """
    Evento organizzato.

    ordine_colonne_ospiti e colonne_nascoste memorizzano le preferenze
    della lista ospiti (vedi ospiti.colonne). token_checkin_pubblico apre
    la lista presenze senza login (vedi ospiti.checkin).
    """

    CODE_PREFIX = "EVT"

    titolo = models.CharField("Titolo", max_length=200)
    data = models.DateField("Data")
    luogo = models.CharField("Luogo", max_length=300, blank=True)
    descrizione = models.TextField("Descrizione", blank=True)

    proprietario = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="eventi_proprietario",
        verbose_name="Proprietario",
    )
    membri = models.ManyToManyField(
        settings.AUTH_USER_MODEL,
        blank=True,
        related_name="eventi_membro",
        verbose_name="Membri",
    )

    ordine_colonne_ospiti = models.JSONField("Ordine colonne ospiti", default=list, blank=True)
    colonne_nascoste = models.JSONField("Colonne nascoste", default=list, blank=True)
    token_checkin_pubblico = models.CharField(
        "Token check-in pubblico",
        max_length=64,
        unique=True,
        default=genera_token_pubblico,
        editable=False,
    )

    class Meta:
        verbose_name = "Evento"
        verbose_name_plural = "Eventi"
        ordering = ["-data", "titolo"]

    def __str__(self):
        return f"{self.titolo} ({self.data:%d/%m/%Y})"

    def get_absolute_url(self):
        return reverse("eventi:evento_detail", kwargs={"pk": self.pk})

    def rigenera_token_pubblico(self):
        """Invalida il link di check-in pubblico precedente."""
        self.token_checkin_pubblico = genera_token_pubblico()
        self.save(update_fields=["token_checkin_pubblico", "updated_at"])
        return self.token_checkin_pubblico

    @classmethod
    def get_search_fields(cls):
        return ["codice", "titolo", "luogo"]

    @classmethod
    def get_search_queryset(cls):
        return cls.objects.filter(is_active=True)

    def get_search_result_display(self):
        return f"{self.codice} - {self.titolo}"


# ============================================================================
# NOTE
# ============================================================================


class Nota(BaseModel):
    """Nota libera su un evento, opzionalmente legata a un'area o a un task."""

    evento = models.ForeignKey(
        Evento, on_delete=models.CASCADE, related_name="note", verbose_name="Evento"
    )
    categoria = models.ForeignKey(
        Categoria,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="note",
        verbose_name="Area",
    )
    task = models.ForeignKey(
        "attivita.Task",
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="note",
        verbose_name="Task",
    )
    titolo = models.CharField("Titolo", max_length=200)
    contenuto = models.TextField("Contenuto", blank=True)
    autore = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        related_name="note_scritte",
        verbose_name="Autore",
    )

    class Meta:
        verbose_name = "Nota"
        verbose_name_plural = "Note"
        ordering = ["-updated_at"]

    def __str__(self):
        return self.titolo


# ============================================================================
# PROGRAMMA
# ============================================================================


class PuntoProgramma(BaseModel):
    """Voce della scaletta dell'evento."""

    evento = models.ForeignKey(
        Evento, on_delete=models.CASCADE, related_name="programma", verbose_name="Evento"
    )
    ora = models.TimeField("Ora")
    titolo = models.CharField("Titolo", max_length=200)
    descrizione = models.TextField("Descrizione", blank=True)
    responsabile = models.CharField("Responsabile", max_length=200, blank=True)
    ordine = models.PositiveIntegerField("Ordine", default=0)

    class Meta:
        verbose_name = "Punto programma"
        verbose_name_plural = "Programma"
        ordering = ["ora", "ordine"]

    def __str__(self):
        return f"{self.ora:%H:%M} {self.titolo}"
