"""
Models per l'app users.

Include:
- User (estende AbstractUser con ruolo ed edizione)
- PermessoPagina (override per-utente delle pagine consentite)
- PermessoCategoria (override per-utente delle aree consentite)
"""

from django.contrib.auth.models import AbstractUser
from django.db import models
from django.utils import timezone


# ============================================================================
# USER MODEL
# ============================================================================


class User(AbstractUser):
    """
    Utente del sistema.

    Il ruolo admin vede tutto; gli altri utenti vedono le pagine e le aree
    della propria edizione (finché non scade) più gli override personali.
    """

    RUOLO_CHOICES = [
        ("admin", "Amministratore"),
        ("utente", "Utente"),
    ]
    ruolo = models.CharField("Ruolo", max_length=10, choices=RUOLO_CHOICES, default="utente")

    # ========== EDIZIONE ==========
    edizione = models.ForeignKey(
        "eventi.Edizione",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="utenti",
        verbose_name="Edizione",
    )
    scadenza_edizione = models.DateField(
        "Scadenza edizione",
        null=True,
        blank=True,
        help_text="Dopo questa data l'edizione non concede più pagine né aree",
    )

    # ========== CONTATTI ==========
    telefono = models.CharField("Telefono", max_length=30, blank=True)

    # ========== COLLABORATORI ==========
    utente_principale = models.ForeignKey(
        "self",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="collaboratori",
        verbose_name="Utente principale",
    )
    categoria_principale = models.ForeignKey(
        "eventi.Categoria",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="utenti_principali",
        verbose_name="Area principale",
    )

    class Meta:
        verbose_name = "Utente"
        verbose_name_plural = "Utenti"
        ordering = ["first_name", "last_name", "username"]

    def __str__(self):
        return self.nome_visualizzato

    @property
    def nome_visualizzato(self):
        return self.get_full_name() or self.username

    @property
    def is_amministratore(self):
        return self.is_superuser or self.ruolo == "admin"

    def edizione_attiva(self, oggi=None):
        """True se l'utente ha un'edizione non scaduta."""
        if not self.edizione_id:
            return False
        if self.scadenza_edizione is None:
            return True
        oggi = oggi or timezone.localdate()
        return self.scadenza_edizione >= oggi


# ============================================================================
# OVERRIDE PERMESSI
# ============================================================================


class PermessoPagina(models.Model):
    """Concede (consentito=True) o revoca una pagina a un singolo utente."""

    utente = models.ForeignKey(
        User, on_delete=models.CASCADE, related_name="permessi_pagina", verbose_name="Utente"
    )
    pagina = models.CharField("Pagina", max_length=30)
    consentito = models.BooleanField("Consentito", default=True)

    class Meta:
        verbose_name = "Permesso pagina"
        verbose_name_plural = "Permessi pagina"
        unique_together = [["utente", "pagina"]]

    def __str__(self):
        segno = "+" if self.consentito else "-"
        return f"{self.utente} {segno}{self.pagina}"


class PermessoCategoria(models.Model):
    """Concede o revoca un'area (Categoria) a un singolo utente."""

    utente = models.ForeignKey(
        User, on_delete=models.CASCADE, related_name="permessi_categoria", verbose_name="Utente"
    )
    categoria = models.ForeignKey(
        "eventi.Categoria",
        on_delete=models.CASCADE,
        related_name="permessi_utente",
        verbose_name="Area",
    )
    consentito = models.BooleanField("Consentito", default=True)

    class Meta:
        verbose_name = "Permesso area"
        verbose_name_plural = "Permessi area"
        unique_together = [["utente", "categoria"]]

    def __str__(self):
        segno = "+" if self.consentito else "-"
        return f"{self.utente} {segno}{self.categoria}"
