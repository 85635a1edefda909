"""
Audit log delle operazioni utente.

Le scritture passano da core.audit.registra_audit.
"""

from django.conf import settings
from django.core.serializers.json import DjangoJSONEncoder
from django.db import models


class AuditLog(models.Model):
    """
    Singola voce di audit: chi ha fatto cosa, su quale entità, da dove.
    """

    AZIONE_CHOICES = [
        ("CREATE", "Creazione"),
        ("UPDATE", "Modifica"),
        ("DELETE", "Eliminazione"),
        ("VIEW", "Visualizzazione"),
        ("LOGIN", "Login"),
        ("LOGOUT", "Logout"),
        ("SEND", "Invio"),
        ("CHECKIN", "Check-in"),
        ("EXPORT", "Esportazione"),
    ]

    created_at = models.DateTimeField("Data", auto_now_add=True, db_index=True)

    utente = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="audit_logs",
        verbose_name="Utente",
    )
    email_utente = models.EmailField("Email utente", blank=True)

    azione = models.CharField("Azione", max_length=20, choices=AZIONE_CHOICES, db_index=True)
    tipo_entita = models.CharField("Tipo entità", max_length=50, db_index=True)
    id_entita = models.CharField("ID entità", max_length=64, blank=True)

    evento = models.ForeignKey(
        "eventi.Evento",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="audit_logs",
        verbose_name="Evento",
    )
    categoria = models.CharField("Categoria", max_length=100, blank=True)
    descrizione = models.TextField("Descrizione", blank=True)

    valori_precedenti = models.JSONField(
        "Valori precedenti", null=True, blank=True, encoder=DjangoJSONEncoder
    )
    valori_nuovi = models.JSONField(
        "Valori nuovi", null=True, blank=True, encoder=DjangoJSONEncoder
    )

    indirizzo_ip = models.CharField("Indirizzo IP", max_length=64, blank=True)
    user_agent = models.TextField("User agent", blank=True)
    url = models.CharField("URL", max_length=500, blank=True)
    metadata = models.JSONField(
        "Metadata", default=dict, blank=True, encoder=DjangoJSONEncoder
    )

    class Meta:
        verbose_name = "Audit log"
        verbose_name_plural = "Audit log"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["tipo_entita", "id_entita"]),
            models.Index(fields=["evento", "created_at"]),
        ]

    def __str__(self):
        chi = self.email_utente or "anonimo"
        return f"{self.get_azione_display()} {self.tipo_entita} ({chi})"
