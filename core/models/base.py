"""
Base Models per Gestione Eventi

Tutti i models delle app ereditano da BaseModel: chiave UUID, timestamp,
utente creatore/modificatore e cancellazione logica.
"""

import uuid

from django.conf import settings
from django.db import models
from django.utils import timezone


class BaseModel(models.Model):
    """
    Abstract base model per tutti i models del progetto.

    Fornisce:
    - UUID come primary key
    - Timestamp di creazione e modifica
    - Tracking utente creatore e modificatore
    - Soft delete (is_active / deleted_at)

    Usage:
        class Ospite(BaseModel):
            nome = models.CharField(max_length=200)
    """

    id = models.UUIDField(
        primary_key=True, default=uuid.uuid4, editable=False, verbose_name="ID"
    )

    created_at = models.DateTimeField(
        "Data creazione", auto_now_add=True, db_index=True
    )
    updated_at = models.DateTimeField("Data modifica", auto_now=True)

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="%(class)s_created",
        verbose_name="Creato da",
    )
    updated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="%(class)s_updated",
        verbose_name="Modificato da",
    )

    is_active = models.BooleanField("Attivo", default=True, db_index=True)
    deleted_at = models.DateTimeField("Data cancellazione", null=True, blank=True)

    class Meta:
        abstract = True
        get_latest_by = "created_at"
        ordering = ["-created_at"]

    def soft_delete(self, user=None):
        """
        Esegue soft delete del record.

        Args:
            user: Utente che esegue la cancellazione
        """
        self.is_active = False
        self.deleted_at = timezone.now()
        if user:
            self.updated_by = user
        self.save()

    def restore(self, user=None):
        """Ripristina un record cancellato."""
        self.is_active = True
        self.deleted_at = None
        if user:
            self.updated_by = user
        self.save()


class BaseModelWithCode(BaseModel):
    """
    Abstract model con codice univoco automatico PREFIX-YYYYMMDD-NNNN.

    Usage:
        class Evento(BaseModelWithCode):
            CODE_PREFIX = "EVT"
    """

    CODE_PREFIX = ""
    CODE_LENGTH = 4

    codice = models.CharField(
        "Codice", max_length=50, unique=True, db_index=True, editable=False
    )

    class Meta:
        abstract = True

    def generate_code(self):
        """
        Genera il prossimo codice del giorno.

        Returns:
            str: es. "EVT-20260412-0003"
        """
        today = timezone.now().strftime("%Y%m%d")
        prefix = f"{self.CODE_PREFIX}-{today}-"

        last_obj = (
            self.__class__.objects.filter(codice__startswith=prefix)
            .order_by("-codice")
            .first()
        )
        new_number = int(last_obj.codice.split("-")[-1]) + 1 if last_obj else 1

        return f"{prefix}{str(new_number).zfill(self.CODE_LENGTH)}"

    def save(self, *args, **kwargs):
        if not self.codice:
            self.codice = self.generate_code()
        super().save(*args, **kwargs)
