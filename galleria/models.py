"""
Models per app galleria.

MediaFile: foto, video e documenti PDF caricati per un evento.
"""

import mimetypes
import os

from django.conf import settings
from django.db import models
from django.utils import timezone

from core.models import BaseModel

ESTENSIONI_FOTO = (".jpg", ".jpeg", ".png", ".gif", ".webp")
ESTENSIONI_VIDEO = (".mp4", ".webm", ".mov", ".avi")
ESTENSIONI_DOCUMENTO = (".pdf",)
ESTENSIONI_CONSENTITE = ESTENSIONI_FOTO + ESTENSIONI_VIDEO + ESTENSIONI_DOCUMENTO


def media_upload_path(instance, filename):
    """Struttura: galleria/{evento}/{anno}/{mese}/{filename}"""
    now = timezone.now()
    return os.path.join("galleria", str(instance.evento_id), str(now.year), f"{now.month:02d}", filename)


def tipo_da_nome(nome):
    estensione = os.path.splitext(nome)[1].lower()
    if estensione in ESTENSIONI_FOTO:
        return MediaFile.FOTO
    if estensione in ESTENSIONI_VIDEO:
        return MediaFile.VIDEO
    return MediaFile.DOCUMENTO


class MediaFile(BaseModel):
    FOTO = "foto"
    VIDEO = "video"
    DOCUMENTO = "documento"
    TIPO_CHOICES = [
        (FOTO, "Foto"),
        (VIDEO, "Video"),
        (DOCUMENTO, "Documento"),
    ]

    evento = models.ForeignKey(
        "eventi.Evento", on_delete=models.CASCADE, related_name="media", verbose_name="Evento"
    )
    file = models.FileField("File", upload_to=media_upload_path)
    nome_originale = models.CharField("Nome file originale", max_length=255, blank=True)
    mime_type = models.CharField("Tipo MIME", max_length=100, blank=True)
    dimensione = models.PositiveBigIntegerField("Dimensione (bytes)", default=0)
    tipo = models.CharField("Tipo", max_length=10, choices=TIPO_CHOICES, default=FOTO, db_index=True)
    descrizione = models.TextField("Descrizione", blank=True)
    caricato_da = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="media_caricati",
        verbose_name="Caricato da",
    )

    class Meta:
        verbose_name = "File multimediale"
        verbose_name_plural = "Galleria"
        ordering = ["-created_at"]
        indexes = [models.Index(fields=["evento", "tipo"])]

    def __str__(self):
        return self.nome_originale or self.file.name

    def save(self, *args, **kwargs):
        """Popola nome, dimensione, tipo MIME e tipo dal file caricato."""
        if self.file:
            if not self.nome_originale:
                self.nome_originale = os.path.basename(self.file.name)
            if hasattr(self.file, "size"):
                self.dimensione = self.file.size
            if not self.mime_type:
                content_type = getattr(getattr(self.file, "file", None), "content_type", None)
                self.mime_type = content_type or mimetypes.guess_type(self.nome_originale)[0] or ""
            self.tipo = tipo_da_nome(self.nome_originale)
        super().save(*args, **kwargs)

    def get_size_display(self):
        dimensione = self.dimensione
        for unita in ("B", "KB", "MB"):
            if dimensione < 1024:
                return f"{dimensione:.0f} {unita}" if unita == "B" else f"{dimensione:.1f} {unita}"
            dimensione /= 1024
        return f"{dimensione:.1f} GB"

    def is_image(self):
        return self.tipo == self.FOTO

    def puo_eliminare(self, user):
        """Solo chi ha caricato il file o un amministratore."""
        if not user or not user.is_authenticated:
            return False
        return user.is_amministratore or self.caricato_da_id == user.pk
