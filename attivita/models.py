"""
Models per app attivita.

- Task: attività di un'area (Categoria) per un evento
- ChecklistItem: punto di controllo, opzionalmente legato a un task
"""

from django.conf import settings
from django.db import models
from django.utils import timezone

from core.models import BaseModel


class Task(BaseModel):
    """
    Attività di un'area.

    Invariante: completato_il è valorizzato se e solo se lo stato è
    COMPLETED (gestito in save()).
    """

    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"
    STATO_CHOICES = [
        (PENDING, "Da fare"),
        (IN_PROGRESS, "In corso"),
        (COMPLETED, "Completato"),
        (CANCELLED, "Annullato"),
    ]

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    URGENT = "URGENT"
    PRIORITA_CHOICES = [
        (LOW, "Bassa"),
        (MEDIUM, "Media"),
        (HIGH, "Alta"),
        (URGENT, "Urgente"),
    ]

    evento = models.ForeignKey(
        "eventi.Evento", on_delete=models.CASCADE, related_name="tasks", verbose_name="Evento"
    )
    categoria = models.ForeignKey(
        "eventi.Categoria", on_delete=models.PROTECT, related_name="tasks", verbose_name="Area"
    )
    titolo = models.CharField("Titolo", max_length=200)
    descrizione = models.TextField("Descrizione", null=True, blank=True)
    stato = models.CharField(
        "Stato", max_length=20, choices=STATO_CHOICES, default=PENDING, db_index=True
    )
    priorita = models.CharField("Priorità", max_length=10, choices=PRIORITA_CHOICES, default=MEDIUM)
    scadenza = models.DateField("Scadenza", null=True, blank=True)
    assegnato_a = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="tasks_assegnati",
        verbose_name="Assegnato a",
    )
    completato_il = models.DateTimeField("Completato il", null=True, blank=True)

    class Meta:
        verbose_name = "Task"
        verbose_name_plural = "Task"
        ordering = ["scadenza", "-created_at"]
        indexes = [models.Index(fields=["evento", "categoria", "stato"])]

    def __str__(self):
        return self.titolo

    def save(self, *args, **kwargs):
        if not self.descrizione:
            self.descrizione = None
        if self.stato == self.COMPLETED:
            if self.completato_il is None:
                self.completato_il = timezone.now()
        else:
            self.completato_il = None
        super().save(*args, **kwargs)

    @property
    def is_scaduto(self):
        if not self.scadenza or self.stato in (self.COMPLETED, self.CANCELLED):
            return False
        return self.scadenza < timezone.localdate()


class ChecklistItem(BaseModel):
    """Punto di checklist di un'area."""

    NOT_STARTED = "NOT_STARTED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    STATO_CHOICES = [
        (NOT_STARTED, "Non iniziato"),
        (IN_PROGRESS, "In corso"),
        (COMPLETED, "Completato"),
    ]

    evento = models.ForeignKey(
        "eventi.Evento", on_delete=models.CASCADE, related_name="checklist", verbose_name="Evento"
    )
    categoria = models.ForeignKey(
        "eventi.Categoria",
        on_delete=models.PROTECT,
        related_name="checklist",
        verbose_name="Area",
    )
    task = models.ForeignKey(
        Task,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="checklist",
        verbose_name="Task",
    )
    titolo = models.CharField("Titolo", max_length=200)
    descrizione = models.TextField("Descrizione", null=True, blank=True)
    stato = models.CharField(
        "Stato", max_length=20, choices=STATO_CHOICES, default=NOT_STARTED, db_index=True
    )
    scadenza = models.DateField("Scadenza", null=True, blank=True)
    assegnato_a = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="checklist_assegnate",
        verbose_name="Assegnato a",
    )
    completato_il = models.DateTimeField("Completato il", null=True, blank=True)

    class Meta:
        verbose_name = "Punto checklist"
        verbose_name_plural = "Checklist"
        ordering = ["-created_at"]

    def __str__(self):
        return self.titolo

    def save(self, *args, **kwargs):
        if not self.descrizione:
            self.descrizione = None
        if self.stato == self.COMPLETED:
            if self.completato_il is None:
                self.completato_il = timezone.now()
        else:
            self.completato_il = None
        super().save(*args, **kwargs)

    def toggle(self):
        """Completato <-> non iniziato (checkbox della lista)."""
        self.stato = self.NOT_STARTED if self.stato == self.COMPLETED else self.COMPLETED
        return self.stato
