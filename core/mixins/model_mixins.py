"""
Model Mixins per Gestione Eventi

Mixins da applicare ai models per la ricerca globale.
"""

from django.db import models


# ============================================================================
# RICERCA GLOBALE
# ============================================================================


class SearchMixin(models.Model):
    """
    Rende un model ricercabile dal SearchRegistry.

    Uso:
        class Ospite(SearchMixin, BaseModel):
            @classmethod
            def get_search_fields(cls):
                return ['nome', 'email', 'organizzazione']

            def get_search_result_display(self):
                return f"{self.nome} - {self.organizzazione}"
    """

    SEARCH_MAX_RESULTS = 5

    class Meta:
        abstract = True

    @classmethod
    def get_search_fields(cls):
        """Campi su cui eseguire la ricerca icontains."""
        raise NotImplementedError(
            f"{cls.__name__} deve implementare il metodo get_search_fields()"
        )

    @classmethod
    def get_search_queryset(cls):
        """Queryset di partenza (override per escludere record inattivi)."""
        return cls.objects.all()

    @classmethod
    def search(cls, query):
        """
        Ricerca nei campi di get_search_fields().

        Returns:
            QuerySet: primi SEARCH_MAX_RESULTS risultati
        """
        if not query or not query.strip():
            return cls.objects.none()

        q_objects = models.Q()
        for field in cls.get_search_fields():
            q_objects |= models.Q(**{f"{field}__icontains": query.strip()})

        return cls.get_search_queryset().filter(q_objects)[: cls.SEARCH_MAX_RESULTS]

    def get_search_result_display(self):
        return str(self)
