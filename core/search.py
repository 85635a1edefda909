"""
Sistema di ricerca globale - SearchRegistry
Gestisce la registrazione e ricerca dei model di tutte le app.
"""

import logging

from django.core.exceptions import FieldError

logger = logging.getLogger(__name__)


class SearchRegistry:
    """
    Registry centrale dei model ricercabili.

    Ogni app registra i propri model nel metodo ready() di apps.py:

        from core.search import SearchRegistry

        def ready(self):
            from .models import Ospite

            SearchRegistry.register(
                model=Ospite,
                category='Ospiti',
                icon='bi-person',
                priority=8
            )
    """

    _registry = {}

    @classmethod
    def _key(cls, model):
        return f"{model._meta.app_label}.{model._meta.model_name}"

    @classmethod
    def register(cls, model, category, icon="bi-file-earmark", priority=5):
        """
        Registra un model come ricercabile.

        Args:
            model: classe del model (con core.mixins.ModelSearchMixin)
            category: categoria mostrata nei risultati
            icon: classe icona Bootstrap Icons
            priority: priorità nei risultati (0-10)
        """
        cls._registry[cls._key(model)] = {
            "model": model,
            "category": category,
            "icon": icon,
            "priority": priority,
        }

    @classmethod
    def is_registered(cls, model):
        return cls._key(model) in cls._registry

    @classmethod
    def search_all(cls, query, max_results_per_model=5, filtro=None):
        """
        Esegue la ricerca in tutti i model registrati.

        Args:
            query: stringa di ricerca
            max_results_per_model: numero massimo risultati per categoria
            filtro: callable(obj) -> bool opzionale, per escludere oggetti
                non accessibili all'utente

        Returns:
            list: [{"category": str, "items": [...]}] in ordine alfabetico
        """
        if not query or not query.strip():
            return []

        results_by_category = {}

        for model_key, info in cls._registry.items():
            model = info["model"]
            try:
                found = list(model.search(query))
            except (FieldError, NotImplementedError) as e:
                logger.error(f"Errore ricerca in {model_key}: {e}")
                continue

            for obj in found:
                if filtro is not None and not filtro(obj):
                    continue
                results_by_category.setdefault(info["category"], []).append(
                    {
                        "id": str(obj.pk),
                        "title": obj.get_search_result_display(),
                        "subtitle": str(model._meta.verbose_name),
                        "url": obj.get_absolute_url(),
                        "icon": info["icon"],
                        "priority": info["priority"],
                    }
                )

        results = []
        for category, items in results_by_category.items():
            items.sort(key=lambda x: x["priority"], reverse=True)
            results.append({"category": category, "items": items[:max_results_per_model]})

        results.sort(key=lambda x: x["category"])
        return results

    @classmethod
    def clear(cls):
        """Svuota il registry (utile per testing)."""
        cls._registry = {}
