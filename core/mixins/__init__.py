"""
Core Mixins Package

Mixins riutilizzabili per models e views.
"""

# Model Mixins - import eager (nessuna dipendenza circolare)
from .model_mixins import SearchMixin as ModelSearchMixin


# View Mixins - import lazy per evitare import circolari al caricamento dei models
def __getattr__(name):
    if name in ("PermissionRequiredMixin", "JSONResponseMixin",
                "FormValidMessageMixin", "FormInvalidMessageMixin",
                "SetCreatedByMixin", "CustomPaginationMixin", "SearchMixin"):
        from . import view_mixins
        return getattr(view_mixins, name)
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")


__all__ = [
    "ModelSearchMixin",
    "PermissionRequiredMixin",
    "JSONResponseMixin",
    "FormValidMessageMixin",
    "FormInvalidMessageMixin",
    "SetCreatedByMixin",
    "CustomPaginationMixin",
]
