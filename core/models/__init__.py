"""
Core Models Package

Esporta base models e AuditLog per facile import nelle app.
"""

from .base import BaseModel, BaseModelWithCode
from .audit import AuditLog

__all__ = ["BaseModel", "BaseModelWithCode", "AuditLog"]
