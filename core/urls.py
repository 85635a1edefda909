"""
URL Configuration per l'app Core
"""

from django.urls import path

from . import views

app_name = "core"

urlpatterns = [
    # ========== QR CODE ==========
    path("qrcode/", views.serve_qr_code, name="serve_qr_code"),
    # ========== RICERCA GLOBALE (AJAX) ==========
    path("search/", views.global_search, name="global_search"),
    # ========== AUDIT LOG ==========
    path("audit-log/", views.audit_log_list_view, name="audit_log_list"),
]
