"""
URL configuration per Gestione Eventi.
"""

from django.contrib import admin
from django.urls import path, include
from django.conf import settings
from django.conf.urls.static import static
from users.views import dashboard_view

urlpatterns = [
    # Root = login
    path("", include("users.urls")),
    # Dashboard centrale
    path("dashboard/", dashboard_view, name="dashboard"),
    # Admin
    path("admin/", admin.site.urls),
    # Core (QR code, ricerca, audit log)
    path("core/", include("core.urls")),
    # Eventi, categorie, edizioni, programma
    path("eventi/", include("eventi.urls")),
    # Task e checklist per area
    path("attivita/", include("attivita.urls")),
    # Lista ospiti, tavoli, check-in, badge
    path("ospiti/", include("ospiti.urls")),
    # Inviti e template email (include le pagine pubbliche)
    path("inviti/", include("inviti.urls")),
    # Report PDF
    path("report/", include("report.urls")),
    # Galleria media
    path("galleria/", include("galleria.urls")),
    # Widget select2
    path("select2/", include("django_select2.urls")),
]

# Serve media files in development
if settings.DEBUG:
    urlpatterns += static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)
