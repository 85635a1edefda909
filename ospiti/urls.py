"""
OSPITI URLS
===========

Lista ospiti, piano tavoli, check-in e badge dell'evento corrente.
Il check-in pubblico (pubblico/<token>/) non richiede login.
"""

from django.urls import path

from . import views

app_name = "ospiti"

urlpatterns = [
    # ================== LISTA OSPITI ==================
    path("", views.ospite_list_view, name="ospite_list"),
    path("pdf/", views.ospite_export_pdf_view, name="ospite_export_pdf"),
    path("nuovo/", views.ospite_form_view, name="ospite_create"),
    path("<uuid:pk>/modifica/", views.ospite_form_view, name="ospite_update"),
    path("<uuid:pk>/elimina/", views.ospite_delete_view, name="ospite_delete"),
    path("colonne/", views.colonne_salva_view, name="colonne_salva"),
    path("colonne/elimina/", views.colonna_delete_view, name="colonna_delete"),
    # ================== TAVOLI ==================
    path("tavoli/", views.tavoli_view, name="tavoli"),
    path("tavoli/casuale/", views.tavoli_casuale_view, name="tavoli_casuale"),
    path("tavoli/scambia/", views.tavoli_scambia_view, name="tavoli_scambia"),
    path("tavoli/reset/", views.tavoli_reset_view, name="tavoli_reset"),
    path("tavoli/pdf/", views.tavoli_pdf_view, name="tavoli_pdf"),
    path("<uuid:pk>/tavolo/", views.tavolo_assegna_view, name="tavolo_assegna"),
    # ================== CHECK-IN ==================
    path("checkin/", views.checkin_view, name="checkin"),
    path("checkin/scan/", views.checkin_scan_view, name="checkin_scan"),
    path("checkin/pdf/", views.checkin_pdf_view, name="checkin_pdf"),
    path("<uuid:pk>/presenza/", views.checkin_toggle_view, name="checkin_toggle"),
    path("checkin/link/rigenera/", views.checkin_link_rigenera_view, name="checkin_link_rigenera"),
    # ================== CHECK-IN PUBBLICO ==================
    path("pubblico/<str:token>/", views.checkin_pubblico_view, name="checkin_pubblico"),
    path(
        "pubblico/<str:token>/ospiti/",
        views.CheckinPubblicoOspitiView.as_view(),
        name="checkin_pubblico_ospiti",
    ),
    path(
        "pubblico/<str:token>/<uuid:pk>/presenza/",
        views.checkin_pubblico_presenza_view,
        name="checkin_pubblico_presenza",
    ),
    # ================== BADGE ==================
    path("badge/", views.badge_view, name="badge"),
]
