"""
INVITI URLS
===========

Pagine staff sugli inviti dell'evento corrente, template e-mail e
pagine pubbliche raggiunte dai link dell'e-mail (r/<token>/...).
"""

from django.urls import path

from . import views

app_name = "inviti"

urlpatterns = [
    # ================== INVITI ==================
    path("", views.invito_list_view, name="invito_list"),
    path("crea/", views.invito_crea_view, name="invito_crea"),
    path("invia/", views.invito_invia_view, name="invito_invia"),
    path("annulla-risposte/", views.annulla_risposte_view, name="annulla_risposte"),
    path("<uuid:pk>/", views.invito_detail_view, name="invito_detail"),
    path("<uuid:pk>/reinvia/", views.invito_reinvia_view, name="invito_reinvia"),
    path("<uuid:pk>/accetta/", views.invito_accetta_per_conto_view, name="invito_accetta_per_conto"),
    path("<uuid:pk>/rigenera-qr/", views.invito_rigenera_qr_view, name="invito_rigenera_qr"),
    path("<uuid:pk>/qr.pdf", views.invito_qr_pdf_view, name="invito_qr_pdf"),
    path("<uuid:pk>/accompagnatori/", views.accompagnatore_create_view, name="accompagnatore_create"),
    # ================== TEMPLATE ==================
    path("modelli/", views.modello_list_view, name="modello_list"),
    path("modelli/nuovo/", views.modello_form_view, name="modello_create"),
    path("modelli/<uuid:pk>/modifica/", views.modello_form_view, name="modello_update"),
    path("modelli/<uuid:pk>/elimina/", views.modello_delete_view, name="modello_delete"),
    # ================== PUBBLICHE ==================
    path("r/<str:token>/accetta/", views.accetta_view, name="accetta"),
    path("r/<str:token>/rifiuta/", views.rifiuta_view, name="rifiuta"),
    path("r/<str:token>/pixel.gif", views.traccia_view, name="traccia"),
    path("r/<str:token>/qr.pdf", views.qr_pdf_pubblico_view, name="qr_pdf_pubblico"),
    path("r/<str:token>/invia-qr/", views.invia_qr_pdf_view, name="invia_qr_pdf"),
]
