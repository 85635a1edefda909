"""
EVENTI URLS
===========

- CRUD eventi, switch evento corrente, membri
- Aree e edizioni (admin)
- Note e programma dell'evento corrente
"""

from django.urls import path

from . import views

app_name = "eventi"

urlpatterns = [
    # ================== EVENTI ==================
    path("", views.EventoListView.as_view(), name="evento_list"),
    path("nuovo/", views.EventoCreateView.as_view(), name="evento_create"),
    path("<uuid:pk>/", views.EventoDetailView.as_view(), name="evento_detail"),
    path("<uuid:pk>/modifica/", views.EventoUpdateView.as_view(), name="evento_update"),
    path("<uuid:pk>/seleziona/", views.evento_switch_view, name="evento_switch"),
    path("<uuid:pk>/membri/", views.evento_membri_view, name="evento_membri"),
    # ================== AREE ==================
    path("aree/", views.CategoriaListView.as_view(), name="categoria_list"),
    path("aree/nuova/", views.CategoriaCreateView.as_view(), name="categoria_create"),
    path("aree/<uuid:pk>/modifica/", views.CategoriaUpdateView.as_view(), name="categoria_update"),
    path("aree/<uuid:pk>/elimina/", views.categoria_delete_view, name="categoria_delete"),
    # ================== EDIZIONI ==================
    path("edizioni/", views.edizione_list_view, name="edizione_list"),
    path("edizioni/<uuid:pk>/modifica/", views.edizione_update_view, name="edizione_update"),
    # ================== NOTE ==================
    path("note/nuova/", views.nota_create_view, name="nota_create"),
    path("note/<uuid:pk>/elimina/", views.nota_delete_view, name="nota_delete"),
    # ================== PROGRAMMA ==================
    path("programma/", views.programma_list_view, name="programma_list"),
    path("programma/nuovo/", views.programma_form_view, name="programma_create"),
    path("programma/<uuid:pk>/modifica/", views.programma_form_view, name="programma_update"),
    path("programma/<uuid:pk>/elimina/", views.programma_delete_view, name="programma_delete"),
]
