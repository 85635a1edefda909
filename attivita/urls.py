"""
ATTIVITA URLS
=============

Pagina area con task e checklist, azioni AJAX per stato e checkbox.
"""

from django.urls import path

from . import views

app_name = "attivita"

urlpatterns = [
    path("<slug:slug>/", views.categoria_view, name="categoria"),
    # ================== TASK ==================
    path("<slug:slug>/task/nuovo/", views.task_form_view, name="task_create"),
    path("<slug:slug>/task/<uuid:pk>/modifica/", views.task_form_view, name="task_update"),
    path("<slug:slug>/task/<uuid:pk>/elimina/", views.task_delete_view, name="task_delete"),
    path("<slug:slug>/task/<uuid:pk>/stato/", views.task_stato_view, name="task_stato"),
    # ================== CHECKLIST ==================
    path("<slug:slug>/checklist/nuovo/", views.checklist_form_view, name="checklist_create"),
    path(
        "<slug:slug>/checklist/<uuid:pk>/modifica/",
        views.checklist_form_view,
        name="checklist_update",
    ),
    path(
        "<slug:slug>/checklist/<uuid:pk>/elimina/",
        views.checklist_delete_view,
        name="checklist_delete",
    ),
    path(
        "<slug:slug>/checklist/<uuid:pk>/toggle/",
        views.checklist_toggle_view,
        name="checklist_toggle",
    ),
]
