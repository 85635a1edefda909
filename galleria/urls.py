from django.urls import path

from . import views

app_name = "galleria"

urlpatterns = [
    path("", views.galleria_view, name="galleria"),
    path("carica/", views.upload_view, name="upload"),
    path("<uuid:pk>/download/", views.download_view, name="download"),
    path("<uuid:pk>/elimina/", views.delete_view, name="delete"),
]
