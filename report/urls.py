"""
REPORT URLS
===========
"""

from django.urls import path

from . import views

app_name = "report"

urlpatterns = [
    path("", views.report_view, name="report"),
    path("pdf/", views.report_pdf_view, name="report_pdf"),
]
