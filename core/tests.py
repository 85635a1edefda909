"""
Tests per app core.
"""

from datetime import date
from decimal import Decimal
from unittest import mock

from django.contrib.auth import get_user_model
from django.db import DatabaseError
from django.test import RequestFactory, TestCase
from django.urls import reverse
from django.views import View

from eventi.models import Evento

from .audit import get_client_ip, registra_audit
from .mixins import JSONResponseMixin
from .models import AuditLog
from .pdf_generator import (
    DONE_LABEL,
    PDFReport,
    column_widths,
    format_value,
    generate_pdf_response,
    sanitize,
    wrap_text,
)
from .qr_code_generator import generate_qr_code, parametri_qr

User = get_user_model()


# ============================================================================
# PDF
# ============================================================================


class PDFGeneratorTestCase(TestCase):
    def test_sanitize(self):
        self.assertEqual(sanitize("  Menu\u200b  \x07vegano\n\tok "), "Menu vegano ok")
        self.assertEqual(sanitize(None), "")

    def test_wrap_text(self):
        self.assertEqual(wrap_text("uno due tre", 7), ["uno due", "tre"])
        self.assertEqual(wrap_text("", 10), [""])
        self.assertEqual(wrap_text("parolalunghissima x", 5), ["parolalunghissima", "x"])

    def test_column_widths(self):
        headers = ["A", "B", "C", "D", "E", DONE_LABEL]
        self.assertEqual(column_widths(headers, 551), [150, 170, 70, 60, 65, 36])
        self.assertEqual(column_widths(["A", "B", "C", "D", "E"], 600), [170, 210, 70, 60, 90])
        self.assertEqual(column_widths(["A", "B"], 600), [300, 300])

    def test_column_widths_pagina_a4(self):
        larghezza = PDFReport("x").content_width

        for headers in (["A", "B", "C", "D", "E", DONE_LABEL], ["A", "B", "C", "D", "E"]):
            widths = column_widths(headers, larghezza)
            self.assertAlmostEqual(sum(widths), larghezza)
            # padding delle celle 6 + 2
            self.assertTrue(all(w > 30 for w in widths))

    def test_render_tabelle_a4(self):
        report = PDFReport("Presenze")
        report.add_section("Ospiti", table=(["Nome", "Org.", "Tel.", "Tavolo", "Check-in"], [["Mario", "", "", "3", ""]]))
        report.add_section("Checklist", table=(["Punto", "Nota", "Stato", "Scadenza", DONE_LABEL], [["Luci"]]))
        report.add_section("Vuota", table=(["Nome", "Org.", "Tel.", "Tavolo", "Note"], []))

        self.assertTrue(report.render().startswith(b"%PDF"))

    def test_format_value(self):
        self.assertEqual(format_value(date(2026, 5, 1)), "01/05/2026")
        self.assertEqual(format_value(Decimal("3.5")), "3.50")
        self.assertEqual(format_value(True), "Sì")
        self.assertEqual(format_value(None), "-")

    def test_render(self):
        report = PDFReport("Report: Area Catering", subtitle="Gala")
        report.add_section(
            "Attività",
            table=(["Attività", "Nota", "Stato", "Scadenza", "Prio", DONE_LABEL], [["Menu", "", "", "", "", ""]]),
        )
        report.add_section("Note", paragraphs=["- Menu: confermato"])

        self.assertTrue(report.render().startswith(b"%PDF"))

    def test_generate_pdf_response(self):
        response = generate_pdf_response([{"nome": "Mario", "tavolo": 3}], "ospiti", title="Ospiti")

        self.assertEqual(response["Content-Type"], "application/pdf")
        self.assertIn('filename="ospiti.pdf"', response["Content-Disposition"])
        self.assertTrue(generate_pdf_response([], "vuoto").content.startswith(b"%PDF"))


# ============================================================================
# AUDIT
# ============================================================================


class AuditTestCase(TestCase):
    def setUp(self):
        self.factory = RequestFactory()
        self.user = User.objects.create_user(username="owner", password="pwd", ruolo="admin")

    def test_client_ip(self):
        request = self.factory.get("/", HTTP_X_FORWARDED_FOR="10.0.0.1, 10.0.0.2", REMOTE_ADDR="1.1.1.1")
        self.assertEqual(get_client_ip(request), "10.0.0.1")

        request = self.factory.get("/", HTTP_CF_CONNECTING_IP="2.2.2.2", REMOTE_ADDR="1.1.1.1")
        self.assertEqual(get_client_ip(request), "2.2.2.2")
        self.assertEqual(get_client_ip(None), "")

    def test_registra_audit(self):
        request = self.factory.get("/ospiti/", HTTP_USER_AGENT="pytest")
        request.user = self.user

        log = registra_audit(request, "EXPORT", "Ospite", id_entita=42, descrizione="PDF")

        self.assertEqual(log.utente, self.user)
        self.assertEqual(log.id_entita, "42")
        self.assertEqual(log.user_agent, "pytest")
        self.assertEqual(log.url, "/ospiti/")

    def test_errore_non_propagato(self):
        with mock.patch.object(AuditLog.objects, "create", side_effect=DatabaseError("db giù")):
            self.assertIsNone(registra_audit(None, "LOGIN", "User"))

    def test_lista_solo_admin(self):
        registra_audit(None, "LOGIN", "User", utente=self.user)
        User.objects.create_user(username="utente", password="pwd")

        self.client.login(username="utente", password="pwd")
        self.assertEqual(self.client.get(reverse("core:audit_log_list")).status_code, 403)

        self.client.login(username="owner", password="pwd")
        response = self.client.get(reverse("core:audit_log_list"), {"azione": "LOGIN"})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.context["total"], 1)


# ============================================================================
# VIEWS
# ============================================================================


class EchoView(JSONResponseMixin, View):
    def get(self, request):
        if request.GET.get("errore"):
            return self.render_to_json_error("richiesta non valida")
        return self.render_to_json_response({"ok": True})


class CoreViewsTestCase(TestCase):
    def setUp(self):
        self.user = User.objects.create_user(username="owner", password="pwd", ruolo="admin")
        self.client.login(username="owner", password="pwd")

    def test_qr_code(self):
        response = self.client.get(reverse("core:serve_qr_code"), {"data": "https://example.com"})
        self.assertEqual(response["Content-Type"], "image/png")
        self.assertTrue(response.content.startswith(b"\x89PNG"))

        self.assertEqual(self.client.get(reverse("core:serve_qr_code")).status_code, 400)
        response = self.client.get(reverse("core:serve_qr_code"), {"data": "x", "size": "99"})
        self.assertEqual(response.status_code, 400)

    def test_parametri_qr(self):
        self.assertEqual(parametri_qr("12", "0"), (12, 0))
        for size, border in (("abc", 4), (0, 4), (10, 21)):
            with self.assertRaises(ValueError):
                parametri_qr(size, border)
        self.assertTrue(generate_qr_code("EVT-1").getvalue().startswith(b"\x89PNG"))

    def test_ricerca_globale(self):
        Evento.objects.create(titolo="Gala di primavera", data=date(2026, 5, 1), proprietario=self.user)

        response = self.client.get(reverse("core:global_search"), {"q": "primavera"})

        dati = response.json()
        self.assertTrue(dati["success"])
        self.assertEqual(dati["results"][0]["category"], "Eventi")
        self.assertEqual(self.client.get(reverse("core:global_search"), {"q": "x"}).status_code, 400)

    def test_json_response_mixin(self):
        factory = RequestFactory()
        self.assertEqual(EchoView.as_view()(factory.get("/")).status_code, 200)
        self.assertEqual(EchoView.as_view()(factory.get("/", {"errore": "1"})).status_code, 400)
