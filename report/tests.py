"""
Tests per app report.
"""

from datetime import date, datetime

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.test import TestCase
from django.urls import reverse
from django.utils import timezone

from attivita.models import ChecklistItem, Task
from core.models import AuditLog
from core.pdf_generator import PDFReport
from eventi.models import Categoria, Edizione, Evento, Nota
from ospiti.models import Ospite

from .reports import _report_responsabile, _report_tutti, dettagli_ospite, genera_report, sezioni_ospiti

User = get_user_model()


class ReportTestMixin:
    def setUp(self):
        self.admin = User.objects.create_user(username="admin", password="pwd", ruolo="admin")
        self.anna = User.objects.create_user(username="anna", first_name="Anna", last_name="Verdi")
        self.bruno = User.objects.create_user(username="bruno", first_name="bruno", last_name="Neri")
        self.evento = Evento.objects.create(titolo="Gala", data=date(2026, 5, 1), proprietario=self.admin)
        self.catering = Categoria.objects.create(slug="catering", nome="Catering", responsabile=self.anna)

        Task.objects.create(evento=self.evento, categoria=self.catering, titolo="Menu", assegnato_a=self.anna)
        Task.objects.create(evento=self.evento, categoria=self.catering, titolo="Torta", assegnato_a=self.bruno)
        Task.objects.create(evento=self.evento, categoria=self.catering, titolo="Vini")
        ChecklistItem.objects.create(evento=self.evento, categoria=self.catering, titolo="Sedie")
        Nota.objects.create(evento=self.evento, categoria=self.catering, titolo="Menu", contenuto="vegano")

        Ospite.objects.create(evento=self.evento, nome="Zeno", is_vip=True, numero_tavolo=1)
        Ospite.objects.create(evento=self.evento, nome="Aldo")


class ReportBuilderTestCase(ReportTestMixin, TestCase):
    def test_raggruppamento_per_utente(self):
        report = PDFReport("Test")
        _report_tutti(report, self.evento)

        headings = [s.heading for s in report.sections]
        self.assertEqual(
            headings, ["Utente: Anna Verdi (1)", "Utente: bruno Neri (1)", "Utente: Non assegnato (1)"]
        )

    def test_sezioni_ospiti(self):
        report = PDFReport("Test")
        sezioni_ospiti(report, self.evento)

        totale, vip = report.sections
        self.assertEqual(totale.heading, "Lista ospiti (totale) (2)")
        self.assertEqual([r[0] for r in totale.rows], ["Aldo", "Zeno"])
        self.assertEqual(vip.heading, "Lista ospiti (VIP) (1)")
        self.assertEqual(vip.rows[0][3], "1")

    def test_dettagli_ospite(self):
        ospite = Ospite(nome="X", richiede_accoglienza=True)
        self.assertEqual(dettagli_ospite(ospite), "Accoglienza: Sì")

        ospite.accoglienza_da = "Lucia"
        ospite.data_arrivo = timezone.make_aware(datetime(2026, 5, 1, 18, 30))
        self.assertEqual(dettagli_ospite(ospite), "Accoglienza: Lucia | Arrivo: 01/05/2026 18:30")

        self.assertEqual(dettagli_ospite(Ospite(nome="Y")), "")

    def test_responsabile_senza_aree(self):
        report = PDFReport("Test")
        _report_responsabile(report, self.evento, self.bruno)
        self.assertEqual(report.sections[0].paragraphs, ["Nessuna area assegnata."])

    def test_responsabile_con_aree(self):
        report = PDFReport("Test")
        _report_responsabile(report, self.evento, self.anna)
        headings = [s.heading for s in report.sections]
        self.assertEqual(headings, ["Attività: Catering", "Checklist: Catering", "Note: Catering"])
        self.assertEqual(report.sections[2].paragraphs, ["- Menu: vegano"])

    def test_filename_e_parametri(self):
        self.assertEqual(genera_report(self.evento).filename, "report-tutte-attivita.pdf")
        self.assertEqual(
            genera_report(self.evento, "category", categoria=self.catering).filename,
            "report-area-catering.pdf",
        )
        with self.assertRaises(ValidationError):
            genera_report(self.evento, "user")
        with self.assertRaises(ValidationError):
            genera_report(self.evento, "boh")

    def test_render_ogni_tipo(self):
        parametri = {
            "all_by_user": {},
            "user": {"utente": self.anna},
            "category": {"categoria": self.catering},
            "responsible": {"responsabile": self.anna},
        }
        for tipo, kwargs in parametri.items():
            with self.subTest(tipo=tipo):
                self.assertTrue(genera_report(self.evento, tipo, **kwargs).pdf.startswith(b"%PDF"))

    def test_render_evento_vuoto(self):
        vuoto = Evento.objects.create(titolo="Vuoto", data=date(2026, 7, 1), proprietario=self.admin)
        self.assertTrue(genera_report(vuoto).pdf.startswith(b"%PDF"))


class ReportViewsTestCase(ReportTestMixin, TestCase):
    def setUp(self):
        super().setUp()
        self.client.login(username="admin", password="pwd")
        self.url = reverse("report:report_pdf")

    def test_evento_mancante(self):
        response = self.client.get(self.url)
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error"], "evento mancante")

    def test_parametri_obbligatori(self):
        for tipo in ("user", "category", "responsible"):
            response = self.client.get(self.url, {"type": tipo, "evento": self.evento.pk})
            self.assertEqual(response.status_code, 400, tipo)

        response = self.client.get(self.url, {"type": "boh", "evento": self.evento.pk})
        self.assertEqual(response.status_code, 400)

    def test_pdf_utente(self):
        response = self.client.get(self.url, {"type": "user", "evento": self.evento.pk, "utente": self.anna.pk})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response["Content-Type"], "application/pdf")
        self.assertIn("report-attivita-utente.pdf", response["Content-Disposition"])
        self.assertTrue(response.content.startswith(b"%PDF"))
        self.assertTrue(AuditLog.objects.filter(azione="EXPORT", tipo_entita="Report").exists())

    def test_pdf_responsabile(self):
        response = self.client.get(
            self.url, {"type": "responsible", "evento": self.evento.pk, "responsabile": self.anna.pk}
        )
        self.assertIn("report-responsabile.pdf", response["Content-Disposition"])

    def test_evento_non_accessibile(self):
        edizione = Edizione.objects.create(codice="base", nome="Base", pagine=["report"])
        User.objects.create_user(username="estraneo", password="pwd", edizione=edizione)
        self.client.logout()
        self.client.login(username="estraneo", password="pwd")

        response = self.client.get(self.url, {"evento": self.evento.pk})

        self.assertEqual(response.status_code, 403)

    def test_pagina_report(self):
        response = self.client.get(reverse("report:report"))
        self.assertEqual(response.status_code, 200)
        self.assertIn(self.catering, response.context["categorie"])
