"""
Tests per app attivita.
"""

import json
from datetime import date

from django.contrib.auth import get_user_model
from django.test import TestCase
from django.urls import reverse

from core.models import AuditLog
from eventi.models import Categoria, Edizione, Evento
from eventi.utils import SESSION_KEY

from .models import ChecklistItem, Task

User = get_user_model()


class TaskModelTestCase(TestCase):
    """Test per l'invariante stato/completato_il"""

    def setUp(self):
        self.user = User.objects.create_user(username="owner")
        self.evento = Evento.objects.create(titolo="Gala", data=date(2026, 5, 1), proprietario=self.user)
        self.categoria = Categoria.objects.create(slug="catering", nome="Catering")

    def test_completato_il(self):
        task = Task.objects.create(evento=self.evento, categoria=self.categoria, titolo="Menu")
        self.assertIsNone(task.completato_il)

        task.stato = Task.COMPLETED
        task.save()
        self.assertIsNotNone(task.completato_il)

        task.stato = Task.IN_PROGRESS
        task.save()
        self.assertIsNone(task.completato_il)

    def test_descrizione_vuota_diventa_null(self):
        task = Task.objects.create(
            evento=self.evento, categoria=self.categoria, titolo="Menu", descrizione=""
        )
        task.refresh_from_db()
        self.assertIsNone(task.descrizione)

    def test_checklist_toggle(self):
        item = ChecklistItem.objects.create(evento=self.evento, categoria=self.categoria, titolo="Sedie")
        self.assertEqual(item.toggle(), ChecklistItem.COMPLETED)
        self.assertEqual(item.toggle(), ChecklistItem.NOT_STARTED)


class AttivitaViewsTestCase(TestCase):
    def setUp(self):
        self.catering = Categoria.objects.create(slug="catering", nome="Catering")
        self.location = Categoria.objects.create(slug="location", nome="Location")
        edizione = Edizione.objects.create(codice="base", nome="Base")
        edizione.categorie.add(self.catering)

        self.user = User.objects.create_user(username="mario", password="pwd", edizione=edizione)
        self.evento = Evento.objects.create(titolo="Gala", data=date(2026, 5, 1), proprietario=self.user)
        self.client.login(username="mario", password="pwd")
        session = self.client.session
        session[SESSION_KEY] = str(self.evento.pk)
        session.save()

    def test_area_non_consentita(self):
        response = self.client.get(reverse("attivita:categoria", kwargs={"slug": "location"}))
        self.assertEqual(response.status_code, 403)

    def test_area_inesistente(self):
        response = self.client.get(reverse("attivita:categoria", kwargs={"slug": "nessuna"}))
        self.assertEqual(response.status_code, 404)

    def test_lista_con_filtri(self):
        Task.objects.create(evento=self.evento, categoria=self.catering, titolo="Menu", assegnato_a=self.user)
        Task.objects.create(evento=self.evento, categoria=self.catering, titolo="Torta", stato=Task.COMPLETED)
        Task.objects.create(evento=self.evento, categoria=self.location, titolo="Sala")

        url = reverse("attivita:categoria", kwargs={"slug": "catering"})
        response = self.client.get(url)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(len(response.context["tasks"]), 2)

        response = self.client.get(url, {"stato": Task.COMPLETED})
        self.assertEqual([t.titolo for t in response.context["tasks"]], ["Torta"])

        response = self.client.get(url, {"assegnato": "me"})
        self.assertEqual([t.titolo for t in response.context["tasks"]], ["Menu"])

    def test_create_task(self):
        response = self.client.post(
            reverse("attivita:task_create", kwargs={"slug": "catering"}),
            {"titolo": "Degustazione", "stato": Task.PENDING, "priorita": Task.HIGH},
        )

        self.assertRedirects(
            response,
            reverse("attivita:categoria", kwargs={"slug": "catering"}),
            fetch_redirect_response=False,
        )
        task = Task.objects.get(titolo="Degustazione")
        self.assertEqual(task.evento, self.evento)
        self.assertEqual(task.categoria, self.catering)
        self.assertTrue(AuditLog.objects.filter(azione="CREATE", tipo_entita="Task").exists())

    def test_cambio_stato_ajax(self):
        task = Task.objects.create(evento=self.evento, categoria=self.catering, titolo="Menu")
        url = reverse("attivita:task_stato", kwargs={"slug": "catering", "pk": task.pk})

        response = self.client.post(
            url, data=json.dumps({"stato": Task.COMPLETED}), content_type="application/json"
        )

        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertEqual(data["stato"], Task.COMPLETED)
        self.assertIsNotNone(data["completato_il"])

        response = self.client.post(url, {"stato": "BOH"})
        self.assertEqual(response.status_code, 400)

    def test_delete_task(self):
        task = Task.objects.create(evento=self.evento, categoria=self.catering, titolo="Menu")
        self.client.post(reverse("attivita:task_delete", kwargs={"slug": "catering", "pk": task.pk}))
        task.refresh_from_db()
        self.assertFalse(task.is_active)

    def test_checklist_toggle(self):
        item = ChecklistItem.objects.create(evento=self.evento, categoria=self.catering, titolo="Sedie")
        url = reverse("attivita:checklist_toggle", kwargs={"slug": "catering", "pk": item.pk})

        response = self.client.post(url)

        self.assertTrue(response.json()["completato"])
        item.refresh_from_db()
        self.assertEqual(item.stato, ChecklistItem.COMPLETED)
        self.assertIsNotNone(item.completato_il)
