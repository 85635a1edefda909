"""
Tests per app users: allow list, login/logout, gestione utenti e permessi.
"""

from datetime import date, timedelta

from django.contrib.auth import get_user_model
from django.test import RequestFactory, TestCase
from django.urls import reverse

from core.models import AuditLog
from eventi.models import Categoria, Edizione, Evento

from .models import PermessoCategoria, PermessoPagina
from .permissions import can_access_event, get_allow_list, pagina_richiesta

User = get_user_model()


class AllowListTestCase(TestCase):
    """Test per get_allow_list e can_access_event"""

    def setUp(self):
        self.catering = Categoria.objects.create(slug="catering", nome="Catering")
        self.location = Categoria.objects.create(slug="location", nome="Location")
        self.musica = Categoria.objects.create(slug="musica", nome="Musica", attiva=False)

        self.edizione = Edizione.objects.create(codice="base", nome="Base", pagine=["inviti", "report"])
        self.edizione.categorie.add(self.catering, self.musica)

        self.user = User.objects.create_user(
            username="mario",
            password="pwd",
            edizione=self.edizione,
            scadenza_edizione=date.today() + timedelta(days=30),
        )

    def test_admin_vede_tutto(self):
        admin = User.objects.create_user(username="admin", ruolo="admin")
        allow_list = get_allow_list(admin)

        self.assertTrue(allow_list.is_admin)
        self.assertTrue(allow_list.consente_pagina("audit_log"))
        self.assertEqual(allow_list.categorie, frozenset({"catering", "location"}))

    def test_superuser_e_admin(self):
        root = User.objects.create_superuser(username="root", password="pwd")
        self.assertTrue(get_allow_list(root).is_admin)

    def test_edizione_attiva(self):
        allow_list = get_allow_list(self.user)

        self.assertEqual(allow_list.pagine, frozenset({"inviti", "report"}))
        # aree disattivate escluse
        self.assertEqual(allow_list.categorie, frozenset({"catering"}))

    def test_edizione_scaduta(self):
        self.user.scadenza_edizione = date.today() - timedelta(days=1)
        self.user.save()

        allow_list = get_allow_list(self.user)

        self.assertEqual(allow_list.pagine, frozenset())
        self.assertEqual(allow_list.categorie, frozenset())

    def test_override(self):
        PermessoPagina.objects.create(utente=self.user, pagina="report", consentito=False)
        PermessoPagina.objects.create(utente=self.user, pagina="galleria", consentito=True)
        PermessoCategoria.objects.create(utente=self.user, categoria=self.location, consentito=True)
        PermessoCategoria.objects.create(utente=self.user, categoria=self.catering, consentito=False)

        allow_list = get_allow_list(self.user)

        self.assertEqual(allow_list.pagine, frozenset({"inviti", "galleria"}))
        self.assertEqual(allow_list.categorie, frozenset({"location"}))

    def test_can_access_event(self):
        owner = User.objects.create_user(username="owner")
        evento = Evento.objects.create(titolo="Gala", data=date.today(), proprietario=owner)

        self.assertTrue(can_access_event(owner, evento))
        self.assertFalse(can_access_event(self.user, evento))
        evento.membri.add(self.user)
        self.assertTrue(can_access_event(self.user, evento))

    def test_decoratore_pagina_richiesta(self):
        from django.core.exceptions import PermissionDenied
        from django.http import HttpResponse

        @pagina_richiesta("tavoli")
        def view(request):
            return HttpResponse("ok")

        request = RequestFactory().get("/")
        request.user = self.user
        with self.assertRaises(PermissionDenied):
            view(request)

        request = RequestFactory().get("/")
        request.user = self.user
        PermessoPagina.objects.create(utente=self.user, pagina="tavoli")
        self.assertEqual(view(request).status_code, 200)


class AuthViewsTestCase(TestCase):
    def setUp(self):
        self.user = User.objects.create_user(username="mario", password="segreta")

    def test_login_remember_me(self):
        response = self.client.post(
            reverse("users:login"),
            {"username": " mario ", "password": "segreta", "remember_me": "on"},
        )

        self.assertRedirects(response, reverse("dashboard"), fetch_redirect_response=False)
        self.assertFalse(self.client.session.get_expire_at_browser_close())
        self.assertTrue(AuditLog.objects.filter(azione="LOGIN", utente=self.user).exists())

    def test_login_senza_remember_me(self):
        self.client.post(reverse("users:login"), {"username": "mario", "password": "segreta"})
        self.assertTrue(self.client.session.get_expire_at_browser_close())

    def test_login_errato(self):
        response = self.client.post(reverse("users:login"), {"username": "mario", "password": "no"})
        self.assertEqual(response.status_code, 200)
        self.assertFalse(AuditLog.objects.filter(azione="LOGIN").exists())

    def test_login_next_esterno_ignorato(self):
        response = self.client.post(
            reverse("users:login"),
            {"username": "mario", "password": "segreta", "next": "https://evil.example.com/"},
        )
        self.assertRedirects(response, reverse("dashboard"), fetch_redirect_response=False)

    def test_logout(self):
        self.client.login(username="mario", password="segreta")

        response = self.client.post(reverse("users:logout"))

        self.assertRedirects(response, reverse("users:login"), fetch_redirect_response=False)
        self.assertTrue(AuditLog.objects.filter(azione="LOGOUT", utente=self.user).exists())

    def test_dashboard_senza_eventi(self):
        self.client.login(username="mario", password="segreta")
        response = self.client.get(reverse("dashboard"))
        self.assertEqual(response.status_code, 200)
        self.assertIsNone(response.context["evento"])


class DashboardTestCase(TestCase):
    def test_contatori_evento_corrente(self):
        from attivita.models import ChecklistItem, Task
        from ospiti.models import Ospite

        user = User.objects.create_user(username="owner", password="pwd")
        evento = Evento.objects.create(titolo="Gala", data=date.today(), proprietario=user)
        catering = Categoria.objects.create(slug="catering", nome="Catering")
        Ospite.objects.create(evento=evento, nome="Anna Verdi", stato=Ospite.CONFIRMED)
        Ospite.objects.create(evento=evento, nome="Luca Neri")
        Task.objects.create(evento=evento, categoria=catering, titolo="Menu")
        Task.objects.create(evento=evento, categoria=catering, titolo="Torta", stato=Task.COMPLETED)
        ChecklistItem.objects.create(evento=evento, categoria=catering, titolo="Tovaglie")

        self.client.login(username="owner", password="pwd")
        response = self.client.get(reverse("dashboard"))

        stats = response.context["stats"]
        self.assertEqual(stats["ospiti_totali"], 2)
        self.assertEqual(stats["ospiti_confermati"], 1)
        self.assertEqual(stats["task_aperti"], 1)
        self.assertEqual(stats["task_completati"], 1)
        self.assertEqual(stats["checklist_aperte"], 1)


class GestioneUtentiTestCase(TestCase):
    def setUp(self):
        self.admin = User.objects.create_user(username="admin", password="pwd", ruolo="admin")
        self.user = User.objects.create_user(username="mario", password="pwd")
        self.catering = Categoria.objects.create(slug="catering", nome="Catering")

    def test_lista_riservata_admin(self):
        self.client.login(username="mario", password="pwd")
        self.assertEqual(self.client.get(reverse("users:user_list")).status_code, 403)

        self.client.login(username="admin", password="pwd")
        self.assertEqual(self.client.get(reverse("users:user_list")).status_code, 200)

    def test_create(self):
        self.client.login(username="admin", password="pwd")

        response = self.client.post(
            reverse("users:user_create"),
            {
                "username": "giulia",
                "email": "giulia@example.com",
                "first_name": "Giulia",
                "last_name": "Bianchi",
                "telefono": "",
                "ruolo": "utente",
                "password1": "Una-Password-Lunga-42",
                "password2": "Una-Password-Lunga-42",
            },
        )

        self.assertRedirects(response, reverse("users:user_list"), fetch_redirect_response=False)
        self.assertTrue(User.objects.filter(username="giulia").exists())

    def test_permessi_override(self):
        PermessoPagina.objects.create(utente=self.user, pagina="report", consentito=True)
        self.client.login(username="admin", password="pwd")

        self.client.post(
            reverse("users:user_permissions_manage", kwargs={"pk": self.user.pk}),
            {"pagina_inviti": "1", "pagina_report": "", "categoria_catering": "0"},
        )

        self.assertTrue(PermessoPagina.objects.get(utente=self.user, pagina="inviti").consentito)
        self.assertFalse(PermessoPagina.objects.filter(utente=self.user, pagina="report").exists())
        self.assertFalse(
            PermessoCategoria.objects.get(utente=self.user, categoria=self.catering).consentito
        )

    def test_profilo(self):
        self.client.login(username="mario", password="pwd")

        self.client.post(
            reverse("users:profilo"),
            {"first_name": "Mario", "last_name": "Rossi", "email": "m@example.com", "telefono": "123"},
        )

        self.user.refresh_from_db()
        self.assertEqual(self.user.nome_visualizzato, "Mario Rossi")
