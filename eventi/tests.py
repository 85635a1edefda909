"""
Tests per app eventi.
"""

from datetime import date

from django.contrib.auth import get_user_model
from django.test import TestCase
from django.urls import reverse

from core.models import AuditLog

from .models import Categoria, Edizione, Evento, Nota, PuntoProgramma
from .utils import SESSION_KEY, eventi_accessibili

User = get_user_model()


class EventiTestMixin:
    def setUp(self):
        self.admin = User.objects.create_user(username="admin", password="pwd", ruolo="admin")
        self.owner = User.objects.create_user(username="owner", password="pwd")
        self.membro = User.objects.create_user(username="membro", password="pwd")
        self.estraneo = User.objects.create_user(username="estraneo", password="pwd")

        self.evento = Evento.objects.create(
            titolo="Matrimonio Rossi",
            data=date(2026, 6, 20),
            luogo="Villa Test",
            proprietario=self.owner,
        )
        self.evento.membri.add(self.membro)


class EventoModelTestCase(EventiTestMixin, TestCase):
    """Test per model Evento e helper di accesso"""

    def test_codice_generato(self):
        self.assertTrue(self.evento.codice.startswith("EVT-"))
        self.assertEqual(self.evento.codice.split("-")[-1], "0001")

    def test_eventi_accessibili(self):
        altro = Evento.objects.create(titolo="Altro", data=date(2026, 7, 1), proprietario=self.admin)

        self.assertIn(self.evento, eventi_accessibili(self.owner))
        self.assertIn(self.evento, eventi_accessibili(self.membro))
        self.assertNotIn(altro, eventi_accessibili(self.membro))
        self.assertEqual(eventi_accessibili(self.estraneo).count(), 0)
        self.assertEqual(eventi_accessibili(self.admin).count(), 2)

    def test_evento_soft_deleted_non_accessibile(self):
        self.evento.soft_delete(user=self.owner)
        self.assertEqual(eventi_accessibili(self.owner).count(), 0)

    def test_edizione_imposta_pagine(self):
        edizione = Edizione(codice="base", nome="Base")
        edizione.imposta_pagine(["inviti", "", "report", "inviti", "  "])
        self.assertEqual(edizione.pagine, ["inviti", "report"])


class EventoViewsTestCase(EventiTestMixin, TestCase):
    """Test per le view degli eventi"""

    def test_lista_richiede_login(self):
        response = self.client.get(reverse("eventi:evento_list"))
        self.assertEqual(response.status_code, 302)
        self.assertIn(reverse("users:login"), response.url)

    def test_lista_mostra_solo_eventi_accessibili(self):
        Evento.objects.create(titolo="Segreto", data=date(2026, 8, 1), proprietario=self.admin)
        self.client.login(username="membro", password="pwd")

        response = self.client.get(reverse("eventi:evento_list"))

        self.assertEqual(response.status_code, 200)
        titoli = [e.titolo for e in response.context["eventi"]]
        self.assertEqual(titoli, ["Matrimonio Rossi"])

    def test_create_imposta_proprietario_e_evento_corrente(self):
        self.client.login(username="estraneo", password="pwd")

        response = self.client.post(
            reverse("eventi:evento_create"),
            {"titolo": "Festa", "data": "2026-09-10", "luogo": "Roma", "descrizione": ""},
        )

        evento = Evento.objects.get(titolo="Festa")
        self.assertRedirects(response, evento.get_absolute_url(), fetch_redirect_response=False)
        self.assertEqual(evento.proprietario, self.estraneo)
        self.assertEqual(self.client.session[SESSION_KEY], str(evento.pk))
        self.assertTrue(
            AuditLog.objects.filter(azione="CREATE", tipo_entita="Evento", id_entita=str(evento.pk)).exists()
        )

    def test_detail_negato_a_estraneo(self):
        self.client.login(username="estraneo", password="pwd")
        response = self.client.get(self.evento.get_absolute_url())
        self.assertEqual(response.status_code, 403)

    def test_update_solo_proprietario(self):
        self.client.login(username="membro", password="pwd")
        url = reverse("eventi:evento_update", kwargs={"pk": self.evento.pk})
        self.assertEqual(self.client.get(url).status_code, 403)

        self.client.login(username="owner", password="pwd")
        response = self.client.post(
            url, {"titolo": "Matrimonio Bianchi", "data": "2026-06-20", "luogo": "Villa Test"}
        )
        self.assertEqual(response.status_code, 302)
        self.evento.refresh_from_db()
        self.assertEqual(self.evento.titolo, "Matrimonio Bianchi")

    def test_switch_evento(self):
        altro = Evento.objects.create(titolo="Altro", data=date(2026, 7, 1), proprietario=self.owner)
        self.client.login(username="owner", password="pwd")

        response = self.client.post(reverse("eventi:evento_switch", kwargs={"pk": altro.pk}))

        self.assertRedirects(response, reverse("dashboard"), fetch_redirect_response=False)
        self.assertEqual(self.client.session[SESSION_KEY], str(altro.pk))

    def test_switch_evento_senza_accesso(self):
        self.client.login(username="estraneo", password="pwd")

        response = self.client.post(reverse("eventi:evento_switch", kwargs={"pk": self.evento.pk}))

        self.assertRedirects(response, reverse("eventi:evento_list"), fetch_redirect_response=False)
        self.assertNotIn(SESSION_KEY, self.client.session)

    def test_membri(self):
        self.client.login(username="owner", password="pwd")

        response = self.client.post(
            reverse("eventi:evento_membri", kwargs={"pk": self.evento.pk}),
            {"membri": [str(self.estraneo.pk)]},
        )

        self.assertEqual(response.status_code, 302)
        self.assertEqual(list(self.evento.membri.all()), [self.estraneo])


class CategoriaViewsTestCase(EventiTestMixin, TestCase):
    """Test per le aree (solo admin)"""

    def test_create_riservata_admin(self):
        self.client.login(username="owner", password="pwd")
        response = self.client.get(reverse("eventi:categoria_create"))
        self.assertEqual(response.status_code, 403)

    def test_slug_duplicato_rifiutato(self):
        Categoria.objects.create(slug="catering", nome="Catering")
        self.client.login(username="admin", password="pwd")

        response = self.client.post(
            reverse("eventi:categoria_create"),
            {
                "slug": "catering",
                "nome": "Catering 2",
                "icona": "bi-cup",
                "colore": "#000000",
                "ordine": 1,
                "attiva": "on",
            },
        )

        self.assertEqual(response.status_code, 200)
        self.assertIn("ID area già presente", response.context["form"].errors["slug"])
        self.assertEqual(Categoria.objects.filter(slug="catering").count(), 1)

    def test_create_categoria(self):
        self.client.login(username="admin", password="pwd")

        response = self.client.post(
            reverse("eventi:categoria_create"),
            {
                "slug": "catering",
                "nome": "Catering",
                "icona": "bi-cup",
                "colore": "#000000",
                "ordine": 1,
                "attiva": "on",
            },
        )

        self.assertRedirects(response, reverse("eventi:categoria_list"))
        self.assertTrue(Categoria.objects.filter(slug="catering", nome="Catering").exists())

    def test_slug_non_modificabile(self):
        categoria = Categoria.objects.create(slug="catering", nome="Catering")
        self.client.login(username="admin", password="pwd")

        self.client.post(
            reverse("eventi:categoria_update", kwargs={"pk": categoria.pk}),
            {
                "slug": "altro",
                "nome": "Catering e bar",
                "icona": "bi-cup",
                "colore": "#000000",
                "ordine": 1,
                "attiva": "on",
            },
        )

        categoria.refresh_from_db()
        self.assertEqual(categoria.slug, "catering")
        self.assertEqual(categoria.nome, "Catering e bar")

    def test_delete_disattiva(self):
        categoria = Categoria.objects.create(slug="location", nome="Location")
        self.client.login(username="admin", password="pwd")

        self.client.post(reverse("eventi:categoria_delete", kwargs={"pk": categoria.pk}))

        categoria.refresh_from_db()
        self.assertFalse(categoria.is_active)
        self.assertFalse(categoria.attiva)


class EdizioneViewsTestCase(EventiTestMixin, TestCase):
    def test_update_pagine_deduplicate(self):
        edizione = Edizione.objects.create(codice="pro", nome="Pro")
        catering = Categoria.objects.create(slug="catering", nome="Catering")
        self.client.login(username="admin", password="pwd")

        response = self.client.post(
            reverse("eventi:edizione_update", kwargs={"pk": edizione.pk}),
            {
                "nome": "Pro",
                "prezzo_annuale_cents": 9900,
                "categorie": [str(catering.pk)],
                "pagine": ["inviti", "report"],
            },
        )

        self.assertRedirects(response, reverse("eventi:edizione_list"), fetch_redirect_response=False)
        edizione.refresh_from_db()
        self.assertEqual(edizione.pagine, ["inviti", "report"])
        self.assertEqual(edizione.prezzo_annuale_cents, 9900)
        self.assertEqual(list(edizione.categorie.all()), [catering])

    def test_lista_negata_a_utente(self):
        self.client.login(username="owner", password="pwd")
        response = self.client.get(reverse("eventi:edizione_list"))
        self.assertEqual(response.status_code, 403)


class NoteProgrammaTestCase(EventiTestMixin, TestCase):
    def test_nota_create_e_delete(self):
        self.client.login(username="membro", password="pwd")
        self.client.post(reverse("eventi:nota_create"), {"titolo": "Chiamare fiorista", "contenuto": ""})

        nota = Nota.objects.get(titolo="Chiamare fiorista")
        self.assertEqual(nota.evento, self.evento)
        self.assertEqual(nota.autore, self.membro)

        # un altro utente non può eliminarla
        self.client.login(username="owner", password="pwd")
        self.client.post(reverse("eventi:nota_delete", kwargs={"pk": nota.pk}))
        nota.refresh_from_db()
        self.assertTrue(nota.is_active)

        self.client.login(username="membro", password="pwd")
        self.client.post(reverse("eventi:nota_delete", kwargs={"pk": nota.pk}))
        nota.refresh_from_db()
        self.assertFalse(nota.is_active)

    def test_programma_richiede_pagina(self):
        self.client.login(username="owner", password="pwd")
        response = self.client.get(reverse("eventi:programma_list"))
        self.assertEqual(response.status_code, 403)

    def test_programma_ordinato_per_ora(self):
        PuntoProgramma.objects.create(evento=self.evento, ora="18:00", titolo="Cena")
        PuntoProgramma.objects.create(evento=self.evento, ora="16:00", titolo="Cerimonia")
        self.client.login(username="admin", password="pwd")
        session = self.client.session
        session[SESSION_KEY] = str(self.evento.pk)
        session.save()

        response = self.client.get(reverse("eventi:programma_list"))

        self.assertEqual(response.status_code, 200)
        self.assertEqual([p.titolo for p in response.context["punti"]], ["Cerimonia", "Cena"])
