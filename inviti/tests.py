"""
Tests per app inviti.
"""

from datetime import date

from django.contrib.auth import get_user_model
from django.core import mail
from django.core.exceptions import ValidationError
from django.test import TestCase
from django.urls import reverse

from core.models import AuditLog
from eventi.models import Evento
from eventi.utils import SESSION_KEY
from ospiti.checkin import esegui_checkin
from ospiti.models import Accompagnatore, Ospite

from .models import Invito, ModelloEmail
from .services import (
    accetta,
    annulla_risposte,
    crea_invito,
    invia_invito,
    invia_qr_pdf,
    qr_pdf,
    renderizza,
    rifiuta,
    traccia_apertura,
)
from .services.inviti import PIXEL_GIF
from .tasks import invia_inviti_task

User = get_user_model()


class ServizioGuasto:
    """Servizio e-mail che fallisce sempre."""

    def send_email(self, *args, **kwargs):
        return {"success": False, "error": "SMTP non raggiungibile"}


class InvitiTestMixin:
    def setUp(self):
        self.user = User.objects.create_user(username="owner", password="pwd", ruolo="admin")
        self.evento = Evento.objects.create(
            titolo="Gala <2026>", data=date(2026, 5, 1), luogo="Roma", proprietario=self.user
        )
        self.modello = ModelloEmail.objects.create(
            nome="Standard",
            lingua="it",
            is_default=True,
            oggetto="Invito: {{evento}}",
            corpo="<p>Gentile {{nome}}, {{ sconosciuto }}</p>"
            '<a href="{{link_accetta}}">Sì</a> <a href="{{link_rifiuta}}">No</a>',
        )
        self.ospite = Ospite.objects.create(evento=self.evento, nome="Mario", email="mario@example.com")

    def crea(self, ospite=None):
        invito, _ = crea_invito(ospite or self.ospite, self.evento)
        return invito


# ============================================================================
# SERVIZI
# ============================================================================


class CreazioneTestCase(InvitiTestMixin, TestCase):
    def test_crea_e_riusa(self):
        invito, creato = crea_invito(self.ospite, self.evento)
        self.assertTrue(creato)
        self.assertEqual(invito.modello, self.modello)
        self.assertEqual(len(invito.token_accetta), 64)
        self.assertNotEqual(invito.token_accetta, invito.token_rifiuta)

        stesso, creato = crea_invito(self.ospite, self.evento)
        self.assertFalse(creato)
        self.assertEqual(stesso.pk, invito.pk)

    def test_modello_per_categoria(self):
        stampa = ModelloEmail.objects.create(
            nome="Stampa", lingua="de", categoria="medien", oggetto="Presse", corpo="x"
        )
        ospite = Ospite.objects.create(evento=self.evento, nome="Anna", dati_aggiuntivi={"Kategorie": "Medya"})

        invito, _ = crea_invito(ospite, self.evento)

        self.assertEqual(invito.modello, stampa)
        self.assertEqual(invito.lingua, "de")

    def test_senza_template(self):
        self.modello.delete()
        with self.assertRaises(ValidationError):
            crea_invito(self.ospite, self.evento)

    def test_un_solo_predefinito_per_lingua(self):
        ModelloEmail.objects.create(nome="Nuovo", lingua="it", is_default=True, oggetto="x", corpo="x")
        self.modello.refresh_from_db()
        self.assertFalse(self.modello.is_default)


class RenderInvioTestCase(InvitiTestMixin, TestCase):
    def test_renderizza(self):
        invito = self.crea()

        contenuto = renderizza(invito, base_url="https://eventi.example.com")

        self.assertEqual(contenuto["oggetto"], "Invito: Gala <2026>")
        self.assertIn("Gentile Mario", contenuto["html"])
        self.assertIn("{{ sconosciuto }}", contenuto["html"])
        self.assertIn(f"https://eventi.example.com/inviti/r/{invito.token_accetta}/accetta/", contenuto["html"])
        self.assertIn(f"/inviti/r/{invito.token_tracking}/pixel.gif", contenuto["html"])
        self.assertNotIn("<p>", contenuto["testo"])

    def test_html_escape(self):
        self.modello.corpo = "<p>{{evento}}</p>"
        self.modello.save()
        invito = self.crea()
        self.assertIn("Gala &lt;2026&gt;", renderizza(invito)["html"])

    def test_testo_senza_entita_html(self):
        ospite = Ospite.objects.create(evento=self.evento, nome="Lucia D'Amico", email="lucia@example.com")

        contenuto = renderizza(self.crea(ospite))

        self.assertIn("Gentile Lucia D'Amico", contenuto["testo"])
        self.assertIn("Lucia D&#x27;Amico", contenuto["html"])

    def test_invio(self):
        invito = self.crea()

        esito = invia_invito(invito)

        self.assertTrue(esito["success"])
        self.assertEqual(len(mail.outbox), 1)
        self.assertEqual(mail.outbox[0].to, ["mario@example.com"])
        self.assertEqual(mail.outbox[0].alternatives[0][1], "text/html")
        invito.refresh_from_db()
        self.assertIsNotNone(invito.inviato_il)
        self.ospite.refresh_from_db()
        self.assertTrue(self.ospite.dati_aggiuntivi["Invito inviato"])

    def test_email_da_colonna_importata(self):
        ospite = Ospite.objects.create(
            evento=self.evento, nome="Anna", dati_aggiuntivi={"E-Mail privat": "anna@example.com"}
        )
        invia_invito(self.crea(ospite))
        self.assertEqual(mail.outbox[0].to, ["anna@example.com"])

    def test_ospite_senza_email(self):
        ospite = Ospite.objects.create(evento=self.evento, nome="Anna")
        invito = self.crea(ospite)

        esito = invia_invito(invito)

        self.assertFalse(esito["success"])
        invito.refresh_from_db()
        self.assertIsNone(invito.inviato_il)
        self.assertTrue(invito.errore_invio)

    def test_errore_smtp_registrato(self):
        invito = self.crea()
        esito = invia_invito(invito, servizio=ServizioGuasto())
        self.assertFalse(esito["success"])
        invito.refresh_from_db()
        self.assertEqual(invito.errore_invio, "SMTP non raggiungibile")

    def test_task_blocco(self):
        buono = self.crea()
        senza_email = self.crea(Ospite.objects.create(evento=self.evento, nome="Anna"))

        esito = invia_inviti_task([str(buono.pk), str(senza_email.pk)])

        self.assertEqual(esito, {"inviati": 1, "errori": 1})

    def test_invia_qr_pdf(self):
        invito = self.crea()
        with self.assertRaises(ValidationError):
            invia_qr_pdf(invito)

        accetta(invito.token_accetta)
        invito.refresh_from_db()
        esito = invia_qr_pdf(invito, base_url="https://eventi.example.com")

        self.assertTrue(esito["success"])
        self.assertEqual(mail.outbox[0].to, ["mario@example.com"])
        nome, contenuto, mimetype = mail.outbox[0].attachments[0]
        self.assertEqual((nome, mimetype), ("qr-checkin.pdf", "application/pdf"))
        self.assertTrue(contenuto.startswith(b"%PDF"))

    def test_invia_qr_pdf_senza_email(self):
        invito = self.crea(Ospite.objects.create(evento=self.evento, nome="Anna"))
        accetta(invito.token_accetta)
        invito.refresh_from_db()

        self.assertFalse(invia_qr_pdf(invito)["success"])
        self.assertEqual(len(mail.outbox), 0)


class RisposteTestCase(InvitiTestMixin, TestCase):
    def test_accetta(self):
        invito = self.crea()

        risultato, gia = accetta(invito.token_accetta)

        self.assertFalse(gia)
        self.assertEqual(risultato.risposta, Invito.ACCEPTED)
        self.assertIsNotNone(risultato.risposto_il)
        self.ospite.refresh_from_db()
        self.assertEqual(self.ospite.stato, Ospite.CONFIRMED)

        _, gia = accetta(invito.token_accetta)
        self.assertTrue(gia)

    def test_token_sconosciuto(self):
        self.assertIsNone(accetta("x" * 64))
        self.assertIsNone(rifiuta("x" * 64))

    def test_rifiuta_poi_accetta(self):
        invito = self.crea()
        rifiuta(invito.token_rifiuta)
        self.ospite.refresh_from_db()
        self.assertEqual(self.ospite.stato, Ospite.DECLINED)

        risultato, gia = accetta(invito.token_accetta)

        self.assertFalse(gia)
        self.assertEqual(risultato.risposta, Invito.ACCEPTED)

    def test_traccia_apertura(self):
        invito = self.crea()

        self.assertEqual(traccia_apertura(invito.token_tracking), PIXEL_GIF)
        invito.refresh_from_db()
        prima = invito.aperto_il
        self.assertIsNotNone(prima)

        traccia_apertura(invito.token_tracking)
        invito.refresh_from_db()
        self.assertEqual(invito.aperto_il, prima)
        self.assertEqual(traccia_apertura("sconosciuto"), PIXEL_GIF)

    def test_annulla_risposte(self):
        invito = self.crea()
        accetta(invito.token_accetta)

        self.assertEqual(annulla_risposte(self.evento), 1)

        invito.refresh_from_db()
        self.ospite.refresh_from_db()
        self.assertEqual(invito.risposta, Invito.PENDING)
        self.assertIsNone(invito.risposto_il)
        self.assertEqual(self.ospite.stato, Ospite.INVITED)

    def test_qr_pdf_e_checkin_accompagnatore(self):
        invito = self.crea()
        accompagnatore = Accompagnatore.objects.create(invito=invito, nome="Lucia", cognome="Rossi")

        self.assertTrue(qr_pdf(invito).startswith(b"%PDF"))

        risultato = esegui_checkin(accompagnatore.token_checkin)
        self.assertEqual(risultato.tipo, "accompagnatore")
        self.assertEqual(risultato.nome, "Lucia Rossi")
        accompagnatore.refresh_from_db()
        self.assertIsNotNone(accompagnatore.arrivato_il)


# ============================================================================
# VIEWS
# ============================================================================


class InvitiViewsTestCase(InvitiTestMixin, TestCase):
    def setUp(self):
        super().setUp()
        self.client.login(username="owner", password="pwd")
        session = self.client.session
        session[SESSION_KEY] = str(self.evento.pk)
        session.save()

    def test_lista_contatori(self):
        invito = self.crea()
        accetta(invito.token_accetta)

        response = self.client.get(reverse("inviti:invito_list"))

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.context["contatori"]["totale"], 1)
        self.assertEqual(response.context["contatori"]["accettati"], 1)

    def test_crea_e_invia(self):
        response = self.client.post(reverse("inviti:invito_crea"), {"ospiti": [self.ospite.pk], "lingua": "it"})
        self.assertRedirects(response, reverse("inviti:invito_list"), fetch_redirect_response=False)
        self.assertEqual(Invito.objects.count(), 1)

        self.client.post(reverse("inviti:invito_invia"))

        self.assertEqual(len(mail.outbox), 1)
        self.assertTrue(AuditLog.objects.filter(azione="SEND").exists())

    def test_pagine_pubbliche_senza_login(self):
        invito = self.crea()
        self.client.logout()

        response = self.client.get(reverse("inviti:accetta", kwargs={"token": invito.token_accetta}))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.context["tipo"], "accettato")

        response = self.client.get(reverse("inviti:rifiuta", kwargs={"token": "sconosciuto"}))
        self.assertEqual(response.status_code, 404)

        response = self.client.get(reverse("inviti:traccia", kwargs={"token": invito.token_tracking}))
        self.assertEqual(response["Content-Type"], "image/gif")
        self.assertEqual(response.content, PIXEL_GIF)

        response = self.client.get(reverse("inviti:qr_pdf_pubblico", kwargs={"token": invito.token_accetta}))
        self.assertEqual(response["Content-Type"], "application/pdf")

    def test_qr_pdf_pubblico_solo_se_accettato(self):
        invito = self.crea()
        response = self.client.get(reverse("inviti:qr_pdf_pubblico", kwargs={"token": invito.token_accetta}))
        self.assertEqual(response.status_code, 404)

    def test_invia_qr_pdf_pubblico(self):
        invito = self.crea()
        url = reverse("inviti:invia_qr_pdf", kwargs={"token": invito.token_accetta})
        self.client.logout()

        self.assertEqual(self.client.post(url).status_code, 404)

        accetta(invito.token_accetta)
        response = self.client.post(url)

        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.context["esito_qr"]["success"])
        self.assertEqual(len(mail.outbox), 1)
        self.assertEqual(mail.outbox[0].attachments[0][0], "qr-checkin.pdf")
        self.assertTrue(AuditLog.objects.filter(azione="SEND", id_entita=str(invito.pk)).exists())

    def test_invio_selezione_non_valida(self):
        self.crea()

        response = self.client.post(reverse("inviti:invito_invia"), {"inviti": ["x"]})

        self.assertRedirects(response, reverse("inviti:invito_list"), fetch_redirect_response=False)
        self.assertEqual(len(mail.outbox), 0)
        self.assertIsNone(Invito.objects.get().inviato_il)

    def test_dettaglio_e_accompagnatore(self):
        invito = self.crea()

        response = self.client.get(reverse("inviti:invito_detail", kwargs={"pk": invito.pk}))
        self.assertContains(response, "Gentile Mario")

        self.client.post(
            reverse("inviti:accompagnatore_create", kwargs={"pk": invito.pk}), {"nome": "Lucia"}
        )
        invito.refresh_from_db()
        self.assertEqual(invito.numero_accompagnatori, 1)

    def test_rigenera_qr(self):
        invito = self.crea()
        vecchio = self.ospite.token_checkin

        self.client.post(reverse("inviti:invito_rigenera_qr", kwargs={"pk": invito.pk}))

        self.ospite.refresh_from_db()
        self.assertNotEqual(self.ospite.token_checkin, vecchio)

    def test_modello_crud(self):
        response = self.client.post(
            reverse("inviti:modello_create"),
            {"nome": "Inglese", "lingua": "en", "oggetto": "Invitation", "corpo": "<p>Dear {{nome}}</p>"},
        )
        self.assertRedirects(response, reverse("inviti:modello_list"), fetch_redirect_response=False)

        modello = ModelloEmail.objects.get(nome="Inglese")
        self.client.post(reverse("inviti:modello_delete", kwargs={"pk": modello.pk}))
        modello.refresh_from_db()
        self.assertFalse(modello.is_active)
