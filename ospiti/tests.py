"""
Tests per app ospiti.
"""

import json
import random
from datetime import date

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.test import TestCase
from django.urls import reverse

from core.models import AuditLog
from eventi.models import Edizione, Evento
from eventi.utils import SESSION_KEY

from . import colonne as col
from .badge import contenuto_badge, genera_badge_docx, genera_badge_pdf, layout_badge, valore_campo
from .categorie import categoria_ospite, normalizza_categoria
from .checkin import esegui_checkin, evento_da_token_pubblico, ospiti_confermati, presenze_pdf
from .models import Ospite
from .tavoli import (
    assegna_tavoli_casuale,
    assegna_tavolo,
    raggruppa_per_tavolo,
    reset_tavoli,
    scambia_tavoli,
)

User = get_user_model()


class OspitiTestMixin:
    def setUp(self):
        self.user = User.objects.create_user(username="owner", password="pwd", ruolo="admin")
        self.evento = Evento.objects.create(titolo="Gala", data=date(2026, 5, 1), proprietario=self.user)

    def crea_ospite(self, nome, **kwargs):
        return Ospite.objects.create(evento=self.evento, nome=nome, **kwargs)

    def login(self, username="owner"):
        self.client.login(username=username, password="pwd")
        session = self.client.session
        session[SESSION_KEY] = str(self.evento.pk)
        session.save()


# ============================================================================
# MODEL / COLONNE
# ============================================================================


class OspiteModelTestCase(OspitiTestMixin, TestCase):
    def test_vip(self):
        self.assertTrue(self.crea_ospite("A", is_vip=True).vip)
        self.assertTrue(self.crea_ospite("B", dati_aggiuntivi={"VIP": "ja"}).vip)
        self.assertTrue(self.crea_ospite("C", dati_aggiuntivi={"vip": 1}).vip)
        self.assertFalse(self.crea_ospite("D", dati_aggiuntivi={"VIP": "no"}).vip)
        self.assertFalse(self.crea_ospite("E").vip)

    def test_token_univoco(self):
        a = self.crea_ospite("A")
        b = self.crea_ospite("B")
        self.assertEqual(len(a.token_checkin), 32)
        self.assertNotEqual(a.token_checkin, b.token_checkin)

        vecchio = a.token_checkin
        self.assertNotEqual(a.rigenera_token(), vecchio)

    def test_categoria_ospite(self):
        ospite = self.crea_ospite("A", dati_aggiuntivi={"KATEGORIE": "Medya"})
        self.assertEqual(categoria_ospite(ospite), "medien")
        self.assertEqual(normalizza_categoria("Protocol"), "protokol")
        self.assertEqual(normalizza_categoria("Polit"), "politik")
        self.assertEqual(normalizza_categoria("Press Office"), "press_office")
        self.assertEqual(normalizza_categoria(""), "")


class ColonneTestCase(OspitiTestMixin, TestCase):
    def setUp(self):
        super().setUp()
        self.mario = self.crea_ospite(
            "Mario Rossi",
            email="mario@example.com",
            organizzazione="ACME",
            dati_aggiuntivi={"Kategorie": "Medien", "Delegazione": "Nord", "": "x", "Nome": "dup"},
        )
        self.anna = self.crea_ospite(
            "Anna Bianchi", richiede_accoglienza=True, dati_aggiuntivi={"Menu": "Vegano"}
        )

    def test_scopri_colonne(self):
        colonne = col.scopri_colonne([self.mario, self.anna])
        self.assertEqual(colonne[: len(col.COLONNE_STANDARD)], col.COLONNE_STANDARD)
        self.assertEqual(colonne[len(col.COLONNE_STANDARD):], ["Kategorie", "Delegazione", "Menu"])

    def test_ordine_salvato_e_nascoste(self):
        colonne = ["Nome", "Tavolo", "Menu", "Nuova"]
        risultato = col.ordina_colonne(colonne, ["Menu", "Sparita", "Nome"], ["Tavolo"])
        self.assertEqual(risultato, ["Menu", "Nome", "Nuova"])

    def test_nome_sempre_visibile(self):
        col.salva_preferenze_colonne(self.evento, ["Tavolo", "Nome"], ["Nome", "Nota"])
        self.evento.refresh_from_db()
        self.assertEqual(self.evento.colonne_nascoste, ["Nota"])
        _, visibili = col.colonne_evento(self.evento, [self.mario])
        self.assertEqual(visibili[:2], ["Tavolo", "Nome"])
        self.assertNotIn("Nota", visibili)

    def test_valore_cella(self):
        self.assertEqual(col.valore_cella(self.anna, "Accoglienza VIP"), "Sì")
        self.assertEqual(col.valore_cella(self.mario, "Accoglienza VIP"), "No")
        self.assertEqual(col.valore_cella(self.mario, "Funzione"), "")
        self.assertEqual(col.valore_cella(self.mario, "Delegazione"), "Nord")
        self.assertEqual(col.valore_cella(self.anna, "Delegazione"), "")

    def test_cerca(self):
        self.assertEqual(col.cerca([self.mario, self.anna], "acme"), [self.mario])
        self.assertEqual(col.cerca([self.mario, self.anna], "VEGANO"), [self.anna])
        self.assertEqual(len(col.cerca([self.mario, self.anna], "  ")), 2)

    def test_filtri(self):
        ospiti = [self.mario, self.anna]
        self.assertEqual(col.filtra(ospiti, {"Accoglienza VIP": "ja"}), [self.anna])
        self.assertEqual(col.filtra(ospiti, {"Accoglienza VIP": "nein"}), [self.mario])
        # chi non ha la colonna aggiuntiva passa il filtro
        self.assertEqual(col.filtra(ospiti, {"Delegazione": "nord"}), [self.mario, self.anna])
        self.assertEqual(col.filtra(ospiti, {"Delegazione": "sud"}), [self.anna])
        self.assertEqual(col.filtra(ospiti, {"Organizzazione": "acm", "Nome": ""}), [self.mario])

    def test_elimina_colonna(self):
        self.evento.colonne_nascoste = ["Delegazione"]
        self.evento.save()

        self.assertEqual(col.elimina_colonna(self.evento, "Delegazione"), 1)

        self.mario.refresh_from_db()
        self.evento.refresh_from_db()
        self.assertNotIn("Delegazione", self.mario.dati_aggiuntivi)
        self.assertEqual(self.evento.colonne_nascoste, [])

    def test_elimina_colonna_standard(self):
        with self.assertRaises(ValidationError):
            col.elimina_colonna(self.evento, "Tavolo")


# ============================================================================
# TAVOLI
# ============================================================================


class TavoliTestCase(OspitiTestMixin, TestCase):
    def test_assegnazione_casuale(self):
        vip = self.crea_ospite("Vip", is_vip=True, numero_tavolo=1)
        for i in range(5):
            self.crea_ospite(f"Ospite {i}")

        esito = assegna_tavoli_casuale(self.evento, 2, 2, rng=random.Random(1))

        self.assertEqual(esito, {"assegnati": 4, "vip_saltati": 1, "tavoli": 2, "posti": 2})
        vip.refresh_from_db()
        self.assertEqual(vip.numero_tavolo, 1)
        non_vip = Ospite.objects.filter(evento=self.evento, is_vip=False)
        self.assertEqual(non_vip.filter(numero_tavolo=1).count(), 2)
        self.assertEqual(non_vip.filter(numero_tavolo=2).count(), 2)
        self.assertEqual(non_vip.filter(numero_tavolo__isnull=True).count(), 1)

    def test_oltre_capienza_mantiene_tavolo(self):
        self.crea_ospite("A", numero_tavolo=9)
        self.crea_ospite("B", numero_tavolo=9)

        assegna_tavoli_casuale(self.evento, 1, 1, rng=random.Random(3))

        tavoli = sorted(Ospite.objects.values_list("numero_tavolo", flat=True))
        self.assertEqual(tavoli, [1, 9])

    def test_valori_non_validi(self):
        for num, posti in [(0, 2), (2, -1), ("x", 2)]:
            with self.assertRaises(ValidationError):
                assegna_tavoli_casuale(self.evento, num, posti)

    def test_scambia_e_reset(self):
        self.crea_ospite("A", numero_tavolo=1)
        self.crea_ospite("B", numero_tavolo=1)
        self.crea_ospite("C", numero_tavolo=2)

        self.assertEqual(scambia_tavoli(self.evento, 1, 2), {"spostati_da_a": 2, "spostati_da_b": 1})
        self.assertEqual(raggruppa_per_tavolo(self.evento), {1: ["C"], 2: ["A", "B"]})

        with self.assertRaises(ValidationError):
            scambia_tavoli(self.evento, 3, 3)

        self.assertEqual(reset_tavoli(self.evento), 3)
        self.assertEqual(raggruppa_per_tavolo(self.evento), {})

    def test_assegna_tavolo_singolo(self):
        ospite = self.crea_ospite("A")
        self.assertEqual(assegna_tavolo(ospite, "4"), 4)
        self.assertIsNone(assegna_tavolo(ospite, ""))
        with self.assertRaises(ValidationError):
            assegna_tavolo(ospite, "0")


# ============================================================================
# CHECK-IN / BADGE
# ============================================================================


class CheckinTestCase(OspitiTestMixin, TestCase):
    def test_checkin_ospite(self):
        ospite = self.crea_ospite("Mario", stato=Ospite.CONFIRMED)

        risultato = esegui_checkin(ospite.token_checkin)

        self.assertEqual(risultato.tipo, "ospite")
        ospite.refresh_from_db()
        self.assertEqual(ospite.stato, Ospite.ATTENDED)
        self.assertTrue(ospite.dati_aggiuntivi["Presente"])
        self.assertIn("Presente il", ospite.dati_aggiuntivi)

    def test_token_sconosciuto_o_vuoto(self):
        self.assertIsNone(esegui_checkin("abc"))
        with self.assertRaises(ValidationError):
            esegui_checkin("  ")

    def test_token_di_altro_evento(self):
        altro = Evento.objects.create(titolo="Altro", data=date(2026, 6, 1), proprietario=self.user)
        ospite = Ospite.objects.create(evento=altro, nome="X")
        self.assertIsNone(esegui_checkin(ospite.token_checkin, evento=self.evento))

    def test_presenze_pdf(self):
        ospite = self.crea_ospite("Mario", stato=Ospite.CONFIRMED)
        esegui_checkin(ospite.token_checkin)
        self.crea_ospite("Luigi")

        self.assertTrue(presenze_pdf(self.evento).startswith(b"%PDF"))


class CheckinPubblicoTestCase(OspitiTestMixin, TestCase):
    def setUp(self):
        super().setUp()
        self.mario = self.crea_ospite(
            "Mario", stato=Ospite.CONFIRMED, numero_tavolo=3, dati_aggiuntivi={"Kategorie": "Presse"}
        )
        self.crea_ospite("Zeno", stato=Ospite.CONFIRMED, is_vip=True)
        self.crea_ospite("Invitato")
        self.token = self.evento.token_checkin_pubblico

    def test_ospiti_confermati(self):
        nomi = [r["nome"] for r in ospiti_confermati(self.evento)]
        self.assertEqual(nomi, ["Mario", "Zeno"])

        self.assertEqual([r["nome"] for r in ospiti_confermati(self.evento, "presse")], ["Mario"])
        self.assertEqual([r["nome"] for r in ospiti_confermati(self.evento, "3")], ["Mario"])
        self.assertEqual([r["nome"] for r in ospiti_confermati(self.evento, solo_vip=True)], ["Zeno"])

    def test_token_non_valido(self):
        self.assertIsNone(evento_da_token_pubblico(""))
        response = self.client.get(reverse("ospiti:checkin_pubblico", kwargs={"token": "sbagliato"}))
        self.assertEqual(response.status_code, 403)

        response = self.client.get(reverse("ospiti:checkin_pubblico_ospiti", kwargs={"token": "sbagliato"}))
        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.json()["error"], "Codice di accesso non valido")

    def test_pagina_e_json_senza_login(self):
        response = self.client.get(reverse("ospiti:checkin_pubblico", kwargs={"token": self.token}))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(len(response.context["righe"]), 2)

        response = self.client.get(
            reverse("ospiti:checkin_pubblico_ospiti", kwargs={"token": self.token}), {"vip": "1"}
        )
        dati = response.json()
        self.assertEqual(dati["evento"], "Gala")
        self.assertEqual([r["nome"] for r in dati["ospiti"]], ["Zeno"])

    def test_presenza(self):
        url = reverse("ospiti:checkin_pubblico_presenza", kwargs={"token": self.token, "pk": self.mario.pk})

        response = self.client.post(url, {"ritorno": "q=mario"})

        self.assertRedirects(
            response,
            reverse("ospiti:checkin_pubblico", kwargs={"token": self.token}) + "?q=mario",
            fetch_redirect_response=False,
        )
        self.mario.refresh_from_db()
        self.assertTrue(self.mario.presente)
        self.assertTrue(AuditLog.objects.filter(azione="CHECKIN", id_entita=str(self.mario.pk)).exists())

        response = self.client.post(url, HTTP_X_REQUESTED_WITH="XMLHttpRequest")
        self.assertFalse(response.json()["presente"])

    def test_presenza_ospite_non_confermato(self):
        invitato = Ospite.objects.get(nome="Invitato")
        url = reverse("ospiti:checkin_pubblico_presenza", kwargs={"token": self.token, "pk": invitato.pk})
        self.assertEqual(self.client.post(url).status_code, 404)

    def test_rigenera_link(self):
        self.login()

        response = self.client.post(reverse("ospiti:checkin_link_rigenera"))

        self.assertRedirects(response, reverse("ospiti:checkin"), fetch_redirect_response=False)
        self.evento.refresh_from_db()
        self.assertNotEqual(self.evento.token_checkin_pubblico, self.token)
        response = self.client.get(reverse("ospiti:checkin_pubblico", kwargs={"token": self.token}))
        self.assertEqual(response.status_code, 403)


class BadgeTestCase(OspitiTestMixin, TestCase):
    def test_campi_con_fallback(self):
        ospite = self.crea_ospite("Mario De Rossi", organizzazione="Comune", numero_tavolo=3)
        self.assertEqual(valore_campo(ospite, "Vorname"), "Mario")
        self.assertEqual(valore_campo(ospite, "Name"), "De Rossi")
        self.assertEqual(valore_campo(ospite, "Tisch-Nummer"), "3")
        self.assertEqual(valore_campo(ospite, "Staat/Institution"), "Comune")

    def test_campi_da_lista_importata(self):
        ospite = self.crea_ospite(
            "X",
            dati_aggiuntivi={"Anrede 1": "S.E.", "Anrede 2": "Dott.", "Vorname": "Hans", "Name": "Müller"},
        )
        testi = contenuto_badge(ospite)
        self.assertEqual(testi["saluto"], "S.E. Dott.")
        self.assertEqual(testi["nome"], "Hans Müller")

    def test_layout(self):
        self.assertEqual(layout_badge(2), (1, 2))
        self.assertEqual(layout_badge(6), (2, 3))
        self.assertEqual(layout_badge(3), (1, 3))
        with self.assertRaises(ValueError):
            layout_badge(0)

    def test_generazione(self):
        ospiti = [self.crea_ospite(f"Ospite {i}", numero_tavolo=i + 1) for i in range(5)]
        self.assertTrue(genera_badge_pdf(ospiti, 4).startswith(b"%PDF"))
        self.assertTrue(genera_badge_docx(ospiti, 4).startswith(b"PK"))


# ============================================================================
# VIEWS
# ============================================================================


class OspitiViewsTestCase(OspitiTestMixin, TestCase):
    def setUp(self):
        super().setUp()
        self.login()

    def test_lista_con_ricerca_e_filtri(self):
        self.crea_ospite("Mario", organizzazione="ACME")
        self.crea_ospite("Anna", dati_aggiuntivi={"Menu": "Vegano"})

        response = self.client.get(reverse("ospiti:ospite_list"), {"f_Organizzazione": "acme"})

        self.assertEqual(response.status_code, 200)
        self.assertIn("Menu", response.context["colonne"])
        self.assertEqual([o.nome for o, _ in response.context["righe"]], ["Mario"])

        response = self.client.get(reverse("ospiti:ospite_list"), {"q": "vegano"})
        self.assertEqual(response.context["filtrati"], 1)

    def test_export_pdf_filtrato(self):
        self.crea_ospite("Mario", organizzazione="ACME")
        self.crea_ospite("Anna")

        response = self.client.get(reverse("ospiti:ospite_export_pdf"), {"f_Organizzazione": "acme"})

        self.assertEqual(response["Content-Type"], "application/pdf")
        self.assertIn('filename="lista-ospiti.pdf"', response["Content-Disposition"])
        self.assertTrue(response.content.startswith(b"%PDF"))
        audit = AuditLog.objects.get(azione="EXPORT", tipo_entita="Ospite")
        self.assertEqual(audit.descrizione, "PDF lista ospiti (1 righe)")

    def test_pagina_non_consentita(self):
        edizione = Edizione.objects.create(codice="base", nome="Base", pagine=["report"])
        User.objects.create_user(username="mario", password="pwd", edizione=edizione)
        self.client.logout()
        self.client.login(username="mario", password="pwd")

        response = self.client.get(reverse("ospiti:ospite_list"))

        self.assertEqual(response.status_code, 403)

    def test_create_ospite(self):
        response = self.client.post(
            reverse("ospiti:ospite_create"),
            {"nome": "Luca", "stato": Ospite.INVITED, "dati_aggiuntivi": '{"Menu": "Carne"}'},
        )

        self.assertRedirects(response, reverse("ospiti:ospite_list"), fetch_redirect_response=False)
        ospite = Ospite.objects.get(nome="Luca")
        self.assertEqual(ospite.evento, self.evento)
        self.assertEqual(ospite.dati_aggiuntivi, {"Menu": "Carne"})
        self.assertTrue(AuditLog.objects.filter(azione="CREATE", tipo_entita="Ospite").exists())

    def test_elimina_colonna_standard_rifiutata(self):
        response = self.client.post(reverse("ospiti:colonna_delete"), {"colonna": "Nome"}, follow=True)
        self.assertContains(response, "non può essere eliminata")

    def test_checkin_scan_json(self):
        ospite = self.crea_ospite("Mario")
        url = reverse("ospiti:checkin_scan")

        response = self.client.post(url, data=json.dumps({"token": ""}), content_type="application/json")
        self.assertEqual(response.status_code, 400)

        response = self.client.post(url, {"token": "sconosciuto"})
        self.assertEqual(response.status_code, 404)

        response = self.client.post(url, {"token": ospite.token_checkin})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["nome"], "Mario")
        self.assertTrue(AuditLog.objects.filter(azione="CHECKIN").exists())

    def test_checkin_toggle(self):
        ospite = self.crea_ospite("Mario", stato=Ospite.CONFIRMED)
        url = reverse("ospiti:checkin_toggle", kwargs={"pk": ospite.pk})

        self.client.post(url)
        ospite.refresh_from_db()
        self.assertTrue(ospite.presente)

        self.client.post(url)
        ospite.refresh_from_db()
        self.assertFalse(ospite.presente)
        self.assertEqual(ospite.stato, Ospite.CONFIRMED)

    def test_tavoli_casuale_e_pdf(self):
        for i in range(4):
            self.crea_ospite(f"Ospite {i}")

        self.client.post(reverse("ospiti:tavoli_casuale"), {"num_tavoli": 2, "posti_per_tavolo": 2})
        self.assertEqual(Ospite.objects.filter(numero_tavolo__isnull=False).count(), 4)

        response = self.client.get(reverse("ospiti:tavoli_pdf"))
        self.assertEqual(response["Content-Type"], "application/pdf")

    def test_badge_selezione_vuota(self):
        response = self.client.post(reverse("ospiti:badge"), {"per_pagina": 4, "formato": "pdf"})
        self.assertEqual(response.status_code, 400)

    def test_badge_default_vip_e_pdf(self):
        vip = self.crea_ospite("Vip", is_vip=True)
        self.crea_ospite("Normale")

        response = self.client.get(reverse("ospiti:badge"))
        self.assertEqual(response.context["form"].fields["ospiti"].initial, [vip.pk])

        response = self.client.post(
            reverse("ospiti:badge"), {"ospiti": [vip.pk], "per_pagina": 2, "formato": "pdf"}
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response["Content-Type"], "application/pdf")
