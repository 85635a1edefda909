"""
Tests per app galleria.
"""

from datetime import date

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import TestCase, override_settings
from django.urls import reverse

from core.models import AuditLog
from eventi.models import Edizione, Evento
from eventi.utils import SESSION_KEY

from .forms import valida_file
from .models import MediaFile

User = get_user_model()


def foto(nome="palco.jpg", contenuto=b"\xff\xd8\xff\xe0jpeg"):
    return SimpleUploadedFile(nome, contenuto, content_type="image/jpeg")


class GalleriaTestMixin:
    def setUp(self):
        self.admin = User.objects.create_user(username="owner", password="pwd", ruolo="admin")
        self.evento = Evento.objects.create(titolo="Gala", data=date(2026, 5, 1), proprietario=self.admin)
        edizione = Edizione.objects.create(codice="foto", nome="Foto", pagine=["galleria"])
        self.staff = User.objects.create_user(username="staff", password="pwd", edizione=edizione)
        self.altro = User.objects.create_user(username="altro", password="pwd", edizione=edizione)
        self.evento.membri.add(self.staff, self.altro)

    def login(self, username="owner"):
        self.client.login(username=username, password="pwd")
        session = self.client.session
        session[SESSION_KEY] = str(self.evento.pk)
        session.save()

    def crea_media(self, nome="palco.jpg", utente=None):
        return MediaFile.objects.create(evento=self.evento, file=foto(nome), caricato_da=utente or self.admin)


class ValidazioneTestCase(TestCase):
    def test_estensione_non_consentita(self):
        with self.assertRaises(ValidationError) as ctx:
            valida_file(SimpleUploadedFile("virus.exe", b"MZ"))
        self.assertIn("Formati permessi", ctx.exception.messages[0])
        self.assertIn(".pdf", ctx.exception.messages[0])

    @override_settings(GALLERIA_MAX_FILE_SIZE=10)
    def test_file_troppo_grande(self):
        with self.assertRaises(ValidationError):
            valida_file(SimpleUploadedFile("grande.pdf", b"x" * 11))
        valida_file(SimpleUploadedFile("piccolo.pdf", b"x" * 10))


class MediaFileTestCase(GalleriaTestMixin, TestCase):
    def test_metadati_da_file(self):
        media = self.crea_media()
        self.assertEqual(media.nome_originale, "palco.jpg")
        self.assertEqual(media.tipo, MediaFile.FOTO)
        self.assertEqual(media.dimensione, 8)
        self.assertEqual(media.mime_type, "image/jpeg")
        self.assertTrue(media.file.name.startswith(f"galleria/{self.evento.pk}/"))

        documento = MediaFile.objects.create(
            evento=self.evento, file=SimpleUploadedFile("programma.pdf", b"%PDF-1.4")
        )
        self.assertEqual(documento.tipo, MediaFile.DOCUMENTO)

    def test_puo_eliminare(self):
        media = self.crea_media(utente=self.staff)
        self.assertTrue(media.puo_eliminare(self.staff))
        self.assertTrue(media.puo_eliminare(self.admin))
        self.assertFalse(media.puo_eliminare(self.altro))


class GalleriaViewsTestCase(GalleriaTestMixin, TestCase):
    def test_upload_multiplo(self):
        self.login("staff")

        response = self.client.post(
            reverse("galleria:upload"),
            {"files": [foto("a.jpg"), SimpleUploadedFile("b.mp4", b"video", content_type="video/mp4")]},
        )

        self.assertRedirects(response, reverse("galleria:galleria"), fetch_redirect_response=False)
        self.assertEqual(self.evento.media.count(), 2)
        self.assertEqual(self.evento.media.get(nome_originale="b.mp4").tipo, MediaFile.VIDEO)
        self.assertTrue(AuditLog.objects.filter(azione="CREATE", tipo_entita="MediaFile").exists())

    def test_upload_rifiutato(self):
        self.login()
        self.client.post(reverse("galleria:upload"), {"files": [SimpleUploadedFile("x.exe", b"MZ")]})
        self.assertFalse(self.evento.media.exists())

    def test_lista_filtrata(self):
        self.crea_media("a.jpg")
        MediaFile.objects.create(evento=self.evento, file=SimpleUploadedFile("p.pdf", b"%PDF"))
        self.login()

        response = self.client.get(reverse("galleria:galleria"), {"tipo": "documento"})

        self.assertEqual(response.status_code, 200)
        self.assertEqual([m.nome_originale for m in response.context["media"]], ["p.pdf"])

    def test_download(self):
        media = self.crea_media()
        self.login()

        response = self.client.get(reverse("galleria:download", kwargs={"pk": media.pk}))

        self.assertEqual(response.status_code, 200)
        self.assertIn("attachment", response["Content-Disposition"])
        self.assertIn("palco.jpg", response["Content-Disposition"])
        self.assertEqual(b"".join(response.streaming_content), b"\xff\xd8\xff\xe0jpeg")

    def test_elimina_solo_autore_o_admin(self):
        media = self.crea_media(utente=self.staff)
        storage, nome = media.file.storage, media.file.name

        self.login("altro")
        response = self.client.post(reverse("galleria:delete", kwargs={"pk": media.pk}))
        self.assertEqual(response.status_code, 403)

        self.login("staff")
        self.client.post(reverse("galleria:delete", kwargs={"pk": media.pk}))
        media.refresh_from_db()
        self.assertFalse(media.is_active)
        self.assertFalse(storage.exists(nome))
