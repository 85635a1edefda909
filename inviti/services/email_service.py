"""
Servizio di invio e-mail per gli inviti.

Usa il backend e-mail configurato in Django (SMTP in produzione,
console in sviluppo, locmem nei test).
"""

import logging

from django.conf import settings
from django.core.mail import EmailMultiAlternatives
from django.utils.html import strip_tags

logger = logging.getLogger(__name__)


class InvitiEmailService:
    """
    Invio di e-mail HTML con alternativa testuale.

    Gli errori non vengono propagati: send_email restituisce sempre un
    dict {'success': bool, 'error': str} così un invio in blocco non si
    interrompe al primo fallimento.
    """

    def __init__(self, user=None, from_email=None):
        self.user = user
        self.from_email = from_email or getattr(settings, "DEFAULT_FROM_EMAIL", "noreply@example.com")

    def send_email(self, to, subject, body_html, body_text=None, reply_to=None, attachments=None):
        """
        Invia un'e-mail.

        Args:
            to: destinatario (stringa o lista)
            subject: oggetto
            body_html: contenuto HTML
            body_text: contenuto testuale (default: HTML senza tag)
            attachments: [(filename, content, mimetype), ...]

        Returns:
            dict: {'success': True} oppure {'success': False, 'error': messaggio}
        """
        if not body_html:
            return {"success": False, "error": "Contenuto HTML mancante"}

        to_list = [to] if isinstance(to, str) else list(to)
        if not body_text:
            body_text = " ".join(strip_tags(body_html).split())

        email = EmailMultiAlternatives(
            subject=subject,
            body=body_text,
            from_email=self.from_email,
            to=to_list,
            reply_to=[reply_to] if reply_to else [],
        )
        email.attach_alternative(body_html, "text/html")
        for filename, content, mimetype in attachments or []:
            email.attach(filename, content, mimetype)

        try:
            email.send(fail_silently=False)
        except Exception as e:
            logger.error(f"Errore invio email a {', '.join(to_list)}: {e}")
            return {"success": False, "error": str(e)}

        logger.info(f"Email inviata a {', '.join(to_list)} - Oggetto: {subject}")
        return {"success": True, "error": ""}
