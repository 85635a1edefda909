"""
QR code PNG per i token di check-in (django-qr-code).

generate_qr_code restituisce un buffer pronto per ImageReader di
reportlab (PDF dei QR e badge); qr_png i bytes per una HttpResponse.
"""

from io import BytesIO

from qr_code.qrcode.maker import make_qr_code_image
from qr_code.qrcode.utils import QRCodeOptions

SIZE_RANGE = (1, 40)
BORDER_RANGE = (0, 20)


def parametri_qr(size=10, border=4):
    """
    Converte e verifica dimensione modulo e bordo.

    Raises:
        ValueError: valori non interi o fuori da SIZE_RANGE / BORDER_RANGE
    """
    size, border = int(size), int(border)
    if not SIZE_RANGE[0] <= size <= SIZE_RANGE[1]:
        raise ValueError(f"size deve essere tra {SIZE_RANGE[0]} e {SIZE_RANGE[1]}")
    if not BORDER_RANGE[0] <= border <= BORDER_RANGE[1]:
        raise ValueError(f"border deve essere tra {BORDER_RANGE[0]} e {BORDER_RANGE[1]}")
    return size, border


def qr_png(data, box_size=10, border=4):
    options = QRCodeOptions(size=box_size, border=border, image_format="png")
    return make_qr_code_image(data, options)


def generate_qr_code(data, box_size=10, border=4):
    """QR code di data come BytesIO PNG posizionato all'inizio."""
    return BytesIO(qr_png(data, box_size=box_size, border=border))
