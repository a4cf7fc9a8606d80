"""
QR code rendering for download links.
"""

from io import BytesIO

import qrcode
from PIL import Image
from qrcode.constants import ERROR_CORRECT_M
from qrcode.image.pil import PilImage

from quickdrop.config import QR_SIZE


def render_qr(text, size=QR_SIZE):
    """Encode text as a square PNG of size x size pixels"""
    qr = qrcode.QRCode(
        error_correction=ERROR_CORRECT_M,
        box_size=10,
        border=4,
    )
    qr.add_data(text)
    qr.make(fit=True)

    img = qr.make_image(image_factory=PilImage, fill_color='black', back_color='white')
    img = img.get_image().resize((size, size), Image.NEAREST)

    buffer = BytesIO()
    img.save(buffer, format='PNG')
    return buffer.getvalue()
