"""
QR code generation service
"""

import io
import qrcode

from app.core.config import settings

class QRService:
    """Service for generating QR codes"""

    @staticmethod
    def get_website_url(slug: str) -> str:
        """Get the URL that the QR code will point to"""
        return f"{settings.BASE_URL}/w/{slug}"

    @staticmethod
    def generate_website_qr(slug: str, format: str = 'PNG') -> bytes:
        """Generate QR code for the wedding website"""
        qr = qrcode.QRCode(
            version=1,
            error_correction=qrcode.constants.ERROR_CORRECT_M,
            box_size=10,
            border=4,
        )
        qr.add_data(QRService.get_website_url(slug))
        qr.make(fit=True)

        img = qr.make_image(fill_color="black", back_color="white")

        buffer = io.BytesIO()
        img.save(buffer, format=format)

        return buffer.getvalue()
