"""QR code rendering for hand-off links."""

import base64
import io
from dataclasses import dataclass

import qrcode
from qrcode.constants import ERROR_CORRECT_M

from card_handoff.services.handoff import QrRenderer


@dataclass
class QrCodeRenderer(QrRenderer):
    """Renders PNG QR codes as data URLs."""

    box_size: int = 8
    border: int = 1

    def render_data_url(self, data: str) -> str:
        """Encode ``data`` as a PNG QR code data URL."""
        qr = qrcode.QRCode(
            error_correction=ERROR_CORRECT_M,
            box_size=self.box_size,
            border=self.border,
        )
        qr.add_data(data)
        qr.make(fit=True)
        image = qr.make_image()
        buffer = io.BytesIO()
        image.save(buffer)
        encoded = base64.b64encode(buffer.getvalue()).decode("ascii")
        return f"data:image/png;base64,{encoded}"
