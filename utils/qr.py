"""
Registration link and QR code rendering
QR images are returned as PNG data URIs so they can be stored and embedded directly
"""
import base64
import io
import os
from typing import Optional

import qrcode

FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:3002")


def build_registration_link(code: str, base_url: Optional[str] = None) -> str:
    """Registration page URL for an event code"""
    base = (base_url or FRONTEND_URL).rstrip("/")
    return f"{base}/user-register?eventCode={code}"


def encode_qr(payload: str) -> str:
    """
    Render a payload as a QR code PNG and return it as a data URI

    The symbol version grows with the payload (fit=True), so URLs and signed
    check-in tokens of a few hundred bytes are accepted.
    """
    qr = qrcode.QRCode(version=1, box_size=10, border=4)
    qr.add_data(payload)
    qr.make(fit=True)

    img = qr.make_image(fill_color="black", back_color="white")

    buffer = io.BytesIO()
    img.save(buffer, format='PNG')
    qr_base64 = base64.b64encode(buffer.getvalue()).decode()
    return f"data:image/png;base64,{qr_base64}"
