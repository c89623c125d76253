from __future__ import annotations

import io
from urllib.parse import quote, urlencode

import qrcode

QR_SERVICE_ENDPOINT = "https://api.qrserver.com/v1/create-qr-code/"
VERIFY_QUERY_PARAM = "verify"


def verify_link(base_url: str, fingerprint: str) -> str:
    base = base_url.strip()
    clean_base = base if base.endswith("/") else base + "/"
    return f"{clean_base}?{VERIFY_QUERY_PARAM}={fingerprint}"


def qr_service_url(link: str, size: int = 200) -> str:
    query = urlencode({"size": f"{size}x{size}", "data": link}, quote_via=quote)
    return f"{QR_SERVICE_ENDPOINT}?{query}"


def render_qr_png(link: str, box_size: int = 8, border: int = 4) -> bytes:
    qr = qrcode.QRCode(
        version=None,
        error_correction=qrcode.constants.ERROR_CORRECT_M,
        box_size=box_size,
        border=border,
    )
    qr.add_data(link)
    qr.make(fit=True)
    image = qr.make_image(fill_color="black", back_color="white")
    buffer = io.BytesIO()
    image.save(buffer)
    return buffer.getvalue()
