"""
QR Code 圖片產生

把 vCard 文字交給 qrcode 套件轉成 PNG / SVG。錯誤修正等級與邊界只是原樣傳遞，
這裡不解讀 QR 內容，也不驗證產生的圖片能否被掃描。
"""

import io
from typing import Optional

import qrcode
from qrcode.constants import ERROR_CORRECT_L, ERROR_CORRECT_M, ERROR_CORRECT_Q, ERROR_CORRECT_H
from qrcode.exceptions import DataOverflowError
from qrcode.image.pil import PilImage
from qrcode.image.svg import SvgPathImage
import structlog

from src.qrcard.core.exceptions import QRRenderError

logger = structlog.get_logger()

ECC_LEVELS = {
    "L": ERROR_CORRECT_L,
    "M": ERROR_CORRECT_M,
    "Q": ERROR_CORRECT_Q,
    "H": ERROR_CORRECT_H,
}

PNG_FILENAME = "qr-card.png"
SVG_FILENAME = "qr-card.svg"


class QRRenderer:
    """QR Code 產生器"""

    def __init__(self, ecc: str = "M", margin: int = 1, box_size: int = 10):
        self.ecc = ecc
        self.margin = margin
        self.box_size = box_size

    def _build(self, payload: str, ecc: Optional[str], margin: Optional[int]) -> qrcode.QRCode:
        if not payload:
            raise QRRenderError("empty payload")

        level = (ecc or self.ecc).upper()
        if level not in ECC_LEVELS:
            raise QRRenderError(f"unknown ECC level {level!r}")

        qr = qrcode.QRCode(
            error_correction=ECC_LEVELS[level],
            box_size=self.box_size,
            border=self.margin if margin is None else margin,
        )
        qr.add_data(payload)
        try:
            qr.make(fit=True)
        # 新版 qrcode 超過 version 40 時拋出 ValueError 而非 DataOverflowError
        except (DataOverflowError, ValueError) as e:
            logger.error("QR payload too large", payload_length=len(payload), ecc=level)
            raise QRRenderError("payload too large", details={"payload_length": len(payload)}) from e
        return qr

    def render_png(self, payload: str, ecc: Optional[str] = None, margin: Optional[int] = None) -> bytes:
        """產生 PNG 圖片"""
        qr = self._build(payload, ecc, margin)
        img = qr.make_image(image_factory=PilImage, fill_color="black", back_color="white")
        buffer = io.BytesIO()
        img.save(buffer, format="PNG")
        return buffer.getvalue()

    def render_svg(self, payload: str, ecc: Optional[str] = None, margin: Optional[int] = None) -> bytes:
        """產生 SVG 圖片"""
        qr = self._build(payload, ecc, margin)
        img = qr.make_image(image_factory=SvgPathImage)
        buffer = io.BytesIO()
        img.save(buffer)
        return buffer.getvalue()
