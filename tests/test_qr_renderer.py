"""QR Code 產生器測試"""

import io
from unittest.mock import patch

import pytest
import qrcode
from qrcode.exceptions import DataOverflowError
from PIL import Image

from src.qrcard.api.web.qr_renderer import QRRenderer
from src.qrcard.core.exceptions import QRRenderError
from src.qrcard.core.models.contact import Contact
from src.qrcard.core.services.vcard_builder import build_vcard


@pytest.fixture
def renderer():
    return QRRenderer(ecc="M", margin=1, box_size=4)


@pytest.fixture
def vcard_payload():
    return build_vcard(Contact(first_name="Ada", last_name="Lovelace", email="ada@example.com"))


class TestQRRenderer:

    def test_png(self, renderer, vcard_payload):
        data = renderer.render_png(vcard_payload)

        image = Image.open(io.BytesIO(data))
        assert image.format == "PNG"
        assert image.size[0] == image.size[1]

    def test_margin_changes_size(self, renderer, vcard_payload):
        small = Image.open(io.BytesIO(renderer.render_png(vcard_payload, margin=0)))
        large = Image.open(io.BytesIO(renderer.render_png(vcard_payload, margin=4)))
        assert large.size[0] - small.size[0] == 2 * 4 * renderer.box_size

    def test_svg(self, renderer, vcard_payload):
        data = renderer.render_svg(vcard_payload)
        assert b"<svg" in data

    def test_ecc_case_insensitive(self, renderer, vcard_payload):
        assert renderer.render_png(vcard_payload, ecc="h").startswith(b"\x89PNG")

    def test_unknown_ecc(self, renderer, vcard_payload):
        with pytest.raises(QRRenderError):
            renderer.render_png(vcard_payload, ecc="X")

    def test_empty_payload(self, renderer):
        with pytest.raises(QRRenderError):
            renderer.render_svg("")

    def test_payload_too_large(self, renderer):
        with pytest.raises(QRRenderError) as exc_info:
            renderer.render_png("x" * 5000, ecc="H")
        assert exc_info.value.details["payload_length"] == 5000

    def test_svg_payload_too_large(self, renderer):
        with pytest.raises(QRRenderError):
            renderer.render_svg("x" * 5000, ecc="H")

    @pytest.mark.parametrize("overflow", [
        ValueError("Invalid version (was 41, expected 1 to 40)"),
        DataOverflowError(),
    ])
    def test_overflow_errors_map_to_render_error(self, renderer, vcard_payload, overflow):
        """不同版本 qrcode 的溢位例外都轉為 QRRenderError"""
        with patch.object(qrcode.QRCode, "make", side_effect=overflow):
            with pytest.raises(QRRenderError) as exc_info:
                renderer.render_png(vcard_payload)
        assert exc_info.value.__cause__ is overflow
