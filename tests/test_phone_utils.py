"""電話號碼正規化測試"""

import pytest
from src.qrcard.core.utils.phone_utils import normalize_phone


class TestNormalizePhone:
    """normalize_phone 測試"""

    @pytest.mark.parametrize("raw, expected", [
        ("5551234567", "+15551234567"),
        ("(555) 123-4567", "+15551234567"),
        ("555.123.4567", "+15551234567"),
        ("15551234567", "+15551234567"),
        ("1-555-123-4567", "+15551234567"),
        ("00442071838750", "+442071838750"),
        ("00 44 20 7183 8750", "+442071838750"),
        ("+442071838750", "+442071838750"),
        ("+44 20 7183 8750", "+44 20 7183 8750"),
        ("886912345678", "+886912345678"),
    ])
    def test_known_patterns(self, raw, expected):
        assert normalize_phone(raw) == expected

    def test_plus_prefix_with_ten_digits_gets_country_code(self):
        """10 位數字規則優先於 + 開頭規則"""
        assert normalize_phone("+5551234567") == "+15551234567"
        assert normalize_phone("+1 555 123 4567") == "+15551234567"

    def test_plus_prefix_returned_unchanged(self):
        """不符合其他規則的 + 開頭號碼原樣返回"""
        assert normalize_phone("+44 20 7183 8750") == "+44 20 7183 8750"
        assert normalize_phone("  +886-912-345-678 ") == "+886-912-345-678"

    def test_empty_input(self):
        assert normalize_phone("") == ""
        assert normalize_phone(None) == ""

    def test_no_digits(self):
        assert normalize_phone("call me") == ""

    def test_fullwidth_digits(self):
        """全形數字轉半形"""
        assert normalize_phone("５５５１２３４５６７") == "+15551234567"
        assert normalize_phone("＋４４２０７１８３８７５０") == "+442071838750"

    def test_idempotent(self):
        """正規化結果再正規化不變"""
        for raw in ["5551234567", "00442071838750", "12345", "+1 (555) 123-4567"]:
            once = normalize_phone(raw)
            assert normalize_phone(once) == once

    def test_custom_default_country_code(self):
        assert normalize_phone("2071838750", default_country_code="44") == "+442071838750"

    def test_fallback_prefixes_plus(self):
        """不符合規則的號碼直接加 +"""
        assert normalize_phone("12345") == "+12345"
