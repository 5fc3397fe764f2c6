"""
電話號碼正規化工具

將使用者輸入的電話號碼盡量轉為 E.164 形式（+國碼號碼），供 vCard TEL 欄位使用。
這是啟發式規則，不做真正的號碼驗證：

- 10 位數字：視為北美號碼，加上 +1（5551234567 -> +15551234567）
- 00 開頭：國際冠碼，換成 +（00442071838750 -> +442071838750）
- 1 開頭且 11 位：加上 +（15551234567 -> +15551234567）
- 已經是 + 開頭：原樣返回（含分隔符號）
- 其他：直接在數字前加 +

規則依序比對，+ 開頭的號碼若符合前三條規則仍會被改寫（+5551234567 -> +15551234567）。
不符合以上規則的國際號碼可能被誤判，例如不含國碼的 10 位歐洲號碼會被當成 +1。
"""

import re
import structlog

logger = structlog.get_logger()


# 預設國碼（10 位數字的號碼會套用）
DEFAULT_COUNTRY_CODE = "1"

# 全形數字與符號轉半形
_FULLWIDTH_MAP = str.maketrans("０１２３４５６７８９＋", "0123456789+")

_NON_DIGITS = re.compile(r"[^0-9]")


def _preprocess_phone(phone: str) -> str:
    """預處理電話號碼字串"""
    return phone.translate(_FULLWIDTH_MAP).strip()


def normalize_phone(phone: str, default_country_code: str = DEFAULT_COUNTRY_CODE) -> str:
    """
    正規化電話號碼

    Args:
        phone: 原始電話號碼字串
        default_country_code: 10 位數字號碼使用的國碼

    Returns:
        +開頭的號碼字串；沒有任何數字時返回空字串
    """
    if not phone:
        return ""

    phone = _preprocess_phone(phone)
    digits = _NON_DIGITS.sub("", phone)

    if not digits:
        logger.debug("Phone has no digits", phone=phone)
        return ""

    if len(digits) == 10:
        return f"+{default_country_code}{digits}"

    # 00 國際冠碼
    if digits.startswith("00"):
        return "+" + digits[2:]

    if digits.startswith("1") and len(digits) == 11:
        return "+" + digits

    # 已經是國際格式
    if phone.startswith("+"):
        return phone

    # fallback as-is with plus
    logger.debug("Phone did not match a known pattern", digits_length=len(digits))
    return "+" + digits


__all__ = [
    "normalize_phone",
    "DEFAULT_COUNTRY_CODE",
]
