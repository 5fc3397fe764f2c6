"""
網址清理工具

只接受絕對 URL（必須有 scheme）。解析成功時返回正規化後的字串，
失敗時返回空字串，不會讓整筆送出失敗。
"""

import re
from typing import Dict
from urllib.parse import urlsplit, urlunsplit

import structlog

from src.qrcard.core.exceptions import MalformedUrlError

logger = structlog.get_logger()

# RFC 3986 scheme
_SCHEME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]*$")

# 需要主機名稱的 scheme
_HIERARCHICAL_SCHEMES = {"http", "https", "ftp", "ws", "wss"}

# 不合法的網址字元（空白與控制字元）
_INVALID_CHARS_RE = re.compile(r"[\s\x00-\x1f\x7f]")

_DEFAULT_PORTS = {"http": 80, "https": 443, "ws": 80, "wss": 443, "ftp": 21}


def parse_absolute_url(raw: str) -> str:
    """
    將字串解析為絕對 URL 並正規化

    - scheme 和主機名稱轉小寫
    - http(s) 網址沒有路徑時補上 "/"
    - 不會自動補 scheme（"example.com" 視為錯誤）

    Raises:
        MalformedUrlError: 無法解析為絕對 URL
    """
    if raw is None:
        raise MalformedUrlError(raw)

    candidate = raw.strip()
    if not candidate or _INVALID_CHARS_RE.search(candidate):
        raise MalformedUrlError(raw)

    try:
        parts = urlsplit(candidate)
        port = parts.port  # 觸發 port 驗證
    except ValueError as e:
        raise MalformedUrlError(raw, details={"error": str(e)}) from e

    scheme = parts.scheme.lower()
    if not scheme or not _SCHEME_RE.match(scheme):
        raise MalformedUrlError(raw)

    if scheme in _HIERARCHICAL_SCHEMES:
        if not parts.hostname:
            raise MalformedUrlError(raw)

        netloc = parts.hostname.lower()
        if ":" in netloc:
            netloc = f"[{netloc}]"  # IPv6
        if parts.username is not None:
            userinfo = parts.username
            if parts.password is not None:
                userinfo += f":{parts.password}"
            netloc = f"{userinfo}@{netloc}"
        if port is not None and port != _DEFAULT_PORTS.get(scheme):
            netloc += f":{port}"

        path = parts.path or "/"
        return urlunsplit((scheme, netloc, path, parts.query, parts.fragment))

    # mailto:, tel: 等不需要主機名稱
    if not (parts.netloc or parts.path):
        raise MalformedUrlError(raw)
    return urlunsplit((scheme, parts.netloc, parts.path, parts.query, parts.fragment))


def sanitize_url(raw: str) -> str:
    """清理網址，無效時返回空字串"""
    if not raw:
        return ""
    try:
        return parse_absolute_url(raw)
    except MalformedUrlError as e:
        logger.debug("Dropping malformed URL", url=raw, error=str(e))
        return ""


def sanitize_socials(socials: Dict[str, str]) -> Dict[str, str]:
    """清理社群網址，無效的項目會保留鍵但值為空字串"""
    return {platform: sanitize_url(url) for platform, url in (socials or {}).items()}
