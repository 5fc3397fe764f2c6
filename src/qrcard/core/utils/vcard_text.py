"""vCard 文字跳脫（RFC 6350 §3.4）"""

_UNESCAPES = {"\\": "\\", "n": "\n", "N": "\n", ",": ",", ";": ";"}


def escape_vcard_text(value: str) -> str:
    """
    跳脫 vCard 文字值

    反斜線必須最先處理，否則後面加入的反斜線會被重複跳脫。
    CRLF 與單獨的 CR 都視為換行。
    """
    if not value:
        return ""
    value = value.replace("\r\n", "\n").replace("\r", "\n")
    return (
        value.replace("\\", "\\\\")
        .replace("\n", "\\n")
        .replace(",", "\\,")
        .replace(";", "\\;")
    )


def unescape_vcard_text(value: str) -> str:
    """還原 escape_vcard_text 的結果；無法識別的跳脫序列原樣保留"""
    if not value:
        return ""

    out = []
    i = 0
    while i < len(value):
        ch = value[i]
        if ch == "\\" and i + 1 < len(value):
            nxt = value[i + 1]
            if nxt in _UNESCAPES:
                out.append(_UNESCAPES[nxt])
                i += 2
                continue
        out.append(ch)
        i += 1
    return "".join(out)
