"""
vCard 4.0 產生器

預覽 QR Code 和下載 .vcf 共用同一個函數。輸入應為已正規化的 Contact，
輸出為以 CRLF 連接的文字，不含結尾換行、不含時間戳，相同輸入必定得到相同輸出。
"""

from typing import List

from src.qrcard.core.models.contact import Contact
from src.qrcard.core.utils.vcard_text import escape_vcard_text as esc

VCARD_VERSION = "4.0"
VCARD_MIME_TYPE = "text/vcard"
PREVIEW_VCARD_FILENAME = "contact.vcf"


def build_vcard_lines(contact: Contact) -> List[str]:
    """依固定順序產生 vCard 屬性行，空的選填欄位整行省略"""
    adr = contact.address

    # 姓名都空白時 FN 為單一空格（已知的退化輸出）
    full_name = esc(f"{contact.first_name} {contact.last_name}").strip() or " "

    lines = [
        "BEGIN:VCARD",
        f"VERSION:{VCARD_VERSION}",
        f"N:{esc(contact.last_name)};{esc(contact.first_name)};;;",
        f"FN:{full_name}",
    ]

    if contact.company:
        lines.append(f"ORG:{esc(contact.company)}")
    if contact.title:
        lines.append(f"TITLE:{esc(contact.title)}")
    if contact.email:
        lines.append(f"EMAIL;TYPE=work:{esc(contact.email)}")
    if contact.mobile:
        lines.append(f"TEL;TYPE=cell,voice:{esc(contact.mobile)}")
    if contact.work_phone:
        lines.append(f"TEL;TYPE=work,voice:{esc(contact.work_phone)}")
    if contact.website:
        lines.append(f"URL:{esc(contact.website)}")
    if not adr.is_empty():
        # PO box;extended;street;city;region;postal code;country
        lines.append(
            "ADR;TYPE=work:;;"
            + ";".join(
                esc(part)
                for part in (adr.street, adr.city, adr.region, adr.postal_code, adr.country)
            )
        )
    if contact.notes:
        lines.append(f"NOTE:{esc(contact.notes)}")

    lines.append("END:VCARD")
    return lines


def build_vcard(contact: Contact) -> str:
    """產生 vCard 文字（同時也是 QR Code 的內容）"""
    return "\r\n".join(build_vcard_lines(contact))


def vcard_filename(contact_id: int) -> str:
    """下載檔名 contact_{id}.vcf"""
    return f"contact_{contact_id}.vcf"
