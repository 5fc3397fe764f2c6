"""
Contact field normalization

Applies the phone and URL cleaners to a whole Contact. Used by both the QR
preview path and the persistence path so the two never drift apart.
"""

from src.qrcard.core.models.contact import Contact
from src.qrcard.core.utils.phone_utils import normalize_phone
from src.qrcard.core.utils.url_utils import sanitize_url, sanitize_socials


def normalize_contact(contact: Contact) -> Contact:
    """
    Return a normalized copy of the contact.

    - mobile / work_phone -> E.164-like (+digits)
    - website / socials -> absolute URL or empty string
    """
    return contact.model_copy(
        update={
            "mobile": normalize_phone(contact.mobile),
            "work_phone": normalize_phone(contact.work_phone),
            "website": sanitize_url(contact.website),
            "socials": sanitize_socials(contact.socials),
        }
    )
