"""
Profile Service for QR Card Contacts

Persists contacts, issues unique public profile slugs, records consent and
serves public profiles / vCards.
"""

import json
import secrets
import sqlite3
from typing import Optional, List, Dict, Any, Callable

import structlog

from src.qrcard.core.exceptions import ValidationError, SlugExhaustedError
from src.qrcard.core.models.contact import (
    Contact,
    ConsentRecord,
    ContactCreated,
    Profile,
    PublicProfile,
    QRCardSubmission,
)
from src.qrcard.core.services.normalizer import normalize_contact
from src.qrcard.core.services.vcard_builder import build_vcard
from src.qrcard.infrastructure.storage.profile_db import ProfileDatabase, is_slug_collision

logger = structlog.get_logger()

# Slug alphabet: lowercase letters + digits
SLUG_ALPHABET = "abcdefghijklmnopqrstuvwxyz0123456789"
SLUG_LENGTH = 8
SLUG_MAX_ATTEMPTS = 5


def generate_slug(length: int = SLUG_LENGTH) -> str:
    """Random URL-safe token from SLUG_ALPHABET"""
    return "".join(secrets.choice(SLUG_ALPHABET) for _ in range(length))


def profile_url(slug: str) -> str:
    return f"/c/{slug}"


def row_to_contact(row: Dict[str, Any]) -> Contact:
    """Build a Contact from a contacts row"""
    return Contact(
        first_name=row["first_name"],
        last_name=row["last_name"],
        title=row.get("title"),
        company=row.get("company"),
        email=row["email"],
        mobile=row["mobile"],
        work_phone=row.get("work_phone"),
        website=row.get("website"),
        socials=json.loads(row.get("socials_json") or "{}"),
        address=json.loads(row.get("address_json") or "{}"),
        notes=row.get("notes"),
    )


class ProfileService:
    """
    Service for contact persistence and public profiles.

    Features:
    - Atomic contact + profile + consent creation
    - Bounded retry on slug collision
    - Atomic view counting on public fetch
    """

    def __init__(
        self,
        db: ProfileDatabase,
        slug_length: int = SLUG_LENGTH,
        slug_max_attempts: int = SLUG_MAX_ATTEMPTS,
        consent_version: str = "v1",
        default_consent_text: str = "consent",
        consent_failure_fatal: bool = False,
        slug_generator: Optional[Callable[[int], str]] = None,
    ):
        """
        Initialize the profile service.

        Args:
            db: ProfileDatabase instance (lifecycle owned by the caller)
            slug_length: Length of issued slugs
            slug_max_attempts: Attempts before SlugExhaustedError
            consent_version: Version tag stored with each consent record
            default_consent_text: Stored when the submission carries no consent text
            consent_failure_fatal: If True a failed consent insert aborts the submission
            slug_generator: Override for slug generation (tests)
        """
        self.db = db
        self.slug_length = slug_length
        self.slug_max_attempts = slug_max_attempts
        self.consent_version = consent_version
        self.default_consent_text = default_consent_text
        self.consent_failure_fatal = consent_failure_fatal
        self._generate_slug = slug_generator or generate_slug

    @classmethod
    def from_settings(cls, db: ProfileDatabase, settings) -> "ProfileService":
        return cls(
            db,
            slug_length=settings.slug_length,
            slug_max_attempts=settings.slug_max_attempts,
            consent_version=settings.consent_version,
            default_consent_text=settings.default_consent_text,
            consent_failure_fatal=settings.consent_failure_fatal,
        )

    # ==================== Create ====================

    def create_contact(self, contact: Contact, conn: Optional[sqlite3.Connection] = None) -> int:
        """
        Validate, normalize and insert a contact.

        Args:
            contact: Contact from the form / request body
            conn: Join an open transaction instead of opening a new one

        Returns:
            New contact ID

        Raises:
            ValidationError: first name, last name, email or mobile missing
        """
        missing = contact.missing_required_fields()
        if missing:
            logger.info("Contact rejected", missing_fields=missing)
            raise ValidationError(missing)

        normalized = normalize_contact(contact)
        if not normalized.mobile:
            raise ValidationError(["mobile"])

        data = normalized.model_dump()

        if conn is not None:
            contact_id = self.db.insert_contact(conn, data)
        else:
            with self.db.get_connection() as own_conn:
                contact_id = self.db.insert_contact(own_conn, data)

        logger.info("Contact created", contact_id=contact_id)
        return contact_id

    def issue_profile(self, contact_id: int, conn: Optional[sqlite3.Connection] = None) -> str:
        """
        Issue a unique public slug for a contact.

        Regenerates on a slug UNIQUE violation, at most slug_max_attempts times.

        Raises:
            SlugExhaustedError: every attempt collided
        """
        if conn is None:
            with self.db.get_connection() as own_conn:
                return self.issue_profile(contact_id, own_conn)

        for attempt in range(1, self.slug_max_attempts + 1):
            slug = self._generate_slug(self.slug_length)
            try:
                self.db.insert_profile(conn, contact_id, slug)
            except sqlite3.IntegrityError as e:
                if not is_slug_collision(e):
                    raise
                logger.warning("Slug collision, regenerating",
                               contact_id=contact_id, attempt=attempt)
                continue

            logger.info("Profile issued", contact_id=contact_id, slug=slug, attempts=attempt)
            return slug

        logger.error("Slug attempts exhausted",
                     contact_id=contact_id, attempts=self.slug_max_attempts)
        raise SlugExhaustedError(self.slug_max_attempts, details={"contact_id": contact_id})

    def record_consent(
        self,
        contact_id: int,
        consent_text: Optional[str],
        ip: Optional[str],
        user_agent: Optional[str],
        conn: Optional[sqlite3.Connection] = None,
    ) -> int:
        """Append an immutable consent record and return its ID"""
        text = consent_text or self.default_consent_text

        if conn is not None:
            consent_id = self.db.insert_consent(
                conn, contact_id, text, self.consent_version, ip, user_agent or ""
            )
        else:
            with self.db.get_connection() as own_conn:
                consent_id = self.db.insert_consent(
                    own_conn, contact_id, text, self.consent_version, ip, user_agent or ""
                )

        logger.info("Consent recorded", contact_id=contact_id, version=self.consent_version)
        return consent_id

    def submit_card(
        self,
        submission: QRCardSubmission,
        ip: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> ContactCreated:
        """
        Create contact, profile and consent as one transaction.

        Nothing is persisted if validation or slug issuance fails. A consent
        failure is rolled back to its savepoint and logged unless
        consent_failure_fatal is set, in which case the whole submission is
        rolled back.
        """
        with self.db.get_connection() as conn:
            contact_id = self.create_contact(submission.contact, conn)
            slug = self.issue_profile(contact_id, conn)

            try:
                with self.db.savepoint(conn, "consent"):
                    self.record_consent(contact_id, submission.consent.text, ip, user_agent, conn)
            except sqlite3.Error as e:
                if self.consent_failure_fatal:
                    raise
                logger.warning("Consent record failed, submission kept",
                               contact_id=contact_id, error=str(e))

        return ContactCreated(contact_id=contact_id, slug=slug, profile_url=profile_url(slug))

    # ==================== Read ====================

    def get_public_profile(self, slug: str) -> Optional[PublicProfile]:
        """
        Fetch a public profile and count the view.

        Returns:
            PublicProfile, or None when the slug is unknown / not public
        """
        row = self.db.view_public_profile(slug)
        if row is None:
            logger.info("Profile not found", slug=slug)
            return None

        logger.info("Profile viewed", slug=slug, view_count=row["view_count"])
        return PublicProfile(
            contact_id=row["id"],
            slug=row["slug"],
            view_count=row["view_count"],
            contact=row_to_contact(row),
        )

    def get_profile(self, slug: str) -> Optional[Profile]:
        """Profile row without counting a view"""
        row = self.db.get_profile_by_slug(slug)
        return Profile(**row) if row else None

    def list_consents(self, contact_id: int) -> List[ConsentRecord]:
        """Consent history of a contact, oldest first (audit / tests)"""
        return [ConsentRecord(**row) for row in self.db.list_consents(contact_id)]

    def get_contact(self, contact_id: int) -> Optional[Contact]:
        row = self.db.get_contact_by_id(contact_id)
        return row_to_contact(row) if row else None

    def get_contact_vcard(self, contact_id: int) -> Optional[str]:
        """vCard text regenerated from the stored contact, None if missing"""
        contact = self.get_contact(contact_id)
        if contact is None:
            logger.info("Contact not found", contact_id=contact_id)
            return None
        return build_vcard(contact)

    def list_recent_contacts(self, limit: int = 100) -> List[Dict[str, Any]]:
        """Most recent contacts for the admin list"""
        return self.db.list_contacts(limit)
