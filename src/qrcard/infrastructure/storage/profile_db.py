"""
SQLite Database Operations for QR Card Profiles

Handles database initialization, connection management, and CRUD operations
for contacts, public profiles and consent records.
"""

import json
import sqlite3
import os
from datetime import datetime, timezone
from typing import Optional, List, Dict, Any
from contextlib import contextmanager
from pathlib import Path
import structlog

logger = structlog.get_logger()

# Default database path
DEFAULT_DB_PATH = "data/qr_cards.db"

# Seconds a connection waits on a locked database before failing
BUSY_TIMEOUT = 30.0

SCHEMA_SQL = """
    CREATE TABLE IF NOT EXISTS contacts (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        first_name TEXT NOT NULL,
        last_name TEXT NOT NULL,
        title TEXT DEFAULT '',
        company TEXT DEFAULT '',
        email TEXT NOT NULL,
        mobile TEXT NOT NULL,
        work_phone TEXT DEFAULT '',
        website TEXT DEFAULT '',
        socials_json TEXT DEFAULT '{}',
        address_json TEXT DEFAULT '{}',
        notes TEXT DEFAULT '',
        created_at TEXT DEFAULT (datetime('now')),
        updated_at TEXT DEFAULT (datetime('now'))
    );

    CREATE TABLE IF NOT EXISTS profiles (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        contact_id INTEGER NOT NULL,
        slug TEXT NOT NULL UNIQUE,
        is_public INTEGER DEFAULT 1,
        view_count INTEGER DEFAULT 0,
        created_at TEXT DEFAULT (datetime('now')),
        updated_at TEXT DEFAULT (datetime('now')),
        FOREIGN KEY (contact_id) REFERENCES contacts(id) ON DELETE CASCADE
    );

    CREATE TABLE IF NOT EXISTS consents (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        contact_id INTEGER NOT NULL,
        consent_text TEXT,
        consent_version TEXT,
        ip_address TEXT,
        user_agent TEXT,
        timestamp TEXT DEFAULT (datetime('now')),
        FOREIGN KEY (contact_id) REFERENCES contacts(id) ON DELETE CASCADE
    );

    CREATE INDEX IF NOT EXISTS idx_profiles_contact_id ON profiles(contact_id);
    CREATE INDEX IF NOT EXISTS idx_consents_contact_id ON consents(contact_id);
"""


def is_slug_collision(error: sqlite3.IntegrityError) -> bool:
    """True if the integrity error is the profiles.slug UNIQUE constraint"""
    return "profiles.slug" in str(error)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class ProfileDatabase:
    """SQLite database manager for contacts, profiles and consents"""

    def __init__(self, db_path: Optional[str] = None):
        """
        Initialize the database manager.

        Args:
            db_path: Path to SQLite database file. Defaults to data/qr_cards.db
        """
        self.db_path = db_path or os.environ.get("QRCARD_DB_PATH", DEFAULT_DB_PATH)
        self._ensure_db_directory()
        self._initialize_schema()

    def _ensure_db_directory(self):
        """Ensure the database directory exists"""
        db_dir = os.path.dirname(self.db_path)
        if db_dir:
            Path(db_dir).mkdir(parents=True, exist_ok=True)

    def _initialize_schema(self):
        """Initialize database schema if not exists"""
        with self.get_connection() as conn:
            conn.execute("PRAGMA journal_mode = WAL")
            conn.executescript(SCHEMA_SQL)
        logger.info("Database schema initialized", db_path=self.db_path)

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path, timeout=BUSY_TIMEOUT)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        conn.execute("PRAGMA synchronous = NORMAL")
        return conn

    @contextmanager
    def get_connection(self):
        """
        Get a database connection as a context manager.

        Everything executed on the connection is one transaction: committed
        when the block exits normally, rolled back on any exception.
        """
        conn = self._connect()
        try:
            yield conn
            conn.commit()
        except Exception as e:
            conn.rollback()
            raise e
        finally:
            conn.close()

    @contextmanager
    def savepoint(self, conn: sqlite3.Connection, name: str):
        """
        Nested rollback point inside an open transaction.

        On exception only the work since the savepoint is undone and the
        exception is re-raised; the outer transaction stays usable.
        """
        conn.execute(f"SAVEPOINT {name}")
        try:
            yield conn
            conn.execute(f"RELEASE SAVEPOINT {name}")
        except Exception:
            conn.execute(f"ROLLBACK TO SAVEPOINT {name}")
            conn.execute(f"RELEASE SAVEPOINT {name}")
            raise

    # ==================== Contact Operations ====================

    def insert_contact(self, conn: sqlite3.Connection, data: Dict[str, Any]) -> int:
        """
        Insert a contact row.

        Args:
            conn: Open connection (transaction owned by the caller)
            data: Normalized contact fields (snake_case); socials and address as dicts

        Returns:
            New contact ID
        """
        now = _now()
        cursor = conn.execute(
            """
            INSERT INTO contacts (
                first_name, last_name, title, company, email, mobile,
                work_phone, website, socials_json, address_json, notes,
                created_at, updated_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                data["first_name"],
                data["last_name"],
                data.get("title", ""),
                data.get("company", ""),
                data["email"],
                data["mobile"],
                data.get("work_phone", ""),
                data.get("website", ""),
                json.dumps(data.get("socials") or {}),
                json.dumps(data.get("address") or {}),
                data.get("notes", ""),
                now,
                now,
            ),
        )
        return cursor.lastrowid

    def get_contact_by_id(self, contact_id: int) -> Optional[Dict[str, Any]]:
        """Get contact by ID"""
        with self.get_connection() as conn:
            cursor = conn.execute(
                "SELECT * FROM contacts WHERE id = ?", (contact_id,)
            )
            row = cursor.fetchone()
            return dict(row) if row else None

    def list_contacts(self, limit: int = 100) -> List[Dict[str, Any]]:
        """List the most recent contacts (summary columns only)"""
        with self.get_connection() as conn:
            cursor = conn.execute(
                """
                SELECT id, first_name, last_name, email, mobile, website, created_at
                FROM contacts ORDER BY id DESC LIMIT ?
                """,
                (limit,),
            )
            return [dict(row) for row in cursor.fetchall()]

    # ==================== Profile Operations ====================

    def insert_profile(self, conn: sqlite3.Connection, contact_id: int, slug: str,
                       is_public: bool = True) -> int:
        """
        Insert a profile row.

        Raises:
            sqlite3.IntegrityError: slug already taken or contact missing
        """
        now = _now()
        cursor = conn.execute(
            """
            INSERT INTO profiles (contact_id, slug, is_public, view_count, created_at, updated_at)
            VALUES (?, ?, ?, 0, ?, ?)
            """,
            (contact_id, slug, 1 if is_public else 0, now, now),
        )
        return cursor.lastrowid

    def get_profile_by_slug(self, slug: str) -> Optional[Dict[str, Any]]:
        """Get profile by slug without touching the view counter"""
        with self.get_connection() as conn:
            cursor = conn.execute(
                "SELECT * FROM profiles WHERE slug = ?", (slug,)
            )
            row = cursor.fetchone()
            return dict(row) if row else None

    def view_public_profile(self, slug: str) -> Optional[Dict[str, Any]]:
        """
        Increment the view counter of a public profile and return it joined
        with its contact.

        The UPDATE runs first so the write lock is held before the read; the
        returned view_count therefore includes this view and concurrent
        viewers never lose an increment. Returns None (and changes nothing)
        if the slug is unknown or not public.
        """
        with self.get_connection() as conn:
            cursor = conn.execute(
                """
                UPDATE profiles SET view_count = view_count + 1, updated_at = ?
                WHERE slug = ? AND is_public = 1
                """,
                (_now(), slug),
            )
            if cursor.rowcount == 0:
                return None

            cursor = conn.execute(
                """
                SELECT c.*, p.id AS profile_id, p.slug AS slug, p.view_count AS view_count
                FROM profiles p JOIN contacts c ON c.id = p.contact_id
                WHERE p.slug = ?
                """,
                (slug,),
            )
            row = cursor.fetchone()
            return dict(row) if row else None

    # ==================== Consent Operations ====================

    def insert_consent(self, conn: sqlite3.Connection, contact_id: int, consent_text: str,
                       consent_version: str, ip_address: Optional[str] = None,
                       user_agent: Optional[str] = None) -> int:
        """Append a consent record"""
        cursor = conn.execute(
            """
            INSERT INTO consents (contact_id, consent_text, consent_version, ip_address, user_agent, timestamp)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            (contact_id, consent_text, consent_version, ip_address, user_agent, _now()),
        )
        return cursor.lastrowid

    def list_consents(self, contact_id: int) -> List[Dict[str, Any]]:
        """
        List consent records for a contact, oldest first.

        Read-only audit helper for operators and tests; the request path
        never reads consents back.
        """
        with self.get_connection() as conn:
            cursor = conn.execute(
                "SELECT * FROM consents WHERE contact_id = ? ORDER BY id", (contact_id,)
            )
            return [dict(row) for row in cursor.fetchall()]

    def count_rows(self, table: str) -> int:
        """Row count of contacts, profiles or consents (operators / tests)"""
        if table not in ("contacts", "profiles", "consents"):
            raise ValueError(f"Unknown table: {table}")
        with self.get_connection() as conn:
            return conn.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0]
