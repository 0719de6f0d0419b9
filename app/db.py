import logging
import secrets
import sqlite3
import threading
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path

from fastapi import Request

from app.errors import InternalError

logger = logging.getLogger(__name__)

ID_BYTES = 12

SCHEMA = """
    CREATE TABLE IF NOT EXISTS users (
        id TEXT PRIMARY KEY,
        nickname TEXT NOT NULL,
        email TEXT UNIQUE NOT NULL,
        password_hash TEXT NOT NULL,
        password_salt TEXT NOT NULL,
        created_at TEXT NOT NULL
    );

    CREATE TABLE IF NOT EXISTS challenges (
        id TEXT PRIMARY KEY,
        user_id TEXT NOT NULL,
        title TEXT NOT NULL,
        category TEXT NOT NULL,
        plan TEXT NOT NULL,
        days TEXT NOT NULL DEFAULT '[false,false,false]',
        current_day INTEGER NOT NULL DEFAULT 0,
        is_complete INTEGER NOT NULL DEFAULT 0,
        created_at TEXT NOT NULL
    );

    CREATE INDEX IF NOT EXISTS idx_challenges_user_id ON challenges(user_id);

    CREATE TABLE IF NOT EXISTS proofs (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        challenge_id TEXT NOT NULL,
        day_index INTEGER NOT NULL CHECK (day_index BETWEEN 0 AND 2),
        image_base64 TEXT NOT NULL,
        uploaded_at TEXT NOT NULL,
        FOREIGN KEY (challenge_id) REFERENCES challenges(id) ON DELETE CASCADE
    );

    CREATE INDEX IF NOT EXISTS idx_proofs_challenge_day ON proofs(challenge_id, day_index);
"""


def generate_id() -> str:
    """Generate an opaque, non-sequential record identifier."""
    return secrets.token_hex(ID_BYTES)


def utcnow() -> str:
    return datetime.now(timezone.utc).isoformat()


class Database:
    """Owns the single sqlite connection shared by every store for the process lifetime."""

    def __init__(self, path: str):
        self.path = path
        self._conn: sqlite3.Connection | None = None
        self._lock = threading.RLock()

    def connect(self) -> "Database":
        if self.path != ":memory:":
            Path(self.path).parent.mkdir(parents=True, exist_ok=True)
        self._conn = sqlite3.connect(self.path, check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        self._conn.execute("PRAGMA foreign_keys = ON")
        logger.info(f"Opened database at {self.path}")
        return self

    def init_schema(self):
        """Create tables if they don't exist."""
        with self.transaction() as conn:
            conn.executescript(SCHEMA)

    def close(self):
        if self._conn is not None:
            self._conn.close()
            self._conn = None
            logger.info("Database connection closed")

    @property
    def conn(self) -> sqlite3.Connection:
        if self._conn is None:
            raise InternalError("Database not initialized")
        return self._conn

    @contextmanager
    def transaction(self):
        with self._lock:
            conn = self.conn
            try:
                yield conn
                conn.commit()
            except sqlite3.Error as e:
                conn.rollback()
                logger.exception("Database error")
                raise InternalError("Database error") from e
            except Exception:
                conn.rollback()
                raise


def get_db(request: Request) -> Database:
    return request.app.state.db
