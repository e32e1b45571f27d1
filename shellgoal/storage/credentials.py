"""Per-user API key storage backed by SQLite."""

import logging
import sqlite3
import threading
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CredentialPair:
    """A user's model API key and sandbox API key."""

    model_api_key: str = field(repr=False)
    sandbox_api_key: str = field(repr=False)


def connect(db_path: Path | str) -> sqlite3.Connection:
    """
    Open a SQLite connection usable from worker threads.

    Returns a connection object the caller owns and must close.
    """
    if str(db_path) != ":memory:":
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    db = sqlite3.connect(str(db_path), check_same_thread=False)
    db.row_factory = sqlite3.Row  # Access columns by name
    return db


class CredentialStore:
    """
    Insert-once credential lookup keyed by user id.

    The connection is owned by the caller; the store only serializes access to it.
    """

    def __init__(self, db: sqlite3.Connection) -> None:
        self._db = db
        self._lock = threading.Lock()
        self.ensure_schema()

    def ensure_schema(self) -> None:
        with self._lock:
            self._db.execute(
                """
                CREATE TABLE IF NOT EXISTS users (
                    user_id TEXT PRIMARY KEY,
                    username TEXT,
                    model_api_key TEXT NOT NULL,
                    sandbox_api_key TEXT NOT NULL
                )
                """
            )
            self._db.commit()

    def lookup(self, user_id: str) -> CredentialPair | None:
        """Return the stored pair for a user, or None if they never onboarded."""
        with self._lock:
            row = self._db.execute(
                "SELECT model_api_key, sandbox_api_key FROM users WHERE user_id = ?",
                (user_id,),
            ).fetchone()
        if row is None:
            return None
        return CredentialPair(
            model_api_key=row["model_api_key"],
            sandbox_api_key=row["sandbox_api_key"],
        )

    def store(self, user_id: str, username: str, credentials: CredentialPair) -> None:
        """
        Insert credentials for a new user.

        Raises:
            sqlite3.IntegrityError: If the user already has credentials stored.
        """
        with self._lock:
            self._db.execute(
                "INSERT INTO users (user_id, username, model_api_key, sandbox_api_key) "
                "VALUES (?, ?, ?, ?)",
                (user_id, username, credentials.model_api_key, credentials.sandbox_api_key),
            )
            self._db.commit()
        logger.info(f"Stored API keys for user {user_id} ({username})")
