import logging
import sqlite3

from app.auth.utils import create_token, hash_password, verify_password
from app.config import Settings
from app.db import Database, generate_id, utcnow
from app.errors import DuplicateIdentity, InvalidCredentials, NotFound
from app.models import User

logger = logging.getLogger(__name__)


class CredentialStore:
    """Users, their salted password hashes, and token issuance on login."""

    def __init__(self, db: Database, settings: Settings, secret_key: str):
        self.db = db
        self.settings = settings
        self.secret_key = secret_key

    def _find_by_email(self, conn: sqlite3.Connection, email: str) -> User | None:
        row = conn.execute("SELECT * FROM users WHERE email = ?", (email,)).fetchone()
        return User(**dict(row)) if row else None

    def register(self, nickname: str, email: str, password: str) -> dict:
        password_hash, salt = hash_password(
            password,
            rounds=self.settings.password_kdf_rounds,
            key_bytes=self.settings.password_hash_bytes,
        )
        user = User(
            id=generate_id(),
            nickname=nickname,
            email=email,
            password_hash=password_hash,
            password_salt=salt,
            created_at=utcnow(),
        )

        with self.db.transaction() as conn:
            if self._find_by_email(conn, email):
                raise DuplicateIdentity()
            try:
                conn.execute(
                    "INSERT INTO users (id, nickname, email, password_hash, password_salt, created_at) "
                    "VALUES (?, ?, ?, ?, ?, ?)",
                    (user.id, user.nickname, user.email, user.password_hash, user.password_salt, user.created_at),
                )
            except sqlite3.IntegrityError:
                raise DuplicateIdentity()

        logger.info(f"Registered user {user.id}")
        return {"userId": user.id, "nickname": user.nickname, "email": user.email}

    def authenticate(self, email: str, password: str) -> dict:
        with self.db.transaction() as conn:
            user = self._find_by_email(conn, email)

        if not user or not verify_password(
            password, user.password_salt, user.password_hash, self.settings.password_kdf_rounds
        ):
            logger.info("Rejected login attempt")
            raise InvalidCredentials()

        token = create_token(
            user.id,
            user.email,
            self.secret_key,
            expire_minutes=self.settings.jwt_expire_minutes,
            algorithm=self.settings.jwt_algorithm,
        )
        return {"jwttoken": token}

    def get_profile(self, user_id: str) -> dict:
        with self.db.transaction() as conn:
            row = conn.execute("SELECT * FROM users WHERE id = ?", (user_id,)).fetchone()
        if not row:
            raise NotFound("User not found")
        return User(**dict(row)).profile()

    def rename_user(self, user_id: str, nickname: str) -> dict:
        # No uniqueness or format rules on nicknames
        with self.db.transaction() as conn:
            conn.execute("UPDATE users SET nickname = ? WHERE id = ?", (nickname, user_id))
        return {"nickname": nickname}
