import hmac
import secrets
from datetime import datetime, timedelta, timezone

import bcrypt
from jose import JWTError, jwt

SALT_BYTES = 16


def hash_password(password: str, rounds: int, key_bytes: int, salt: str | None = None) -> tuple[str, str]:
    """Derive a salted password hash with bcrypt_pbkdf. Returns (hash, salt), both hex."""
    if salt is None:
        salt = secrets.token_hex(SALT_BYTES)
    derived = bcrypt.kdf(
        password=password.encode(),
        salt=bytes.fromhex(salt),
        desired_key_bytes=key_bytes,
        rounds=rounds,
    )
    return derived.hex(), salt


def verify_password(password: str, salt: str, hashed: str, rounds: int) -> bool:
    # bcrypt.kdf refuses an empty password
    if not password:
        return False
    candidate, _ = hash_password(password, rounds, len(bytes.fromhex(hashed)), salt=salt)
    return hmac.compare_digest(candidate, hashed)


def create_token(
    user_id: str,
    email: str,
    secret_key: str,
    expire_minutes: int = 60 * 24,
    algorithm: str = "HS256",
) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        "sub": user_id,
        "email": email,
        "iat": now,
        "exp": now + timedelta(minutes=expire_minutes),
    }
    return jwt.encode(payload, secret_key, algorithm=algorithm)


def decode_token(token: str, secret_key: str, algorithm: str = "HS256") -> dict | None:
    """Return the token's claims, or None if the signature is bad, it expired or it is malformed."""
    try:
        payload = jwt.decode(token, secret_key, algorithms=[algorithm])
    except JWTError:
        return None
    if not payload.get("sub"):
        return None
    return payload
