"""Authentication utilities: one-time code hashing and JWT session tokens."""

from datetime import datetime, timedelta, timezone

import bcrypt
from jose import JWTError, jwt

from warrantycheck.config import settings

BCRYPT_MAX_BYTES = 72


def hash_code(code: str) -> str:
    return bcrypt.hashpw(code.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_code_hash(code: str, hashed: str) -> bool:
    """Exact comparison of a submitted code against its stored bcrypt hash."""
    if not code or not hashed:
        return False
    pw = code.encode("utf-8")
    if len(pw) > BCRYPT_MAX_BYTES:
        return False
    return bcrypt.checkpw(pw, hashed.encode("utf-8"))


def create_access_token(subject: str, session_id: str, expires_at: datetime | None = None) -> str:
    expire = expires_at or datetime.now(timezone.utc) + timedelta(minutes=settings.jwt_expire_minutes)
    payload = {"sub": subject, "sid": session_id, "exp": expire}
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> tuple[str, str] | None:
    """Decode JWT and return (email, session_id). Returns None on failure."""
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None
    subject, session_id = payload.get("sub"), payload.get("sid")
    if not subject or not session_id:
        return None
    return subject, session_id
