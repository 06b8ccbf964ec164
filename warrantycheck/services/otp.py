"""One-time code login: issue, resend, verify, logout and account deletion."""

import logging
import math
import secrets
from datetime import datetime, timedelta

from sqlmodel import Session, select

from warrantycheck.config import settings
from warrantycheck.models.session import AuthSession
from warrantycheck.models.user import UserAccount
from warrantycheck.services import mailer
from warrantycheck.services.auth import hash_code, verify_code_hash
from warrantycheck.utils.timeutil import as_utc, utcnow

logger = logging.getLogger(__name__)

CODE_BYTES = 4  # 8 hex characters


class InvalidCredential(Exception):
    """Unknown account, no active code, or the submitted code does not match."""


class CooldownActive(Exception):
    """A resend was requested before the account's resend deadline."""

    def __init__(self, remaining_seconds: int):
        self.remaining_seconds = remaining_seconds
        super().__init__(f"Please wait {remaining_seconds} seconds before requesting a new code")


def generate_code() -> str:
    return secrets.token_hex(CODE_BYTES).upper()


def normalize_email(email: str) -> str:
    return email.strip()


def get_or_create_account(db: Session, email: str) -> UserAccount:
    account = db.get(UserAccount, email)
    if account is None:
        account = UserAccount(email=email)
        db.add(account)
        db.commit()
        db.refresh(account)
        logger.info(f"Created account for {email}")
    return account


def request_code(db: Session, email: str, now: datetime | None = None) -> UserAccount:
    """Issue a fresh code for `email`, replacing any previous one, and mail it."""
    now = now or utcnow()
    email = normalize_email(email)
    account = get_or_create_account(db, email)

    code = generate_code()
    account.otp_hash = hash_code(code)
    account.resend_after = now + timedelta(seconds=settings.otp_resend_cooldown_seconds)
    db.add(account)
    db.commit()
    db.refresh(account)

    if not mailer.send_otp_email(email, code):
        logger.error(f"OTP for {email} was issued but could not be delivered")
    return account


def resend_code(db: Session, email: str, now: datetime | None = None) -> UserAccount:
    now = now or utcnow()
    account = db.get(UserAccount, normalize_email(email))
    if account is not None and account.resend_after is not None:
        deadline = as_utc(account.resend_after)
        if now < deadline:
            remaining = (deadline - now).total_seconds()
            raise CooldownActive(max(1, math.ceil(remaining)))
    return request_code(db, email, now=now)


def verify_code(db: Session, email: str, code: str, now: datetime | None = None) -> AuthSession:
    """Consume the account's code and open a session. The code is single use."""
    now = now or utcnow()
    email = normalize_email(email)
    account = db.get(UserAccount, email)
    if account is None or not verify_code_hash(code, account.otp_hash):
        raise InvalidCredential("Invalid email or code")

    account.otp_hash = ""
    auth_session = AuthSession(
        email=email,
        created_at=now,
        expires_at=now + timedelta(minutes=settings.jwt_expire_minutes),
    )
    db.add(account)
    db.add(auth_session)
    db.commit()
    db.refresh(auth_session)
    logger.info(f"Login verified for {email}")
    return auth_session


def get_active_session(db: Session, session_id: str, email: str, now: datetime | None = None) -> AuthSession | None:
    now = now or utcnow()
    auth_session = db.get(AuthSession, session_id)
    if auth_session is None or auth_session.email != email:
        return None
    if as_utc(auth_session.expires_at) <= now:
        db.delete(auth_session)
        db.commit()
        return None
    return auth_session


def close_session(db: Session, session_id: str) -> None:
    auth_session = db.get(AuthSession, session_id)
    if auth_session is not None:
        db.delete(auth_session)
        db.commit()


def delete_account(db: Session, email: str) -> None:
    """Remove the account row and every session for it in one commit."""
    sessions = db.exec(select(AuthSession).where(AuthSession.email == email)).all()
    for auth_session in sessions:
        db.delete(auth_session)
    db.flush()
    account = db.get(UserAccount, email)
    if account is not None:
        db.delete(account)
    db.commit()
    logger.info(f"Deleted account {email} ({len(sessions)} session(s))")
