"""Shared API dependencies."""

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlmodel import Session

from warrantycheck.database import get_session
from warrantycheck.models.session import AuthSession
from warrantycheck.models.user import UserAccount
from warrantycheck.services.auth import decode_access_token
from warrantycheck.services.otp import get_active_session

bearer_scheme = HTTPBearer()


def get_current_session(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
    session: Session = Depends(get_session),
) -> AuthSession:
    """Validate JWT and return the live session row it points at."""
    decoded = decode_access_token(credentials.credentials)
    if decoded is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
        )
    email, session_id = decoded
    auth_session = get_active_session(session, session_id, email)
    if auth_session is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Session ended",
        )
    return auth_session


def get_current_user(
    auth_session: AuthSession = Depends(get_current_session),
    session: Session = Depends(get_session),
) -> UserAccount:
    user = session.get(UserAccount, auth_session.email)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
        )
    return user
