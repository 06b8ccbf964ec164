"""Authentication API — one-time code login, resend, verify and logout."""

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field
from sqlmodel import Session

from warrantycheck.api.deps import get_current_session
from warrantycheck.database import get_session
from warrantycheck.models.session import AuthSession
from warrantycheck.services.auth import create_access_token
from warrantycheck.services.otp import (
    CooldownActive,
    InvalidCredential,
    close_session,
    request_code,
    resend_code,
    verify_code,
)
from warrantycheck.utils.timeutil import as_utc

router = APIRouter(prefix="/api/auth", tags=["auth"])


class CodeRequest(BaseModel):
    email: str = Field(min_length=3, max_length=320, pattern=r"^[^@\s]+@[^@\s]+$")


class VerifyRequest(BaseModel):
    email: str = Field(max_length=320)
    code: str = Field(max_length=256)


class CodeSentResponse(BaseModel):
    detail: str = "A one-time code has been sent"
    resend_after: int


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"


@router.post("/login", response_model=CodeSentResponse, status_code=status.HTTP_202_ACCEPTED)
def login(body: CodeRequest, session: Session = Depends(get_session)):
    account = request_code(session, body.email)
    return CodeSentResponse(resend_after=int(as_utc(account.resend_after).timestamp()))


@router.post("/resend", response_model=CodeSentResponse, status_code=status.HTTP_202_ACCEPTED)
def resend(body: CodeRequest, session: Session = Depends(get_session)):
    try:
        account = resend_code(session, body.email)
    except CooldownActive as e:
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail={"message": str(e), "retry_after": e.remaining_seconds},
            headers={"Retry-After": str(e.remaining_seconds)},
        )
    return CodeSentResponse(resend_after=int(as_utc(account.resend_after).timestamp()))


@router.post("/verify", response_model=LoginResponse)
def verify(body: VerifyRequest, session: Session = Depends(get_session)):
    try:
        auth_session = verify_code(session, body.email, body.code)
    except InvalidCredential:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or code",
        )

    token = create_access_token(
        subject=auth_session.email,
        session_id=auth_session.id,
        expires_at=as_utc(auth_session.expires_at),
    )
    return LoginResponse(access_token=token)


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
def logout(
    auth_session: AuthSession = Depends(get_current_session),
    session: Session = Depends(get_session),
):
    close_session(session, auth_session.id)
