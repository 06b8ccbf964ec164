"""Server-side login session, referenced by the `sid` claim of the bearer token."""

import secrets
from datetime import datetime, timezone
from sqlmodel import SQLModel, Field


class AuthSession(SQLModel, table=True):
    __tablename__ = "auth_session"

    id: str = Field(default_factory=lambda: secrets.token_urlsafe(24), primary_key=True)
    email: str = Field(foreign_key="user_account.email", index=True)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    expires_at: datetime
    last_report_csv: str | None = None
