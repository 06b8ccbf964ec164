"""User account model: OTP state plus sealed credential fields."""

from datetime import datetime, timezone
from sqlmodel import SQLModel, Field


class UserAccount(SQLModel, table=True):
    __tablename__ = "user_account"

    email: str = Field(primary_key=True)
    otp_hash: str = ""  # bcrypt hash of the active code; empty when none
    resend_after: datetime | None = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    # Fernet-sealed; read and write through services.credentials only
    peplink_client_id: str = ""
    peplink_client_secret: str = ""
    smtp_host: str = ""
    smtp_port: str = ""
    smtp_user: str = ""
    smtp_pass: str = ""
    smtp_secure: str = ""
