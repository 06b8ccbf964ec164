"""User panel API — sealed SMTP and InControl settings, account deletion."""

from fastapi import APIRouter, Depends
from sqlmodel import Session

from warrantycheck.api.deps import get_current_user
from warrantycheck.database import get_session
from warrantycheck.models.user import UserAccount
from warrantycheck.schemas.panel import PanelRead, PanelUpdate
from warrantycheck.services.credentials import StoredCredentials, read_credentials, write_credentials
from warrantycheck.services.otp import delete_account

router = APIRouter(tags=["panel"])


def _to_read(creds: StoredCredentials) -> PanelRead:
    return PanelRead(
        email=creds.email,
        smtp_host=creds.smtp_host,
        smtp_port=creds.smtp_port,
        smtp_user=creds.smtp_user,
        smtp_secure=creds.smtp_secure.lower() == "true",
        has_smtp_pass=bool(creds.smtp_pass),
        peplink_client_id=creds.peplink_client_id,
        has_peplink_client_secret=bool(creds.peplink_client_secret),
        undecryptable_fields=creds.undecryptable,
    )


@router.get("/api/panel", response_model=PanelRead)
def get_panel(user: UserAccount = Depends(get_current_user)):
    return _to_read(read_credentials(user))


@router.put("/api/panel", response_model=PanelRead)
def update_panel(
    data: PanelUpdate,
    user: UserAccount = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    write_credentials(user, data.sealed_updates())
    session.add(user)
    session.commit()
    session.refresh(user)
    return _to_read(read_credentials(user))


@router.delete("/api/account", status_code=204)
def remove_account(
    user: UserAccount = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    delete_account(session, user.email)
