"""Warranty report API — run, view, download and email."""

import logging

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import HTMLResponse, Response
from sqlmodel import Session

from warrantycheck.api.deps import get_current_session, get_current_user
from warrantycheck.database import get_session
from warrantycheck.models.session import AuthSession
from warrantycheck.models.user import UserAccount
from warrantycheck.schemas.warranty import (
    OrganizationOutcomeRead,
    ReportEmailResult,
    WarrantyReportRead,
    WarrantyRowRead,
)
from warrantycheck.services.credentials import read_credentials
from warrantycheck.services.encryption import DecryptionError
from warrantycheck.services.incontrol import AuthError, UpstreamError
from warrantycheck.services.mailer import send_mail
from warrantycheck.services.report_table import results_page
from warrantycheck.services.warranty_report import build_report
from warrantycheck.utils.constants import CSV_DOWNLOAD_FILENAME, CSV_EMAIL_FILENAME, REPORT_EMAIL_SUBJECT

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/warranty", tags=["warranty"])


@router.post("/check", response_model=WarrantyReportRead)
def run_check(
    user: UserAccount = Depends(get_current_user),
    auth_session: AuthSession = Depends(get_current_session),
    session: Session = Depends(get_session),
):
    """Run the InControl warranty check and keep the CSV on the session."""
    creds = read_credentials(user)
    try:
        creds.require("peplink_client_id", "peplink_client_secret")
    except DecryptionError as e:
        raise HTTPException(
            status_code=409,
            detail=f"{e}. Re-enter your InControl credentials in the panel.",
        )
    if not creds.has_peplink:
        raise HTTPException(status_code=400, detail="Missing InControl credentials")

    logger.info(f"Running warranty check for {user.email}")
    try:
        report = build_report(creds.peplink_client_id, creds.peplink_client_secret)
    except (AuthError, UpstreamError) as e:
        raise HTTPException(status_code=502, detail=f"Error running warranty check: {e}")

    csv_text = report.to_csv()
    auth_session.last_report_csv = csv_text
    session.add(auth_session)
    session.commit()

    return WarrantyReportRead(
        generated_on=report.generated_on,
        window_days=report.window_days,
        csv=csv_text,
        rows=[WarrantyRowRead.model_validate(r) for r in report.rows],
        organizations=[OrganizationOutcomeRead.model_validate(o) for o in report.organizations],
        skipped_organizations=[o.org_name or o.org_id for o in report.skipped],
    )


def _last_csv(auth_session: AuthSession) -> str:
    if not auth_session.last_report_csv:
        raise HTTPException(status_code=404, detail="No report has been run in this session")
    return auth_session.last_report_csv


@router.get("/results", response_class=HTMLResponse)
def results(auth_session: AuthSession = Depends(get_current_session)):
    return HTMLResponse(results_page(_last_csv(auth_session)))


@router.get("/download")
def download(auth_session: AuthSession = Depends(get_current_session)):
    return Response(
        content=_last_csv(auth_session),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{CSV_DOWNLOAD_FILENAME}"'},
    )


@router.post("/email", response_model=ReportEmailResult)
def email_report(
    user: UserAccount = Depends(get_current_user),
    auth_session: AuthSession = Depends(get_current_session),
):
    """Send the last report through the user's own SMTP relay."""
    csv_text = _last_csv(auth_session)
    creds = read_credentials(user)
    try:
        creds.require("smtp_host", "smtp_port", "smtp_user", "smtp_pass", "smtp_secure")
    except DecryptionError as e:
        raise HTTPException(status_code=409, detail=f"{e}. Re-enter your SMTP settings in the panel.")

    config = creds.smtp_config()
    if not config.is_complete:
        raise HTTPException(status_code=400, detail="Missing SMTP settings")

    sent = send_mail(
        config,
        to=user.email,
        subject=REPORT_EMAIL_SUBJECT,
        body="Report attached.",
        attachments=[(CSV_EMAIL_FILENAME, csv_text)],
    )
    return ReportEmailResult(email_sent=sent, recipient=user.email)
