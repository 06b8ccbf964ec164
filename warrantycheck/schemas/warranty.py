"""Pydantic schemas for warranty report responses."""

from datetime import date

from pydantic import BaseModel


class WarrantyRowRead(BaseModel):
    org_name: str
    serial_number: str
    expiry_date: date
    days_until_expiry: int
    expired: bool

    model_config = {"from_attributes": True}


class OrganizationOutcomeRead(BaseModel):
    org_id: str
    org_name: str
    ok: bool
    device_count: int
    matched: int
    error: str | None = None

    model_config = {"from_attributes": True}


class WarrantyReportRead(BaseModel):
    generated_on: date
    window_days: int
    csv: str
    rows: list[WarrantyRowRead]
    organizations: list[OrganizationOutcomeRead]
    skipped_organizations: list[str]


class ReportEmailResult(BaseModel):
    email_sent: bool
    recipient: str
