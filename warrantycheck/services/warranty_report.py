"""Warranty expiry report built from InControl organizations and devices.

The token exchange and organization listing fail fast. Device listing is
best effort: an organization whose devices cannot be fetched is recorded as
skipped and the run carries on with the next one.
"""

import csv
import io
import logging
import re
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta

from warrantycheck.config import settings
from warrantycheck.services.incontrol import InControlClient, UpstreamError
from warrantycheck.utils.constants import CSV_HEADER, NO_DEVICES_SENTINEL, NO_ORGANIZATIONS_SENTINEL
from warrantycheck.utils.timeutil import utcnow

logger = logging.getLogger(__name__)

_NON_ALNUM_RE = re.compile(r"[^A-Za-z0-9]")


@dataclass
class WarrantyRow:
    org_name: str
    serial_number: str
    expiry_date: date
    days_until_expiry: int
    expired: bool  # upstream's flag, not derived from days_until_expiry

    def as_csv_fields(self) -> list[str]:
        return [
            self.org_name,
            self.serial_number,
            self.expiry_date.isoformat(),
            str(self.days_until_expiry),
            "YES" if self.expired else "NO",
        ]


@dataclass
class OrganizationOutcome:
    org_id: str
    org_name: str
    ok: bool
    device_count: int = 0
    matched: int = 0
    error: str | None = None


@dataclass
class WarrantyReport:
    generated_on: date
    window_days: int
    rows: list[WarrantyRow] = field(default_factory=list)
    organizations: list[OrganizationOutcome] = field(default_factory=list)

    @property
    def skipped(self) -> list[OrganizationOutcome]:
        return [o for o in self.organizations if not o.ok]

    def to_csv(self) -> str:
        buf = io.StringIO()
        buf.write(CSV_HEADER + "\n")
        if not self.organizations:
            buf.write(NO_ORGANIZATIONS_SENTINEL)
        elif not self.rows:
            buf.write(NO_DEVICES_SENTINEL.format(days=self.window_days))
        else:
            writer = csv.writer(buf, quoting=csv.QUOTE_ALL, lineterminator="\n")
            writer.writerows(row.as_csv_fields() for row in self.rows)
        return buf.getvalue().rstrip("\n")


def normalize_serial(serial: str) -> str:
    """Strip everything that is not an ASCII letter or digit."""
    return _NON_ALNUM_RE.sub("", serial)


def parse_expiry_date(value: str) -> date | None:
    """Parse the YYYY-MM-DD prefix of an upstream date; the rest is ignored."""
    try:
        return date.fromisoformat(value[:10])
    except (TypeError, ValueError):
        return None


def device_to_row(org_name: str, device: dict, today: date, cutoff: date) -> WarrantyRow | None:
    """Return a row for `device` if it qualifies for the report, else None."""
    serial = device.get("sn")
    expiry_raw = device.get("expiry_date")
    if not serial or not expiry_raw:
        return None

    expiry = parse_expiry_date(str(expiry_raw))
    if expiry is None:
        logger.debug(f"Skipping device {serial}: unparseable expiry_date {expiry_raw!r}")
        return None
    if expiry > cutoff:
        return None

    return WarrantyRow(
        org_name=org_name,
        serial_number=normalize_serial(str(serial)),
        expiry_date=expiry,
        days_until_expiry=(expiry - today).days,
        expired=bool(device.get("expired")),
    )


def build_report(
    client_id: str,
    client_secret: str,
    client: InControlClient | None = None,
    now: datetime | date | None = None,
    window_days: int | None = None,
) -> WarrantyReport:
    """Run the full InControl walk and collect qualifying devices.

    Raises AuthError if the token exchange fails and UpstreamError if the
    organization list cannot be fetched.
    """
    window_days = window_days if window_days is not None else settings.report_window_days
    now = now or utcnow()
    today = now.date() if isinstance(now, datetime) else now
    cutoff = today + timedelta(days=window_days)

    own_client = client is None
    client = client or InControlClient()
    report = WarrantyReport(generated_on=today, window_days=window_days)
    try:
        token = client.fetch_access_token(client_id, client_secret)
        orgs = client.list_organizations(token)

        for org in orgs:
            if not isinstance(org, dict):
                logger.warning(f"Skipping malformed organization entry: {org!r}")
                continue
            raw_id = org.get("id")
            org_id = "" if raw_id is None else str(raw_id).strip()
            org_name = str(org.get("name") or "")
            if not org_id:
                logger.error(f"Organization {org_name!r} has no id; skipping")
                report.organizations.append(
                    OrganizationOutcome(org_id="", org_name=org_name, ok=False, error="organization has no id")
                )
                continue
            try:
                devices = client.list_devices(token, org_id)
            except UpstreamError as e:
                logger.error(f"Failed devices for org {org_id}: {e}")
                report.organizations.append(
                    OrganizationOutcome(org_id=org_id, org_name=org_name, ok=False, error=str(e))
                )
                continue

            outcome = OrganizationOutcome(
                org_id=org_id, org_name=org_name, ok=True, device_count=len(devices)
            )
            for device in devices:
                if not isinstance(device, dict):
                    continue
                row = device_to_row(org_name, device, today, cutoff)
                if row is not None:
                    report.rows.append(row)
                    outcome.matched += 1
            report.organizations.append(outcome)
    finally:
        if own_client:
            client.close()

    logger.info(
        f"Warranty report: {len(report.rows)} row(s) from {len(report.organizations)} "
        f"organization(s), {len(report.skipped)} skipped"
    )
    return report
