"""Shared constants for the warranty report."""

CSV_HEADER = "org_name,serial_number,warranty_expiry_date,days_until_expiry,is_expired"

NO_ORGANIZATIONS_SENTINEL = "(No organizations found)"

NO_DEVICES_SENTINEL = "(No devices expiring within {days} days)"

CSV_DOWNLOAD_FILENAME = "warranty_results.csv"
CSV_EMAIL_FILENAME = "peplink_expiring_warranties.csv"
REPORT_EMAIL_SUBJECT = "Peplink Warranty Expiry Report"
OTP_EMAIL_SUBJECT = "Your One-Time Password"
