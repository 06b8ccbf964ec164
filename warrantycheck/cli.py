"""CLI tool for admin operations.

Usage:
    python -m warrantycheck.cli generate-key
    python -m warrantycheck.cli init-db
    python -m warrantycheck.cli run-report <email>
"""

import sys

from cryptography.fernet import Fernet
from sqlmodel import Session

from warrantycheck.database import engine, create_db_and_tables
from warrantycheck.models.user import UserAccount
from warrantycheck.services.credentials import read_credentials
from warrantycheck.services.encryption import DecryptionError
from warrantycheck.services.incontrol import AuthError, UpstreamError
from warrantycheck.services.warranty_report import build_report
from warrantycheck.utils.logging import setup_logging


def generate_key():
    """Print a fresh key for WC_ENCRYPTION_KEY."""
    print(Fernet.generate_key().decode())


def init_db():
    create_db_and_tables()
    print("Database initialized.")


def run_report(email: str):
    """Run the warranty report with the credentials stored for `email`."""
    setup_logging()
    create_db_and_tables()

    with Session(engine) as session:
        user = session.get(UserAccount, email)
        if user is None:
            print(f"No account for '{email}'.")
            sys.exit(1)
        creds = read_credentials(user)

    try:
        creds.require("peplink_client_id", "peplink_client_secret")
    except DecryptionError as e:
        print(f"{e}. Re-enter the InControl credentials.")
        sys.exit(1)
    if not creds.has_peplink:
        print(f"Account '{email}' has no InControl credentials.")
        sys.exit(1)

    try:
        report = build_report(creds.peplink_client_id, creds.peplink_client_secret)
    except (AuthError, UpstreamError) as e:
        print(f"Error running warranty check: {e}")
        sys.exit(1)

    print(report.to_csv())
    for outcome in report.skipped:
        print(f"Skipped organization {outcome.org_name or outcome.org_id}: {outcome.error}", file=sys.stderr)


def main():
    if len(sys.argv) < 2:
        print("Usage: python -m warrantycheck.cli <command>")
        print("Commands: generate-key, init-db, run-report <email>")
        sys.exit(1)

    command = sys.argv[1]
    if command == "generate-key":
        generate_key()
    elif command == "init-db":
        init_db()
    elif command == "run-report":
        if len(sys.argv) < 3:
            print("Usage: python -m warrantycheck.cli run-report <email>")
            sys.exit(1)
        run_report(sys.argv[2])
    else:
        print(f"Unknown command: {command}")
        sys.exit(1)


if __name__ == "__main__":
    main()
