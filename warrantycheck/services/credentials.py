"""Read and write the sealed credential fields of a UserAccount."""

import logging
from dataclasses import dataclass, field

from warrantycheck.models.user import UserAccount
from warrantycheck.services.encryption import DecryptionError, open_field, seal_field
from warrantycheck.services.mailer import SmtpConfig

logger = logging.getLogger(__name__)

SEALED_FIELDS = (
    "peplink_client_id",
    "peplink_client_secret",
    "smtp_host",
    "smtp_port",
    "smtp_user",
    "smtp_pass",
    "smtp_secure",
)


@dataclass
class StoredCredentials:
    """Decrypted view of an account's sealed fields."""

    email: str
    peplink_client_id: str = ""
    peplink_client_secret: str = ""
    smtp_host: str = ""
    smtp_port: str = ""
    smtp_user: str = ""
    smtp_pass: str = ""
    smtp_secure: str = ""
    undecryptable: list[str] = field(default_factory=list)

    @property
    def has_peplink(self) -> bool:
        return bool(self.peplink_client_id and self.peplink_client_secret)

    def require(self, *names: str) -> None:
        """Raise DecryptionError if any of `names` failed to decrypt."""
        broken = [name for name in names if name in self.undecryptable]
        if broken:
            raise DecryptionError(f"stored value could not be decrypted: {', '.join(broken)}")

    def smtp_config(self) -> SmtpConfig:
        try:
            port = int(self.smtp_port) if self.smtp_port else 0
        except ValueError:
            logger.warning(f"Stored SMTP port {self.smtp_port!r} for {self.email} is not a number")
            port = 0
        return SmtpConfig(
            host=self.smtp_host,
            port=port,
            username=self.smtp_user,
            password=self.smtp_pass,
            secure=self.smtp_secure.lower() == "true",
            sender=self.smtp_user,
        )


def read_credentials(user: UserAccount) -> StoredCredentials:
    """Open every sealed field; fields that fail are blank and listed in `undecryptable`."""
    creds = StoredCredentials(email=user.email)
    for name in SEALED_FIELDS:
        try:
            setattr(creds, name, open_field(getattr(user, name)))
        except DecryptionError:
            logger.warning(f"Could not decrypt {name} for {user.email}")
            creds.undecryptable.append(name)
    return creds


def write_credentials(user: UserAccount, updates: dict[str, str | None]) -> None:
    """Seal each provided field independently; None or "" clears it."""
    for name, value in updates.items():
        if name not in SEALED_FIELDS:
            raise KeyError(f"not a sealed field: {name}")
        setattr(user, name, seal_field(value or ""))
