"""Fernet symmetric encryption for sealed credential fields.

Fernet tokens carry their own random IV and an HMAC, so two fields holding
the same plaintext never share a ciphertext, and tampering is detected.
"""

from functools import lru_cache

from cryptography.fernet import Fernet, InvalidToken

from warrantycheck.config import settings


class DecryptionError(Exception):
    """A stored ciphertext could not be opened (corrupt value or wrong key)."""


class FieldCipher:
    """Seals and opens individual credential fields with one Fernet key."""

    def __init__(self, key: str | bytes):
        if not key:
            raise RuntimeError(
                "WC_ENCRYPTION_KEY not set. Generate one with: "
                "python -m warrantycheck.cli generate-key"
            )
        self._fernet = Fernet(key.encode() if isinstance(key, str) else key)

    def seal(self, plaintext: str | None) -> str:
        """Encrypt a string and return base64-encoded ciphertext ("" for empty input)."""
        if not plaintext:
            return ""
        return self._fernet.encrypt(plaintext.encode()).decode()

    def open(self, ciphertext: str | None) -> str:
        """Decrypt a base64-encoded ciphertext ("" for empty input).

        Raises DecryptionError if the token is malformed or was sealed
        under another key.
        """
        if not ciphertext:
            return ""
        try:
            return self._fernet.decrypt(ciphertext.encode()).decode()
        except (InvalidToken, UnicodeError) as e:
            raise DecryptionError("stored value could not be decrypted") from e


@lru_cache(maxsize=1)
def get_cipher() -> FieldCipher:
    """Process-wide cipher, built from settings on first use."""
    return FieldCipher(settings.encryption_key)


def seal_field(plaintext: str | None) -> str:
    return get_cipher().seal(plaintext)


def open_field(ciphertext: str | None) -> str:
    return get_cipher().open(ciphertext)
