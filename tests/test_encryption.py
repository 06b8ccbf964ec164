"""Tests for sealed credential fields."""

import logging

import pytest
from cryptography.fernet import Fernet

from warrantycheck.models.user import UserAccount
from warrantycheck.services.credentials import SEALED_FIELDS, read_credentials, write_credentials
from warrantycheck.services.encryption import DecryptionError, FieldCipher, open_field, seal_field


@pytest.fixture
def cipher():
    return FieldCipher(Fernet.generate_key())


class TestFieldCipher:
    @pytest.mark.parametrize("plaintext", ["secret", "client-id-123", "ünïcødé ✓", "a" * 500])
    def test_round_trip(self, cipher, plaintext):
        assert cipher.open(cipher.seal(plaintext)) == plaintext

    @pytest.mark.parametrize("empty", ["", None])
    def test_empty_in_empty_out(self, cipher, empty):
        assert cipher.seal(empty) == ""
        assert cipher.open(empty) == ""

    def test_same_plaintext_gives_different_ciphertexts(self, cipher):
        assert cipher.seal("same") != cipher.seal("same")

    def test_corrupt_ciphertext_raises(self, cipher):
        with pytest.raises(DecryptionError):
            cipher.open("not-a-fernet-token")

    def test_wrong_key_raises(self, cipher):
        other = FieldCipher(Fernet.generate_key())
        with pytest.raises(DecryptionError):
            other.open(cipher.seal("secret"))

    def test_missing_key_fails_loudly(self):
        with pytest.raises(RuntimeError, match="WC_ENCRYPTION_KEY"):
            FieldCipher("")


def test_module_level_helpers_use_configured_key():
    assert open_field(seal_field("hello")) == "hello"


class TestCredentialStore:
    def test_write_seals_every_field(self):
        user = UserAccount(email="a@example.com")
        write_credentials(user, {"peplink_client_id": "cid", "smtp_pass": "pw"})
        assert user.peplink_client_id not in ("", "cid")
        assert user.smtp_pass not in ("", "pw")
        assert user.smtp_host == ""

    def test_read_opens_every_field(self):
        user = UserAccount(email="a@example.com")
        write_credentials(user, {name: f"value-{name}" for name in SEALED_FIELDS})
        creds = read_credentials(user)
        for name in SEALED_FIELDS:
            assert getattr(creds, name) == f"value-{name}"
        assert creds.undecryptable == []
        assert creds.has_peplink

    def test_blank_and_corrupt_are_distinguishable(self):
        user = UserAccount(email="a@example.com", peplink_client_secret="garbage")
        creds = read_credentials(user)
        assert creds.peplink_client_id == ""
        assert creds.peplink_client_secret == ""
        assert creds.undecryptable == ["peplink_client_secret"]
        with pytest.raises(DecryptionError):
            creds.require("peplink_client_id", "peplink_client_secret")

    def test_none_clears_field(self):
        user = UserAccount(email="a@example.com")
        write_credentials(user, {"smtp_host": "mail.example.com"})
        write_credentials(user, {"smtp_host": None})
        assert user.smtp_host == ""

    def test_unknown_field_rejected(self):
        with pytest.raises(KeyError):
            write_credentials(UserAccount(email="a@example.com"), {"otp_hash": "x"})

    def test_unparseable_port_is_logged(self, caplog):
        user = UserAccount(email="a@example.com")
        write_credentials(user, {"smtp_host": "mail.example.com", "smtp_port": "smtp"})
        with caplog.at_level(logging.WARNING):
            config = read_credentials(user).smtp_config()
        assert config.port == 0
        assert not config.is_complete
        assert "'smtp'" in caplog.text

    def test_smtp_config_from_fields(self):
        user = UserAccount(email="a@example.com")
        write_credentials(user, {
            "smtp_host": "mail.example.com",
            "smtp_port": "587",
            "smtp_user": "me",
            "smtp_pass": "pw",
            "smtp_secure": "false",
        })
        config = read_credentials(user).smtp_config()
        assert config.host == "mail.example.com"
        assert config.port == 587
        assert config.secure is False
        assert config.is_complete
