"""Tests for one-time code issue, resend, verification and account lifecycle."""

from datetime import datetime, timedelta, timezone
from unittest.mock import patch

import pytest
from sqlmodel import select

from warrantycheck.models.session import AuthSession
from warrantycheck.models.user import UserAccount
from warrantycheck.services.otp import (
    CooldownActive,
    InvalidCredential,
    close_session,
    delete_account,
    generate_code,
    get_active_session,
    request_code,
    resend_code,
    verify_code,
)

EMAIL = "ops@example.com"
T0 = datetime(2024, 12, 1, 9, 0, tzinfo=timezone.utc)


def test_generate_code_shape():
    code = generate_code()
    assert len(code) == 8
    assert code == code.upper()
    int(code, 16)


def test_codes_are_not_repeated():
    assert len({generate_code() for _ in range(50)}) == 50


class TestRequestCode:
    def test_creates_account_on_first_request(self, db, sent_codes):
        request_code(db, EMAIL, now=T0)
        account = db.get(UserAccount, EMAIL)
        assert account is not None
        assert account.otp_hash
        assert account.peplink_client_id == ""
        assert EMAIL in sent_codes

    def test_code_is_not_stored_in_clear(self, db, sent_codes):
        account = request_code(db, EMAIL, now=T0)
        assert sent_codes[EMAIL] not in account.otp_hash

    def test_new_request_invalidates_previous_code(self, db, sent_codes):
        request_code(db, EMAIL, now=T0)
        first = sent_codes[EMAIL]
        request_code(db, EMAIL, now=T0)
        second = sent_codes[EMAIL]
        if first == second:
            pytest.skip("random codes collided")
        with pytest.raises(InvalidCredential):
            verify_code(db, EMAIL, first, now=T0)
        verify_code(db, EMAIL, second, now=T0)

    def test_mail_failure_is_not_raised(self, db):
        with patch("warrantycheck.services.mailer.send_otp_email", return_value=False):
            account = request_code(db, EMAIL, now=T0)
        assert account.otp_hash


class TestVerifyCode:
    def test_success_opens_session_and_clears_code(self, db, sent_codes):
        request_code(db, EMAIL, now=T0)
        auth_session = verify_code(db, EMAIL, sent_codes[EMAIL], now=T0)
        assert auth_session.email == EMAIL
        assert db.get(UserAccount, EMAIL).otp_hash == ""

    def test_code_is_single_use(self, db, sent_codes):
        request_code(db, EMAIL, now=T0)
        code = sent_codes[EMAIL]
        verify_code(db, EMAIL, code, now=T0)
        with pytest.raises(InvalidCredential):
            verify_code(db, EMAIL, code, now=T0)

    def test_mismatch(self, db, sent_codes):
        request_code(db, EMAIL, now=T0)
        with pytest.raises(InvalidCredential):
            verify_code(db, EMAIL, "00000000" if sent_codes[EMAIL] != "00000000" else "11111111")

    def test_match_is_case_sensitive(self, db, sent_codes):
        request_code(db, EMAIL, now=T0)
        code = sent_codes[EMAIL]
        if code.lower() == code:
            pytest.skip("code has no letters")
        with pytest.raises(InvalidCredential):
            verify_code(db, EMAIL, code.lower(), now=T0)

    def test_unknown_account(self, db):
        with pytest.raises(InvalidCredential):
            verify_code(db, "nobody@example.com", "ABCDEF12")

    def test_no_active_code(self, db):
        db.add(UserAccount(email=EMAIL))
        db.commit()
        with pytest.raises(InvalidCredential):
            verify_code(db, EMAIL, "")

    def test_overlong_code_is_a_mismatch(self, db, sent_codes):
        request_code(db, EMAIL, now=T0)
        with pytest.raises(InvalidCredential):
            verify_code(db, EMAIL, "X" * 100, now=T0)
        # the real code still works afterwards
        verify_code(db, EMAIL, sent_codes[EMAIL], now=T0)


class TestResendCooldown:
    def test_resend_before_deadline_fails(self, db, sent_codes):
        request_code(db, EMAIL, now=T0)
        with pytest.raises(CooldownActive) as exc:
            resend_code(db, EMAIL, now=T0 + timedelta(seconds=30))
        assert exc.value.remaining_seconds == 30

    def test_remaining_seconds_rounds_up(self, db, sent_codes):
        request_code(db, EMAIL, now=T0)
        with pytest.raises(CooldownActive) as exc:
            resend_code(db, EMAIL, now=T0 + timedelta(seconds=59, milliseconds=500))
        assert exc.value.remaining_seconds == 1

    def test_resend_at_deadline_succeeds_and_resets(self, db, sent_codes):
        request_code(db, EMAIL, now=T0)
        later = T0 + timedelta(seconds=60)
        account = resend_code(db, EMAIL, now=later)
        assert account.resend_after.replace(tzinfo=timezone.utc) == later + timedelta(seconds=60)
        with pytest.raises(CooldownActive):
            resend_code(db, EMAIL, now=later + timedelta(seconds=1))

    def test_resend_for_new_email_issues_code(self, db, sent_codes):
        resend_code(db, "new@example.com", now=T0)
        assert "new@example.com" in sent_codes


class TestSessions:
    def test_active_session_lookup(self, db, sent_codes):
        request_code(db, EMAIL, now=T0)
        auth_session = verify_code(db, EMAIL, sent_codes[EMAIL], now=T0)
        assert get_active_session(db, auth_session.id, EMAIL, now=T0) is not None
        assert get_active_session(db, auth_session.id, "other@example.com", now=T0) is None

    def test_expired_session_is_removed(self, db, sent_codes):
        request_code(db, EMAIL, now=T0)
        auth_session = verify_code(db, EMAIL, sent_codes[EMAIL], now=T0)
        session_id = auth_session.id
        assert get_active_session(db, session_id, EMAIL, now=T0 + timedelta(days=30)) is None
        assert db.get(AuthSession, session_id) is None

    def test_close_session(self, db, sent_codes):
        request_code(db, EMAIL, now=T0)
        session_id = verify_code(db, EMAIL, sent_codes[EMAIL], now=T0).id
        close_session(db, session_id)
        assert db.get(AuthSession, session_id) is None

    def test_delete_account_removes_row_and_sessions(self, db, sent_codes):
        for _ in range(2):
            request_code(db, EMAIL, now=T0)
            verify_code(db, EMAIL, sent_codes[EMAIL], now=T0)
        delete_account(db, EMAIL)
        assert db.get(UserAccount, EMAIL) is None
        assert db.exec(select(AuthSession).where(AuthSession.email == EMAIL)).all() == []
