"""Tests for the forgot-password / reset-password flow."""

import re
from datetime import UTC, datetime, timedelta

import pytest

from wemanage.config import get_settings
from wemanage.models.user import User
from wemanage.services.password_reset import PasswordResetService, hash_reset_token

TOKEN_PATTERN = re.compile(r"/reset-password/([0-9a-f]{64})")


def request_reset(client, email):
    return client.post("/api/auth/forgot-password", json={"email": email})


def token_from_last_email(mailer) -> str:
    match = TOKEN_PATTERN.search(mailer.sent[-1]["body"])
    assert match, mailer.sent[-1]["body"]
    return match.group(1)


def get_user(db, user_id) -> User:
    db.expire_all()
    return db.query(User).filter(User.id == user_id).first()


def test_forgot_password_same_answer_for_unknown_email(client, auth_headers, mailer):
    known = request_reset(client, auth_headers.email)
    unknown = request_reset(client, "nobody@example.com")

    assert known.status_code == unknown.status_code == 200
    assert known.json() == unknown.json()
    assert len(mailer.sent) == 1
    assert mailer.sent[0]["to"] == auth_headers.email


def test_only_token_hash_is_stored(client, db, auth_headers, mailer):
    request_reset(client, auth_headers.email)
    token = token_from_last_email(mailer)

    user = get_user(db, auth_headers.user_id)
    assert user.password_reset_token == hash_reset_token(token)
    assert user.password_reset_token != token
    assert user.password_reset_expires is not None


def test_reset_password_then_login(client, db, auth_headers, mailer):
    request_reset(client, auth_headers.email)
    token = token_from_last_email(mailer)

    response = client.put(f"/api/auth/reset-password/{token}", json={"password": "brand-new-pass"})
    assert response.status_code == 200
    assert response.json()["message"] == "Password reset successful."

    user = get_user(db, auth_headers.user_id)
    assert user.password_reset_token is None
    assert user.password_reset_expires is None

    old = client.post("/api/auth/login", json={"email": auth_headers.email, "password": "testpass123"})
    assert old.status_code == 400
    new = client.post(
        "/api/auth/login", json={"email": auth_headers.email, "password": "brand-new-pass"}
    )
    assert new.status_code == 200


def test_reset_token_is_single_use(client, auth_headers, mailer):
    request_reset(client, auth_headers.email)
    token = token_from_last_email(mailer)

    first = client.put(f"/api/auth/reset-password/{token}", json={"password": "brand-new-pass"})
    second = client.put(f"/api/auth/reset-password/{token}", json={"password": "another-pass"})

    assert first.status_code == 200
    assert second.status_code == 400
    assert second.json()["detail"] == "Reset token invalid or expired"


def test_new_request_replaces_old_token(client, auth_headers, mailer):
    request_reset(client, auth_headers.email)
    old_token = token_from_last_email(mailer)
    request_reset(client, auth_headers.email)
    new_token = token_from_last_email(mailer)

    assert old_token != new_token
    response = client.put(f"/api/auth/reset-password/{old_token}", json={"password": "brand-new-pass"})
    assert response.status_code == 400
    response = client.put(f"/api/auth/reset-password/{new_token}", json={"password": "brand-new-pass"})
    assert response.status_code == 200


def test_expired_reset_token(client, db, auth_headers, mailer):
    request_reset(client, auth_headers.email)
    token = token_from_last_email(mailer)

    user = get_user(db, auth_headers.user_id)
    user.password_reset_expires = datetime.now(UTC) - timedelta(minutes=1)
    db.commit()

    response = client.put(f"/api/auth/reset-password/{token}", json={"password": "brand-new-pass"})
    assert response.status_code == 400
    assert response.json()["detail"] == "Reset token invalid or expired"


def test_unknown_reset_token(client, auth_headers):
    response = client.put(f"/api/auth/reset-password/{'0' * 64}", json={"password": "brand-new-pass"})
    assert response.status_code == 400


def test_reset_rejects_short_password(client, db, auth_headers, mailer):
    request_reset(client, auth_headers.email)
    token = token_from_last_email(mailer)

    response = client.put(f"/api/auth/reset-password/{token}", json={"password": "abc"})
    assert response.status_code == 400

    # The token survives a rejected attempt
    user = get_user(db, auth_headers.user_id)
    assert user.password_reset_token == hash_reset_token(token)


def test_failed_email_clears_token(client, db, auth_headers, mailer):
    mailer.succeed = False

    response = request_reset(client, auth_headers.email)

    assert response.status_code == 500
    assert response.json()["detail"] == "Error sending reset email"
    user = get_user(db, auth_headers.user_id)
    assert user.password_reset_token is None
    assert user.password_reset_expires is None


def test_mailer_error_clears_token(client, db, auth_headers):
    class BrokenMailer:
        def send(self, to, subject, body):
            raise RuntimeError("smtp connection reset")

    service = PasswordResetService(db, BrokenMailer(), get_settings())

    with pytest.raises(RuntimeError):
        service.request_reset(auth_headers.email)

    user = get_user(db, auth_headers.user_id)
    assert user.password_reset_token is None
    assert user.password_reset_expires is None
