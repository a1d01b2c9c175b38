"""Unit tests for registration, login, password reset and profile management."""

import re
from datetime import timedelta
from unittest.mock import MagicMock

import pytest

from core.auth.interface import AuthProvider, AuthUser
from core.auth.passwords import hash_password, verify_password
from core.errors import (
    AuthenticationError,
    ConflictError,
    ErrorCode,
    ForbiddenError,
    NotFoundError,
    UpstreamError,
    ValidationError,
)
from core.models.common import ImageRef, utcnow
from core.services.accounts import AccountService

PASSWORD = "correct-horse"

VALID_REGISTRATION = dict(
    first_name="Ada",
    last_name="Lovelace",
    email="Ada@Example.com",
    password=PASSWORD,
)


@pytest.fixture
def auth():
    provider = MagicMock(spec=AuthProvider)
    provider.issue_token.return_value = "signed-token"
    return provider


@pytest.fixture
def accounts(users, trips, budgets, itineraries, packing_lists, auth, notifier, image_store):
    return AccountService(
        users=users,
        trips=trips,
        budgets=budgets,
        itineraries=itineraries,
        packing_lists=packing_lists,
        auth=auth,
        notifier=notifier,
        images=image_store,
        code_ttl_minutes=10,
    )


def _sent_code(notifier) -> str:
    _, _, body = notifier.send.call_args.args
    return re.search(r"<strong>(\d{6})</strong>", body).group(1)


@pytest.fixture
def registered(accounts, notifier):
    """A registered but unverified user; the verification code is in the last email."""
    result = accounts.register(VALID_REGISTRATION)
    return result["user"]


@pytest.fixture
def verified(accounts, notifier, registered):
    accounts.verify_email({"email": "ada@example.com", "code": _sent_code(notifier)})
    return registered


# --- Registration & verification ---


def test_register(accounts, users, notifier, registered):
    assert registered["email"] == "ada@example.com"
    assert "password_hash" not in registered
    assert "email_verification_code" not in registered

    stored = users.get(registered["id"])
    assert stored.is_email_verified is False
    assert verify_password(PASSWORD, stored.password_hash)
    assert notifier.send.call_args.args[0] == "ada@example.com"


def test_register_duplicate_email(accounts, users, registered):
    with pytest.raises(ConflictError):
        accounts.register({**VALID_REGISTRATION, "email": "ADA@example.com"})
    assert len(users.find()) == 1


def test_register_validates_payload(accounts):
    with pytest.raises(ValidationError):
        accounts.register({**VALID_REGISTRATION, "password": "123"})


@pytest.mark.parametrize("password", ["x" * 73, "\u00e9" * 40])
def test_register_rejects_password_over_bcrypt_limit(accounts, users, password):
    with pytest.raises(ValidationError) as exc_info:
        accounts.register({**VALID_REGISTRATION, "password": password})
    assert [e["field"] for e in exc_info.value.errors] == ["password"]
    assert users.find() == []


def test_register_accepts_password_at_bcrypt_limit(accounts, users):
    accounts.register({**VALID_REGISTRATION, "password": "x" * 72})
    assert verify_password("x" * 72, users.find()[0].password_hash)


def test_register_survives_email_failure(accounts, users, notifier):
    notifier.send.side_effect = UpstreamError("SES down", code=ErrorCode.EMAIL_FAILED)
    result = accounts.register(VALID_REGISTRATION)

    assert result["email_sent"] is False
    assert "warning" in result
    assert users.get(result["user"]["id"]) is not None


def test_verify_email(accounts, users, verified):
    stored = users.get(verified["id"])
    assert stored.is_email_verified is True
    assert stored.email_verification_code is None


def test_verify_email_wrong_code(accounts, notifier, registered):
    wrong = "000000" if _sent_code(notifier) != "000000" else "111111"
    with pytest.raises(ValidationError, match="Invalid or expired verification code"):
        accounts.verify_email({"email": "ada@example.com", "code": wrong})


def test_verify_email_expired_code(accounts, users, notifier, registered):
    stored = users.get(registered["id"])
    stored.email_verification_expire = utcnow() - timedelta(minutes=1)
    users.save(stored)
    with pytest.raises(ValidationError):
        accounts.verify_email({"email": "ada@example.com", "code": _sent_code(notifier)})


def test_resend_verification(accounts, notifier, registered):
    accounts.resend_verification({"email": "ada@example.com"})
    assert notifier.send.call_count == 2


def test_resend_verification_when_verified(accounts, verified):
    with pytest.raises(ValidationError, match="already verified"):
        accounts.resend_verification({"email": "ada@example.com"})


def test_resend_verification_unknown_email(accounts):
    with pytest.raises(NotFoundError):
        accounts.resend_verification({"email": "nobody@example.com"})


# --- Login ---


def test_login(accounts, auth, users, verified):
    result = accounts.login({"email": "ADA@example.com", "password": PASSWORD})

    assert result["token"] == "signed-token"
    assert result["user"]["id"] == verified["id"]
    issued = auth.issue_token.call_args.args[0]
    assert isinstance(issued, AuthUser)
    assert issued.user_id == verified["id"]
    assert users.get(verified["id"]).last_login is not None


@pytest.mark.parametrize("email", ["ada@example.com", "nobody@example.com"])
def test_login_invalid_credentials(accounts, verified, email):
    with pytest.raises(AuthenticationError) as exc_info:
        accounts.login({"email": email, "password": "wrong-password"})
    assert exc_info.value.code == ErrorCode.INVALID_CREDENTIALS


def test_login_requires_verified_email(accounts, registered):
    with pytest.raises(AuthenticationError) as exc_info:
        accounts.login({"email": "ada@example.com", "password": PASSWORD})
    assert exc_info.value.code == ErrorCode.EMAIL_NOT_VERIFIED


def test_login_deactivated(accounts, user_factory):
    user_factory("gone@example.com", password_hash=hash_password(PASSWORD), is_active=False)
    with pytest.raises(AuthenticationError, match="deactivated"):
        accounts.login({"email": "gone@example.com", "password": PASSWORD})


# --- Password reset ---


def test_password_reset_flow(accounts, notifier, verified):
    accounts.forgot_password({"email": "ada@example.com"})
    token = accounts.verify_reset_code({"email": "ada@example.com", "code": _sent_code(notifier)})
    assert len(token) == 64

    accounts.reset_password({"token": token, "password": "new-password"})

    assert accounts.login({"email": "ada@example.com", "password": "new-password"})["token"] == "signed-token"
    with pytest.raises(ValidationError):
        accounts.reset_password({"token": token, "password": "another-one"})


def test_reset_password_rejects_long_password(accounts, notifier, verified):
    accounts.forgot_password({"email": "ada@example.com"})
    token = accounts.verify_reset_code({"email": "ada@example.com", "code": _sent_code(notifier)})
    with pytest.raises(ValidationError):
        accounts.reset_password({"token": token, "password": "x" * 80})


def test_forgot_password_unknown_email(accounts):
    with pytest.raises(NotFoundError):
        accounts.forgot_password({"email": "nobody@example.com"})


def test_forgot_password_email_failure_clears_code(accounts, users, notifier, verified):
    notifier.send.side_effect = UpstreamError("SES down", code=ErrorCode.EMAIL_FAILED)
    with pytest.raises(UpstreamError):
        accounts.forgot_password({"email": "ada@example.com"})

    stored = users.get(verified["id"])
    assert stored.reset_password_code is None
    assert stored.reset_password_expire is None


def test_verify_reset_code_rejects_wrong_code(accounts, notifier, verified):
    accounts.forgot_password({"email": "ada@example.com"})
    wrong = "000000" if _sent_code(notifier) != "000000" else "111111"
    with pytest.raises(ValidationError, match="Invalid or expired reset code"):
        accounts.verify_reset_code({"email": "ada@example.com", "code": wrong})


# --- Self-service ---


def test_update_profile(accounts, owner):
    updated = accounts.update_profile(owner.id, {"first_name": "Liv", "role": "admin"})
    assert updated.first_name == "Liv"
    assert updated.email == owner.email
    assert updated.role == "user"


def test_update_profile_email_taken(accounts, owner, outsider):
    with pytest.raises(ConflictError):
        accounts.update_profile(owner.id, {"email": "OUTSIDER@example.com"})


def test_update_preferences_merges(accounts, owner):
    accounts.update_preferences(owner.id, {"currency": "EUR"})
    updated = accounts.update_preferences(owner.id, {"language": "pt"})
    assert updated.preferences.currency == "EUR"
    assert updated.preferences.language == "pt"


def test_update_avatar_replaces_previous(accounts, owner, image_store):
    photo = {"image": {"data": "aGVsbG8=", "content_type": "image/png"}}
    first = accounts.update_avatar(owner.id, photo)
    assert first.avatar.public_id == "traveltrack/avatars/img.jpg"

    second = accounts.update_avatar(owner.id, {"url": "https://gravatar.example.com/a.png"})
    assert second.avatar == ImageRef(url="https://gravatar.example.com/a.png")
    image_store.delete.assert_called_once_with("traveltrack/avatars/img.jpg")


def test_update_avatar_requires_image_or_url(accounts, owner):
    with pytest.raises(ValidationError):
        accounts.update_avatar(owner.id, {})


def test_update_password(accounts, users, verified):
    accounts.update_password(verified["id"], {"current_password": PASSWORD, "new_password": "brand-new"})
    assert verify_password("brand-new", users.get(verified["id"]).password_hash)


def test_update_password_wrong_current(accounts, verified):
    with pytest.raises(AuthenticationError) as exc_info:
        accounts.update_password(verified["id"], {"current_password": "nope", "new_password": "brand-new"})
    assert exc_info.value.code == ErrorCode.INVALID_CREDENTIALS


def test_update_password_rejects_long_password(accounts, users, verified):
    before = users.get(verified["id"]).password_hash
    with pytest.raises(ValidationError):
        accounts.update_password(verified["id"], {"current_password": PASSWORD, "new_password": "x" * 80})
    assert users.get(verified["id"]).password_hash == before


def test_delete_account(accounts, users, owner):
    accounts.delete_account(owner.id)
    assert users.get(owner.id) is None
    with pytest.raises(NotFoundError):
        accounts.get_profile(owner.id)


def test_stats(accounts, trip, owner, budget_service):
    budget_service.create(trip.id, owner.id, {"title": "Main budget", "total_budget": {"amount": 900}})

    stats = accounts.get_stats(owner.id)
    assert stats["trips"]["total"] == 1
    assert stats["trips"]["by_status"] == {trip.status: 1}
    assert stats["trips"]["total_budget"] == 2000
    assert stats["budgets"]["count"] == 1
    assert stats["budgets"]["total_budget"] == 900
    assert stats["itineraries"]["completion_percentage"] == 0
    assert stats["recent_trips"][0]["id"] == trip.id


def test_stats_for_new_user(accounts, outsider):
    stats = accounts.get_stats(outsider.id)
    assert stats["trips"]["total"] == 0
    assert stats["packing_lists"]["packing_progress"] == 0


# --- Admin ---


def test_admin_operations_require_admin(accounts, owner):
    with pytest.raises(ForbiddenError):
        accounts.list_users("user")
    with pytest.raises(ForbiddenError):
        accounts.get_user(None, owner.id)


def test_list_users_filters(accounts, owner, outsider, user_factory):
    user_factory("boss@example.com", first_name="Bea", role="admin")

    assert accounts.list_users("admin").total == 3
    assert [u.email for u in accounts.list_users("admin", {"role": "admin"}).items] == ["boss@example.com"]
    assert [u.id for u in accounts.list_users("admin", {"search": "oscar"}).items] == [outsider.id]


def test_admin_update_and_delete(accounts, users, owner):
    updated = accounts.update_user("admin", owner.id, {"role": "admin", "is_active": False})
    assert updated.role == "admin"
    assert updated.is_active is False

    accounts.delete_user("admin", owner.id)
    assert users.get(owner.id) is None
