"""Unit tests for the JWT auth provider."""

from datetime import timedelta

import jwt
import pytest

from core.auth.interface import AuthUser
from core.auth.jwt_provider import JwtAuthProvider, auth_user_from
from core.errors import AuthenticationError, ErrorCode
from core.models.common import utcnow

SECRET = "unit-test-secret"


@pytest.fixture
def provider(users):
    return JwtAuthProvider(secret=SECRET, expire_minutes=60, users=users)


@pytest.fixture
def traveler(user_factory):
    return user_factory("jane@example.com", first_name="Jane", role="admin")


def test_issue_token_claims(provider, traveler):
    token = provider.issue_token(auth_user_from(traveler))
    claims = jwt.decode(token, SECRET, algorithms=["HS256"])
    assert claims["sub"] == traveler.id
    assert claims["email"] == "jane@example.com"
    assert claims["role"] == "admin"
    assert claims["exp"] - claims["iat"] == 3600


@pytest.mark.asyncio
async def test_verify_token_round_trip(provider, traveler):
    token = provider.issue_token(auth_user_from(traveler))
    auth_user = await provider.verify_token(token)
    assert auth_user == AuthUser(user_id=traveler.id, email="jane@example.com", name="Jane User", role="admin")


@pytest.mark.asyncio
async def test_verify_token_expired(provider, traveler):
    now = utcnow()
    token = jwt.encode(
        {"sub": traveler.id, "iat": now - timedelta(hours=2), "exp": now - timedelta(hours=1)},
        SECRET,
        algorithm="HS256",
    )
    with pytest.raises(AuthenticationError, match="Token expired") as exc_info:
        await provider.verify_token(token)
    assert exc_info.value.code == ErrorCode.INVALID_TOKEN


@pytest.mark.asyncio
async def test_verify_token_wrong_signature(provider, traveler):
    token = jwt.encode({"sub": traveler.id, "exp": utcnow() + timedelta(hours=1)}, "other-secret", algorithm="HS256")
    with pytest.raises(AuthenticationError):
        await provider.verify_token(token)


@pytest.mark.asyncio
async def test_verify_token_garbage(provider):
    with pytest.raises(AuthenticationError):
        await provider.verify_token("not.a.jwt")


@pytest.mark.asyncio
async def test_verify_token_requires_exp(provider, traveler):
    token = jwt.encode({"sub": traveler.id}, SECRET, algorithm="HS256")
    with pytest.raises(AuthenticationError):
        await provider.verify_token(token)


@pytest.mark.asyncio
async def test_verify_token_for_deleted_user(provider, users, traveler):
    token = provider.issue_token(auth_user_from(traveler))
    users.delete(traveler.id)
    with pytest.raises(AuthenticationError, match="Unknown or inactive user"):
        await provider.verify_token(token)


@pytest.mark.asyncio
async def test_get_user_rejects_inactive(provider, user_factory):
    inactive = user_factory("gone@example.com", is_active=False)
    with pytest.raises(AuthenticationError):
        await provider.get_user(inactive.id)


@pytest.mark.asyncio
async def test_decode_claims_without_verification(provider):
    token = jwt.encode({"sub": "user_123", "role": "user"}, "someone-elses-secret", algorithm="HS256")
    claims = await provider.decode_claims(token)
    assert claims["sub"] == "user_123"


@pytest.mark.asyncio
async def test_decode_claims_invalid(provider):
    with pytest.raises(AuthenticationError):
        await provider.decode_claims("garbage")
