"""Password hashing and one-time codes."""

import hmac
import secrets

import bcrypt


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=12)).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Malformed stored hash
        return False


def generate_code() -> str:
    """Six-digit numeric code for email verification and password reset."""
    return str(secrets.randbelow(900000) + 100000)


def generate_reset_token() -> str:
    return secrets.token_hex(32)


def codes_match(expected: str | None, given: str) -> bool:
    if not expected:
        return False
    return hmac.compare_digest(expected, given)
