"""Authentication abstraction layer."""

from core.auth.interface import AuthProvider, AuthUser, get_auth_provider
from core.auth.jwt_provider import JwtAuthProvider

__all__ = ["AuthProvider", "AuthUser", "JwtAuthProvider", "get_auth_provider"]
