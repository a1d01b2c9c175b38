from abc import ABC, abstractmethod

from pydantic import BaseModel


class AuthUser(BaseModel):
    user_id: str
    email: str
    name: str
    role: str = "user"


class AuthProvider(ABC):
    @abstractmethod
    async def verify_token(self, token: str) -> AuthUser: ...

    @abstractmethod
    async def get_user(self, user_id: str) -> AuthUser: ...

    @abstractmethod
    async def decode_claims(self, token: str) -> dict[str, object]: ...

    @abstractmethod
    def issue_token(self, user: AuthUser) -> str: ...


def get_auth_provider() -> AuthProvider:
    from core.config import get_config

    config = get_config()
    secret = config.jwt_secret
    if not secret:
        raise ValueError("JWT_SECRET not configured")

    from core.auth.jwt_provider import JwtAuthProvider
    from core.services.registry import get_user_repository

    return JwtAuthProvider(
        secret=secret,
        expire_minutes=config.jwt_expire_minutes,
        users=get_user_repository(),
    )
