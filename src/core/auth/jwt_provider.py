from datetime import timedelta

import jwt

from core.db.repository import Repository
from core.errors import AuthenticationError, ErrorCode
from core.models.common import utcnow
from core.models.user import User

from .interface import AuthProvider, AuthUser

_ALGORITHM = "HS256"


class JwtAuthProvider(AuthProvider):
    """HS256 bearer tokens issued and verified locally against the user store."""

    def __init__(self, secret: str, expire_minutes: int, users: Repository[User]):
        self._secret = secret
        self._expire_minutes = expire_minutes
        self._users = users

    def issue_token(self, user: AuthUser) -> str:
        now = utcnow()
        claims = {
            "sub": user.user_id,
            "email": user.email,
            "role": user.role,
            "iat": now,
            "exp": now + timedelta(minutes=self._expire_minutes),
        }
        return jwt.encode(claims, self._secret, algorithm=_ALGORITHM)

    async def verify_token(self, token: str) -> AuthUser:
        try:
            payload = jwt.decode(token, self._secret, algorithms=[_ALGORITHM], options={"require": ["sub", "exp"]})
        except jwt.ExpiredSignatureError as e:
            raise AuthenticationError("Token expired", code=ErrorCode.INVALID_TOKEN) from e
        except jwt.InvalidTokenError as e:
            raise AuthenticationError(f"Token verification failed: {e}", code=ErrorCode.INVALID_TOKEN) from e
        return await self.get_user(str(payload["sub"]))

    async def get_user(self, user_id: str) -> AuthUser:
        user = self._users.get(user_id)
        if user is None or not user.is_active:
            raise AuthenticationError(f"Unknown or inactive user: {user_id}")
        return auth_user_from(user)

    async def decode_claims(self, token: str) -> dict[str, object]:
        """Decode JWT claims WITHOUT signature verification. For logging/routing only."""
        try:
            decoded: dict[str, object] = jwt.decode(token, options={"verify_signature": False})
            return decoded
        except jwt.InvalidTokenError as e:
            raise AuthenticationError(f"Invalid token: {e}", code=ErrorCode.INVALID_TOKEN) from e


def auth_user_from(user: User) -> AuthUser:
    return AuthUser(user_id=user.id, email=user.email, name=user.full_name, role=user.role)
