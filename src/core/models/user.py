from typing import Annotated, Any, Literal

from pydantic import AfterValidator, BaseModel, EmailStr, Field, computed_field

from core.models.common import Currency, Document, ImageRef, UtcDateTime

Role = Literal["user", "admin"]

# Never leaves the service boundary
SECRET_FIELDS = frozenset(
    {
        "password_hash",
        "email_verification_code",
        "email_verification_expire",
        "reset_password_code",
        "reset_password_expire",
        "reset_password_token",
        "reset_password_token_expire",
    }
)


def _normalize_email(value: str) -> str:
    return value.strip().lower()


LowerEmail = Annotated[EmailStr, AfterValidator(_normalize_email)]

# bcrypt only hashes the first 72 bytes
MAX_PASSWORD_BYTES = 72


def _check_password_bytes(value: str) -> str:
    if len(value.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValueError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")
    return value


NewPassword = Annotated[str, Field(min_length=6), AfterValidator(_check_password_bytes)]


class NotificationPreferences(BaseModel):
    email: bool = True
    push: bool = True


class Preferences(BaseModel):
    currency: Currency = "USD"
    language: str = Field(default="en", max_length=10)
    timezone: str = Field(default="UTC", max_length=64)
    notifications: NotificationPreferences = Field(default_factory=NotificationPreferences)


class User(Document):
    first_name: str
    last_name: str
    email: LowerEmail
    password_hash: str
    avatar: ImageRef | None = None
    role: Role = "user"
    is_email_verified: bool = False
    email_verification_code: str | None = None
    email_verification_expire: UtcDateTime | None = None
    reset_password_code: str | None = None
    reset_password_expire: UtcDateTime | None = None
    reset_password_token: str | None = None
    reset_password_token_expire: UtcDateTime | None = None
    preferences: Preferences = Field(default_factory=Preferences)
    last_login: UtcDateTime | None = None
    is_active: bool = True

    @computed_field  # type: ignore[prop-decorator]
    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def to_public(self) -> dict[str, Any]:
        return self.model_dump(mode="json", exclude=set(SECRET_FIELDS))


class RegisterInput(BaseModel):
    first_name: str = Field(..., min_length=1, max_length=50)
    last_name: str = Field(..., min_length=1, max_length=50)
    email: LowerEmail
    password: NewPassword


class LoginInput(BaseModel):
    email: LowerEmail
    password: str = Field(..., min_length=1)


class EmailInput(BaseModel):
    email: LowerEmail


class CodeInput(EmailInput):
    code: str = Field(..., pattern=r"^\d{6}$")


class ResetPasswordInput(BaseModel):
    token: str = Field(..., min_length=1)
    password: NewPassword


class PasswordChangeInput(BaseModel):
    current_password: str = Field(..., min_length=1)
    new_password: NewPassword


class ProfileFields(BaseModel):
    first_name: str = Field(..., min_length=1, max_length=50)
    last_name: str = Field(..., min_length=1, max_length=50)
    email: LowerEmail


class AdminUserFields(ProfileFields):
    role: Role = "user"
    is_active: bool = True
