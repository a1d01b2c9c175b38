"""
Accounts: registration, email verification, login, password reset,
self-service profile management and admin user management.

Verification and reset codes are six digits and expire after
``code_ttl_minutes``. A verification email that fails to send during
registration does not fail the registration; a reset email that fails to
send does, and the stored code is cleared.
"""

import logging
from collections import Counter
from datetime import timedelta
from typing import Any

from pydantic import BaseModel, Field

from core.access import require_admin
from core.auth.interface import AuthProvider
from core.auth.jwt_provider import auth_user_from
from core.auth.passwords import codes_match, generate_code, generate_reset_token, hash_password, verify_password
from core.db.repository import Repository
from core.errors import AuthenticationError, ConflictError, ErrorCode, NotFoundError, UpstreamError, ValidationError
from core.models.budget import Budget
from core.models.common import ImageRef, percentage, utcnow
from core.models.itinerary import Itinerary
from core.models.packing_list import PackingList
from core.models.trip import Trip
from core.models.user import (
    AdminUserFields,
    CodeInput,
    EmailInput,
    LoginInput,
    PasswordChangeInput,
    Preferences,
    ProfileFields,
    RegisterInput,
    ResetPasswordInput,
    User,
)
from core.pagination import Page, paginate, parse_page_params, sort_by
from core.services.images import ImageStore, ImageUpload, discard_images
from core.services.notifications import NotificationSender, password_reset_email, verification_email
from core.services.scoped import merge_fields, mutate_with_retry
from core.validation import parse_payload

logger = logging.getLogger(__name__)


class AvatarInput(BaseModel):
    image: ImageUpload | None = None
    url: str | None = Field(default=None, min_length=1)


class AccountService:
    def __init__(
        self,
        users: Repository[User],
        trips: Repository[Trip],
        budgets: Repository[Budget],
        itineraries: Repository[Itinerary],
        packing_lists: Repository[PackingList],
        auth: AuthProvider,
        notifier: NotificationSender,
        images: ImageStore,
        code_ttl_minutes: int = 10,
    ) -> None:
        self._users = users
        self._trips = trips
        self._budgets = budgets
        self._itineraries = itineraries
        self._packing_lists = packing_lists
        self._auth = auth
        self._notifier = notifier
        self._images = images
        self._code_ttl = timedelta(minutes=code_ttl_minutes)
        self._code_ttl_minutes = code_ttl_minutes

    def _require(self, user_id: str) -> User:
        user = self._users.get(user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    def _by_email(self, email: str) -> User | None:
        return self._users.find_one(email=email)

    def _update(self, user_id: str, change: Any) -> User:
        return mutate_with_retry(self._users, lambda: self._require(user_id), change)

    # --- Registration & verification ---

    def register(self, payload: Any) -> dict[str, Any]:
        data = parse_payload(RegisterInput, payload)
        if self._by_email(data.email) is not None:
            raise ConflictError("User already exists with this email")

        code = generate_code()
        user = User(
            first_name=data.first_name,
            last_name=data.last_name,
            email=data.email,
            password_hash=hash_password(data.password),
            email_verification_code=code,
            email_verification_expire=utcnow() + self._code_ttl,
        )
        self._users.create(user)
        logger.info("Registered user %s", user.id)

        result: dict[str, Any] = {"user": user.to_public(), "email_sent": True}
        try:
            self._send_verification(user, code)
        except UpstreamError:
            logger.warning("Verification email to %s not sent", user.email, exc_info=True)
            result["email_sent"] = False
            result["warning"] = "Account created, but the verification email could not be sent."
        return result

    def _send_verification(self, user: User, code: str) -> None:
        subject, body = verification_email(user.first_name, code, self._code_ttl_minutes)
        self._notifier.send(user.email, subject, body)

    def verify_email(self, payload: Any) -> User:
        data = parse_payload(CodeInput, payload)
        user = self._by_email(data.email)
        if (
            user is None
            or not codes_match(user.email_verification_code, data.code)
            or user.email_verification_expire is None
            or user.email_verification_expire < utcnow()
        ):
            raise ValidationError("Invalid or expired verification code")

        def change(u: User) -> None:
            u.is_email_verified = True
            u.email_verification_code = None
            u.email_verification_expire = None

        return self._update(user.id, change)

    def resend_verification(self, payload: Any) -> None:
        data = parse_payload(EmailInput, payload)
        user = self._by_email(data.email)
        if user is None:
            raise NotFoundError("User not found")
        if user.is_email_verified:
            raise ValidationError("Email is already verified")

        code = generate_code()

        def change(u: User) -> None:
            u.email_verification_code = code
            u.email_verification_expire = utcnow() + self._code_ttl

        user = self._update(user.id, change)
        self._send_verification(user, code)

    # --- Login ---

    def login(self, payload: Any) -> dict[str, Any]:
        data = parse_payload(LoginInput, payload)
        user = self._by_email(data.email)
        if user is None or not verify_password(data.password, user.password_hash):
            raise AuthenticationError("Invalid email or password", code=ErrorCode.INVALID_CREDENTIALS)
        if not user.is_active:
            raise AuthenticationError("Account is deactivated")
        if not user.is_email_verified:
            raise AuthenticationError(
                "Please verify your email before logging in", code=ErrorCode.EMAIL_NOT_VERIFIED
            )

        def change(u: User) -> None:
            u.last_login = utcnow()

        user = self._update(user.id, change)
        token = self._auth.issue_token(auth_user_from(user))
        return {"token": token, "user": user.to_public()}

    # --- Password reset ---

    def forgot_password(self, payload: Any) -> None:
        data = parse_payload(EmailInput, payload)
        user = self._by_email(data.email)
        if user is None:
            raise NotFoundError("No user found with that email")

        code = generate_code()

        def set_code(u: User) -> None:
            u.reset_password_code = code
            u.reset_password_expire = utcnow() + self._code_ttl

        user = self._update(user.id, set_code)
        subject, body = password_reset_email(user.first_name, code, self._code_ttl_minutes)
        try:
            self._notifier.send(user.email, subject, body)
        except UpstreamError:

            def clear_code(u: User) -> None:
                u.reset_password_code = None
                u.reset_password_expire = None

            self._update(user.id, clear_code)
            raise

    def verify_reset_code(self, payload: Any) -> str:
        data = parse_payload(CodeInput, payload)
        user = self._by_email(data.email)
        if (
            user is None
            or not codes_match(user.reset_password_code, data.code)
            or user.reset_password_expire is None
            or user.reset_password_expire < utcnow()
        ):
            raise ValidationError("Invalid or expired reset code")

        token = generate_reset_token()

        def change(u: User) -> None:
            u.reset_password_code = None
            u.reset_password_expire = None
            u.reset_password_token = token
            u.reset_password_token_expire = utcnow() + self._code_ttl

        self._update(user.id, change)
        return token

    def reset_password(self, payload: Any) -> None:
        data = parse_payload(ResetPasswordInput, payload)
        user = self._users.find_one(reset_password_token=data.token)
        if user is None or user.reset_password_token_expire is None or user.reset_password_token_expire < utcnow():
            raise ValidationError("Invalid or expired reset token")

        def change(u: User) -> None:
            u.password_hash = hash_password(data.password)
            u.reset_password_code = None
            u.reset_password_expire = None
            u.reset_password_token = None
            u.reset_password_token_expire = None

        self._update(user.id, change)
        logger.info("Password reset for user %s", user.id)

    # --- Self-service ---

    def get_profile(self, user_id: str) -> User:
        return self._require(user_id)

    def update_profile(self, user_id: str, payload: Any) -> User:
        new_email = payload.get("email") if isinstance(payload, dict) else None
        if new_email:
            existing = self._by_email(str(new_email).strip().lower())
            if existing is not None and existing.id != user_id:
                raise ConflictError("Email is already in use")
        return self._update(user_id, lambda u: merge_fields(u, ProfileFields, payload))

    def update_preferences(self, user_id: str, payload: Any) -> User:
        def change(u: User) -> None:
            current = u.preferences.model_dump()
            updates = payload if isinstance(payload, dict) else {}
            u.preferences = parse_payload(Preferences, {**current, **updates})

        return self._update(user_id, change)

    def update_avatar(self, user_id: str, payload: Any) -> User:
        data = parse_payload(AvatarInput, payload)
        if data.image is not None:
            avatar = self._images.upload(data.image, "avatars")
        elif data.url:
            avatar = ImageRef(url=data.url)
        else:
            raise ValidationError("Provide an image or an avatar url")

        previous: list[ImageRef] = []

        def change(u: User) -> None:
            previous[:] = [u.avatar] if u.avatar is not None else []
            u.avatar = avatar

        user = self._update(user_id, change)
        discard_images(self._images, previous)
        return user

    def update_password(self, user_id: str, payload: Any) -> None:
        data = parse_payload(PasswordChangeInput, payload)

        def change(u: User) -> None:
            if not verify_password(data.current_password, u.password_hash):
                raise AuthenticationError("Current password is incorrect", code=ErrorCode.INVALID_CREDENTIALS)
            u.password_hash = hash_password(data.new_password)

        self._update(user_id, change)

    def delete_account(self, user_id: str) -> None:
        user = self._require(user_id)
        self._users.delete(user.id)
        if user.avatar is not None:
            discard_images(self._images, [user.avatar])
        logger.info("Deleted account %s", user.id)

    def get_stats(self, user_id: str) -> dict[str, Any]:
        trips = self._trips.find(user=user_id, sort="created_at", descending=True)
        trip_ids = {trip.id for trip in trips}
        budgets = [b for b in self._budgets.find() if b.trip in trip_ids]
        itineraries = [i for i in self._itineraries.find() if i.trip in trip_ids]
        packing_lists = [p for p in self._packing_lists.find() if p.trip in trip_ids]

        total_activities = sum(i.total_activities for i in itineraries)
        completed_activities = sum(i.completed_activities for i in itineraries)
        total_items = sum(p.total_items for p in packing_lists)
        packed_items = sum(p.packed_items for p in packing_lists)
        return {
            "trips": {
                "total": len(trips),
                "by_status": dict(Counter(t.status for t in trips)),
                "total_days": sum(t.duration for t in trips),
                "total_budget": sum(t.budget.total for t in trips),
            },
            "budgets": {
                "count": len(budgets),
                "total_budget": sum(b.total_budget.amount for b in budgets),
                "total_expenses": sum(b.total_expenses.amount for b in budgets),
            },
            "itineraries": {
                "count": len(itineraries),
                "total_activities": total_activities,
                "completed_activities": completed_activities,
                "completion_percentage": percentage(completed_activities, total_activities),
            },
            "packing_lists": {
                "count": len(packing_lists),
                "total_items": total_items,
                "packed_items": packed_items,
                "packing_progress": percentage(packed_items, total_items),
            },
            "recent_trips": [trip.to_public() for trip in trips[:5]],
        }

    # --- Admin ---

    def list_users(self, role: str | None, query: dict[str, Any] | None = None) -> Page[User]:
        require_admin(role)
        query = query or {}
        page, limit = parse_page_params(query)
        users = self._users.find()
        if query.get("role"):
            users = [u for u in users if u.role == query["role"]]
        if query.get("search"):
            needle = str(query["search"]).lower()
            users = [u for u in users if needle in u.full_name.lower() or needle in u.email]
        return paginate(sort_by(users, "created_at", descending=True), page, limit)

    def get_user(self, role: str | None, user_id: str) -> User:
        require_admin(role)
        return self._require(user_id)

    def update_user(self, role: str | None, user_id: str, payload: Any) -> User:
        require_admin(role)
        new_email = payload.get("email") if isinstance(payload, dict) else None
        if new_email:
            existing = self._by_email(str(new_email).strip().lower())
            if existing is not None and existing.id != user_id:
                raise ConflictError("Email is already in use")
        return self._update(user_id, lambda u: merge_fields(u, AdminUserFields, payload))

    def delete_user(self, role: str | None, user_id: str) -> None:
        require_admin(role)
        self.delete_account(user_id)
