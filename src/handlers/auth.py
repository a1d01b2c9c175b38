"""Authentication endpoints: registration, verification, login and password reset."""

from typing import Any

from core.http import ApiRequest, Router, api_response
from core.services.registry import get_account_service

router = Router()


@router.route("POST", "/auth/register")
def register(request: ApiRequest) -> dict[str, Any]:
    result = get_account_service().register(request.body)
    message = "User registered successfully. Please check your email for the verification code."
    return api_response(201, message=message, data=result)


@router.route("POST", "/auth/verify-email")
def verify_email(request: ApiRequest) -> dict[str, Any]:
    user = get_account_service().verify_email(request.body)
    return api_response(message="Email verified successfully", data=user)


@router.route("POST", "/auth/resend-verification")
def resend_verification(request: ApiRequest) -> dict[str, Any]:
    get_account_service().resend_verification(request.body)
    return api_response(message="Verification code sent successfully")


@router.route("POST", "/auth/login")
def login(request: ApiRequest) -> dict[str, Any]:
    return api_response(message="Login successful", data=get_account_service().login(request.body))


@router.route("GET", "/auth/me")
def me(request: ApiRequest) -> dict[str, Any]:
    return api_response(data=get_account_service().get_profile(request.user_id))


@router.route("POST", "/auth/logout", auth=True)
def logout(request: ApiRequest) -> dict[str, Any]:
    # Tokens are stateless; the client discards its copy.
    return api_response(message="Logged out successfully")


@router.route("POST", "/auth/forgot-password")
def forgot_password(request: ApiRequest) -> dict[str, Any]:
    get_account_service().forgot_password(request.body)
    return api_response(message="Password reset code sent to your email")


@router.route("POST", "/auth/verify-reset-code")
def verify_reset_code(request: ApiRequest) -> dict[str, Any]:
    token = get_account_service().verify_reset_code(request.body)
    return api_response(message="Reset code verified", data={"reset_token": token})


@router.route("PUT", "/auth/reset-password")
def reset_password(request: ApiRequest) -> dict[str, Any]:
    get_account_service().reset_password(request.body)
    return api_response(message="Password reset successfully")


def handler(event: dict[str, Any], context: object) -> dict[str, Any]:
    return router.dispatch(event, context)
