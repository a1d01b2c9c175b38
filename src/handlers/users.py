"""User endpoints: self-service profile management and admin user management."""

from typing import Any

from core.http import ApiRequest, Router, api_response, page_response
from core.services.registry import get_account_service

router = Router()


@router.route("GET", "/users/profile")
def get_profile(request: ApiRequest) -> dict[str, Any]:
    return api_response(data=get_account_service().get_profile(request.user_id))


@router.route("PUT", "/users/profile")
def update_profile(request: ApiRequest) -> dict[str, Any]:
    user = get_account_service().update_profile(request.user_id, request.body)
    return api_response(message="Profile updated successfully", data=user)


@router.route("PUT", "/users/preferences")
def update_preferences(request: ApiRequest) -> dict[str, Any]:
    user = get_account_service().update_preferences(request.user_id, request.body)
    return api_response(message="Preferences updated successfully", data=user)


@router.route("PUT", "/users/avatar")
def update_avatar(request: ApiRequest) -> dict[str, Any]:
    user = get_account_service().update_avatar(request.user_id, request.body)
    return api_response(message="Avatar updated successfully", data=user)


@router.route("PUT", "/users/password")
def update_password(request: ApiRequest) -> dict[str, Any]:
    get_account_service().update_password(request.user_id, request.body)
    return api_response(message="Password updated successfully")


@router.route("DELETE", "/users/account")
def delete_account(request: ApiRequest) -> dict[str, Any]:
    get_account_service().delete_account(request.user_id)
    return api_response(message="Account deleted successfully")


@router.route("GET", "/users/stats")
def user_stats(request: ApiRequest) -> dict[str, Any]:
    return api_response(data=get_account_service().get_stats(request.user_id))


# --- Admin ---


@router.route("GET", "/users", auth=True)
def list_users(request: ApiRequest) -> dict[str, Any]:
    return page_response(get_account_service().list_users(request.role, request.query))


@router.route("GET", "/users/{userId}", auth=True)
def get_user(request: ApiRequest) -> dict[str, Any]:
    return api_response(data=get_account_service().get_user(request.role, request.path("userId")))


@router.route("PUT", "/users/{userId}", auth=True)
def update_user(request: ApiRequest) -> dict[str, Any]:
    user = get_account_service().update_user(request.role, request.path("userId"), request.body)
    return api_response(message="User updated successfully", data=user)


@router.route("DELETE", "/users/{userId}", auth=True)
def delete_user(request: ApiRequest) -> dict[str, Any]:
    get_account_service().delete_user(request.role, request.path("userId"))
    return api_response(message="User deleted successfully")


def handler(event: dict[str, Any], context: object) -> dict[str, Any]:
    return router.dispatch(event, context)
