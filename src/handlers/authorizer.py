"""REST API Lambda authorizer: validates the bearer JWT on every protected route."""

import asyncio
import logging
from typing import Any

from core.auth import AuthUser, get_auth_provider
from core.errors import AuthenticationError

logger = logging.getLogger(__name__)

_BEARER = "bearer "


def handler(event: dict[str, Any], context: object) -> dict[str, Any]:
    # AuthProvider methods are async; asyncio.run() bridges them into this sync handler.
    try:
        token = _extract_token(event["authorizationToken"])
        auth_provider = get_auth_provider()
        auth_user = asyncio.run(auth_provider.verify_token(token))
        return _allow_policy(event["methodArn"], auth_user)
    except (KeyError, AuthenticationError) as e:
        logger.info("Denied request to %s: %s", event.get("methodArn"), e)
        return _deny_policy(event.get("methodArn", "*"))


def _extract_token(header: str) -> str:
    if not header or not header.lower().startswith(_BEARER):
        raise AuthenticationError("Not authorized to access this route")
    token = header[len(_BEARER) :].strip()
    if not token:
        raise AuthenticationError("Not authorized to access this route")
    return token


def _allow_policy(method_arn: str, auth_user: AuthUser) -> dict[str, Any]:
    return {
        "principalId": auth_user.user_id,
        "policyDocument": {
            "Version": "2012-10-17",
            "Statement": [{"Action": "execute-api:Invoke", "Effect": "Allow", "Resource": method_arn}],
        },
        "context": {"userId": auth_user.user_id, "email": auth_user.email, "role": auth_user.role},
    }


def _deny_policy(method_arn: str) -> dict[str, Any]:
    return {
        "principalId": "unauthorized",
        "policyDocument": {
            "Version": "2012-10-17",
            "Statement": [{"Action": "execute-api:Invoke", "Effect": "Deny", "Resource": method_arn}],
        },
    }
