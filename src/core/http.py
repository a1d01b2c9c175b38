"""
API Gateway (REST, proxy integration) glue shared by the Lambda handlers.

Every response uses the envelope ``{success, message?, data?, errors?}``,
with ``count``/``total``/``pagination`` added for paged lists. Exceptions
are mapped here: ``TravelTrackError`` subclasses carry their own status,
anything else is logged and reported as an opaque 500.
"""

import base64
import json
import logging
from collections.abc import Callable
from functools import cached_property
from typing import Any

from pydantic import BaseModel

from core.config import get_config
from core.errors import AuthenticationError, ErrorCode, NotFoundError, TravelTrackError, ValidationError
from core.models.common import Document
from core.pagination import Page

logger = logging.getLogger(__name__)

_HEADERS = {
    "Content-Type": "application/json",
    "Access-Control-Allow-Origin": "*",
}


class ApiRequest:
    """The parts of an API Gateway proxy event the handlers read."""

    def __init__(self, event: dict[str, Any]) -> None:
        self.event = event
        self.method: str = event.get("httpMethod", "GET").upper()
        self.resource: str = event.get("resource", "")
        self.path_params: dict[str, str] = event.get("pathParameters") or {}
        self.query: dict[str, str] = event.get("queryStringParameters") or {}

    @cached_property
    def body(self) -> Any:
        raw = self.event.get("body")
        if not raw:
            return {}
        try:
            if self.event.get("isBase64Encoded"):
                raw = base64.b64decode(raw, validate=True).decode("utf-8")
            return json.loads(raw)
        except ValueError as e:
            raise ValidationError("Request body is not valid JSON", code=ErrorCode.INVALID_REQUEST) from e

    @property
    def _authorizer(self) -> dict[str, Any]:
        return (self.event.get("requestContext") or {}).get("authorizer") or {}

    @property
    def user_id(self) -> str:
        user_id = self._authorizer.get("userId")
        if not user_id:
            raise AuthenticationError("Not authorized to access this route")
        return str(user_id)

    @property
    def role(self) -> str | None:
        return self._authorizer.get("role")

    def path(self, name: str) -> str:
        value = self.path_params.get(name)
        if not value:
            raise ValidationError(f"Missing path parameter: {name}", code=ErrorCode.INVALID_REQUEST)
        return value


def _serialize(value: Any) -> Any:
    if isinstance(value, Document):
        return value.to_public()
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if isinstance(value, dict):
        return {k: _serialize(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_serialize(v) for v in value]
    return value


def api_response(
    status_code: int = 200,
    *,
    success: bool = True,
    message: str | None = None,
    data: Any = None,
    errors: list[dict[str, Any]] | None = None,
    **extra: Any,
) -> dict[str, Any]:
    body: dict[str, Any] = {"success": success}
    if message is not None:
        body["message"] = message
    if data is not None:
        body["data"] = _serialize(data)
    if errors:
        body["errors"] = errors
    body.update({k: _serialize(v) for k, v in extra.items()})
    return {"statusCode": status_code, "headers": dict(_HEADERS), "body": json.dumps(body, default=str)}


def page_response(page: Page[Any]) -> dict[str, Any]:
    return api_response(
        data=page.items,
        count=len(page.items),
        total=page.total,
        pagination=page.pagination,
    )


def error_response(error: TravelTrackError) -> dict[str, Any]:
    errors = error.errors if isinstance(error, ValidationError) else None
    return api_response(
        error.status_code,
        success=False,
        message=error.public_message,
        errors=errors,
        code=error.code.value,
    )


RouteHandler = Callable[[ApiRequest], dict[str, Any]]


class Router:
    """Dispatches proxy events on (``httpMethod``, ``resource``)."""

    def __init__(self) -> None:
        self._routes: dict[tuple[str, str], tuple[RouteHandler, bool]] = {}

    def route(
        self, method: str, resource: str, *, auth: bool = False
    ) -> Callable[[RouteHandler], RouteHandler]:
        """Register a route. ``auth=True`` rejects requests without an authorizer identity
        before the handler runs, for routes that never read ``user_id`` themselves."""

        def register(fn: RouteHandler) -> RouteHandler:
            self._routes[(method.upper(), resource)] = (fn, auth)
            return fn

        return register

    def dispatch(self, event: dict[str, Any], context: object) -> dict[str, Any]:
        logging.getLogger().setLevel(get_config().log_level)
        request = ApiRequest(event)
        route = self._routes.get((request.method, request.resource))
        try:
            if route is None:
                raise NotFoundError(f"Route not found: {request.method} {request.resource}")
            fn, needs_auth = route
            if needs_auth:
                request.user_id  # raises AuthenticationError when absent
            return fn(request)
        except TravelTrackError as e:
            if e.status_code >= 500:
                logger.error("%s %s failed: %s", request.method, request.resource, e.message, exc_info=True)
            else:
                logger.info("%s %s rejected (%d): %s", request.method, request.resource, e.status_code, e.message)
            return error_response(e)
        except Exception:
            logger.exception("Unhandled error on %s %s", request.method, request.resource)
            return error_response(TravelTrackError("Unhandled error"))
