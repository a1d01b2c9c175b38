"""Turns pydantic validation failures into client-facing ``ValidationError``s."""

from typing import Any, TypeVar

import pydantic
from pydantic import BaseModel

from core.errors import ValidationError

ModelT = TypeVar("ModelT", bound=BaseModel)


def field_errors(exc: pydantic.ValidationError) -> list[dict[str, Any]]:
    errors = []
    for err in exc.errors():
        field = ".".join(str(part) for part in err["loc"]) or "body"
        errors.append({"field": field, "message": err["msg"]})
    return errors


def parse_payload(model: type[ModelT], data: Any) -> ModelT:
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    try:
        return model.model_validate(data)
    except pydantic.ValidationError as e:
        raise ValidationError("Validation failed", errors=field_errors(e)) from e
