"""Request body parsing shared by every account endpoint."""

from typing import Any, Dict, Type, TypeVar

from fastapi import Request
from pydantic import BaseModel, ValidationError

from ...domain.errors import InvalidInput

SchemaT = TypeVar("SchemaT", bound=BaseModel)


async def read_payload(request: Request) -> Dict[str, Any]:
    """Merge query parameters with a JSON or form body, selected by content type."""
    payload: Dict[str, Any] = dict(request.query_params)
    content_type = request.headers.get("content-type", "").lower()
    if content_type.startswith("application/json"):
        raw = await request.body()
        if not raw.strip():
            return payload
        try:
            data = await request.json()
        except ValueError as exc:
            raise InvalidInput("invalid JSON body") from exc
        if not isinstance(data, dict):
            raise InvalidInput("JSON body must be an object")
        payload.update(data)
    elif content_type.startswith(("application/x-www-form-urlencoded", "multipart/form-data")):
        form = await request.form()
        payload.update({key: value for key, value in form.items() if isinstance(value, str)})
    return payload


def parse_payload(schema: Type[SchemaT], payload: Dict[str, Any]) -> SchemaT:
    try:
        return schema.model_validate(payload)
    except ValidationError as exc:
        error = exc.errors()[0]
        field = ".".join(str(part) for part in error.get("loc", ())) or "body"
        raise InvalidInput(f"{field}: {error.get('msg', 'invalid value')}") from exc
