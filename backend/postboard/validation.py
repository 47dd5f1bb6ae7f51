"""Request validation gate.

`validate_request(schema)` turns a pydantic model describing the
`body`, `params` (route parameters) and `query` sections of a request into
a FastAPI dependency. All sections are validated in a single pass so the
client receives every violation at once, as a list of
`{"field": "<section>.<name>", "message": "..."}` entries.
"""

import json
import logging
from typing import Any, Dict, Iterable, List, Type

from fastapi import Request
from pydantic import BaseModel, ValidationError

from .errors import PayloadTooLarge, RequestValidationFailed

logger = logging.getLogger(__name__)

DEFAULT_MAX_BODY_BYTES = 10 * 1024 * 1024
BODY_TOO_LARGE = "Request body too large"

# FastAPI reports route parameters under "path"; clients see "params".
_SECTION_ALIASES = {"path": "params"}


def _label(loc: List[Any]) -> str:
    name = str(loc[-1]) if loc else "value"
    return name.replace("_", " ").capitalize()


def _message(error: Dict[str, Any]) -> str:
    loc = list(error.get("loc", ()))
    kind = error.get("type")
    if kind == "missing":
        return f"{_label(loc)} is required"
    if kind == "string_type":
        return f"{_label(loc)} must be a string"
    if kind in ("model_type", "model_attributes_type", "dict_type") and len(loc) == 1:
        return f"Request {loc[0]} must be a JSON object"
    return error.get("msg", "Invalid value")


def format_errors(errors: Iterable[Dict[str, Any]]) -> List[dict]:
    """Convert pydantic/FastAPI error dicts to `{field, message}` details."""
    details = []
    for error in errors:
        loc = [str(part) for part in error.get("loc", ())]
        if loc:
            loc[0] = _SECTION_ALIASES.get(loc[0], loc[0])
        details.append({"field": ".".join(loc), "message": _message(error)})
    return details


async def _read_body(request: Request) -> Any:
    limit = getattr(request.app.state, "max_body_bytes", DEFAULT_MAX_BODY_BYTES)
    declared = request.headers.get("content-length", "")
    if declared.isdigit() and int(declared) > limit:
        raise PayloadTooLarge(BODY_TOO_LARGE)
    raw = bytearray()
    async for chunk in request.stream():
        raw.extend(chunk)
        # chunked uploads carry no Content-Length
        if len(raw) > limit:
            raise PayloadTooLarge(BODY_TOO_LARGE)
    if not raw.strip():
        return {}
    try:
        return json.loads(raw)
    except ValueError:
        raise RequestValidationFailed([{"field": "body", "message": "Malformed JSON body"}])


def validate_request(schema: Type[BaseModel]):
    """Return a dependency validating the request against `schema`.

    The body is only read when the schema declares a `body` field.
    """
    sections = schema.model_fields

    async def dependency(request: Request):
        raw: Dict[str, Any] = {}
        if "body" in sections:
            raw["body"] = await _read_body(request)
        if "params" in sections:
            raw["params"] = dict(request.path_params)
        if "query" in sections:
            raw["query"] = dict(request.query_params)
        try:
            return schema.model_validate(raw)
        except ValidationError as exc:
            details = format_errors(exc.errors())
            logger.debug("validation.rejected path=%s fields=%s", request.url.path, [d["field"] for d in details])
            raise RequestValidationFailed(details) from exc

    dependency.__name__ = f"validate_{schema.__name__}"
    return dependency
