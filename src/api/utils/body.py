"""Request body parsing for the dispatch handlers.

The body is read and parsed once per request, before any argument is
extracted, and stored on ``request.state.body`` where the ``body()`` binding
picks it up:

- JSON (``application/json``, ``text/json``, ``*+json``) -> parsed value
- ``application/x-www-form-urlencoded`` -> ``dict`` of the last value per key
- empty or any other content -> ``{}``
"""

from typing import Any
from urllib.parse import parse_qsl

import orjson
from starlette.requests import Request

from src.api.constants import (
    JSON_CONTENT_TYPES,
    JSON_SUFFIX,
    REQUEST_BODY_STATE_KEY,
    URLENCODED_CONTENT_TYPE,
)
from src.core.exceptions import ValidationError


def _media_type(request: Request) -> str:
    content_type = request.headers.get("content-type", "")
    return content_type.split(";", 1)[0].strip().lower()


def _is_json(media_type: str) -> bool:
    return media_type in JSON_CONTENT_TYPES or media_type.endswith(JSON_SUFFIX)


def decode_body(raw: bytes, media_type: str) -> Any:
    """Decode a raw body according to its media type.

    Args:
        raw: The request body bytes.
        media_type: Content type without parameters, lower-cased.

    Returns:
        Any: The parsed body, ``{}`` when there is nothing to parse.

    Raises:
        ValidationError: If a JSON body is malformed or a form is not UTF-8.
    """
    if not raw.strip():
        return {}

    if _is_json(media_type):
        try:
            return orjson.loads(raw)
        except orjson.JSONDecodeError as e:
            raise ValidationError(
                "Malformed JSON body",
                context={"content_type": media_type, "position": e.pos},
                cause=e,
            ) from e

    if media_type == URLENCODED_CONTENT_TYPE:
        try:
            text = raw.decode()
        except UnicodeDecodeError as e:
            raise ValidationError(
                "Form body is not valid UTF-8",
                context={"content_type": media_type},
                cause=e,
            ) from e
        return dict(parse_qsl(text, keep_blank_values=True))

    return {}


async def parse_body(request: Request) -> Any:
    """Parse the body of ``request`` and store it on ``request.state``.

    Repeated calls return the stored value without reading the body again.

    Args:
        request: The inbound request.

    Returns:
        Any: The parsed body.
    """
    if hasattr(request.state, REQUEST_BODY_STATE_KEY):
        return getattr(request.state, REQUEST_BODY_STATE_KEY)

    body = decode_body(await request.body(), _media_type(request))
    setattr(request.state, REQUEST_BODY_STATE_KEY, body)
    return body
