"""JSON response class backed by orjson.

Controller return values and error payloads are both rendered through
``ORJSONResponse``. It is installed as the FastAPI default response class,
so routes registered by the dispatch table and the exception handlers share
one serializer.

orjson serializes dataclasses, datetimes, UUIDs and enums natively; Pydantic
models are dumped to JSON-compatible dicts first.
"""

from typing import Any

import orjson
from fastapi.responses import JSONResponse
from pydantic import BaseModel


class ORJSONResponse(JSONResponse):
    """JSONResponse rendering its content with orjson."""

    media_type = "application/json"

    def render(self, content: Any) -> bytes:  # noqa: ANN401
        """Serialize ``content`` to JSON bytes.

        Args:
            content: A controller return value or an error payload.

        Returns:
            bytes: The JSON-encoded body.
        """
        if isinstance(content, BaseModel):
            content = content.model_dump(mode="json")

        return orjson.dumps(content, option=orjson.OPT_NON_STR_KEYS)
