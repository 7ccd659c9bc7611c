"""JSON codecs used to encode token segments and decode received ones."""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Mapping, Type

from pydantic import BaseModel, ValidationError

from .exceptions import TokenDecodeError, TokenEncodeError

logger = logging.getLogger(__name__)


class JsonCodec:
    """Compact JSON codec.

    Keys keep their insertion order and separators carry no whitespace, so
    the encoded segments match what other JOSE implementations produce for
    the same mapping.
    """

    def encode(self, data: Mapping[str, Any]) -> str:
        try:
            return json.dumps(
                dict(data), separators=(",", ":"), ensure_ascii=False, allow_nan=False
            )
        except (TypeError, ValueError) as exc:
            raise TokenEncodeError(f"Could not encode JSON: {exc}") from exc

    def decode(self, text: str | bytes) -> Dict[str, Any]:
        try:
            data = json.loads(text)
        except (UnicodeDecodeError, ValueError) as exc:
            raise TokenDecodeError(f"Could not decode JSON: {exc}") from exc
        if not isinstance(data, dict):
            raise TokenDecodeError("Decoded JSON is not an object")
        return data

    def decode_header(self, text: str | bytes) -> Dict[str, Any]:
        """Decode a JOSE header, which never takes a payload model's shape."""
        return JsonCodec.decode(self, text)

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class ModelCodec(JsonCodec):
    """Decode payloads through a pydantic model.

    The decoded claims take the model's predefined shape: values are coerced
    to the field types, missing fields receive their defaults and the result
    is handed back as a plain dict.
    """

    def __init__(self, model: Type[BaseModel]) -> None:
        self.model = model

    def decode(self, text: str | bytes) -> Dict[str, Any]:
        try:
            instance = self.model.model_validate_json(text)
        except ValidationError as exc:
            logger.debug(f"Payload does not match {self.model.__name__}: {exc}")
            raise TokenDecodeError(
                f"Could not decode JSON as {self.model.__name__}: {exc.error_count()} error(s)"
            ) from exc
        return instance.model_dump()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.model.__name__})"
