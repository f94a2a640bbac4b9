"""
JSON codec for the relay wire format.

Decodes untrusted WebSocket text frames into typed requests and encodes
typed responses back to text.
"""

import json

from pydantic import ValidationError

from relay.messaging.types import RelayRequest, RelayResponse, request_adapter

# 64KB leaves room for SDP offers with many codecs and candidates.
MAX_MESSAGE_SIZE = 64 * 1024


class DecodeError(Exception):
    """Error raised when an incoming frame is not a recognized request."""


def decode(data: str | bytes, max_size: int = MAX_MESSAGE_SIZE) -> RelayRequest:
    """
    Decode a text frame into a typed request.

    Raises DecodeError for binary frames, oversized payloads, malformed JSON
    and anything that does not match one of the request shapes.
    """
    if not isinstance(data, str):
        raise DecodeError(f"expected text frame, got {type(data).__name__}")
    byte_len = len(data.encode("utf-8"))
    if byte_len > max_size:
        raise DecodeError(f"payload too large: {byte_len} bytes (max {max_size})")
    try:
        raw = json.loads(data)
    except (json.JSONDecodeError, RecursionError) as e:
        raise DecodeError(f"malformed JSON: {e}") from e

    if not isinstance(raw, dict):
        raise DecodeError(f"expected object, got {type(raw).__name__}")

    try:
        return request_adapter.validate_python(raw)
    except ValidationError as e:
        raise DecodeError(f"unrecognized message: {e.error_count()} validation error(s)") from e


def encode(response: RelayResponse) -> str:
    """
    Encode a response model to a JSON text frame.
    """
    return response.model_dump_json(by_alias=True)
