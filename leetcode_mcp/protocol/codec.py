"""Line framing for JSON-RPC messages."""

import json
from pydantic import ValidationError

from .messages import MCPRequest, MCPResponse


class DecodeError(ValueError):
    """Raised when an inbound line cannot be turned into a request."""
    pass


class EncodeError(ValueError):
    """Raised when a response cannot be serialized."""
    pass


def decode(line: str) -> MCPRequest:
    """Parse one line of text into a request envelope."""
    try:
        raw = json.loads(line)
    except json.JSONDecodeError as e:
        raise DecodeError(f"Invalid JSON: {e}") from e

    if not isinstance(raw, dict):
        raise DecodeError("Message must be a JSON object")
    if "method" not in raw:
        raise DecodeError("Message has no method")

    try:
        return MCPRequest.model_validate(raw)
    except ValidationError as e:
        raise DecodeError(f"Invalid request: {e}") from e


def encode(response: MCPResponse) -> str:
    """Serialize a response envelope to a single line of JSON."""
    try:
        return json.dumps(
            response.to_dict(),
            ensure_ascii=False,
            separators=(",", ":"),
            allow_nan=False,
        )
    except (TypeError, ValueError) as e:
        raise EncodeError(f"Failed to serialize response: {e}") from e
