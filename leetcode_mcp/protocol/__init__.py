"""JSON-RPC 2.0 protocol implementation for MCP."""

from .messages import (
    MCPMessage,
    MCPRequest,
    MCPResponse,
    MCPError,
    ErrorCode,
)
from .codec import DecodeError, EncodeError, decode, encode

__all__ = [
    "MCPMessage",
    "MCPRequest",
    "MCPResponse",
    "MCPError",
    "ErrorCode",
    "DecodeError",
    "EncodeError",
    "decode",
    "encode",
]
