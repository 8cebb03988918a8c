"""Transport layer abstraction for MCP communication."""

from .base import Transport, TransportError
from .stdio import StdioTransport

__all__ = ["Transport", "TransportError", "StdioTransport"]
