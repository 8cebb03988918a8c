"""Base transport interface for MCP communication."""

from abc import ABC, abstractmethod
from typing import Any, Dict, Iterator, Optional


class TransportError(Exception):
    """Base exception for transport-related errors."""
    pass


class ConnectionError(TransportError):
    """Raised when the transport is used while not connected."""
    pass


class MessageError(TransportError):
    """Raised when reading or writing a message fails."""
    pass


class Transport(ABC):
    """Abstract base class for line-oriented MCP transports."""

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        self.config = config or {}
        self._connected = False
        self._closed = False

    @property
    def connected(self) -> bool:
        """Check if transport is connected."""
        return self._connected

    @property
    def closed(self) -> bool:
        """Check if transport is closed."""
        return self._closed

    @abstractmethod
    def connect(self) -> None:
        """Establish transport connection."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Close transport connection."""
        pass

    @abstractmethod
    def send_line(self, line: str) -> None:
        """Write one message line."""
        pass

    @abstractmethod
    def receive_lines(self) -> Iterator[str]:
        """Yield inbound message lines until the input ends."""
        pass

    def __enter__(self):
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.disconnect()
