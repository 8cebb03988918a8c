"""Standard I/O transport implementation for MCP."""

import io
import sys
from typing import Any, Dict, Iterator, Optional, TextIO
import structlog

from .base import Transport, ConnectionError, MessageError

logger = structlog.get_logger()


class StdioTransport(Transport):
    """Line transport over text streams, stdin/stdout by default."""

    def __init__(
        self,
        config: Optional[Dict[str, Any]] = None,
        stdin: Optional[TextIO] = None,
        stdout: Optional[TextIO] = None
    ):
        super().__init__(config)
        self._stdin = stdin
        self._stdout = stdout

    def connect(self) -> None:
        """Bind the input and output streams."""
        if self._connected:
            return

        self._stdin = self._utf8(self._stdin if self._stdin is not None else sys.stdin)
        self._stdout = self._utf8(self._stdout if self._stdout is not None else sys.stdout)

        self._connected = True
        self._closed = False
        logger.debug("Stdio transport initialized")

    @staticmethod
    def _utf8(stream: TextIO) -> TextIO:
        # Undecodable bytes become U+FFFD so only the offending line is lost.
        if isinstance(stream, io.TextIOWrapper):
            stream.reconfigure(encoding="utf-8", errors="replace")
        return stream

    def disconnect(self) -> None:
        """Stop reading. The streams themselves are left open."""
        if not self._connected:
            return

        self._connected = False
        self._closed = True
        try:
            self._stdout.flush()
        except (OSError, ValueError) as e:
            logger.warning("Failed to flush output", error=str(e))
        logger.debug("Stdio transport closed")

    def send_line(self, line: str) -> None:
        """Write one line to the output stream and flush it."""
        if not self._connected:
            raise ConnectionError("Not connected")

        try:
            self._stdout.write(line + "\n")
            self._stdout.flush()
        except (OSError, ValueError) as e:
            raise MessageError(f"Failed to send message: {e}") from e

        logger.debug("Message sent", size=len(line))

    def receive_lines(self) -> Iterator[str]:
        """Yield lines from the input stream without their line endings."""
        if not self._connected:
            raise ConnectionError("Not connected")

        while not self._closed:
            try:
                line = self._stdin.readline()
            except (OSError, ValueError) as e:
                raise MessageError(f"Failed to receive messages: {e}") from e

            if not line:
                break

            logger.debug("Message received", size=len(line))
            yield line.rstrip("\r\n")
