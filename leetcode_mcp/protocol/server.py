"""MCP server implementation."""

from typing import Any, Dict, Optional
import httpx
import structlog

from .codec import DecodeError, EncodeError, decode, encode
from .handler import ProtocolHandler
from ..transport.base import Transport, TransportError
from ..tools.base import ToolRegistry
from ..tools.leetcode import LeetCodeDailyChallengeTool, create_http_client

logger = structlog.get_logger()


class MCPServer:
    """MCP server exposing LeetCode tools over a line transport.

    Requests are handled one at a time: a line is read, dispatched and
    answered before the next line is read, so responses come out in
    request order.
    """

    def __init__(
        self,
        transport: Transport,
        config: Optional[Dict[str, Any]] = None,
        tool_registry: Optional[ToolRegistry] = None
    ):
        self.transport = transport
        self.config = config or {}
        self._http_client: Optional[httpx.Client] = None
        self._running = False
        self._server_info = {
            "name": self.config.get("server_name", "leetcode-mcp-server"),
            "version": self.config.get("server_version", "1.0.0")
        }

        if tool_registry is None:
            tool_registry = self._create_tool_registry()
        self.tool_registry = tool_registry
        self.protocol_handler = ProtocolHandler(self.tool_registry, self._server_info)

    def _create_tool_registry(self) -> ToolRegistry:
        """Build the fixed tool set around one shared HTTP client."""
        leetcode_config = self.config.get("leetcode", {})
        self._http_client = create_http_client(leetcode_config)
        return ToolRegistry([
            LeetCodeDailyChallengeTool(leetcode_config, client=self._http_client),
        ])

    def start(self) -> None:
        """Start the MCP server."""
        if self._running:
            return

        try:
            self.transport.connect()
            self.tool_registry.initialize_all()
            self._running = True
            logger.debug(
                "MCP server started",
                server_info=self._server_info,
                tools=self.tool_registry.names
            )
        except Exception as e:
            logger.error("Failed to start MCP server", error=str(e))
            self.stop()
            raise

    def stop(self) -> None:
        """Stop the MCP server."""
        self._running = False
        self.tool_registry.cleanup_all()

        if self._http_client is not None:
            self._http_client.close()
            self._http_client = None

        self.transport.disconnect()
        logger.info("MCP server stopped")

    def run(self) -> None:
        """Serve until end of input."""
        self.start()
        try:
            self.serve()
        finally:
            self.stop()

    def serve(self) -> None:
        """Read, dispatch and answer lines until the input ends."""
        try:
            for line in self.transport.receive_lines():
                self.process_line(line)
        except TransportError as e:
            logger.warning("Error reading from input", error=str(e))

        logger.info("Input closed")

    def process_line(self, line: str) -> None:
        """Handle one inbound line, writing at most one response line."""
        if not line.strip():
            return

        try:
            request = decode(line)
        except DecodeError as e:
            logger.error("Failed to parse request", error=str(e))
            return

        response = self.protocol_handler.handle_request(request)

        try:
            payload = encode(response)
        except EncodeError as e:
            logger.error("Failed to marshal response", request_id=request.id, error=str(e))
            return

        self.transport.send_line(payload)

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.stop()
