"""Protocol handler for MCP method routing."""

from typing import Any, Callable, Dict, Optional
import structlog

from .formatting import render_result
from .messages import (
    MCP_PROTOCOL_VERSION,
    ErrorCode,
    InitializeResult,
    MCPMethods,
    MCPRequest,
    MCPResponse,
    ServerCapabilities,
    ToolCallResult,
)
from .values import ShapeError, expect_object, expect_string, optional_object
from ..tools.base import ToolError, ToolRegistry, ToolValidationError

logger = structlog.get_logger()


class RequestError(Exception):
    """Carries a protocol error code and message out of a method handler."""

    def __init__(self, code: ErrorCode, message: str):
        super().__init__(message)
        self.code = code
        self.message = message


class ProtocolHandler:
    """Routes MCP requests to their method handlers.

    The handler keeps no state between requests. The tool registry is
    passed in and only read.
    """

    def __init__(
        self,
        tool_registry: ToolRegistry,
        server_info: Optional[Dict[str, str]] = None
    ):
        self.tool_registry = tool_registry
        self.server_info = server_info or {
            "name": "leetcode-mcp-server",
            "version": "1.0.0"
        }
        self._capabilities = ServerCapabilities(tools={"listChanged": False})
        self._request_handlers: Dict[str, Callable[[Any], Dict[str, Any]]] = {}
        self._setup_handlers()

    def _setup_handlers(self) -> None:
        self._request_handlers[MCPMethods.INITIALIZE] = self._handle_initialize
        self._request_handlers[MCPMethods.TOOLS_LIST] = self._handle_tools_list
        self._request_handlers[MCPMethods.TOOLS_CALL] = self._handle_tools_call

    def handle_request(self, request: MCPRequest) -> MCPResponse:
        """Produce the response for one request. Never raises."""
        logger.debug("Request received", method=request.method, request_id=request.id)

        handler = self._request_handlers.get(request.method)
        if handler is None:
            logger.warning("Method not found", method=request.method)
            return MCPResponse.failure(request.id, ErrorCode.METHOD_NOT_FOUND, "Method not found")

        try:
            result = handler(request.params)
        except RequestError as e:
            logger.info(
                "Request failed",
                method=request.method,
                request_id=request.id,
                code=int(e.code),
                error=e.message
            )
            return MCPResponse.failure(request.id, e.code, e.message)
        except Exception as e:
            logger.error(
                "Request handler failed",
                method=request.method,
                error=str(e),
                exc_info=True
            )
            return MCPResponse.failure(request.id, ErrorCode.INTERNAL_ERROR, "Internal error")

        return MCPResponse.success(request.id, result)

    def _handle_initialize(self, params: Any) -> Dict[str, Any]:
        """Handle initialize request."""
        logger.info("Client initializing")
        result = InitializeResult(
            protocol_version=MCP_PROTOCOL_VERSION,
            capabilities=self._capabilities,
            server_info=self.server_info
        )
        return result.model_dump(exclude_none=True)

    def _handle_tools_list(self, params: Any) -> Dict[str, Any]:
        """Handle tools list request."""
        tool_defs = [tool.model_dump() for tool in self.tool_registry.list_tools()]
        logger.debug("Tools list requested", tool_count=len(tool_defs))
        return {"tools": tool_defs}

    def _handle_tools_call(self, params: Any) -> Dict[str, Any]:
        """Handle tool call request."""
        try:
            call_params = expect_object(params, "params")
        except ShapeError:
            raise RequestError(ErrorCode.INVALID_PARAMS, "Invalid params")

        try:
            tool_name = expect_string(call_params.get("name"), "params.name")
        except ShapeError:
            raise RequestError(ErrorCode.INVALID_PARAMS, "Missing tool name")

        tool = self.tool_registry.get_tool(tool_name)
        if tool is None:
            raise RequestError(ErrorCode.METHOD_NOT_FOUND, "Tool not found")

        try:
            arguments = optional_object(call_params.get("arguments"), "params.arguments") or {}
        except ShapeError as e:
            logger.warning("Ignoring malformed tool arguments", tool=tool_name, error=str(e))
            arguments = {}

        logger.info("Tool call requested", tool=tool_name, arguments=arguments)

        try:
            result = tool.call(arguments)
        except ToolValidationError as e:
            raise RequestError(ErrorCode.INVALID_PARAMS, f"Invalid arguments: {e.message}")
        except ToolError as e:
            logger.error("Tool execution failed", tool=tool_name, error=e.message)
            raise RequestError(ErrorCode.INTERNAL_ERROR, f"Internal error: {e.message}")

        text = render_result(result)
        if tool.result_heading:
            text = f"{tool.result_heading}\n\n{text}"
        return ToolCallResult.from_text(text).model_dump()
