"""MCP message types and JSON-RPC 2.0 protocol definitions."""

from enum import IntEnum
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field


JSONRPC_VERSION = "2.0"
MCP_PROTOCOL_VERSION = "2024-11-05"


class ErrorCode(IntEnum):
    """JSON-RPC 2.0 error codes used by the server."""
    METHOD_NOT_FOUND = -32601
    INVALID_PARAMS = -32602
    INTERNAL_ERROR = -32603


class MCPError(BaseModel):
    """JSON-RPC 2.0 error object."""
    code: int
    message: str


class MCPMessage(BaseModel):
    """Base MCP message."""
    jsonrpc: str = JSONRPC_VERSION


class MCPRequest(MCPMessage):
    """JSON-RPC 2.0 request message.

    The id is opaque: any JSON value is accepted and echoed back unchanged.
    """
    id: Any = None
    method: str
    params: Any = None


class MCPResponse(MCPMessage):
    """JSON-RPC 2.0 response message."""
    id: Any = None
    result: Optional[Any] = None
    error: Optional[MCPError] = None

    def model_post_init(self, __context: Any) -> None:
        """Validate that either result or error is present, but not both."""
        if self.result is None and self.error is None:
            raise ValueError("Either 'result' or 'error' must be present")
        if self.result is not None and self.error is not None:
            raise ValueError("Both 'result' and 'error' cannot be present")

    @classmethod
    def success(cls, request_id: Any, result: Any) -> "MCPResponse":
        return cls(id=request_id, result=result)

    @classmethod
    def failure(cls, request_id: Any, code: ErrorCode, message: str) -> "MCPResponse":
        return cls(id=request_id, error=MCPError(code=int(code), message=message))

    def to_dict(self) -> Dict[str, Any]:
        """Wire representation; the id key is always present."""
        message: Dict[str, Any] = {"jsonrpc": self.jsonrpc, "id": self.id}
        if self.error is not None:
            message["error"] = self.error.model_dump()
        else:
            message["result"] = self.result
        return message


class MCPMethods:
    """MCP method names handled by the server."""
    INITIALIZE = "initialize"
    TOOLS_LIST = "tools/list"
    TOOLS_CALL = "tools/call"


class ToolDefinition(BaseModel):
    """Tool definition schema."""
    name: str
    description: str
    inputSchema: Dict[str, Any] = Field(alias="input_schema")


class ServerCapabilities(BaseModel):
    """Server capabilities schema."""
    tools: Optional[Dict[str, Any]] = None


class InitializeResult(BaseModel):
    """Initialize response result."""
    protocolVersion: str = Field(alias="protocol_version")
    capabilities: ServerCapabilities
    serverInfo: Dict[str, str] = Field(alias="server_info")


class ToolCallResult(BaseModel):
    """Tool call response result."""
    content: List[Dict[str, Any]]
    isError: bool = Field(default=False, alias="is_error")

    @classmethod
    def from_text(cls, text: str) -> "ToolCallResult":
        return cls(content=[{"type": "text", "text": text}], is_error=False)
