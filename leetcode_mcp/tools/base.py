"""Base tool interface and registry."""

from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Optional
import structlog

from ..protocol.messages import ToolDefinition
from ..protocol.values import matches_json_type, json_type

logger = structlog.get_logger()


class ToolError(Exception):
    """Base exception for tool-related errors."""
    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ToolValidationError(ToolError):
    """Raised when tool arguments do not match the input schema."""
    def __init__(self, errors: List[str]):
        super().__init__("; ".join(errors))
        self.errors = errors


class Tool(ABC):
    """Abstract base class for MCP tools."""

    # Text placed above the rendered result in a tools/call response.
    result_heading: Optional[str] = None

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        self.config = config or {}
        self._initialized = False

    @property
    @abstractmethod
    def name(self) -> str:
        """Tool name."""
        pass

    @property
    @abstractmethod
    def description(self) -> str:
        """Tool description."""
        pass

    @property
    @abstractmethod
    def input_schema(self) -> Dict[str, Any]:
        """JSON schema for tool input validation."""
        pass

    @abstractmethod
    def execute(self, arguments: Dict[str, Any]) -> Dict[str, Any]:
        """Execute the tool with given arguments."""
        pass

    def initialize(self) -> None:
        """Initialize tool resources."""
        if self._initialized:
            return

        try:
            self._initialize_impl()
            self._initialized = True
            logger.info("Tool initialized", tool=self.name)
        except Exception as e:
            logger.error("Tool initialization failed", tool=self.name, error=str(e))
            raise ToolError(f"Failed to initialize {self.name}: {e}") from e

    def cleanup(self) -> None:
        """Cleanup tool resources."""
        if not self._initialized:
            return

        try:
            self._cleanup_impl()
            logger.info("Tool cleaned up", tool=self.name)
        except Exception as e:
            logger.error("Tool cleanup failed", tool=self.name, error=str(e))
        finally:
            self._initialized = False

    def _initialize_impl(self) -> None:
        """Subclass-specific initialization logic."""
        pass

    def _cleanup_impl(self) -> None:
        """Subclass-specific cleanup logic."""
        pass

    def call(self, arguments: Dict[str, Any]) -> Dict[str, Any]:
        """Call the tool with validation and error handling."""
        if not self._initialized:
            self.initialize()

        arguments = self.validate_arguments(arguments)

        try:
            result = self.execute(arguments)
        except ToolError:
            raise
        except Exception as e:
            error_msg = f"Tool {self.name} execution failed: {e}"
            logger.error(error_msg, tool=self.name, error=str(e))
            raise ToolError(error_msg) from e

        logger.info(
            "Tool executed successfully",
            tool=self.name,
            arguments=arguments
        )
        return result

    def validate_arguments(self, arguments: Dict[str, Any]) -> Dict[str, Any]:
        """Check arguments against the schema and return the usable ones.

        Missing or mistyped required fields raise ToolValidationError. An
        optional field of the wrong type is dropped, so the tool falls back
        to its default for it.
        """
        schema = self.input_schema
        properties = schema.get("properties", {})
        required = schema.get("required", [])
        errors = []
        accepted = {}

        for field in required:
            if field not in arguments:
                errors.append(f"{field} is required")

        for field, value in arguments.items():
            expected_type = properties.get(field, {}).get("type")
            if not expected_type or matches_json_type(value, expected_type):
                accepted[field] = value
                continue

            message = f"{field} must be of type {expected_type}, got {json_type(value)}"
            if field in required:
                errors.append(message)
            else:
                logger.warning("Ignoring mistyped argument", tool=self.name, error=message)

        if errors:
            logger.error("Input validation failed", tool=self.name, errors=errors)
            raise ToolValidationError(errors)

        return accepted

    def get_definition(self) -> ToolDefinition:
        """Get tool definition for MCP."""
        return ToolDefinition(
            name=self.name,
            description=self.description,
            input_schema=self.input_schema
        )


class ToolRegistry:
    """Fixed, ordered collection of tools.

    The registry is built once from its tools and cannot be changed
    afterwards; lookups are exact and case-sensitive.
    """

    def __init__(self, tools: Iterable[Tool]):
        self._tools: Dict[str, Tool] = {}
        for tool in tools:
            name = tool.name
            if not name:
                raise ValueError("Tool name must not be empty")
            if name in self._tools:
                raise ValueError(f"Duplicate tool: {name}")
            if "type" not in tool.input_schema:
                raise ValueError(f"Input schema of {name} has no type")
            self._tools[name] = tool
            logger.debug("Tool registered", tool=name)

    def __len__(self) -> int:
        return len(self._tools)

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    @property
    def names(self) -> List[str]:
        return list(self._tools)

    def get_tool(self, name: str) -> Optional[Tool]:
        """Get a tool by exact name."""
        return self._tools.get(name)

    def list_tools(self) -> List[ToolDefinition]:
        """List all tools in registration order."""
        return [tool.get_definition() for tool in self._tools.values()]

    def initialize_all(self) -> None:
        """Initialize all tools."""
        for tool in self._tools.values():
            tool.initialize()

    def cleanup_all(self) -> None:
        """Cleanup all tools."""
        for tool in self._tools.values():
            tool.cleanup()
