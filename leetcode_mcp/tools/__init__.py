"""Tool implementations for LeetCode integration."""

from .base import Tool, ToolError, ToolRegistry, ToolValidationError
from .leetcode import (
    LeetCodeAPIError,
    LeetCodeDailyChallengeTool,
    create_http_client,
)

__all__ = [
    "Tool",
    "ToolError",
    "ToolRegistry",
    "ToolValidationError",
    "LeetCodeAPIError",
    "LeetCodeDailyChallengeTool",
    "create_http_client",
]
