"""Configuration management for MCP server."""

import os
from typing import Any, Dict, Optional
import json
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class LeetCodeConfig(BaseModel):
    """LeetCode API configuration."""
    base_url: str = "https://leetcode.com"
    graphql_url: str = "https://leetcode.com/graphql"
    user_agent: str = "LeetCode-MCP-Server/1.0"
    timeout: float = 30.0
    connect_timeout: float = 10.0
    retry_attempts: int = 3
    retry_multiplier: float = 1.0
    retry_max_wait: float = 5.0


class TransportConfig(BaseModel):
    """Transport configuration."""
    type: str = "stdio"


class ServerConfig(BaseSettings):
    """Main server configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    # Server settings
    server_name: str = "leetcode-mcp-server"
    server_version: str = "1.0.0"
    debug: bool = False
    log_level: str = "info"

    # Transport
    transport: TransportConfig = Field(default_factory=TransportConfig)

    # API configurations
    leetcode: LeetCodeConfig = Field(default_factory=LeetCodeConfig)

    @classmethod
    def from_file(cls, config_file: str) -> "ServerConfig":
        """Load configuration from JSON file."""
        with open(config_file, "r") as f:
            config_data = json.load(f)
        return cls(**config_data)

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """Load configuration from environment variables."""
        return cls()

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return self.model_dump()


def load_config(
    config_file: Optional[str] = None,
    use_env: bool = True
) -> ServerConfig:
    """Load configuration from file or environment."""

    if config_file and os.path.exists(config_file):
        config = ServerConfig.from_file(config_file)
    elif use_env:
        config = ServerConfig.from_env()
    else:
        config = ServerConfig()

    # Override with environment variables if specified
    if use_env:
        if os.getenv("LOG_LEVEL"):
            config.log_level = os.getenv("LOG_LEVEL")
        if os.getenv("DEBUG"):
            config.debug = os.getenv("DEBUG", "false").lower() == "true"

        # LeetCode configuration from environment
        if os.getenv("LEETCODE_BASE_URL"):
            config.leetcode.base_url = os.getenv("LEETCODE_BASE_URL")
        if os.getenv("LEETCODE_GRAPHQL_URL"):
            config.leetcode.graphql_url = os.getenv("LEETCODE_GRAPHQL_URL")
        if os.getenv("LEETCODE_TIMEOUT"):
            config.leetcode.timeout = float(os.getenv("LEETCODE_TIMEOUT"))

        # Transport configuration
        if os.getenv("TRANSPORT_TYPE"):
            config.transport.type = os.getenv("TRANSPORT_TYPE")

    return config


def create_sample_config() -> Dict[str, Any]:
    """Create a sample configuration for reference."""
    return {
        "server_name": "leetcode-mcp-server",
        "server_version": "1.0.0",
        "debug": False,
        "log_level": "info",
        "transport": {
            "type": "stdio"
        },
        "leetcode": {
            "base_url": "https://leetcode.com",
            "graphql_url": "https://leetcode.com/graphql",
            "user_agent": "LeetCode-MCP-Server/1.0",
            "timeout": 30.0,
            "connect_timeout": 10.0,
            "retry_attempts": 3,
            "retry_multiplier": 1.0,
            "retry_max_wait": 5.0
        }
    }
