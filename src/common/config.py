"""
Configuration loader for the reservations MCP server.

Loads settings from config.yaml. Environment variables are used ONLY for secrets
(the backend service key); never log secrets.
"""

from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from pydantic import BaseModel, Field


class GatewayConfig(BaseModel):
    """Configuration for the HTTP gateway."""

    host: str = Field(default="127.0.0.1", description="Host to bind to")
    port: int = Field(default=8787, description="Port to bind to")


class BackendConfig(BaseModel):
    """Configuration for the hosted reservations backend."""

    url: str = Field(
        default="", description="Backend base URL (SUPABASE_URL is used when empty)"
    )
    request_timeout: Optional[float] = Field(
        default=None, description="Backend request timeout in seconds (httpx default if unset)"
    )


class AuthConfig(BaseModel):
    """Configuration for the identity provider gate."""

    enabled: bool = Field(default=True, description="Require a verified bearer token on /mcp")
    user_api_url: str = Field(
        default="https://api.github.com/user",
        description="Identity provider endpoint that resolves a token to its user",
    )
    allowed_logins: List[str] = Field(
        default_factory=list, description="Logins allowed to call tools (empty allows any)"
    )


class ObservabilityConfig(BaseModel):
    """Configuration for per-call tracing."""

    tracing: bool = Field(default=False, description="Open a traced span around each tool call")


class Config(BaseModel):
    """Main configuration object."""

    gateway: GatewayConfig = Field(default_factory=GatewayConfig)
    backend: BackendConfig = Field(default_factory=BackendConfig)
    auth: AuthConfig = Field(default_factory=AuthConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)
    log_level: str = Field(default="INFO", description="Logging level")
    enable_pretty_print: bool = Field(
        default=False, description="Enable custom pretty print for debugging"
    )
    save_to_file: bool = Field(default=False, description="Save logs to file")
    log_file_path: str = Field(default="server.log", description="Log file path (relative to root)")
    max_log_file_size: int = Field(
        default=10485760, description="Max log file size in bytes (10MB)"
    )
    backup_count: int = Field(default=5, description="Number of backup log files to keep")


_LOGGING_KEYS = {
    "level": "log_level",
    "enable_pretty_print": "enable_pretty_print",
    "save_to_file": "save_to_file",
    "log_file_path": "log_file_path",
    "max_log_file_size": "max_log_file_size",
    "backup_count": "backup_count",
}


def load_config(config_path: Optional[Path] = None) -> Config:
    """
    Load configuration from YAML file.

    Environment variables are used ONLY for secrets (API keys), not configuration.

    Args:
        config_path: Path to config.yaml file. Defaults to ./config.yaml

    Returns:
        Loaded configuration object
    """
    if config_path is None:
        config_path = Path("config.yaml")

    config_data: Dict[str, Any] = {}

    # Load from YAML file if it exists
    if config_path.exists():
        with open(config_path, "r", encoding="utf-8") as f:
            config_data = yaml.safe_load(f) or {}

    # Handle nested logging configuration
    logging_config = config_data.pop("logging", None) or {}
    for key, target in _LOGGING_KEYS.items():
        if key in logging_config:
            config_data[target] = logging_config[key]

    return Config(**config_data)
