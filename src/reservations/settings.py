"""
Backend connection settings.

Settings are resolved once (config.yaml + environment secrets) and injected
into the translator, never read from the environment per call.
"""

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from .errors import ConfigurationError

URL_ENV_VAR = "SUPABASE_URL"
API_KEY_ENV_VAR = "SUPABASE_SERVICE_ROLE_KEY"


@dataclass(frozen=True)
class BackendSettings:
    """Connection settings for the hosted REST backend."""

    url: str = ""
    api_key: str = ""
    request_timeout: Optional[float] = None

    def require(self) -> "BackendSettings":
        """
        Check that both required values are present.

        Returns:
            Settings with the trailing slash stripped from the URL

        Raises:
            ConfigurationError: If the URL or API key is missing
        """
        url = (self.url or "").strip().rstrip("/")
        if not url:
            raise ConfigurationError(
                f"Backend URL is not configured (set backend.url or {URL_ENV_VAR})"
            )
        if not self.api_key:
            raise ConfigurationError(f"{API_KEY_ENV_VAR} is not configured in the environment")

        return BackendSettings(url=url, api_key=self.api_key, request_timeout=self.request_timeout)

    def __repr__(self) -> str:
        # Never expose the key
        return (
            f"BackendSettings(url={self.url!r}, api_key={'***' if self.api_key else ''!r}, "
            f"request_timeout={self.request_timeout!r})"
        )


def load_backend_settings(
    url: Optional[str] = None,
    request_timeout: Optional[float] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> BackendSettings:
    """
    Build backend settings from config values and environment secrets.

    Args:
        url: Backend URL from config.yaml; SUPABASE_URL is used when empty
        request_timeout: Optional timeout in seconds for backend calls
        environ: Environment mapping, defaults to os.environ

    Returns:
        Unchecked settings; call require() to validate them
    """
    env = os.environ if environ is None else environ

    return BackendSettings(
        url=url or env.get(URL_ENV_VAR, ""),
        api_key=env.get(API_KEY_ENV_VAR, ""),
        request_timeout=request_timeout,
    )
