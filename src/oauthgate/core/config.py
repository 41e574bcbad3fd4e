"""Configuration types with environment variable support.

All top-level settings can be configured via environment variables with
the OAUTHGATE_ prefix. Example: OAUTHGATE_USE_REFERER=true enables the
Referer fallback for target paths.

Nested settings (firewalls and their resource owners) are usually loaded
from a YAML or TOML file:

    firewalls:
      - name: main
        pattern: "^/"
        check_path: /login/check-{name}
        resource_owners:
          github:
            type: github
            client_id: ...
            client_secret: ...
"""

from __future__ import annotations

import tomllib
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

LogLevel = Literal["debug", "info", "warning", "error"]


def load_config_from_file(path: str | Path) -> dict[str, Any]:
    """Load configuration from a YAML or TOML file.

    Args:
        path: Path to the configuration file (.yaml, .yml, or .toml)

    Returns:
        Configuration dictionary

    Raises:
        FileNotFoundError: If the config file doesn't exist
        ValueError: If the config file has encoding errors, invalid syntax, or unsupported format
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    try:
        content = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise ValueError(f"Config file encoding error in {path}: {e}") from e

    try:
        if path.suffix in (".yaml", ".yml"):
            return yaml.safe_load(content) or {}
        elif path.suffix == ".toml":
            return tomllib.loads(content)
        else:
            raise ValueError(f"Unsupported config format: {path.suffix}")
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in {path}: {e}") from e
    except tomllib.TOMLDecodeError as e:
        raise ValueError(f"Invalid TOML in {path}: {e}") from e


class ResourceOwnerSettings(BaseModel):
    """One resource owner inside a firewall."""

    type: str = Field(
        default="oauth2",
        description="Provider type: 'github', 'google', 'facebook' or 'oauth2'.",
    )
    client_id: str
    client_secret: str = Field(default="", repr=False)
    authorize_url: str | None = Field(
        default=None,
        description="Authorization endpoint (required for 'oauth2').",
    )
    token_url: str | None = None
    userinfo_url: str | None = None
    scopes: list[str] | None = Field(
        default=None,
        description="Scopes to request. Provider defaults apply when unset.",
    )
    check_path: str | None = Field(
        default=None,
        description="Callback path overriding the firewall's check_path template.",
    )


class FirewallSettings(BaseModel):
    """A security context and the resource owners it offers."""

    name: str
    pattern: str | None = Field(
        default=None,
        description="Regex matched from the start of the request path. None matches every path.",
    )
    check_path: str = Field(
        default="/login/check-{name}",
        description="Callback path template; {name} and {context} are substituted.",
    )
    resource_owners: dict[str, ResourceOwnerSettings] = Field(default_factory=dict)


class OAuthGateConfig(BaseSettings):
    """Master configuration for the redirect service.

    Use get_config() to get a cached instance.
    """

    model_config = SettingsConfigDict(
        env_prefix="OAUTHGATE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    host: str = "0.0.0.0"
    port: int = 8080
    log_level: LogLevel = Field(
        default="info",
        description="Log level (debug, info, warning, error).",
    )
    base_url: str | None = Field(
        default=None,
        description="Public base URL used to make check paths absolute.",
    )
    connect_path: str = Field(
        default="/connect",
        description="Route prefix of the redirect endpoint (/connect/{service}).",
    )
    target_path_parameter: str | None = Field(
        default="_target_path",
        description="Request parameter holding the post-authentication target path.",
    )
    use_referer: bool = Field(
        default=False,
        description="Use the Referer header as target path when no parameter is given.",
    )
    failed_use_referer: bool = Field(
        default=False,
        description="Store the target path under the failure key instead.",
    )
    whitelisted_domains: list[str] = Field(
        default_factory=list,
        description="Hosts allowed as absolute target paths ('.example.com' includes subdomains).",
    )
    firewalls: list[FirewallSettings] = Field(default_factory=list)
    session_cookie_name: str = "_oauthgate_session"
    session_duration: int = Field(
        default=3600,
        description="Lifetime of redirect sessions in seconds.",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_log_level(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @field_validator("session_duration")
    @classmethod
    def _check_session_duration(cls, value: int) -> int:
        if value < 60:
            raise ValueError("session_duration must be at least 60 seconds")
        return value

    @field_validator("connect_path")
    @classmethod
    def _check_connect_path(cls, value: str) -> str:
        if not value.startswith("/"):
            raise ValueError("connect_path must start with '/'")
        return value.rstrip("/")

    @classmethod
    def from_file(cls, path: str | Path) -> OAuthGateConfig:
        """Load settings from a file; environment variables still apply to unset fields."""
        return cls(**load_config_from_file(path))


_config: OAuthGateConfig | None = None


def get_config() -> OAuthGateConfig:
    """Get the global configuration instance.

    Returns a cached instance of OAuthGateConfig that reads from environment variables.
    To reload config (e.g., in tests), call clear_config() first.
    """
    global _config
    if _config is None:
        _config = OAuthGateConfig()
    return _config


def clear_config() -> None:
    """Clear the cached configuration.

    Call this to force reloading of environment variables on next get_config() call.
    Useful for testing.
    """
    global _config
    _config = None
