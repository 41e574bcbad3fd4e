"""OAuth provider configuration types.

This module defines the configuration dataclass describing one external
OAuth2 provider (a "resource owner") as seen by the redirect layer.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class ProviderConfig:
    """OAuth2 provider configuration.

    Only the authorization endpoint is needed to start a redirect. The
    token and userinfo endpoints are carried for the callback stage.
    """

    name: str
    client_id: str
    client_secret: str = field(default="", repr=False)
    authorize_url: str | None = None
    token_url: str | None = None
    userinfo_url: str | None = None
    scopes: list[str] = field(default_factory=list)
    # Facebook and GitHub accept comma separated scopes
    scope_separator: str = " "
    # Fixed parameters added to every authorization URL
    authorization_parameters: dict[str, str] = field(default_factory=dict)

    def __post_init__(self):
        """Validate that the provider can build authorization URLs."""
        if not self.name:
            raise ValueError("ProviderConfig requires a name")
        if not self.client_id:
            raise ValueError(f"ProviderConfig '{self.name}' requires a client_id")
        if not self.authorize_url:
            raise ValueError(f"ProviderConfig '{self.name}' requires an authorize_url")

    @property
    def scope(self) -> str:
        """Scopes joined the way the provider expects them."""
        return self.scope_separator.join(self.scopes)
