"""Resource owners: the external providers a user can be redirected to.

A resource owner only needs to know how to build its authorization URL.
Token exchange and profile lookups belong to the callback stage.
"""

from __future__ import annotations

import secrets
from collections.abc import Callable, Mapping
from typing import Protocol, runtime_checkable
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import structlog

from oauthgate.security.oauth.config import ProviderConfig
from oauthgate.security.oauth.state import StateStore

logger = structlog.get_logger()


@runtime_checkable
class ResourceOwner(Protocol):
    """An external OAuth provider capable of producing an authorization URL."""

    @property
    def name(self) -> str: ...

    def get_authorization_url(
        self,
        redirect_uri: str,
        extra_parameters: Mapping[str, str] | None = None,
    ) -> str: ...


def generate_state() -> str:
    """Generate an unguessable value for the OAuth state parameter."""
    return secrets.token_urlsafe(32)


class OAuth2ResourceOwner:
    """Authorization-code flow resource owner backed by a ProviderConfig.

    The generated URL carries response_type, client_id, redirect_uri, scope
    and state, then the provider's fixed parameters, then the caller's
    extra parameters. Later sources win on conflicting keys.

    When a ``state_store`` is given, the state value that ends up in the
    URL is recorded there so the callback can verify it.
    """

    def __init__(
        self,
        config: ProviderConfig,
        state_generator: Callable[[], str] = generate_state,
        state_store: StateStore | None = None,
    ):
        self._config = config
        self._state_generator = state_generator
        self._state_store = state_store

    @property
    def name(self) -> str:
        return self._config.name

    @property
    def config(self) -> ProviderConfig:
        return self._config

    @property
    def state_store(self) -> StateStore | None:
        return self._state_store

    def get_authorization_url(
        self,
        redirect_uri: str,
        extra_parameters: Mapping[str, str] | None = None,
    ) -> str:
        """Build the URL the browser is sent to for authorization.

        Args:
            redirect_uri: The check path the provider redirects back to
            extra_parameters: Additional query parameters for this request

        Returns:
            Absolute authorization URL

        Raises:
            ValueError: If the provider has no authorization endpoint
        """
        url = self._config.authorize_url
        if not url:
            raise ValueError(f"Resource owner '{self.name}' has no authorize_url")

        params: dict[str, str] = {
            "response_type": "code",
            "client_id": self._config.client_id,
            "redirect_uri": redirect_uri,
        }
        if self._config.scopes:
            params["scope"] = self._config.scope
        params["state"] = self._state_generator()
        params.update(self._config.authorization_parameters)
        if extra_parameters:
            params.update(extra_parameters)

        if self._state_store is not None:
            self._state_store.save(self.name, params["state"], redirect_uri)

        scheme, netloc, path, query, fragment = urlsplit(url)
        merged = dict(parse_qsl(query, keep_blank_values=True))
        merged.update(params)

        logger.debug(
            "Built authorization URL",
            resource_owner=self.name,
            redirect_uri=redirect_uri,
        )
        return urlunsplit((scheme, netloc, path, urlencode(merged), fragment))

    def __repr__(self) -> str:
        return f"OAuth2ResourceOwner(name={self.name!r})"
