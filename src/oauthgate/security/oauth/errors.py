"""Failure conditions raised while starting an OAuth redirect.

Configuration failures (no security context, no owner map) are server
misconfigurations. The other two are request-level failures that the web
layer maps to 404 and 403 responses.
"""

from __future__ import annotations


class OAuthRedirectError(Exception):
    """Base class for all redirect-initiation failures."""


class ConfigurationError(OAuthRedirectError):
    """The security setup cannot serve this request."""


class SecurityContextNotFoundError(ConfigurationError, LookupError):
    """No configured security context matches the request path."""

    def __init__(self, path: str):
        super().__init__(f"No security context matches path {path!r}")
        self.path = path


class ResourceOwnerMapNotFoundError(ConfigurationError, LookupError):
    """No resource owner map is registered for a security context."""

    def __init__(self, context_name: str):
        super().__init__(f"No resource owner map registered for context {context_name!r}")
        self.context_name = context_name


class ResourceOwnerNotFoundError(OAuthRedirectError, LookupError):
    """The named resource owner is not registered in the map."""

    def __init__(self, name: str):
        super().__init__(f"No resource owner with name '{name}'.")
        self.name = name


class AccessDeniedError(OAuthRedirectError):
    """A target path failed whitelist validation."""

    def __init__(self, target_path: str):
        super().__init__(f"Not allowed to redirect to {target_path}")
        self.target_path = target_path
