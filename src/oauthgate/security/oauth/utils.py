"""Security context resolution for OAuth redirects.

Every request belongs to exactly one security context ("firewall"),
chosen by matching the request path against the configured patterns.
The context decides which resource owners are available and which
session keys hold the post-authentication target paths.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Protocol

import structlog

from oauthgate.security.oauth.errors import SecurityContextNotFoundError
from oauthgate.security.oauth.owner_map import (
    DEFAULT_CHECK_PATH,
    ResourceOwnerMap,
    ResourceOwnerMapLocator,
)

logger = structlog.get_logger()

TARGET_PATH_KEY = "_security.{context}.target_path"
FAILED_TARGET_PATH_KEY = "_security.{context}.failed_target_path"


class PathRequest(Protocol):
    """The part of an HTTP request needed to pick a security context."""

    @property
    def path(self) -> str: ...


@dataclass(frozen=True)
class SecurityContext:
    """One independently configured authentication zone.

    ``pattern`` is a regular expression matched from the start of the
    request path. A context without a pattern matches every path with
    the lowest specificity.
    """

    name: str
    pattern: str | None = None
    check_path: str = DEFAULT_CHECK_PATH
    _regex: re.Pattern[str] | None = field(default=None, init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("SecurityContext requires a name")
        if self.pattern is None:
            return
        try:
            regex = re.compile(self.pattern)
        except re.error as e:
            raise ValueError(f"Invalid path pattern for context '{self.name}': {e}") from e
        object.__setattr__(self, "_regex", regex)

    def match_length(self, path: str) -> int | None:
        """Length of the matched path prefix, or None if the path does not match."""
        if self._regex is None:
            return 0
        match = self._regex.match(path)
        return match.end() if match else None


class OAuthUtils:
    """Resolves the security context and resource owner map of a request."""

    def __init__(
        self,
        contexts: Iterable[SecurityContext],
        locator: ResourceOwnerMapLocator,
    ):
        self._contexts = tuple(contexts)
        self._locator = locator

        names = [context.name for context in self._contexts]
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            raise ValueError(f"Duplicate security context names: {duplicates}")

    @property
    def contexts(self) -> tuple[SecurityContext, ...]:
        return self._contexts

    @property
    def locator(self) -> ResourceOwnerMapLocator:
        return self._locator

    def get_security_context(self, request: PathRequest) -> SecurityContext:
        """Pick the context whose pattern matches the longest path prefix.

        Contexts are tried in configured order and ties keep the earlier one.

        Raises:
            SecurityContextNotFoundError: If no context matches the path
        """
        path = request.path
        best: SecurityContext | None = None
        best_length = -1

        for context in self._contexts:
            length = context.match_length(path)
            if length is not None and length > best_length:
                best, best_length = context, length

        if best is None:
            logger.error("No security context matches request path", path=path)
            raise SecurityContextNotFoundError(path)

        return best

    def get_resource_owner_map(self, request: PathRequest) -> tuple[str, ResourceOwnerMap]:
        """Return the active context name and its resource owner map.

        Raises:
            SecurityContextNotFoundError: If no context matches the path
            ResourceOwnerMapNotFoundError: If the context has no registered map
        """
        context = self.get_security_context(request)
        return context.name, self._locator.get(context.name)

    def get_check_path(self, context_name: str, resource_owner_name: str) -> str:
        owner_map = self._locator.get(context_name)
        return owner_map.get_resource_owner_check_path(resource_owner_name, context_name)

    def get_resource_owners(self, request: PathRequest) -> list[str]:
        """Names of the resource owners available to this request."""
        _, owner_map = self.get_resource_owner_map(request)
        return owner_map.resource_owner_names

    def get_authorization_url(
        self,
        request: PathRequest,
        name: str,
        extra_parameters: Mapping[str, str] | None = None,
    ) -> str:
        """Authorization URL of ``name`` without touching any session state."""
        context_name, owner_map = self.get_resource_owner_map(request)
        resource_owner = owner_map.get_resource_owner_by_name(name)
        check_path = owner_map.get_resource_owner_check_path(name, context_name)
        return resource_owner.get_authorization_url(check_path, extra_parameters)

    @staticmethod
    def target_path_session_key(context_name: str) -> str:
        return TARGET_PATH_KEY.format(context=context_name)

    @staticmethod
    def failed_target_path_session_key(context_name: str) -> str:
        return FAILED_TARGET_PATH_KEY.format(context=context_name)
