"""Resource owner registries.

A ResourceOwnerMap holds the resource owners of one security context
together with the check paths used to recognize their callbacks. The
ResourceOwnerMapLocator finds the map belonging to a context name.

Both are assembled once at startup and only read afterwards:

    locator = ResourceOwnerMapLocator()
    locator.set("main", ResourceOwnerMap({"github": github_owner}))
    locator.freeze()

    owner_map = locator.get("main")
    owner = owner_map.get_resource_owner_by_name("github")
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from types import MappingProxyType
from urllib.parse import urlsplit

from oauthgate.security.oauth.errors import (
    ResourceOwnerMapNotFoundError,
    ResourceOwnerNotFoundError,
)
from oauthgate.security.oauth.resource_owner import ResourceOwner

DEFAULT_CHECK_PATH = "/login/check-{name}"


class ResourceOwnerMap:
    """Resource owners and callback check paths for one security context.

    Check path templates may contain ``{name}`` (the resource owner name)
    and ``{context}`` (the security context name). Relative check paths are
    made absolute against ``base_url`` when one is configured.
    """

    def __init__(
        self,
        resource_owners: Mapping[str, ResourceOwner],
        check_paths: Mapping[str, str] | None = None,
        check_path: str = DEFAULT_CHECK_PATH,
        base_url: str | None = None,
    ):
        self._resource_owners = MappingProxyType(dict(resource_owners))
        self._check_paths = MappingProxyType(dict(check_paths or {}))
        self._check_path = check_path
        self._base_url = base_url.rstrip("/") if base_url else None

        unknown = set(self._check_paths) - set(self._resource_owners)
        if unknown:
            raise ValueError(f"Check paths configured for unknown resource owners: {sorted(unknown)}")

    @property
    def resource_owner_names(self) -> list[str]:
        return list(self._resource_owners)

    def __len__(self) -> int:
        return len(self._resource_owners)

    def __iter__(self) -> Iterator[str]:
        return iter(self._resource_owners)

    def has_resource_owner(self, name: str) -> bool:
        return name in self._resource_owners

    def get_resource_owner_by_name(self, name: str) -> ResourceOwner:
        """Return the resource owner registered under ``name``.

        Raises:
            ResourceOwnerNotFoundError: If no such resource owner exists
        """
        try:
            return self._resource_owners[name]
        except KeyError:
            raise ResourceOwnerNotFoundError(name) from None

    def get_resource_owner_check_path(self, name: str, context: str) -> str:
        """Return the callback path of ``name`` within ``context``.

        This value is handed to the resource owner as its redirect_uri.

        Raises:
            ResourceOwnerNotFoundError: If no such resource owner exists
        """
        if name not in self._resource_owners:
            raise ResourceOwnerNotFoundError(name)

        template = self._check_paths.get(name, self._check_path)
        path = template.replace("{name}", name).replace("{context}", context)

        if self._base_url and not urlsplit(path).scheme:
            return f"{self._base_url}/{path.lstrip('/')}"
        return path

    def get_resource_owner_by_check_path(self, path: str, context: str) -> ResourceOwner | None:
        """Find the resource owner whose callback arrives on ``path``."""
        request_path = urlsplit(path).path
        for name, owner in self._resource_owners.items():
            check_path = self.get_resource_owner_check_path(name, context)
            if urlsplit(check_path).path == request_path:
                return owner
        return None

    def __repr__(self) -> str:
        return f"ResourceOwnerMap({self.resource_owner_names!r})"


class ResourceOwnerMapLocator:
    """Resource owner maps keyed by security context name.

    Maps are registered with set() while the application is wired. After
    freeze() the locator only answers lookups.
    """

    def __init__(self) -> None:
        self._maps: dict[str, ResourceOwnerMap] = {}
        self._frozen = False

    @classmethod
    def from_mapping(cls, maps: Mapping[str, ResourceOwnerMap]) -> ResourceOwnerMapLocator:
        """Build a frozen locator from a context name to map mapping."""
        locator = cls()
        for context_name, owner_map in maps.items():
            locator.set(context_name, owner_map)
        locator.freeze()
        return locator

    @property
    def frozen(self) -> bool:
        return self._frozen

    @property
    def context_names(self) -> list[str]:
        return list(self._maps)

    def set(self, context_name: str, owner_map: ResourceOwnerMap) -> None:
        """Register the map of a security context, replacing any previous one."""
        if self._frozen:
            raise RuntimeError("ResourceOwnerMapLocator is frozen")
        self._maps[context_name] = owner_map

    def freeze(self) -> None:
        self._frozen = True

    def has(self, context_name: str) -> bool:
        return context_name in self._maps

    def get(self, context_name: str) -> ResourceOwnerMap:
        """Return the map registered for ``context_name``.

        Raises:
            ResourceOwnerMapNotFoundError: If the context has no map
        """
        try:
            return self._maps[context_name]
        except KeyError:
            raise ResourceOwnerMapNotFoundError(context_name) from None
