"""Domain whitelist for post-authentication redirect targets.

Relative references can never leave the site and are always allowed.
Absolute targets must name a host covered by one of the configured
patterns:

    - "domain.com" matches only domain.com
    - ".domain.com" matches domain.com and any subdomain of it

Example:
    whitelist = DomainWhitelist(["domain.com", ".example.org"])

    whitelist.is_whitelisted("/account")                 # True
    whitelist.is_whitelisted("https://domain.com/x")     # True
    whitelist.is_whitelisted("https://api.example.org")  # True
    whitelist.is_whitelisted("https://evil.com/x")       # False
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from urllib.parse import urlsplit

ALLOWED_SCHEMES = frozenset({"http", "https"})


def _normalize_pattern(pattern: str) -> str:
    return pattern.strip().lower().rstrip(".")


class DomainWhitelist:
    """Immutable set of host patterns allowed as redirect targets."""

    __slots__ = ("_domains",)

    def __init__(self, domains: Iterable[str] = ()):
        normalized: list[str] = []
        for domain in domains:
            pattern = _normalize_pattern(domain)
            if pattern and pattern != "." and pattern not in normalized:
                normalized.append(pattern)
        self._domains: tuple[str, ...] = tuple(normalized)

    @property
    def domains(self) -> tuple[str, ...]:
        return self._domains

    def __len__(self) -> int:
        return len(self._domains)

    def __iter__(self) -> Iterator[str]:
        return iter(self._domains)

    def __contains__(self, url: object) -> bool:
        return isinstance(url, str) and self.is_whitelisted(url)

    def __repr__(self) -> str:
        return f"DomainWhitelist({list(self._domains)!r})"

    def is_whitelisted(self, url: str) -> bool:
        """Check whether ``url`` may be used as a redirect target.

        Fails closed: anything that cannot be parsed, or that a browser
        could resolve to another host, is rejected unless its host matches.
        """
        if any(ord(ch) < 0x20 or ch == "\x7f" for ch in url):
            return False

        # Browsers read backslashes as forward slashes in http(s) URLs, so
        # "https://evil.com\@domain.com" must be judged as host evil.com.
        candidate = url.strip().replace("\\", "/")

        try:
            parts = urlsplit(candidate)
            host = parts.hostname
        except ValueError:
            return False

        if not parts.scheme and not parts.netloc:
            return True

        if parts.scheme and parts.scheme.lower() not in ALLOWED_SCHEMES:
            return False
        if not host:
            return False

        return self.is_host_whitelisted(host)

    def is_host_whitelisted(self, host: str) -> bool:
        """Match a bare host name against the configured patterns."""
        host = host.lower().rstrip(".")
        if not host:
            return False

        for pattern in self._domains:
            if host == pattern:
                return True
            if pattern.startswith("."):
                if host == pattern[1:] or host.endswith(pattern):
                    return True
        return False

    is_valid_target_url = is_whitelisted
