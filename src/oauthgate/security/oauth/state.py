"""Pending OAuth state storage.

Every authorization URL carries a state parameter. The value is recorded
here when the URL is built so the callback stage can check the state the
provider sends back and recover the redirect_uri it was issued for.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field

import structlog

logger = structlog.get_logger()

# Security constants
MAX_PENDING_STATES = 10000  # Prevent memory exhaustion attacks
STATE_TTL_SECONDS = 300  # 5 minutes


@dataclass
class PendingState:
    """A state value issued for one authorization redirect."""

    state: str
    resource_owner: str
    redirect_uri: str
    created_at: float = field(default_factory=time.time)
    ttl: float = STATE_TTL_SECONDS

    @property
    def is_expired(self) -> bool:
        return time.time() - self.created_at > self.ttl


class StateStore:
    """In-memory store of issued state values, consumed once on callback."""

    def __init__(
        self,
        ttl: float = STATE_TTL_SECONDS,
        max_pending: int = MAX_PENDING_STATES,
    ):
        self._pending: dict[str, PendingState] = {}
        self._ttl = ttl
        self._max_pending = max_pending

    def __len__(self) -> int:
        return len(self._pending)

    def save(self, resource_owner: str, state: str, redirect_uri: str) -> PendingState:
        """Record an issued state value.

        Raises:
            RuntimeError: If too many unexpired states are pending
        """
        if len(self._pending) >= self._max_pending:
            self.cleanup()
            if len(self._pending) >= self._max_pending:
                logger.warning("Too many pending OAuth states, rejecting new request")
                raise RuntimeError("Too many pending OAuth states")

        pending = PendingState(
            state=state,
            resource_owner=resource_owner,
            redirect_uri=redirect_uri,
            ttl=self._ttl,
        )
        self._pending[state] = pending
        return pending

    def consume(self, state: str, resource_owner: str | None = None) -> PendingState | None:
        """Remove and return the pending state, or None if unknown or expired.

        When ``resource_owner`` is given the state must have been issued for it.
        """
        pending = self._pending.pop(state, None)
        if pending is None:
            return None
        if pending.is_expired:
            logger.warning("Expired OAuth state", resource_owner=pending.resource_owner)
            return None
        if resource_owner is not None and pending.resource_owner != resource_owner:
            logger.warning(
                "OAuth state issued for another resource owner",
                expected=resource_owner,
                issued_for=pending.resource_owner,
            )
            return None
        return pending

    def cleanup(self) -> int:
        """Remove expired states and return how many were dropped."""
        expired = [state for state, pending in self._pending.items() if pending.is_expired]
        for state in expired:
            del self._pending[state]
        return len(expired)
