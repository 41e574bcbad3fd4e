"""Tests for the pending OAuth state store."""

from __future__ import annotations

import time

import pytest

from oauthgate.security.oauth.state import PendingState, StateStore


class TestPendingState:
    """Tests for PendingState."""

    def test_not_expired_when_fresh(self):
        pending = PendingState(state="s", resource_owner="github", redirect_uri="/cb")
        assert pending.is_expired is False

    def test_expired_after_ttl(self):
        pending = PendingState(
            state="s",
            resource_owner="github",
            redirect_uri="/cb",
            created_at=time.time() - 301,
        )
        assert pending.is_expired is True


class TestStateStore:
    """Tests for StateStore."""

    def test_save_and_consume(self):
        store = StateStore()
        store.save("github", "abc", "https://domain.com/login/check-github")

        pending = store.consume("abc")

        assert pending is not None
        assert pending.resource_owner == "github"
        assert pending.redirect_uri == "https://domain.com/login/check-github"
        assert len(store) == 0

    def test_consume_is_single_use(self):
        store = StateStore()
        store.save("github", "abc", "/cb")

        assert store.consume("abc") is not None
        assert store.consume("abc") is None

    def test_unknown_state(self):
        assert StateStore().consume("never-issued") is None

    def test_expired_state_rejected(self):
        store = StateStore(ttl=0)
        store.save("github", "abc", "/cb")
        store._pending["abc"].created_at -= 1

        assert store.consume("abc") is None
        assert len(store) == 0

    def test_state_bound_to_resource_owner(self):
        store = StateStore()
        store.save("github", "abc", "/cb")

        assert store.consume("abc", resource_owner="google") is None
        assert store.consume("abc") is None

    def test_cleanup_drops_expired_only(self):
        store = StateStore()
        store.save("github", "old", "/cb")
        store.save("github", "new", "/cb")
        store._pending["old"].created_at -= 301

        assert store.cleanup() == 1
        assert len(store) == 1
        assert store.consume("new") is not None

    def test_full_store_makes_room_from_expired(self):
        store = StateStore(max_pending=1)
        store.save("github", "old", "/cb")
        store._pending["old"].created_at -= 301

        store.save("github", "new", "/cb")

        assert len(store) == 1
        assert store.consume("new") is not None

    def test_full_store_rejects_new_state(self):
        store = StateStore(max_pending=1)
        store.save("github", "first", "/cb")

        with pytest.raises(RuntimeError, match="Too many pending"):
            store.save("github", "second", "/cb")
