"""Tests for redirect session storage."""

from __future__ import annotations

import asyncio
import time

import pytest

from oauthgate.security.oauth.session import RedirectSession, Session, SessionManager


class TestSession:
    """Tests for Session."""

    def test_session_creation(self):
        """Test basic session creation."""
        session = Session(session_id="test-session-id")
        assert session.session_id == "test-session-id"
        assert session.data == {}
        assert not session.is_expired

    def test_session_expiration(self):
        """Test session expiration check."""
        now = time.time()
        session = Session(
            session_id="test-session-id",
            created_at=now - 100,
            expires_at=now - 10,
        )
        assert session.is_expired is True
        assert session.remaining_seconds == 0

    def test_session_remaining_seconds(self):
        """Test remaining seconds calculation."""
        now = time.time()
        session = Session(session_id="test-session-id", created_at=now, expires_at=now + 3600)
        assert 3599 <= session.remaining_seconds <= 3600

    def test_get_set_has_remove(self):
        """Test key/value access."""
        session = Session(session_id="test-session-id")
        assert session.get("_security.main.target_path") is None
        assert session.get("missing", "fallback") == "fallback"

        session.set("_security.main.target_path", "/account")
        assert session.has("_security.main.target_path") is True
        assert session.get("_security.main.target_path") == "/account"

        assert session.remove("_security.main.target_path") == "/account"
        assert session.has("_security.main.target_path") is False
        assert session.remove("_security.main.target_path") is None

    def test_pop(self):
        """Test pop with and without default."""
        session = Session(session_id="test-session-id", data={"key": "value"})
        assert session.pop("key") == "value"
        assert session.pop("key", None) is None
        with pytest.raises(KeyError):
            session.pop("key")

    def test_satisfies_redirect_session_protocol(self):
        """Test Session is usable wherever a RedirectSession is expected."""
        assert isinstance(Session(session_id="x"), RedirectSession)


class TestSessionManager:
    """Tests for SessionManager."""

    @pytest.mark.asyncio
    async def test_create_session(self):
        """Test session creation."""
        manager = SessionManager()
        session = await manager.create_session()
        assert session.session_id is not None
        assert len(session.session_id) > 20  # Secure random ID
        assert session.data == {}

    @pytest.mark.asyncio
    async def test_create_session_with_data(self):
        """Test initial data is copied into the session."""
        manager = SessionManager()
        data = {"_security.main.target_path": "/account"}
        session = await manager.create_session(data=data)
        data.clear()
        assert session.get("_security.main.target_path") == "/account"

    @pytest.mark.asyncio
    async def test_get_session(self):
        """Test getting a session by ID."""
        manager = SessionManager()
        created = await manager.create_session()
        created.set("key", "value")

        retrieved = await manager.get_session(created.session_id)
        assert retrieved is created
        assert retrieved.get("key") == "value"

    @pytest.mark.asyncio
    async def test_get_nonexistent_session(self):
        """Test getting a session that doesn't exist."""
        manager = SessionManager()
        assert await manager.get_session("nonexistent-session-id") is None

    @pytest.mark.asyncio
    async def test_get_or_create_session(self):
        """Test reuse of existing sessions and creation of new ones."""
        manager = SessionManager()
        session, created = await manager.get_or_create_session(None)
        assert created is True

        same, created = await manager.get_or_create_session(session.session_id)
        assert created is False
        assert same is session

        other, created = await manager.get_or_create_session("unknown-id")
        assert created is True
        assert other.session_id != "unknown-id"

    @pytest.mark.asyncio
    async def test_delete_session(self):
        """Test deleting a session."""
        manager = SessionManager()
        session = await manager.create_session()
        assert await manager.delete_session(session.session_id) is True
        assert await manager.get_session(session.session_id) is None
        assert await manager.delete_session(session.session_id) is False

    @pytest.mark.asyncio
    async def test_get_expired_session_returns_none(self):
        """Test that getting an expired session returns None and removes it."""
        manager = SessionManager(session_duration=1)
        session = await manager.create_session(duration=1)

        await asyncio.sleep(1.5)

        assert await manager.get_session(session.session_id) is None
        assert await manager.get_session_count() == 0

    @pytest.mark.asyncio
    async def test_cleanup_expired(self):
        """Test expired sessions are removed by cleanup."""
        manager = SessionManager()
        session = await manager.create_session()
        await manager.create_session()
        session.expires_at = time.time() - 1

        assert await manager._cleanup_expired() == 1
        assert await manager.get_session_count() == 1

    @pytest.mark.asyncio
    async def test_start_stop(self):
        """Test session manager start/stop."""
        manager = SessionManager(cleanup_interval=0.1)
        await manager.start()
        assert manager._cleanup_task is not None

        await manager.stop()
        assert manager._cleanup_task is None
