"""Tests for resource owner maps and the map locator."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from oauthgate.security.oauth.errors import (
    ConfigurationError,
    ResourceOwnerMapNotFoundError,
    ResourceOwnerNotFoundError,
)
from oauthgate.security.oauth.owner_map import ResourceOwnerMap, ResourceOwnerMapLocator


def make_owner(name: str) -> MagicMock:
    owner = MagicMock()
    owner.name = name
    return owner


@pytest.fixture
def owners():
    return {"facebook": make_owner("facebook"), "github": make_owner("github")}


class TestResourceOwnerMap:
    """Tests for ResourceOwnerMap."""

    def test_get_resource_owner_by_name(self, owners):
        owner_map = ResourceOwnerMap(owners)
        assert owner_map.get_resource_owner_by_name("facebook") is owners["facebook"]

    def test_unknown_resource_owner_raises(self, owners):
        owner_map = ResourceOwnerMap(owners)
        with pytest.raises(ResourceOwnerNotFoundError, match="unknown"):
            owner_map.get_resource_owner_by_name("unknown")

    def test_unknown_resource_owner_is_lookup_error(self, owners):
        owner_map = ResourceOwnerMap(owners)
        with pytest.raises(LookupError):
            owner_map.get_resource_owner_by_name("unknown")

    def test_default_check_path(self, owners):
        owner_map = ResourceOwnerMap(owners)
        assert owner_map.get_resource_owner_check_path("github", "main") == "/login/check-github"

    def test_check_path_template_with_context(self, owners):
        owner_map = ResourceOwnerMap(owners, check_path="/{context}/oauth/{name}/callback")
        assert (
            owner_map.get_resource_owner_check_path("facebook", "admin")
            == "/admin/oauth/facebook/callback"
        )

    def test_per_owner_check_path_override(self, owners):
        owner_map = ResourceOwnerMap(owners, check_paths={"facebook": "/fb-callback"})
        assert owner_map.get_resource_owner_check_path("facebook", "main") == "/fb-callback"
        assert owner_map.get_resource_owner_check_path("github", "main") == "/login/check-github"

    def test_check_path_absolute_with_base_url(self, owners):
        owner_map = ResourceOwnerMap(owners, base_url="https://app.example.com/")
        assert (
            owner_map.get_resource_owner_check_path("github", "main")
            == "https://app.example.com/login/check-github"
        )

    def test_absolute_check_path_not_rebased(self, owners):
        owner_map = ResourceOwnerMap(
            owners,
            check_paths={"github": "https://auth.example.com/cb"},
            base_url="https://app.example.com",
        )
        assert owner_map.get_resource_owner_check_path("github", "main") == "https://auth.example.com/cb"

    def test_check_path_for_unknown_owner_raises(self, owners):
        owner_map = ResourceOwnerMap(owners)
        with pytest.raises(ResourceOwnerNotFoundError):
            owner_map.get_resource_owner_check_path("unknown", "main")

    def test_check_path_for_unregistered_owner_rejected(self, owners):
        with pytest.raises(ValueError, match="unknown resource owners"):
            ResourceOwnerMap(owners, check_paths={"twitter": "/tw"})

    def test_get_resource_owner_by_check_path(self, owners):
        owner_map = ResourceOwnerMap(owners, base_url="https://app.example.com")
        assert owner_map.get_resource_owner_by_check_path("/login/check-github", "main") is owners["github"]
        assert (
            owner_map.get_resource_owner_by_check_path("/login/check-facebook?code=abc", "main")
            is owners["facebook"]
        )
        assert owner_map.get_resource_owner_by_check_path("/login", "main") is None

    def test_names_and_membership(self, owners):
        owner_map = ResourceOwnerMap(owners)
        assert owner_map.resource_owner_names == ["facebook", "github"]
        assert owner_map.has_resource_owner("github") is True
        assert owner_map.has_resource_owner("twitter") is False
        assert len(owner_map) == 2
        assert list(owner_map) == ["facebook", "github"]

    def test_map_is_not_affected_by_source_mutation(self, owners):
        owner_map = ResourceOwnerMap(owners)
        owners["twitter"] = make_owner("twitter")
        assert owner_map.has_resource_owner("twitter") is False


class TestResourceOwnerMapLocator:
    """Tests for ResourceOwnerMapLocator."""

    def test_set_and_get(self, owners):
        owner_map = ResourceOwnerMap(owners)
        locator = ResourceOwnerMapLocator()
        locator.set("default", owner_map)
        assert locator.get("default") is owner_map
        assert locator.has("default") is True

    def test_get_unknown_context_raises(self):
        locator = ResourceOwnerMapLocator()
        with pytest.raises(ResourceOwnerMapNotFoundError, match="main"):
            locator.get("main")

    def test_missing_map_is_configuration_error(self):
        locator = ResourceOwnerMapLocator()
        with pytest.raises(ConfigurationError):
            locator.get("main")

    def test_set_overwrites(self, owners):
        first = ResourceOwnerMap(owners)
        second = ResourceOwnerMap({})
        locator = ResourceOwnerMapLocator()
        locator.set("main", first)
        locator.set("main", second)
        assert locator.get("main") is second

    def test_frozen_locator_rejects_set(self, owners):
        locator = ResourceOwnerMapLocator()
        locator.freeze()
        assert locator.frozen is True
        with pytest.raises(RuntimeError, match="frozen"):
            locator.set("main", ResourceOwnerMap(owners))

    def test_from_mapping(self, owners):
        owner_map = ResourceOwnerMap(owners)
        locator = ResourceOwnerMapLocator.from_mapping({"main": owner_map, "admin": owner_map})
        assert locator.frozen is True
        assert locator.context_names == ["main", "admin"]
        assert locator.get("admin") is owner_map
