"""Tests for user profile lookup."""

import json

import pytest

from venture_sourcer import config
from venture_sourcer.profile_store import (
    InMemoryProfileStore,
    JsonProfileStore,
    ProfileStore,
    UserProfile,
    resolve_apollo_key,
)


class TestInMemoryProfileStore:
    """Tests for InMemoryProfileStore."""

    def test_get_profile(self):
        store = InMemoryProfileStore()
        store.add(UserProfile(user_id="u1", apollo_api_key="user_key"))
        assert store.get_profile("u1").apollo_api_key == "user_key"
        assert store.get_profile("missing") is None

    def test_store_interface_is_abstract(self):
        with pytest.raises(TypeError):
            ProfileStore()


class TestJsonProfileStore:
    """Tests for JsonProfileStore."""

    def test_loads_profile(self, tmp_path):
        path = tmp_path / "profiles.json"
        path.write_text(json.dumps({
            "u1": {
                "apollo_api_key": "user_key",
                "email_subject": "Hello {{First Name}}",
                "variable_mappings": {"{{First Name}}": "firstName"},
            }
        }))

        profile = JsonProfileStore(path).get_profile("u1")

        assert profile.user_id == "u1"
        assert profile.email_subject == "Hello {{First Name}}"
        assert profile.variable_mappings == {"{{First Name}}": "firstName"}

    def test_missing_file(self, tmp_path):
        assert JsonProfileStore(tmp_path / "nope.json").get_profile("u1") is None

    def test_malformed_file(self, tmp_path):
        path = tmp_path / "profiles.json"
        path.write_text("{not json")
        assert JsonProfileStore(path).get_profile("u1") is None


class TestResolveApolloKey:
    """Tests for resolve_apollo_key."""

    def test_user_key_preferred(self, monkeypatch):
        monkeypatch.setattr(config, 'APOLLO_API_KEY', 'env_key')
        store = InMemoryProfileStore({"u1": UserProfile(user_id="u1", apollo_api_key="user_key")})
        assert resolve_apollo_key("u1", store) == "user_key"

    def test_falls_back_to_environment(self, monkeypatch):
        monkeypatch.setattr(config, 'APOLLO_API_KEY', 'env_key')
        store = InMemoryProfileStore({"u1": UserProfile(user_id="u1")})
        assert resolve_apollo_key("u1", store) == "env_key"
        assert resolve_apollo_key() == "env_key"

    def test_nothing_configured(self):
        assert resolve_apollo_key("u1", InMemoryProfileStore()) is None
