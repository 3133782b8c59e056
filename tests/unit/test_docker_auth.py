"""Unit tests for Docker auths parsing and reconciliation."""

import pytest

from leakguard.detectors.docker import decode_auth, encode_auth, parse_auths, resolve_registry_auth

AUTH = encode_auth("deploy-bot", "Zt8qLm2Vx9Rk4")


@pytest.mark.unit
class TestParseAuths:
    """Test parsing of auths blocks."""

    def test_json(self):
        assert parse_auths('{"registry.example.com": {"auth": "abc"}}') == {
            "registry.example.com": {"auth": "abc"}
        }

    def test_unquoted_keys(self):
        assert parse_auths('{"registry.example.com": {auth: "abc", email: ""}}') == {
            "registry.example.com": {"auth": "abc", "email": ""}
        }

    def test_not_an_object(self):
        assert parse_auths("[1, 2]") is None

    def test_garbage(self):
        assert parse_auths("{not json at all") is None


@pytest.mark.unit
class TestDecodeAuth:
    """Test base64 user:password decoding."""

    def test_round_trip(self):
        assert decode_auth(AUTH) == ("deploy-bot", "Zt8qLm2Vx9Rk4")

    def test_invalid_base64(self):
        assert decode_auth("not base64!") is None

    def test_without_separator(self):
        assert decode_auth("dXNlcm9ubHk=") is None  # "useronly"


@pytest.mark.unit
class TestResolveRegistryAuth:
    """Test reconciliation of auth, username and password."""

    def test_auth_only(self):
        login = resolve_registry_auth({"auth": AUTH, "email": "ops@example.com"})
        assert login == {
            "auth": AUTH,
            "username": "deploy-bot",
            "password": "Zt8qLm2Vx9Rk4",
            "email": "ops@example.com",
        }

    def test_username_and_password_only(self):
        login = resolve_registry_auth({"username": "deploy-bot", "password": "Zt8qLm2Vx9Rk4"})
        assert login["auth"] == AUTH

    def test_disagreeing_fields(self):
        assert resolve_registry_auth({"auth": AUTH, "username": "other", "password": "pw"}) is None

    def test_incomplete(self):
        assert resolve_registry_auth({"username": "deploy-bot"}) is None

    def test_not_a_dict(self):
        assert resolve_registry_auth("registry") is None
