"""Unit tests for the code identifier heuristics."""

import pytest

from leakguard.core.naming import filter_identifiers, looks_like_identifier


@pytest.mark.unit
class TestLooksLikeIdentifier:
    """Test looks_like_identifier."""

    @pytest.mark.parametrize("value", [
        "DisableSnapshotBlockPublicAccess",
        "disableSnapshotBlock",
        "API_KEY_VALUE",
        "request_handler_name",
        "getUserProfile",
        "x-amz-content-sha256",
        "this-is-a-long-kebab-name",
        "RequestParser",
    ])
    def test_identifiers(self, value):
        assert looks_like_identifier(value) is True

    @pytest.mark.parametrize("value", [
        "Xk9mP2vQ7rL4",
        "9f8e7d6c5b4a3f2e1d0c",
        "wJalrXUtnFEMI/K7MDENG/bPxRfiCYz",
        "x7k9m2p4n8q1w6e3r5t0y9",
    ])
    def test_random_tokens(self, value):
        assert looks_like_identifier(value) is False


@pytest.mark.unit
class TestFilterIdentifiers:
    """Test filter_identifiers."""

    def test_filters_strings(self):
        assert filter_identifiers(["getUserProfile", "Xk9mP2vQ7rL4"]) == ["Xk9mP2vQ7rL4"]

    def test_filters_with_key(self):
        items = [{"v": "API_KEY_VALUE"}, {"v": "Xk9mP2vQ7rL4"}]
        assert filter_identifiers(items, key=lambda item: item["v"]) == [{"v": "Xk9mP2vQ7rL4"}]
