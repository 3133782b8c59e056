"""Unit tests for secret fingerprints."""

import hashlib

import pytest

from leakguard.core.exceptions import FingerprintError
from leakguard.core.fingerprint import canonical_json, compute_fingerprint


@pytest.mark.unit
class TestCanonicalJson:
    """Test canonical_json."""

    def test_sorted_compact(self):
        assert canonical_json({"b": 1, "a": {"d": 2, "c": 3}}) == '{"a":{"c":3,"d":2},"b":1}'

    def test_non_ascii_kept(self):
        assert canonical_json({"k": "é"}) == '{"k":"é"}'


@pytest.mark.unit
class TestComputeFingerprint:
    """Test compute_fingerprint."""

    def test_sha512_default(self):
        value = {"match": {"api_key": "Xk9mP2vQ7rL4wZ8n"}}
        expected = hashlib.sha512(b'{"match":{"api_key":"Xk9mP2vQ7rL4wZ8n"}}').hexdigest()
        assert compute_fingerprint(value) == expected
        assert len(compute_fingerprint(value)) == 128

    def test_key_order_does_not_matter(self):
        first = {"match": {"access_key_id": "A", "secret_key_id": "B"}}
        second = {"match": {"secret_key_id": "B", "access_key_id": "A"}}
        assert compute_fingerprint(first) == compute_fingerprint(second)

    def test_different_values_differ(self):
        assert compute_fingerprint({"k": "a"}) != compute_fingerprint({"k": "b"})

    def test_other_algorithms(self):
        assert len(compute_fingerprint({"k": "a"}, "SHA-256")) == 64
        assert len(compute_fingerprint({"k": "a"}, "sha-1")) == 40

    def test_unknown_algorithm(self):
        with pytest.raises(FingerprintError) as exc_info:
            compute_fingerprint({"k": "a"}, "MD5")
        assert exc_info.value.message == "Failed to compute MD5 fingerprint"

    def test_unserializable_value(self):
        with pytest.raises(FingerprintError):
            compute_fingerprint({"k": object()})
