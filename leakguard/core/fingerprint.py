"""Deterministic fingerprints for secret values."""

import hashlib
import json
from typing import Any

from leakguard.core.exceptions import FingerprintError

# Web Crypto style algorithm names mapped to hashlib constructors
SUPPORTED_ALGORITHMS = {
    "SHA-1": "sha1",
    "SHA-256": "sha256",
    "SHA-384": "sha384",
    "SHA-512": "sha512",
}

DEFAULT_ALGORITHM = "SHA-512"


def canonical_json(value: Any) -> str:
    """
    Serialize a value with stable key ordering and no insignificant whitespace.

    Two values that are equal by content always produce the same text, no
    matter how their dictionaries were built.
    """
    return json.dumps(value, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def compute_fingerprint(secret_value: Any, algorithm: str = DEFAULT_ALGORITHM) -> str:
    """
    Compute the hex digest identifying a secret value.

    Args:
        secret_value: Family specific secret payload (JSON compatible)
        algorithm: Hash algorithm name, e.g. ``SHA-512``

    Returns:
        Lowercase hexadecimal digest

    Raises:
        FingerprintError: If the algorithm is unknown or the value cannot be serialized
    """
    try:
        digest = hashlib.new(SUPPORTED_ALGORITHMS[algorithm.upper()])
        digest.update(canonical_json(secret_value).encode("utf-8"))
        return digest.hexdigest()
    except (KeyError, TypeError, ValueError) as e:
        raise FingerprintError(
            f"Failed to compute {algorithm} fingerprint",
            {"algorithm": algorithm, "cause": str(e)},
        ) from e
