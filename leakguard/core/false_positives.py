"""Known false positive values shared by all detectors."""

import re
from typing import AbstractSet, Tuple

DEFAULT_FALSE_POSITIVES = frozenset({
    "example", "xxxxxx", "aaaaaa", "abcde", "00000", "sample", "*****",
})

# Git object ids and other SHA-1 digests
HASH_PATTERN = re.compile(r"^[a-f0-9]{40}$")

UUID_PATTERN = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$", re.IGNORECASE
)


def is_likely_uuid(value: str) -> bool:
    return UUID_PATTERN.match(value) is not None


def is_hash_like(value: str) -> bool:
    return HASH_PATTERN.match(value) is not None


def is_valid_utf8(value: str) -> bool:
    try:
        value.encode("utf-8")
    except UnicodeEncodeError:
        return False
    return True


def is_known_false_positive(
    match: str,
    false_positives: AbstractSet[str] = DEFAULT_FALSE_POSITIVES,
    perform_word_check: bool = True,
    perform_uuid_check: bool = True,
) -> Tuple[bool, str]:
    """
    Check a matched value against the known false positive rules.

    Args:
        match: The extracted value
        false_positives: Terms that disqualify a value when equal or contained
        perform_word_check: Whether to reject values that merely contain a term
        perform_uuid_check: Whether to reject values shaped like UUIDs

    Returns:
        Tuple of (is false positive, reason)
    """
    if not is_valid_utf8(match):
        return True, "invalid utf8"

    lower = match.lower()
    if lower in false_positives:
        return True, f"matches term: {lower}"

    if perform_word_check:
        for term in sorted(false_positives):
            if term in lower:
                return True, f"contains term: {term}"

    if is_hash_like(match):
        return True, "matches hash pattern"

    if perform_uuid_check and is_likely_uuid(match):
        return True, "matches UUID pattern"

    return False, ""
