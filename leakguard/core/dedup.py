"""Deduplication of candidate secrets against recorded findings."""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Set, Tuple

from leakguard.core.models import Finding

logger = logging.getLogger(__name__)

# Legacy records nest secret values at most this deep ({"match": {...}})
_MAX_DEPTH = 4


@dataclass(frozen=True)
class CanonicalSecret:
    """
    Shape-independent view of a stored secret value.

    ``fields`` maps each credential field name to every string value found
    under it, wherever it sat in the original record.
    """

    family: str
    fields: Dict[str, Tuple[str, ...]]

    def values(self) -> Set[str]:
        return {value for values in self.fields.values() for value in values}


def flatten_secret_value(secret_value: Any) -> Dict[str, Tuple[str, ...]]:
    """
    Collect string fields from a secret value of any known shape.

    Handles ``{field: value}``, ``{"match": {field: value}}`` and other nested
    mappings. Anything that is not a mapping yields no fields.
    """
    collected: Dict[str, List[str]] = {}

    def walk(node: Any, depth: int) -> None:
        if depth > _MAX_DEPTH or not isinstance(node, Mapping):
            return
        for key, value in node.items():
            if isinstance(value, str):
                if value:
                    collected.setdefault(str(key), []).append(value)
            elif isinstance(value, Mapping):
                walk(value, depth + 1)

    walk(secret_value, 0)
    return {key: tuple(values) for key, values in collected.items()}


def canonicalize(finding: Any) -> Optional[CanonicalSecret]:
    """Normalize a stored finding (model or raw dict); None if unusable."""
    if isinstance(finding, Finding):
        family, secret_value = finding.secret_type, finding.secret_value
    elif isinstance(finding, Mapping):
        family, secret_value = finding.get("secretType"), finding.get("secretValue")
    else:
        return None
    if not isinstance(family, str):
        return None
    return CanonicalSecret(family=family, fields=flatten_secret_value(secret_value))


class Deduplicator:
    """Answers whether a candidate secret was already recorded for its family."""

    def __init__(self, existing_findings: Iterable[Any]):
        self._by_family: Dict[str, List[CanonicalSecret]] = {}
        for finding in existing_findings:
            canonical = canonicalize(finding)
            if canonical is not None:
                self._by_family.setdefault(canonical.family, []).append(canonical)

    def is_already_found(
        self,
        candidate_secret: Mapping[str, Any],
        family: str,
        key_fields: Optional[Sequence[str]] = None,
    ) -> bool:
        """
        Check a candidate against recorded findings of the same family.

        Args:
            candidate_secret: Candidate secret value, in any supported shape
            family: Family (secret type) name
            key_fields: Fields identifying the credential; defaults to all fields

        Returns:
            True when some recorded finding holds every key field value
        """
        candidate_fields = flatten_secret_value(candidate_secret)
        names = list(key_fields) if key_fields else list(candidate_fields)
        wanted = [(name, candidate_fields.get(name, ())) for name in names]
        if not wanted or any(not values for _, values in wanted):
            return False

        for existing in self._by_family.get(family, []):
            all_values = existing.values()
            if all(
                # Legacy records may have lost the field name; fall back to any value
                set(values) & set(existing.fields.get(name) or all_values)
                for name, values in wanted
            ):
                logger.debug("Candidate already recorded for %s", family)
                return True
        return False


def is_already_found(
    candidate_secret: Mapping[str, Any],
    family: str,
    existing_findings: Iterable[Any],
    key_fields: Optional[Sequence[str]] = None,
) -> bool:
    return Deduplicator(existing_findings).is_already_found(candidate_secret, family, key_fields)
