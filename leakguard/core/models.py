"""Core domain models for LeakGuard."""

import re
from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from functools import cached_property
from typing import Any, Dict, List, Optional, Set, Tuple

from leakguard.core.fingerprint import canonical_json


class Validity(str, Enum):
    """Outcome of the last live check of a credential."""

    VALID = "valid"
    INVALID = "invalid"
    FAILED_TO_CHECK = "failed_to_check"
    NO_CHECKER = "no_checker"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: Any) -> "Validity":
        try:
            return cls(value)
        except ValueError:
            return cls.UNKNOWN


class RejectionReason(str, Enum):
    """Why a candidate was dropped by the candidate filter."""

    LENGTH = "length"
    ENTROPY = "entropy"
    NAMING = "naming"
    KNOWN_FALSE_POSITIVE = "known_false_positive"


@dataclass(frozen=True)
class Pattern:
    """A single detection regex and the thresholds its matches must pass."""

    name: str
    family_name: str
    regex: str
    entropy_threshold: float = 0.0
    is_global_match: bool = True
    length: Optional[int] = None
    min_length: Optional[int] = None
    check_naming: bool = True
    # UUID shaped tokens are false positives unless the service issues them
    check_uuid: bool = True
    ignore_case: bool = False

    @cached_property
    def compiled(self) -> "re.Pattern[str]":
        flags = re.MULTILINE
        if self.ignore_case:
            flags |= re.IGNORECASE
        return re.compile(self.regex, flags)


@dataclass(frozen=True)
class Candidate:
    """A raw string extracted from content, with its character offset."""

    value: str
    offset: int
    pattern_name: str


@dataclass(frozen=True)
class SourceContent:
    """Window of source text shown for an occurrence; -1 marks unresolved lines."""

    content: str
    content_filename: str
    content_start_line_num: int = -1
    content_end_line_num: int = -1
    exact_match_numbers: Tuple[int, ...] = (-1,)

    @property
    def is_resolved(self) -> bool:
        return self.content_start_line_num != -1

    def to_dict(self) -> Dict[str, Any]:
        return {
            "content": self.content,
            "contentFilename": self.content_filename,
            "contentStartLineNum": self.content_start_line_num,
            "contentEndLineNum": self.content_end_line_num,
            "exactMatchNumbers": list(self.exact_match_numbers),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SourceContent":
        return cls(
            content=data.get("content") or "",
            content_filename=data.get("contentFilename") or "",
            content_start_line_num=data.get("contentStartLineNum", -1),
            content_end_line_num=data.get("contentEndLineNum", -1),
            exact_match_numbers=tuple(data.get("exactMatchNumbers") or (-1,)),
        )


@dataclass(frozen=True, eq=False)
class Occurrence:
    """
    One concrete sighting of a credential at one URL.

    Occurrences compare equal when they share ``url`` and ``secret_value``, so a
    set of occurrences never holds the same sighting twice.
    """

    secret_type: str
    fingerprint: str
    secret_value: Dict[str, Any]
    file_path: str
    url: str
    resource_type: str
    source_content: SourceContent
    validity: Validity = Validity.VALID
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def identity(self) -> Tuple[str, str]:
        return (self.url, canonical_json(self.secret_value))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Occurrence):
            return NotImplemented
        return self.identity == other.identity

    def __hash__(self) -> int:
        return hash(self.identity)

    def relocated(self, url: str, file_path: str) -> "Occurrence":
        """Return a copy pointing at a new location."""
        return replace(self, url=url, file_path=file_path)

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "secretType": self.secret_type,
            "fingerprint": self.fingerprint,
            "secretValue": self.secret_value,
            "filePath": self.file_path,
            "url": self.url,
            "type": self.resource_type,
            "sourceContent": self.source_content.to_dict(),
            "validity": self.validity.value,
        }
        if self.metadata:
            data["metadata"] = self.metadata
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Occurrence":
        return cls(
            secret_type=data.get("secretType", ""),
            fingerprint=data.get("fingerprint", ""),
            secret_value=data.get("secretValue") or {},
            file_path=data.get("filePath", ""),
            url=data.get("url", ""),
            resource_type=data.get("type") or data.get("resourceType") or "",
            source_content=SourceContent.from_dict(data.get("sourceContent") or {}),
            validity=Validity.parse(data.get("validity", Validity.VALID.value)),
            metadata=data.get("metadata") or {},
        )


@dataclass
class Finding:
    """All sightings of one unique credential, keyed by fingerprint."""

    fingerprint: str
    secret_type: str
    secret_value: Dict[str, Any]
    validity: Validity = Validity.VALID
    occurrences: Set[Occurrence] = field(default_factory=set)
    validated_at: Optional[datetime] = None
    discovered_at: Optional[datetime] = None
    is_new: bool = True

    @property
    def num_occurrences(self) -> int:
        return len(self.occurrences)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the wire shape; occurrences become a list."""
        return {
            "fingerprint": self.fingerprint,
            "secretType": self.secret_type,
            "secretValue": self.secret_value,
            "validity": self.validity.value,
            "numOccurrences": self.num_occurrences,
            "occurrences": [o.to_dict() for o in sorted(self.occurrences, key=lambda o: o.identity)],
            "validatedAt": self.validated_at.isoformat() if self.validated_at else None,
            "discoveredAt": self.discovered_at.isoformat() if self.discovered_at else None,
            "isNew": self.is_new,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Finding":
        """Create from the wire shape; occurrences are collected back into a set."""
        return cls(
            fingerprint=data.get("fingerprint", ""),
            secret_type=data.get("secretType", ""),
            secret_value=data.get("secretValue") or {},
            validity=Validity.parse(data.get("validity")),
            occurrences={Occurrence.from_dict(o) for o in data.get("occurrences") or []},
            validated_at=_parse_timestamp(data.get("validatedAt")),
            discovered_at=_parse_timestamp(data.get("discoveredAt")),
            is_new=bool(data.get("isNew", False)),
        )


def serialize_findings(findings: List[Finding]) -> List[Dict[str, Any]]:
    return [finding.to_dict() for finding in findings]


def deserialize_findings(data: List[Dict[str, Any]]) -> List[Finding]:
    return [Finding.from_dict(item) for item in data]


def _parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    try:
        # Browser timestamps end with "Z"
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except (TypeError, ValueError):
        return None
