"""Assembly of occurrence records."""

import json
from typing import Any, Dict, Mapping, Optional

from leakguard.core.fingerprint import DEFAULT_ALGORITHM, compute_fingerprint
from leakguard.core.models import Occurrence, SourceContent, Validity


def file_name_from_url(url: str) -> str:
    """Last path segment of a URL, or "" when there is none."""
    return (url or "").split("/")[-1]


def default_source_content(url: str, secret_fields: Mapping[str, Any]) -> SourceContent:
    """Unresolved source content: the secret fields as JSON, named after the bundle."""
    return SourceContent(
        content=json.dumps(dict(secret_fields), separators=(",", ":")),
        content_filename=file_name_from_url(url),
    )


class OccurrenceBuilder:
    """Builds fingerprinted occurrences for one family."""

    def __init__(self, family: str, algorithm: str = DEFAULT_ALGORITHM):
        self.family = family
        self.algorithm = algorithm

    def build(
        self,
        secret_value: Dict[str, Any],
        url: str,
        resource_type: str,
        source_content: SourceContent,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> Occurrence:
        """
        Fingerprint a validated secret and wrap it as an occurrence.

        Raises:
            FingerprintError: If the secret value cannot be fingerprinted
        """
        return Occurrence(
            secret_type=self.family,
            fingerprint=compute_fingerprint(secret_value, self.algorithm),
            secret_value=secret_value,
            file_path=file_name_from_url(url),
            url=url,
            resource_type=resource_type,
            source_content=source_content,
            validity=Validity.VALID,
            metadata=dict(metadata or {}),
        )
