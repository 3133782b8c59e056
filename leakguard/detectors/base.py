"""
Detection pipeline shared by every credential family.

A detector turns raw content into validated occurrences:

    extract -> filter -> deduplicate -> validate -> localize -> fingerprint -> build

Each candidate ends in exactly one state: rejected by the filter, skipped as
a duplicate, failed validation, or emitted as an ``Occurrence``. Only
fingerprint failures are raised; every other problem degrades to "no
finding" or to unresolved source content.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

import aiohttp

from leakguard.core.dedup import Deduplicator
from leakguard.core.extractor import PatternExtractor
from leakguard.core.filters import CandidateFilter
from leakguard.core.models import Candidate, Occurrence
from leakguard.core.occurrence import OccurrenceBuilder, default_source_content
from leakguard.core.patterns import PatternRegistry, load_patterns
from leakguard.core.repository import FindingsRepository
from leakguard.core.source_maps import SourceMapResolver
from leakguard.validators import CredentialValidator, ValidationResult, create_validator

logger = logging.getLogger(__name__)


@dataclass
class CredentialCandidate:
    """A complete credential (one or more parts) ready for validation."""

    parts: Tuple[Candidate, ...]
    fields: Dict[str, str]
    secret_value: Dict[str, Any]
    resource_type: str
    validation_args: Tuple[str, ...]
    # Extra field sets that identify the same credential in older records
    dedup_alternatives: List[Dict[str, str]] = field(default_factory=list)

    @property
    def located_values(self) -> List[str]:
        return [part.value for part in self.parts]


class SecretDetector(ABC):
    """
    Base class of all family detectors.

    Subclasses implement ``candidates`` and may narrow deduplication with
    ``key_fields``.
    """

    family: str = ""
    # Fields that identify a credential during deduplication (None = all fields)
    key_fields: Optional[Tuple[str, ...]] = None
    # Fields of the stored secret value passed to the validator, in order
    # (empty = every field of the stored value)
    validation_fields: Tuple[str, ...] = ()

    def __init__(
        self,
        repository: FindingsRepository,
        validator: Optional[CredentialValidator] = None,
        registry: Optional[PatternRegistry] = None,
        candidate_filter: Optional[CandidateFilter] = None,
        session: Optional[aiohttp.ClientSession] = None,
        timeout: int = 10,
        max_concurrent: int = 5,
        max_candidates_per_kind: int = 20,
        resolve_source_maps: bool = True,
    ):
        self.repository = repository
        self.registry = registry or load_patterns()
        self.extractor = PatternExtractor(self.registry)
        self.candidate_filter = candidate_filter or CandidateFilter()
        self.validator = validator or create_validator(self.family, session=session, timeout=timeout)
        self.builder = OccurrenceBuilder(self.family)
        self.session = session
        self.timeout = timeout
        self.max_concurrent = max_concurrent
        self.max_candidates_per_kind = max_candidates_per_kind
        self.resolve_source_maps = resolve_source_maps

    @property
    def name(self) -> str:
        return self.family

    # =========================================================================
    # Family specific steps
    # =========================================================================
    @abstractmethod
    def candidates(self, content: str) -> List[CredentialCandidate]:
        """Extract and filter credentials from content."""

    def extract_filtered(self, content: str, pattern_names: Sequence[str]) -> List[Candidate]:
        """Extract candidates and keep those that pass the candidate filter."""
        return self.candidate_filter.filter(
            self.extractor.extract(content, pattern_names), self.registry
        )

    def resource_type_for(self, value: str) -> str:
        """Resource label for a token, chosen by its longest matching prefix."""
        labels = self.registry.resource_types(self.family)
        prefixes = sorted((p for p in labels if p != "default" and value.startswith(p)), key=len, reverse=True)
        if prefixes:
            return labels[prefixes[0]]
        return labels.get("default", "")

    def is_duplicate(self, credential: CredentialCandidate, dedup: Deduplicator) -> bool:
        for fields in [credential.fields, *credential.dedup_alternatives]:
            if dedup.is_already_found(fields, self.family, self.key_fields):
                return True
        return False

    # =========================================================================
    # Pipeline
    # =========================================================================
    async def detect(self, content: str, url: str) -> List[Occurrence]:
        """
        Find validated occurrences of this family's credentials in content.

        Args:
            content: Raw text, usually a JavaScript bundle
            url: Where the content was loaded from

        Returns:
            Occurrences for every new, live credential (possibly empty)

        Raises:
            FingerprintError: If an occurrence cannot be fingerprinted
        """
        if not content:
            return []

        credentials = self.candidates(content)
        if not credentials:
            return []

        dedup = Deduplicator(await self.repository.get_existing())
        unique = []
        for credential in credentials:
            if self.is_duplicate(credential, dedup):
                logger.debug("%s candidate already recorded, skipping", self.family)
            else:
                unique.append(credential)
        if not unique:
            return []

        if self.validator is None:
            logger.debug("No validator for %s; nothing emitted", self.family)
            return []

        resolver = SourceMapResolver(session=self.session, timeout=self.timeout)
        semaphore = asyncio.Semaphore(self.max_concurrent)
        results = await asyncio.gather(
            *(self._confirm(credential, content, url, resolver, semaphore) for credential in unique)
        )
        occurrences = [occurrence for occurrence in results if occurrence is not None]
        if occurrences:
            logger.info("Found %d %s secret(s) in %s", len(occurrences), self.family, url)
        return occurrences

    async def _validate(self, credential: CredentialCandidate, semaphore: asyncio.Semaphore) -> ValidationResult:
        async with semaphore:
            try:
                return await self.validator.validate(*credential.validation_args)
            except Exception as e:
                logger.warning("%s validator raised: %s", self.family, e)
                return ValidationResult(valid=False, error=str(e))

    async def _confirm(
        self,
        credential: CredentialCandidate,
        content: str,
        url: str,
        resolver: SourceMapResolver,
        semaphore: asyncio.Semaphore,
    ) -> Optional[Occurrence]:
        result = await self._validate(credential, semaphore)
        if not result.valid:
            logger.debug("%s candidate failed validation: %s", self.family, result.error)
            return None

        source_content = default_source_content(url, credential.fields)
        if self.resolve_source_maps:
            source_content = await resolver.localize(
                url, content, credential.located_values, source_content
            )

        return self.builder.build(
            credential.secret_value,
            url,
            credential.resource_type,
            source_content,
            metadata=result.metadata,
        )


class SingleKeyDetector(SecretDetector):
    """Detector for credentials made of a single token."""

    pattern_names: Tuple[str, ...] = ()
    field_name: str = "api_key"

    def candidates(self, content: str) -> List[CredentialCandidate]:
        return [
            CredentialCandidate(
                parts=(candidate,),
                fields={self.field_name: candidate.value},
                secret_value={"match": {self.field_name: candidate.value}},
                resource_type=self.resource_type_for(candidate.value),
                validation_args=(candidate.value,),
            )
            for candidate in self.extract_filtered(content, self.pattern_names)
        ]
