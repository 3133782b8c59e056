"""Accept/reject decision for extracted candidates."""

import logging
from typing import AbstractSet, Iterable, List, Optional, Union

from leakguard.core.entropy import shannon_entropy
from leakguard.core.false_positives import DEFAULT_FALSE_POSITIVES, is_known_false_positive
from leakguard.core.models import Candidate, Pattern, RejectionReason
from leakguard.core.naming import looks_like_identifier
from leakguard.core.patterns import PatternRegistry

logger = logging.getLogger(__name__)


class CandidateFilter:
    """
    Combines the length, entropy, naming and known false positive checks.

    Checks run cheapest first; the combined verdict does not depend on the
    order.
    """

    def __init__(self, false_positives: AbstractSet[str] = DEFAULT_FALSE_POSITIVES):
        self.false_positives = false_positives

    def rejection_reason(self, value: str, pattern: Pattern) -> Optional[RejectionReason]:
        """Return why a value fails the pattern's checks, or None if it passes."""
        if pattern.length is not None and len(value) != pattern.length:
            return RejectionReason.LENGTH
        if pattern.min_length is not None and len(value) < pattern.min_length:
            return RejectionReason.LENGTH
        if shannon_entropy(value) < pattern.entropy_threshold:
            return RejectionReason.ENTROPY
        if pattern.check_naming and looks_like_identifier(value):
            return RejectionReason.NAMING
        is_false_positive, _ = is_known_false_positive(
            value, self.false_positives, perform_uuid_check=pattern.check_uuid
        )
        if is_false_positive:
            return RejectionReason.KNOWN_FALSE_POSITIVE
        return None

    def accept(self, candidate: Union[Candidate, str], pattern: Pattern) -> bool:
        value = candidate.value if isinstance(candidate, Candidate) else candidate
        return self.rejection_reason(value, pattern) is None

    def filter(self, candidates: Iterable[Candidate], registry: PatternRegistry) -> List[Candidate]:
        """Keep candidates that pass the pattern that produced them, logging each rejection."""
        accepted = []
        for candidate in candidates:
            pattern = registry.get(candidate.pattern_name)
            reason = self.rejection_reason(candidate.value, pattern)
            if reason is None:
                accepted.append(candidate)
            else:
                logger.debug("Rejected %s candidate (%s)", pattern.name, reason.value)
        return accepted
