"""Regex extraction of candidate secrets from raw content."""

import logging
from typing import Iterator, List, Optional, Sequence, Tuple

from leakguard.core.models import Candidate, Pattern
from leakguard.core.patterns import PatternRegistry

logger = logging.getLogger(__name__)


def position_for_offset(content: str, offset: int) -> Tuple[int, int]:
    """Convert a character offset into a 1-based (line, column) pair."""
    if offset < 0 or offset > len(content):
        return -1, -1
    line = content.count("\n", 0, offset) + 1
    line_start = content.rfind("\n", 0, offset) + 1
    return line, offset - line_start + 1


def find_secret_position(content: str, secret: str) -> Tuple[int, int]:
    """
    Locate the first occurrence of a secret in content.

    Args:
        content: Text to search
        secret: Literal value to find

    Returns:
        1-based (line, column), or (-1, -1) when the secret is absent
    """
    if not content or not secret:
        return -1, -1
    offset = content.find(secret)
    if offset == -1:
        return -1, -1
    return position_for_offset(content, offset)


def _first_group(match) -> Tuple[Optional[str], int]:
    """Return the first non-empty capture group (or the whole match) and its offset."""
    if match.re.groups == 0:
        return match.group(0), match.start()
    for index in range(1, match.re.groups + 1):
        value = match.group(index)
        if value:
            return value, match.start(index)
    return None, -1


class PatternExtractor:
    """
    Runs named patterns over content and collects candidate strings.

    Patterns are applied in the order given, so callers list contextual
    patterns before generic fallbacks. A literal value found by more than one
    pattern is kept once, with the offset of its first sighting.
    """

    def __init__(self, registry: PatternRegistry):
        self.registry = registry

    def matches(self, content: str, pattern: Pattern) -> Iterator[Candidate]:
        """Yield every usable match of a single pattern."""
        for match in pattern.compiled.finditer(content):
            value, offset = _first_group(match)
            if value is None or not value.strip():
                continue
            yield Candidate(value=value, offset=offset, pattern_name=pattern.name)
            if not pattern.is_global_match:
                break

    def extract(self, content: str, pattern_names: Sequence[str]) -> List[Candidate]:
        """
        Extract candidates for several patterns.

        Args:
            content: Raw text to scan
            pattern_names: Pattern names, contextual first and fallbacks last

        Returns:
            Unique candidates in discovery order
        """
        seen = set()
        candidates: List[Candidate] = []
        for name in pattern_names:
            for candidate in self.matches(content, self.registry.get(name)):
                if candidate.value in seen:
                    continue
                seen.add(candidate.value)
                candidates.append(candidate)
        if candidates:
            logger.debug("Extracted %d candidates with %s", len(candidates), ", ".join(pattern_names))
        return candidates

    def first_match(self, content: str, strategies: Sequence[str]) -> Optional[Candidate]:
        """Return the first match of the first strategy that matches at all."""
        for name in strategies:
            for candidate in self.matches(content, self.registry.get(name)):
                return candidate
        return None

    def contains(self, content: str, pattern_name: str) -> bool:
        return self.registry.get(pattern_name).compiled.search(content) is not None
