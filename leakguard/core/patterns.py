"""Detection pattern configuration loaded from YAML."""

import logging
import re
from functools import lru_cache
from pathlib import Path
from typing import Dict, List, Optional, Union

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from leakguard.core.exceptions import ConfigurationError, PatternError
from leakguard.core.models import Pattern

logger = logging.getLogger(__name__)

DEFAULT_PATTERNS_FILE = Path(__file__).parent.parent / "config" / "patterns.yaml"


class PatternDefinition(BaseModel):
    """Schema of one entry under ``patterns:`` in the YAML file."""

    name: str = Field(..., min_length=1)
    family: str = Field(..., min_length=1)
    pattern: str = Field(..., description="Python regular expression")
    entropy: float = Field(0.0, ge=0.0, description="Minimum Shannon entropy of a match")
    global_match: bool = Field(True, description="Collect every match instead of the first")
    length: Optional[int] = Field(None, gt=0, description="Exact length a match must have")
    min_length: Optional[int] = Field(None, gt=0)
    check_naming: bool = Field(True, description="Reject matches shaped like code identifiers")
    check_uuid: bool = Field(True, description="Reject matches shaped like UUIDs")
    ignore_case: bool = False

    @field_validator("pattern")
    @classmethod
    def pattern_must_compile(cls, value: str) -> str:
        try:
            re.compile(value)
        except re.error as e:
            raise ValueError(f"invalid regular expression: {e}") from e
        return value

    def to_pattern(self) -> Pattern:
        return Pattern(
            name=self.name,
            family_name=self.family,
            regex=self.pattern,
            entropy_threshold=self.entropy,
            is_global_match=self.global_match,
            length=self.length,
            min_length=self.min_length,
            check_naming=self.check_naming,
            check_uuid=self.check_uuid,
            ignore_case=self.ignore_case,
        )


class PatternsFile(BaseModel):
    """Schema of the whole patterns file."""

    patterns: List[PatternDefinition]
    resource_types: Dict[str, Dict[str, str]] = Field(default_factory=dict)


class PatternRegistry:
    """Read-only lookup of detection patterns by name and family."""

    def __init__(self, patterns: List[Pattern], resource_types: Optional[Dict[str, Dict[str, str]]] = None):
        self._patterns: Dict[str, Pattern] = {}
        for pattern in patterns:
            if pattern.name in self._patterns:
                raise PatternError(f"Duplicate pattern name: {pattern.name}")
            self._patterns[pattern.name] = pattern
        self._resource_types = resource_types or {}

    @classmethod
    def from_file(cls, patterns_file: Union[str, Path]) -> "PatternRegistry":
        """
        Load and validate a patterns YAML file.

        Args:
            patterns_file: Path to the YAML file

        Returns:
            Registry holding every pattern in the file

        Raises:
            ConfigurationError: If the file cannot be read or fails validation
        """
        try:
            with open(patterns_file, "r") as f:
                raw = yaml.safe_load(f)
            config = PatternsFile.model_validate(raw or {})
        except (OSError, yaml.YAMLError, ValidationError) as e:
            raise ConfigurationError(
                f"Failed to load patterns file: {e}", {"path": str(patterns_file)}
            ) from e

        logger.debug("Loaded %d patterns from %s", len(config.patterns), patterns_file)
        return cls(
            [definition.to_pattern() for definition in config.patterns],
            config.resource_types,
        )

    def get(self, name: str) -> Pattern:
        try:
            return self._patterns[name]
        except KeyError:
            raise PatternError(f"Unknown pattern: {name}") from None

    def __contains__(self, name: str) -> bool:
        return name in self._patterns

    def __len__(self) -> int:
        return len(self._patterns)

    def names(self) -> List[str]:
        return list(self._patterns)

    def for_family(self, family: str) -> List[Pattern]:
        return [p for p in self._patterns.values() if p.family_name == family]

    def families(self) -> List[str]:
        return sorted({p.family_name for p in self._patterns.values()})

    def resource_types(self, family: str) -> Dict[str, str]:
        return dict(self._resource_types.get(family, {}))


@lru_cache(maxsize=None)
def _load_registry(path: str) -> PatternRegistry:
    return PatternRegistry.from_file(path)


def load_patterns(patterns_file: Optional[Union[str, Path]] = None) -> PatternRegistry:
    """Return the registry for a patterns file, loading each file only once."""
    path = Path(patterns_file) if patterns_file else DEFAULT_PATTERNS_FILE
    return _load_registry(str(path.resolve()))
