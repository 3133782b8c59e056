"""Core package for LeakGuard."""

from leakguard.core.exceptions import LeakGuardError, ScanError
from leakguard.core.fingerprint import compute_fingerprint
from leakguard.core.models import Finding, Occurrence, SourceContent, Validity
from leakguard.core.patterns import PatternRegistry, load_patterns
from leakguard.core.repository import (
    FindingsRepository,
    InMemoryFindingsRepository,
    JsonFileFindingsRepository,
)
from leakguard.core.scanner import Scanner, find_secrets, merge_findings

__all__ = [
    "LeakGuardError",
    "ScanError",
    "compute_fingerprint",
    "Finding",
    "Occurrence",
    "SourceContent",
    "Validity",
    "PatternRegistry",
    "load_patterns",
    "FindingsRepository",
    "InMemoryFindingsRepository",
    "JsonFileFindingsRepository",
    "Scanner",
    "find_secrets",
    "merge_findings",
]
