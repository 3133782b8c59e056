"""Heuristics for strings that are code identifiers rather than secrets."""

import re
from typing import Callable, Iterable, List, Optional, TypeVar

T = TypeVar("T")

_NOUN_SUFFIXES = (
    "Buffer|Parser|Handler|Manager|Service|Config|Helper|Util|Utils|Factory|Builder|"
    "Provider|Controller|Processor|Generator|Validator|Converter|Transformer|Formatter|"
    "Scanner|Monitor|Logger|Writer|Reader"
)

_VERB_PREFIXES = (
    "get|set|is|has|can|should|will|did|create|update|delete|add|remove|find|search|"
    "filter|sort|parse|format|validate|process|handle|manage|execute|run|start|stop|"
    "init|destroy"
)

_FILE_EXTENSIONS = "html|json|xml|css|jsx|tsx|php|java|cpp|hpp|swift|scala|yaml|toml|conf|properties"

PROGRAMMING_PATTERNS = [
    # PascalCase: DisableSnapshotBlockPublicAccess
    re.compile(r"^[A-Z][a-z]+([A-Z][a-z]+)+$"),
    # camelCase: disableSnapshotBlock
    re.compile(r"^[a-z]+([A-Z][a-z]+)+$"),
    # Acronym runs: parseHTMLResponse, XMLHttpRequest-like shapes
    re.compile(r"^[a-z]+[A-Z]{3,}[A-Za-z]+$|^[A-Z][a-z]+[A-Z]{3,}[A-Za-z]*$"),
    # Short version or index numbers: utf8Encoder, base64Url
    re.compile(r"^[A-Za-z]+\d{1,3}[A-Za-z]+$"),
    # SCREAMING_SNAKE_CASE
    re.compile(r"^[A-Z]{2,}(_[A-Z]{2,})+$"),
    # snake_case
    re.compile(r"^[a-z]{2,}(_[a-z]{2,})+$"),
    # SCREAMING_SNAKE_CASE with numeric segments: HTTP_2_ENABLED
    re.compile(r"^[A-Z]{2,}(_[A-Z]{2,}|_[A-Z]*\d+[A-Z]*)+$"),
    re.compile(rf"^[A-Z][a-z]{{2,}}({_NOUN_SUFFIXES})$", re.IGNORECASE),
    re.compile(rf"^({_VERB_PREFIXES})[A-Z][a-z]{{2,}}.*$"),
    re.compile(rf"^[a-z]{{3,}}({_FILE_EXTENSIONS})[a-z]+$", re.IGNORECASE),
    # Header-like tokens: x-amz-content-sha256
    re.compile(r"^(amz|aws|fwd|header|x)(-[a-z0-9]+){3,}-?$"),
    # Long kebab-case tokens
    re.compile(r"^[a-z]+(-[a-z]+){4,}-?$"),
]


def looks_like_identifier(value: str) -> bool:
    """Return True if the value matches a common programming naming convention."""
    return any(pattern.search(value) for pattern in PROGRAMMING_PATTERNS)


def filter_identifiers(items: Iterable[T], key: Optional[Callable[[T], str]] = None) -> List[T]:
    """Drop items whose string form looks like a code identifier."""
    key = key or str
    return [item for item in items if not looks_like_identifier(key(item))]
