"""Reconstruction of credentials made of several separately matched parts."""

import itertools
import logging
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Sequence, Tuple

from leakguard.core.extractor import PatternExtractor
from leakguard.core.models import Candidate

logger = logging.getLogger(__name__)

DEFAULT_MAX_CANDIDATES_PER_KIND = 20

# base64 fragments of "aws" and "origin_ec" found in real STS session tokens
SESSION_TOKEN_MARKERS = ("YXdz", "Jb3JpZ2luX2Vj")


# =============================================================================
# AWS
# =============================================================================

def is_plausible_session_token(token: str, secret: str) -> bool:
    """Cheap check that a session token can belong with a secret key."""
    return any(marker in token for marker in SESSION_TOKEN_MARKERS) or secret in token


def bounded(candidates: Sequence[Candidate], limit: int, kind: str) -> List[Candidate]:
    if len(candidates) > limit:
        logger.debug("Capping %d %s candidates to %d", len(candidates), kind, limit)
    return list(candidates[:limit])


def aws_key_pairs(
    access_keys: Sequence[Candidate],
    secret_keys: Sequence[Candidate],
    limit: int = DEFAULT_MAX_CANDIDATES_PER_KIND,
) -> Iterator[Tuple[Candidate, Candidate]]:
    """Every (access key, secret key) combination, capped per kind."""
    yield from itertools.product(
        bounded(access_keys, limit, "access key"),
        bounded(secret_keys, limit, "secret key"),
    )


def aws_session_triples(
    access_keys: Sequence[Candidate],
    secret_keys: Sequence[Candidate],
    session_tokens: Sequence[Candidate],
    limit: int = DEFAULT_MAX_CANDIDATES_PER_KIND,
) -> Iterator[Tuple[Candidate, Candidate, Candidate]]:
    """
    Every plausible (access key, secret key, session token) combination.

    Combinations whose token fails ``is_plausible_session_token`` are pruned
    here so they never reach the validator.
    """
    for access_key, secret_key, token in itertools.product(
        bounded(access_keys, limit, "access key"),
        bounded(secret_keys, limit, "secret key"),
        bounded(session_tokens, limit, "session token"),
    ):
        if is_plausible_session_token(token.value, secret_key.value):
            yield access_key, secret_key, token


# =============================================================================
# Generic two part credentials
# =============================================================================

def credential_pairs(
    first: Sequence[Candidate],
    second: Sequence[Candidate],
    limit: int = DEFAULT_MAX_CANDIDATES_PER_KIND,
    kinds: Tuple[str, str] = ("key", "secret"),
) -> Iterator[Tuple[Candidate, Candidate]]:
    """Every combination of two separately matched parts, capped per kind."""
    yield from itertools.product(bounded(first, limit, kinds[0]), bounded(second, limit, kinds[1]))


# =============================================================================
# PayPal
# =============================================================================

def paypal_pairs(
    client_ids: Sequence[Candidate],
    client_secrets: Sequence[Candidate],
    limit: int = DEFAULT_MAX_CANDIDATES_PER_KIND,
) -> List[Tuple[Candidate, Candidate]]:
    """Pair client ids with secrets in the order they appear."""
    ids = {candidate.value for candidate in client_ids}
    secrets = [candidate for candidate in client_secrets if candidate.value not in ids]
    return list(zip(bounded(client_ids, limit, "client id"), bounded(secrets, limit, "client secret")))


# =============================================================================
# Google Cloud Platform
# =============================================================================

GCP_FIELD_STRATEGIES: Dict[str, Tuple[str, ...]] = {
    "project_id": ("GCP Project ID Context", "GCP Project ID Assignment", "GCP Project ID"),
    "private_key_id": (
        "GCP Private Key ID Context", "GCP Private Key ID Assignment", "GCP Private Key ID",
    ),
    "private_key": ("GCP Private Key Context", "GCP Private Key Assignment", "GCP Private Key"),
    "client_email": (
        "GCP Client Email Context", "GCP Client Email Assignment", "GCP Client Email",
    ),
    "client_id": ("GCP Client ID Context", "GCP Client ID Assignment", "GCP Client ID"),
    "auth_provider_x509_cert_url": (
        "GCP Auth Provider Context", "GCP Auth Provider Assignment", "GCP Auth Provider URL",
    ),
    "client_x509_cert_url": (
        "GCP Client Cert URL Context", "GCP Client Cert URL Assignment", "GCP Client Cert URL",
    ),
}

# Fields whose value is fixed for every service account; presence is enough
GCP_FIXED_FIELDS: Dict[str, Tuple[str, str]] = {
    "auth_uri": ("GCP Auth URI", "https://accounts.google.com/o/oauth2/auth"),
    "token_uri": ("GCP Token URI", "https://oauth2.googleapis.com/token"),
    "universe_domain": ("GCP Universe Domain", "googleapis.com"),
}

GCP_REQUIRED_FIELDS = (
    "type", "project_id", "private_key_id", "private_key", "client_email",
    "auth_provider_x509_cert_url",
)

SERVICE_ACCOUNT_TYPE = "service_account"


@dataclass
class GcpComponents:
    """Service account fields recovered from scattered matches."""

    values: Dict[str, str] = field(default_factory=dict)
    candidates: Dict[str, Candidate] = field(default_factory=dict)

    def get(self, name: str, default: Optional[str] = None) -> Optional[str]:
        return self.values.get(name, default)

    def is_complete(self) -> bool:
        if self.values.get("type") != SERVICE_ACCOUNT_TYPE:
            return False
        return all(self.values.get(name) for name in GCP_REQUIRED_FIELDS)

    def located(self) -> List[Candidate]:
        """Candidates that came from a concrete position in the content."""
        return [self.candidates[name] for name in GCP_FIELD_STRATEGIES if name in self.candidates]


def extract_gcp_components(extractor: PatternExtractor, content: str) -> GcpComponents:
    """
    Recover service account fields from content.

    Each field is tried with its strategies in priority order (JSON key,
    variable assignment, bare fallback) and the first strategy that matches
    wins.
    """
    components = GcpComponents()

    if extractor.contains(content, "GCP Service Account Type") or SERVICE_ACCOUNT_TYPE in content:
        components.values["type"] = SERVICE_ACCOUNT_TYPE

    for name, strategies in GCP_FIELD_STRATEGIES.items():
        candidate = extractor.first_match(content, strategies)
        if candidate is not None:
            components.values[name] = candidate.value
            components.candidates[name] = candidate
            logger.debug("GCP field %s found with %s", name, candidate.pattern_name)

    for name, (pattern_name, value) in GCP_FIXED_FIELDS.items():
        if extractor.contains(content, pattern_name):
            components.values[name] = value

    return components
