"""Docker registry credentials embedded as ``"auths": {...}`` configs."""

import base64
import binascii
import json
import logging
import re
from typing import Any, Dict, List, Optional, Tuple

from leakguard.core.dedup import Deduplicator
from leakguard.core.entropy import shannon_entropy
from leakguard.detectors.base import CredentialCandidate, SecretDetector

logger = logging.getLogger(__name__)

MIN_AUTH_ENTROPY = 3.0
MIN_PASSWORD_ENTROPY = 1.0

# Object keys left unquoted by JavaScript bundlers
_BARE_KEY = re.compile(r"([{,]\s*)([A-Za-z_$][\w$]*)\s*:")


def parse_auths(text: str) -> Optional[Dict[str, Any]]:
    """Parse the ``auths`` object of a Docker config, accepting unquoted keys."""
    for attempt in (text, _BARE_KEY.sub(r'\1"\2":', text)):
        try:
            auths = json.loads(attempt)
        except ValueError:
            continue
        return auths if isinstance(auths, dict) else None
    return None


def encode_auth(username: str, password: str) -> str:
    return base64.b64encode(f"{username}:{password}".encode("utf-8")).decode("ascii")


def decode_auth(auth: str) -> Optional[Tuple[str, str]]:
    """Split a base64 ``user:password`` auth string; None if it is not one."""
    try:
        decoded = base64.b64decode(auth, validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError):
        return None
    parts = decoded.split(":")
    if len(parts) != 2:
        return None
    return parts[0], parts[1]


def _string(entry: Dict[str, Any], name: str) -> str:
    value = entry.get(name)
    return value if isinstance(value, str) else ""


def resolve_registry_auth(entry: Any) -> Optional[Dict[str, str]]:
    """
    Reconcile the ``auth``, ``username`` and ``password`` of one registry entry.

    Args:
        entry: Value stored under a registry name in ``auths``

    Returns:
        Dict with ``auth``, ``username``, ``password`` and ``email``, or None
        when the entry holds no complete login or its fields disagree
    """
    if not isinstance(entry, dict):
        return None
    username, password, auth = _string(entry, "username"), _string(entry, "password"), _string(entry, "auth")

    if auth:
        decoded = decode_auth(auth)
        if decoded is None:
            return None
        if username and password and decoded != (username, password):
            return None
        username, password = decoded

    if not username or not password:
        return None
    canonical = encode_auth(username, password)
    if auth and canonical != auth:
        return None
    return {"auth": canonical, "username": username, "password": password, "email": _string(entry, "email")}


class DockerDetector(SecretDetector):
    """One credential per registry entry of every auths block."""

    family = "Docker"
    validation_fields = ("registry", "username", "password")

    def candidates(self, content: str) -> List[CredentialCandidate]:
        credentials = []
        for candidate in self.extract_filtered(content, ["Docker Auth Config"]):
            auths = parse_auths(candidate.value)
            if not auths:
                logger.debug("Skipping unparseable Docker auths block")
                continue

            for registry, entry in auths.items():
                login = resolve_registry_auth(entry)
                if login is None:
                    continue
                if shannon_entropy(login["auth"]) < MIN_AUTH_ENTROPY:
                    continue
                if shannon_entropy(login["password"]) < MIN_PASSWORD_ENTROPY:
                    continue

                fields = {"registry": registry, **login}
                credentials.append(CredentialCandidate(
                    parts=(candidate,),
                    fields=fields,
                    secret_value={"match": dict(fields)},
                    resource_type=self.resource_type_for(registry),
                    validation_args=(registry, login["username"], login["password"]),
                ))
        return credentials

    def is_duplicate(self, credential: CredentialCandidate, dedup: Deduplicator) -> bool:
        # The same login or the same registry counts as already recorded
        return any(
            dedup.is_already_found({name: credential.fields[name]}, self.family, (name,))
            for name in ("auth", "registry")
        )
