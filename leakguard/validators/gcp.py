"""GCP service account validation through an OAuth2 JWT bearer exchange."""

import json
import time
from typing import Any, Dict, Optional

import aiohttp
import jwt

from leakguard.validators.base import HttpCredentialValidator, ValidationResult

GCP_TOKEN_ENDPOINT = "https://oauth2.googleapis.com/token"
GCP_SCOPE = "https://www.googleapis.com/auth/cloud-platform"
JWT_BEARER_GRANT = "urn:ietf:params:oauth:grant-type:jwt-bearer"

# Public key published in Google's own docs for pulling images; never a leak
KNOWN_TEST_ACCOUNTS = frozenset({
    "image-pulling@authenticated-image-pulling.iam.gserviceaccount.com",
})

SERVICE_ACCOUNT = "SERVICE_ACCOUNT"


def check_service_account_structure(credentials: Dict[str, Any]) -> Optional[str]:
    """Return a reason the credentials are malformed, or None if they look usable."""
    if credentials.get("type") != "service_account":
        return "Not a service account"
    for name in ("project_id", "private_key_id", "private_key", "client_email"):
        if not isinstance(credentials.get(name), str) or not credentials[name]:
            return f"Invalid {name}"
    email = credentials["client_email"]
    if "@" not in email or "." not in email:
        return "Invalid email format"
    key = credentials["private_key"]
    if "BEGIN PRIVATE KEY" not in key or "END PRIVATE KEY" not in key:
        return "Invalid private key format"
    return None


def build_jwt_assertion(credentials: Dict[str, Any], now: Optional[int] = None) -> str:
    """
    Sign an RS256 JWT assertion for the service account.

    Raises:
        ValueError: If the private key cannot be loaded or is not an RSA key
    """
    issued_at = int(now if now is not None else time.time())
    payload = {
        "iss": credentials["client_email"],
        "scope": GCP_SCOPE,
        "aud": credentials.get("token_uri") or GCP_TOKEN_ENDPOINT,
        "iat": issued_at,
        "exp": issued_at + 3600,
    }
    try:
        return jwt.encode(
            payload,
            credentials["private_key"],
            algorithm="RS256",
            headers={"kid": credentials.get("private_key_id", "")},
        )
    except jwt.PyJWTError as e:
        raise ValueError(f"Unusable private key: {e}") from e
    except TypeError as e:
        # Keys that load but are not RSA fail when signing
        raise ValueError("Service account key is not an RSA key") from e


class GcpValidator(HttpCredentialValidator):
    """Validates a service account key by exchanging a signed JWT for a token."""

    family = "Google Cloud Platform"

    async def _check(self, session: aiohttp.ClientSession, service_account_json: str) -> ValidationResult:
        try:
            credentials = json.loads(service_account_json)
        except (TypeError, ValueError):
            return ValidationResult(valid=False, error="Invalid JSON format")
        if not isinstance(credentials, dict):
            return ValidationResult(valid=False, error="Invalid JSON format")

        problem = check_service_account_structure(credentials)
        if problem:
            return ValidationResult(valid=False, error=problem)
        if credentials["client_email"] in KNOWN_TEST_ACCOUNTS:
            return ValidationResult(valid=False, error="Test service account")

        try:
            assertion = build_jwt_assertion(credentials)
        except ValueError as e:
            return ValidationResult(valid=False, error=str(e))

        data = {"grant_type": JWT_BEARER_GRANT, "assertion": assertion}
        async with session.post(GCP_TOKEN_ENDPOINT, data=data) as resp:
            if resp.status == 200:
                return ValidationResult(
                    valid=True,
                    metadata={"type": SERVICE_ACCOUNT, "projectId": credentials["project_id"]},
                    status=resp.status,
                )
            return self._http_failure(resp.status, resp.reason)
