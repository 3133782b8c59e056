"""Docker registry credential validation through the Registry HTTP API v2."""

from typing import Dict

import aiohttp

from leakguard.validators.base import HttpCredentialValidator, ValidationResult

# Hosts used in documentation and tutorials
PLACEHOLDER_REGISTRIES = frozenset({
    "registry.hostname.com",
    "registry.example.com:5000",
    "registry2.example.com:5000",
    "your.private.registry.example.com",
})

REGISTRY = "REGISTRY"


def registry_api_url(registry: str) -> str:
    """Return the ``/v2/`` base endpoint for a registry named in a Docker config."""
    url = registry.rstrip("/")
    if url.lower() == "docker.io":
        url = "index.docker.io"
    if not url.startswith(("http://", "https://")):
        url = f"https://{url}"
    if url.endswith("/v1"):
        url = url[:-len("/v1")]
    return f"{url}/v2/"


def parse_www_authenticate(header: str) -> Dict[str, str]:
    """
    Parse a ``Www-Authenticate`` challenge into its scheme and parameters.

    >>> parse_www_authenticate('Bearer realm="https://auth.docker.io/token",service="registry.docker.io"')
    {'scheme': 'Bearer', 'realm': 'https://auth.docker.io/token', 'service': 'registry.docker.io'}
    """
    scheme, _, rest = header.strip().partition(" ")
    if not rest:
        return {}
    params = {"scheme": scheme}
    for part in rest.split(","):
        key, sep, value = part.strip().partition("=")
        if sep:
            params[key.strip()] = value.strip().strip('"')
    return params


class DockerValidator(HttpCredentialValidator):
    """
    Logs in to a registry with basic auth.

    Registries that answer 401 with a Bearer challenge (Docker Hub, GHCR, ...)
    are asked for a token at the challenge realm instead.
    """

    family = "Docker"

    async def _check(self, session: aiohttp.ClientSession, registry: str, username: str,
                     password: str) -> ValidationResult:
        if registry in PLACEHOLDER_REGISTRIES:
            return ValidationResult(valid=False, error="Placeholder registry")

        auth = aiohttp.BasicAuth(username, password)
        headers = {"Accept": "application/json"}
        async with session.get(registry_api_url(registry), auth=auth, headers=headers) as resp:
            if resp.status == 200:
                return ValidationResult(valid=True, metadata={"type": REGISTRY}, status=resp.status)
            challenge = resp.headers.get("Www-Authenticate", "") if resp.status == 401 else ""
            if not challenge.startswith("Bearer"):
                return self._http_failure(resp.status, resp.reason)

        params = parse_www_authenticate(challenge)
        realm = params.get("realm")
        if not realm:
            return ValidationResult(valid=False, error="Bearer challenge without realm", status=401)

        query = {"account": username}
        if params.get("service"):
            query["service"] = params["service"]
        async with session.get(realm, params=query, auth=auth, headers=headers) as resp:
            if resp.status == 200:
                return ValidationResult(valid=True, metadata={"type": REGISTRY}, status=resp.status)
            return self._http_failure(resp.status, resp.reason)
