"""Validators for single key SaaS credentials, hosted endpoints and PayPal OAuth pairs."""

import re
from typing import Any, Dict, Optional

import aiohttp

from leakguard.validators.base import HttpCredentialValidator, ValidationResult


class ApiKeyValidator(HttpCredentialValidator):
    """
    GET an authenticated endpoint; HTTP 200 means the key is live.

    Subclasses set ``endpoint`` and override ``_url``, ``_headers``, ``_auth``,
    ``_data`` or ``_interpret`` when the service needs more than a bearer token.
    """

    endpoint: str = ""
    method: str = "GET"

    def _url(self, key: str) -> str:
        return self.endpoint

    def _headers(self, key: str) -> Dict[str, str]:
        return {"Authorization": f"Bearer {key}"}

    def _auth(self, key: str) -> Optional[aiohttp.BasicAuth]:
        return None

    def _data(self, key: str) -> Optional[Dict[str, str]]:
        return None

    async def _interpret(self, resp) -> ValidationResult:
        if resp.status == 200:
            return ValidationResult(valid=True, status=resp.status)
        return self._http_failure(resp.status, resp.reason)

    async def _check(self, session: aiohttp.ClientSession, key: str) -> ValidationResult:
        async with session.request(
            self.method,
            self._url(key),
            headers=self._headers(key),
            auth=self._auth(key),
            data=self._data(key),
        ) as resp:
            return await self._interpret(resp)


# =============================================================================
# AI services
# =============================================================================
class OpenAIValidator(ApiKeyValidator):
    family = "OpenAI"
    endpoint = "https://api.openai.com/v1/models"


class AnthropicValidator(ApiKeyValidator):
    family = "Anthropic AI"
    endpoint = "https://api.anthropic.com/v1/models"

    def _headers(self, key: str) -> Dict[str, str]:
        return {"x-api-key": key, "anthropic-version": "2023-06-01"}


class GroqValidator(ApiKeyValidator):
    family = "Groq"
    endpoint = "https://api.groq.com/openai/v1/models"


class DeepSeekValidator(ApiKeyValidator):
    family = "DeepSeek"
    endpoint = "https://api.deepseek.com/user/balance"


class HuggingFaceValidator(ApiKeyValidator):
    family = "Hugging Face"
    endpoint = "https://huggingface.co/api/whoami-v2"

    async def _interpret(self, resp) -> ValidationResult:
        if resp.status == 200:
            data = await resp.json()
            return ValidationResult(valid=True, metadata={"name": data.get("name")}, status=resp.status)
        return self._http_failure(resp.status, resp.reason)


class LangSmithValidator(ApiKeyValidator):
    family = "LangSmith"
    endpoint = "https://api.smith.langchain.com/api/v1/sessions?limit=1"

    def _headers(self, key: str) -> Dict[str, str]:
        return {"x-api-key": key}


class DeepAIValidator(ApiKeyValidator):
    family = "DeepAI"
    endpoint = "https://api.deepai.org/api/text-tagging"
    method = "POST"

    def _headers(self, key: str) -> Dict[str, str]:
        return {"api-key": key}

    def _data(self, key: str) -> Optional[Dict[str, str]]:
        return {"text": "test"}

    async def _interpret(self, resp) -> ValidationResult:
        if 200 <= resp.status < 300:
            return ValidationResult(valid=True, status=resp.status)
        if resp.status in (401, 403):
            return ValidationResult(valid=False, error="Invalid API key", status=resp.status)
        return ValidationResult(valid=False, error=f"Unexpected status code: {resp.status}", status=resp.status)


# =============================================================================
# Sales and messaging services
# =============================================================================
class ApolloValidator(ApiKeyValidator):
    family = "Apollo"
    endpoint = "https://api.apollo.io/v1/auth/health"

    def _headers(self, key: str) -> Dict[str, str]:
        return {"x-api-key": key}

    async def _interpret(self, resp) -> ValidationResult:
        if resp.status == 200:
            data = await resp.json()
            if isinstance(data, dict) and data.get("is_logged_in") is True:
                return ValidationResult(valid=True, status=resp.status)
            return ValidationResult(valid=False, error="Apollo API key validation failed", status=resp.status)
        return self._http_failure(resp.status, resp.reason)


class SlackValidator(ApiKeyValidator):
    family = "Slack"
    endpoint = "https://slack.com/api/auth.test"
    method = "POST"

    async def _interpret(self, resp) -> ValidationResult:
        if resp.status != 200:
            return self._http_failure(resp.status, resp.reason)
        data = await resp.json()
        if data.get("ok"):
            metadata = {key: data[key] for key in ("team", "user", "url") if key in data}
            return ValidationResult(valid=True, metadata=metadata, status=resp.status)
        return ValidationResult(valid=False, error=data.get("error", "Slack token rejected"), status=resp.status)


class MailchimpValidator(ApiKeyValidator):
    family = "Mailchimp"

    def _url(self, key: str) -> str:
        datacenter = key.rsplit("-", 1)[-1]
        return f"https://{datacenter}.api.mailchimp.com/3.0/ping"

    def _headers(self, key: str) -> Dict[str, str]:
        return {}

    def _auth(self, key: str) -> Optional[aiohttp.BasicAuth]:
        return aiohttp.BasicAuth("anystring", key)


class MailgunValidator(ApiKeyValidator):
    family = "Mailgun"
    endpoint = "https://api.mailgun.net/v3/domains"

    def _headers(self, key: str) -> Dict[str, str]:
        return {}

    def _auth(self, key: str) -> Optional[aiohttp.BasicAuth]:
        return aiohttp.BasicAuth("api", key)


class TelegramBotTokenValidator(ApiKeyValidator):
    family = "Telegram Bot Token"

    def _url(self, key: str) -> str:
        return f"https://api.telegram.org/bot{key}/getMe"

    def _headers(self, key: str) -> Dict[str, str]:
        return {}

    async def _interpret(self, resp) -> ValidationResult:
        if resp.status != 200:
            return self._http_failure(resp.status, resp.reason)
        data = await resp.json()
        if data.get("ok"):
            result: Dict[str, Any] = data.get("result") or {}
            return ValidationResult(valid=True, metadata={"username": result.get("username")}, status=resp.status)
        return ValidationResult(valid=False, error=data.get("description", "Telegram token rejected"), status=resp.status)


# =============================================================================
# Forms, automation and API marketplaces
# =============================================================================
class JotFormValidator(ApiKeyValidator):
    family = "JotForm"

    def _url(self, key: str) -> str:
        return f"https://api.jotform.com/user?apiKey={key}"

    def _headers(self, key: str) -> Dict[str, str]:
        return {"Accept": "application/json"}

    async def _interpret(self, resp) -> ValidationResult:
        if 200 <= resp.status < 300:
            return ValidationResult(valid=True, status=resp.status)
        if resp.status in (401, 403):
            return ValidationResult(valid=False, error="Invalid API key", status=resp.status)
        return ValidationResult(valid=False, error=f"API returned status {resp.status}", status=resp.status)


class RapidApiValidator(ApiKeyValidator):
    family = "RapidAPI"
    host = "covid-193.p.rapidapi.com"
    endpoint = f"https://{host}/countries"

    def _headers(self, key: str) -> Dict[str, str]:
        return {"x-rapidapi-key": key, "x-rapidapi-host": self.host}

    async def _interpret(self, resp) -> ValidationResult:
        if 200 <= resp.status < 300:
            return ValidationResult(valid=True, status=resp.status)
        if resp.status in (401, 403):
            return ValidationResult(valid=False, error="Unauthorized", status=resp.status)
        return ValidationResult(
            valid=False, error=f"Unexpected HTTP status {resp.status} from {self.endpoint}", status=resp.status
        )


class MakeValidator(HttpCredentialValidator):
    """Tries the token against every Make zone until one accepts it."""

    family = "Make"
    zones = (
        "https://eu1.make.com/api/v2/",
        "https://eu2.make.com/api/v2/",
        "https://us1.make.com/api/v2/",
        "https://us2.make.com/api/v2/",
        "https://eu1.make.celonis.com/api/v2/",
        "https://eu2.make.celonis.com/api/v2/",
    )

    async def _check(self, session: aiohttp.ClientSession, api_token: str) -> ValidationResult:
        headers = {"Authorization": f"Token {api_token}"}
        for zone in self.zones:
            async with session.get(f"{zone}users/me/current-authorization", headers=headers) as resp:
                if resp.status != 200:
                    continue
                try:
                    data = await resp.json()
                except (aiohttp.ContentTypeError, ValueError):
                    continue
                # A live token lists its scopes
                if isinstance(data, list):
                    return ValidationResult(valid=True, metadata={"zone": zone}, status=resp.status)
        return ValidationResult(valid=False, error="Make API token rejected in every zone")


class MakeMcpValidator(HttpCredentialValidator):
    """Opens the MCP event stream; only the response status is read."""

    family = "Make MCP"

    async def _check(self, session: aiohttp.ClientSession, full_url: str) -> ValidationResult:
        headers = {"Accept": "text/event-stream", "Cache-Control": "no-cache"}
        async with session.get(full_url, headers=headers) as resp:
            if resp.status == 200:
                return ValidationResult(valid=True, status=resp.status)
            return self._http_failure(resp.status, resp.reason)


# =============================================================================
# Self-hosted services (key + instance URL)
# =============================================================================
_AZURE_RESOURCE = re.compile(r"https?://([^.]+)\.openai\.azure\.com")


def normalize_base_url(url: str) -> str:
    """Add https:// to bare hosts and drop any trailing slash."""
    if not url.startswith(("http://", "https://")):
        url = f"https://{url}"
    return url.rstrip("/")


class ArtifactoryValidator(HttpCredentialValidator):
    family = "Artifactory"

    async def _check(self, session: aiohttp.ClientSession, api_key: str, url: str) -> ValidationResult:
        base_url = normalize_base_url(url)
        async with session.get(
            f"{base_url}/artifactory/api/storageinfo",
            headers={"X-JFrog-Art-Api": api_key, "Content-Type": "application/json"},
        ) as resp:
            if resp.status == 200:
                return ValidationResult(valid=True, metadata={"url": base_url}, status=resp.status)
            if resp.status == 401:
                return ValidationResult(valid=False, error="Invalid Artifactory access token", status=resp.status)
            if resp.status == 403:
                return ValidationResult(
                    valid=False, error="Token exists but lacks required permissions", status=resp.status
                )
            return self._http_failure(resp.status, resp.reason)


class AzureOpenAIValidator(HttpCredentialValidator):
    family = "Azure OpenAI"
    api_version = "2024-02-01"
    errors = {
        401: "Invalid Azure OpenAI API key",
        403: "API key exists but lacks required permissions",
        404: "Azure OpenAI service not found at this URL",
    }

    async def _check(self, session: aiohttp.ClientSession, api_key: str, url: str) -> ValidationResult:
        base_url = normalize_base_url(url)
        async with session.get(
            f"{base_url}/openai/models",
            params={"api-version": self.api_version},
            headers={"Api-Key": api_key},
        ) as resp:
            if resp.status in self.errors:
                return ValidationResult(valid=False, error=self.errors[resp.status], status=resp.status)
            if resp.status != 200:
                return self._http_failure(resp.status, resp.reason)
            data = await resp.json()

        if not isinstance(data, dict) or not (data.get("object") == "list" or data.get("data")):
            return ValidationResult(valid=False, error="Invalid response structure from Azure OpenAI API", status=200)
        resource = _AZURE_RESOURCE.match(base_url)
        models = [model.get("id") for model in data.get("data") or [] if isinstance(model, dict)]
        return ValidationResult(
            valid=True,
            metadata={"url": base_url, "resource": resource.group(1) if resource else "unknown", "models": models},
            status=200,
        )


# =============================================================================
# PayPal
# =============================================================================
class PayPalValidator(HttpCredentialValidator):
    """Requests a client-credentials token from the live and sandbox APIs."""

    family = "PayPal OAuth"
    environments = (
        ("live", "https://api-m.paypal.com/v1/oauth2/token"),
        ("sandbox", "https://api-m.sandbox.paypal.com/v1/oauth2/token"),
    )

    async def _check(self, session: aiohttp.ClientSession, client_id: str, client_secret: str) -> ValidationResult:
        result = ValidationResult(valid=False, error="PayPal credentials rejected")
        for environment, url in self.environments:
            async with session.post(
                url,
                data={"grant_type": "client_credentials"},
                auth=aiohttp.BasicAuth(client_id, client_secret),
                headers={"Accept": "application/json"},
            ) as resp:
                if resp.status == 200:
                    return ValidationResult(valid=True, metadata={"environment": environment}, status=resp.status)
                result = self._http_failure(resp.status, resp.reason)
        return result
