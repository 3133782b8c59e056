"""Gemini exchange API key validation with a signed private API request."""

import base64
import hashlib
import hmac
import json
import time
from typing import Dict, Optional

import aiohttp

from leakguard.validators.base import HttpCredentialValidator, ValidationResult

GEMINI_BASE_URL = "https://api.gemini.com"
GEMINI_ACCOUNT_PATH = "/v1/account"


def sign_gemini_request(api_key: str, api_secret: str, nonce: Optional[int] = None) -> Dict[str, str]:
    """
    Build the headers of a signed ``/v1/account`` request.

    Master keys act on behalf of a sub-account, so they name the primary one.

    Args:
        api_key: Gemini API key (``master-...`` or ``account-...``)
        api_secret: Matching API secret
        nonce: Request nonce (defaults to the current time in microseconds)

    Returns:
        Headers carrying the key, the base64 payload and its HMAC-SHA384
    """
    params = {
        "request": GEMINI_ACCOUNT_PATH,
        "nonce": str(nonce if nonce is not None else int(time.time() * 1_000_000)),
    }
    if api_key.startswith("master-"):
        params["account"] = "primary"

    payload = base64.b64encode(json.dumps(params).encode("utf-8")).decode("ascii")
    signature = hmac.new(api_secret.encode("utf-8"), payload.encode("ascii"), hashlib.sha384).hexdigest()
    return {
        "Content-Type": "text/plain",
        "X-GEMINI-APIKEY": api_key,
        "X-GEMINI-PAYLOAD": payload,
        "X-GEMINI-SIGNATURE": signature,
        "Cache-Control": "no-cache",
    }


class GeminiValidator(HttpCredentialValidator):
    family = "Gemini"

    async def _check(self, session: aiohttp.ClientSession, api_key: str, api_secret: str) -> ValidationResult:
        headers = sign_gemini_request(api_key, api_secret)
        async with session.post(GEMINI_BASE_URL + GEMINI_ACCOUNT_PATH, headers=headers) as resp:
            if 200 <= resp.status < 300:
                data = await resp.json()
                metadata = {"type": "MASTER" if api_key.startswith("master-") else "ACCOUNT"}
                if isinstance(data, dict):
                    metadata.update({key: data[key] for key in ("account", "name", "is_active") if key in data})
                return ValidationResult(valid=True, metadata=metadata, status=resp.status)
            if resp.status in (401, 403):
                return ValidationResult(valid=False, error="Invalid API key or secret", status=resp.status)
            return ValidationResult(
                valid=False, error=f"Unexpected HTTP response status {resp.status}", status=resp.status
            )
