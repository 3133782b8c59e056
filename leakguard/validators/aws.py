"""AWS credential validation through STS GetCallerIdentity."""

import hashlib
import hmac
import re
from datetime import datetime, timezone
from typing import Dict, Optional

import aiohttp

from leakguard.validators.base import HttpCredentialValidator, RetryPolicy, ValidationResult

STS_HOST = "sts.amazonaws.com"
STS_ENDPOINT = f"https://{STS_HOST}/"
STS_REGION = "us-east-1"
STS_SERVICE = "sts"
GET_CALLER_IDENTITY_BODY = "Action=GetCallerIdentity&Version=2011-06-15"

# STS sometimes answers 403 for keys created seconds ago
AWS_RETRY_POLICY = RetryPolicy(max_attempts=2, delay=5.0, retry_statuses=frozenset({403}))

_RE_ACCOUNT = re.compile(r"<Account>([^<]+)</Account>")
_RE_ARN = re.compile(r"<Arn>([^<]+)</Arn>")
_RE_USER_ID = re.compile(r"<UserId>([^<]+)</UserId>")


def _sign(key: bytes, message: str) -> bytes:
    return hmac.new(key, message.encode("utf-8"), hashlib.sha256).digest()


def sign_sts_request(
    access_key_id: str,
    secret_access_key: str,
    body: str = GET_CALLER_IDENTITY_BODY,
    session_token: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Dict[str, str]:
    """
    Build AWS Signature Version 4 headers for a POST to STS.

    Args:
        access_key_id: AWS access key id
        secret_access_key: AWS secret access key
        body: Form encoded request body
        session_token: Session token for temporary credentials
        now: Signing time (defaults to the current UTC time)

    Returns:
        Headers to send with the request
    """
    now = now or datetime.now(timezone.utc)
    amz_date = now.strftime("%Y%m%dT%H%M%SZ")
    date_stamp = now.strftime("%Y%m%d")

    headers = {
        "content-type": "application/x-www-form-urlencoded; charset=utf-8",
        "host": STS_HOST,
        "x-amz-date": amz_date,
    }
    if session_token:
        headers["x-amz-security-token"] = session_token

    signed_headers = ";".join(sorted(headers))
    canonical_headers = "".join(f"{name}:{headers[name]}\n" for name in sorted(headers))
    payload_hash = hashlib.sha256(body.encode("utf-8")).hexdigest()
    canonical_request = "\n".join(
        ["POST", "/", "", canonical_headers, signed_headers, payload_hash]
    )

    credential_scope = f"{date_stamp}/{STS_REGION}/{STS_SERVICE}/aws4_request"
    string_to_sign = "\n".join([
        "AWS4-HMAC-SHA256",
        amz_date,
        credential_scope,
        hashlib.sha256(canonical_request.encode("utf-8")).hexdigest(),
    ])

    signing_key = _sign(f"AWS4{secret_access_key}".encode("utf-8"), date_stamp)
    signing_key = _sign(signing_key, STS_REGION)
    signing_key = _sign(signing_key, STS_SERVICE)
    signing_key = _sign(signing_key, "aws4_request")
    signature = hmac.new(signing_key, string_to_sign.encode("utf-8"), hashlib.sha256).hexdigest()

    signed = {name: value for name, value in headers.items() if name != "host"}
    signed["Authorization"] = (
        f"AWS4-HMAC-SHA256 Credential={access_key_id}/{credential_scope}, "
        f"SignedHeaders={signed_headers}, Signature={signature}"
    )
    return signed


class AwsValidator(HttpCredentialValidator):
    """
    Validates AWS key pairs and session credentials.

    A 403 is retried once after a fixed delay; any other non-2xx answer means
    the credentials are not valid.
    """

    family = "AWS Access & Secret Keys"

    def __init__(self, session: Optional[aiohttp.ClientSession] = None, timeout: int = 10,
                 retry_policy: Optional[RetryPolicy] = None):
        super().__init__(session, timeout, retry_policy or AWS_RETRY_POLICY)

    async def _check(self, session: aiohttp.ClientSession, access_key_id: str,
                     secret_access_key: str, session_token: Optional[str] = None) -> ValidationResult:
        headers = sign_sts_request(access_key_id, secret_access_key, session_token=session_token)

        async with session.post(STS_ENDPOINT, data=GET_CALLER_IDENTITY_BODY, headers=headers) as resp:
            if 200 <= resp.status < 300:
                text = await resp.text()
                metadata = {}
                for key, pattern in (("accountId", _RE_ACCOUNT), ("arn", _RE_ARN), ("userId", _RE_USER_ID)):
                    match = pattern.search(text)
                    if match:
                        metadata[key] = match.group(1)
                return ValidationResult(valid=True, metadata=metadata, status=resp.status)
            return self._http_failure(resp.status, resp.reason)


class AwsSessionValidator(AwsValidator):
    """Validates temporary (ASIA) credentials with their session token."""

    family = "AWS Session Keys"
