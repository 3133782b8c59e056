"""Base classes for live credential validation."""

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Optional

import aiohttp

logger = logging.getLogger(__name__)


@dataclass
class ValidationResult:
    """Result of checking a credential against its issuing service."""

    valid: bool
    error: str = ""
    metadata: Dict[str, Any] = field(default_factory=dict)
    status: Optional[int] = None
    # False when the service could not be reached at all
    checked: bool = True


@dataclass(frozen=True)
class RetryPolicy:
    """Bounded retry for responses that are known to be transient."""

    max_attempts: int = 1
    delay: float = 5.0
    retry_statuses: FrozenSet[int] = frozenset({403})


class CredentialValidator(ABC):
    """Checks whether a credential is live. One implementation per family."""

    family: str = ""

    @abstractmethod
    async def validate(self, *parts: str) -> ValidationResult:
        """
        Validate a credential.

        Implementations report failures through the result instead of raising.
        """


class HttpCredentialValidator(CredentialValidator):
    """
    Validator that calls an HTTP API with aiohttp.

    A session can be held for the validator's lifetime with ``async with`` or
    passed in explicitly. Otherwise every call opens its own short-lived
    session and hands it to ``_check``, so concurrent calls never share one.
    """

    def __init__(
        self,
        session: Optional[aiohttp.ClientSession] = None,
        timeout: int = 10,
        retry_policy: Optional[RetryPolicy] = None,
    ):
        self.timeout = aiohttp.ClientTimeout(total=timeout)
        self.retry_policy = retry_policy or RetryPolicy()
        self._session = session
        self._owns_session = False

    async def __aenter__(self):
        if self._session is None:
            self._session = aiohttp.ClientSession(timeout=self.timeout)
            self._owns_session = True
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if self._owns_session and self._session:
            await self._session.close()
            self._session = None
            self._owns_session = False

    async def validate(self, *parts: str) -> ValidationResult:
        try:
            if self._session is not None:
                return await self._validate_with_retry(self._session, *parts)
            async with aiohttp.ClientSession(timeout=self.timeout) as session:
                return await self._validate_with_retry(session, *parts)
        except asyncio.TimeoutError:
            return ValidationResult(valid=False, error="Validation timed out", checked=False)
        except aiohttp.ClientError as e:
            return ValidationResult(valid=False, error=str(e) or e.__class__.__name__, checked=False)
        except ValueError as e:
            # Malformed response bodies
            return ValidationResult(valid=False, error=f"Unexpected response: {e}")

    async def _validate_with_retry(self, session: aiohttp.ClientSession, *parts: str) -> ValidationResult:
        policy = self.retry_policy
        attempt = 1
        while True:
            result = await self._check(session, *parts)
            if result.status not in policy.retry_statuses or attempt >= policy.max_attempts:
                return result
            logger.debug(
                "%s validation returned HTTP %s, retrying in %.1fs (attempt %d/%d)",
                self.family, result.status, policy.delay, attempt, policy.max_attempts,
            )
            await asyncio.sleep(policy.delay)
            attempt += 1

    @abstractmethod
    async def _check(self, session: aiohttp.ClientSession, *parts: str) -> ValidationResult:
        """Perform one validation request with the given session."""

    @staticmethod
    def _http_failure(status: int, reason: Optional[str] = None) -> ValidationResult:
        message = f"HTTP {status}: {reason}" if reason else f"HTTP {status}"
        return ValidationResult(valid=False, error=message, status=status)
