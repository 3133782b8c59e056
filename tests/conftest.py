"""Test fixtures and utilities."""

from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest

from leakguard.core.fingerprint import compute_fingerprint
from leakguard.core.models import Finding, Occurrence, SourceContent, Validity
from leakguard.core.patterns import load_patterns
from leakguard.core.repository import InMemoryFindingsRepository
from leakguard.validators import ValidationResult

BUNDLE_URL = "http://localhost:3000/static/js/main.js"


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast tests without network access")


def mock_response(status=200, json_data=None, text="", reason="OK"):
    """aiohttp response stand-in."""
    response = AsyncMock()
    response.status = status
    response.reason = reason
    response.json = AsyncMock(return_value=json_data)
    response.text = AsyncMock(return_value=text)
    return response


def mock_session(*responses, method="get"):
    """Session whose ``method`` yields the given responses in order."""
    session = MagicMock()
    contexts = [AsyncMock(__aenter__=AsyncMock(return_value=r)) for r in responses]
    setattr(session, method, MagicMock(side_effect=contexts))
    return session


def valid_validator(metadata=None):
    validator = MagicMock()
    validator.validate = AsyncMock(return_value=ValidationResult(valid=True, metadata=metadata or {}))
    return validator


def invalid_validator():
    validator = MagicMock()
    validator.validate = AsyncMock(return_value=ValidationResult(valid=False, error="HTTP 401"))
    return validator


def make_finding(secret_value, secret_type="Apollo", url=BUNDLE_URL, validity=Validity.VALID):
    fingerprint = compute_fingerprint(secret_value)
    occurrence = Occurrence(
        secret_type=secret_type,
        fingerprint=fingerprint,
        secret_value=secret_value,
        file_path=url.split("/")[-1],
        url=url,
        resource_type="API Key",
        source_content=SourceContent(content="{}", content_filename=url.split("/")[-1]),
    )
    now = datetime(2024, 1, 1, tzinfo=timezone.utc)
    return Finding(
        fingerprint=fingerprint,
        secret_type=secret_type,
        secret_value=secret_value,
        validity=validity,
        occurrences={occurrence},
        validated_at=now,
        discovered_at=now,
        is_new=False,
    )


@pytest.fixture
def registry():
    """The bundled pattern registry."""
    return load_patterns()


@pytest.fixture
def repository():
    """Empty in-memory findings repository."""
    return InMemoryFindingsRepository()


@pytest.fixture
def bundle_url():
    return BUNDLE_URL


@pytest.fixture
def response_factory():
    """Build aiohttp response stand-ins: ``response_factory(status, json_data, text)``."""
    return mock_response


@pytest.fixture
def session_factory():
    """Build mocked sessions: ``session_factory(*responses, method="post")``."""
    return mock_session


@pytest.fixture
def finding_factory():
    """Build stored findings: ``finding_factory(secret_value, secret_type)``."""
    return make_finding


@pytest.fixture
def live_validator():
    """Validator that accepts every credential."""
    return valid_validator()


@pytest.fixture
def dead_validator():
    """Validator that rejects every credential."""
    return invalid_validator()
