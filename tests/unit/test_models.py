"""Unit tests for core models."""

from datetime import datetime, timezone

import pytest

from leakguard.core.models import (
    Finding,
    Occurrence,
    Pattern,
    SourceContent,
    Validity,
    deserialize_findings,
    serialize_findings,
)

URL = "https://app.test/static/js/main.js"


def occurrence(url=URL, secret_value=None, file_path="main.js"):
    return Occurrence(
        secret_type="Apollo",
        fingerprint="fp",
        secret_value=secret_value or {"match": {"api_key": "KEY1"}},
        file_path=file_path,
        url=url,
        resource_type="API Key",
        source_content=SourceContent(content="{}", content_filename=file_path),
    )


@pytest.mark.unit
class TestValidity:
    """Test Validity enum."""

    def test_values(self):
        assert Validity.VALID.value == "valid"
        assert Validity.INVALID.value == "invalid"
        assert Validity.FAILED_TO_CHECK.value == "failed_to_check"
        assert Validity.NO_CHECKER.value == "no_checker"
        assert Validity.UNKNOWN.value == "unknown"

    def test_parse_unknown(self):
        assert Validity.parse("valid") == Validity.VALID
        assert Validity.parse("bogus") == Validity.UNKNOWN
        assert Validity.parse(None) == Validity.UNKNOWN


@pytest.mark.unit
class TestPattern:
    """Test Pattern."""

    def test_compiled_is_cached(self):
        pattern = Pattern(name="T", family_name="T", regex=r"^a$")
        assert pattern.compiled is pattern.compiled

    def test_multiline(self):
        pattern = Pattern(name="T", family_name="T", regex=r"^b$")
        assert pattern.compiled.search("a\nb") is not None


@pytest.mark.unit
class TestSourceContent:
    """Test SourceContent."""

    def test_defaults_unresolved(self):
        source = SourceContent(content="x", content_filename="main.js")
        assert source.exact_match_numbers == (-1,)
        assert source.is_resolved is False

    def test_wire_shape(self):
        source = SourceContent("x", "src/App.js", 1, 11, (6,))
        assert source.to_dict() == {
            "content": "x",
            "contentFilename": "src/App.js",
            "contentStartLineNum": 1,
            "contentEndLineNum": 11,
            "exactMatchNumbers": [6],
        }
        assert SourceContent.from_dict(source.to_dict()) == source


@pytest.mark.unit
class TestOccurrence:
    """Test Occurrence identity and serialization."""

    def test_identity_is_url_and_secret_value(self):
        first = occurrence()
        second = occurrence(file_path="other.js")
        assert first == second
        assert len({first, second}) == 1

    def test_different_url_differs(self):
        assert occurrence() != occurrence(url="https://app.test/other.js")

    def test_relocated(self):
        moved = occurrence().relocated("https://app.test/new.js", "new.js")
        assert moved.url == "https://app.test/new.js"
        assert moved.file_path == "new.js"
        assert moved.secret_value == occurrence().secret_value

    def test_wire_shape(self):
        data = occurrence().to_dict()
        assert data["secretType"] == "Apollo"
        assert data["type"] == "API Key"
        assert data["filePath"] == "main.js"
        assert "metadata" not in data

    def test_reads_legacy_resource_type_key(self):
        data = occurrence().to_dict()
        data["resourceType"] = data.pop("type")
        assert Occurrence.from_dict(data).resource_type == "API Key"


@pytest.mark.unit
class TestFinding:
    """Test Finding."""

    def test_num_occurrences_follows_set(self):
        finding = Finding(fingerprint="fp", secret_type="Apollo", secret_value={})
        finding.occurrences.add(occurrence())
        finding.occurrences.add(occurrence(file_path="dup.js"))
        finding.occurrences.add(occurrence(url="https://app.test/b.js"))
        assert finding.num_occurrences == 2

    def test_round_trip(self):
        now = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
        finding = Finding(
            fingerprint="fp",
            secret_type="Apollo",
            secret_value={"match": {"api_key": "KEY1"}},
            occurrences={occurrence(), occurrence(url="https://app.test/b.js")},
            validated_at=now,
            discovered_at=now,
        )
        data = finding.to_dict()

        assert isinstance(data["occurrences"], list)
        assert data["numOccurrences"] == 2
        assert data["validatedAt"] == "2024-05-01T12:00:00+00:00"

        restored = Finding.from_dict(data)
        assert restored.occurrences == finding.occurrences
        assert restored.validated_at == now
        assert restored.validity == Validity.VALID

    def test_browser_timestamps(self):
        restored = Finding.from_dict({"fingerprint": "fp", "discoveredAt": "2024-05-01T12:00:00.000Z"})
        assert restored.discovered_at == datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)

    def test_bad_timestamp(self):
        assert Finding.from_dict({"fingerprint": "fp", "validatedAt": "yesterday"}).validated_at is None

    def test_serialize_helpers(self):
        findings = [Finding(fingerprint="fp", secret_type="Apollo", secret_value={})]
        assert deserialize_findings(serialize_findings(findings))[0].fingerprint == "fp"
