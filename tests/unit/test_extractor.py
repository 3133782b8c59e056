"""Unit tests for regex extraction."""

import pytest

from leakguard.core.extractor import PatternExtractor, find_secret_position, position_for_offset
from leakguard.core.models import Pattern
from leakguard.core.patterns import PatternRegistry


@pytest.fixture
def test_registry():
    return PatternRegistry([
        Pattern(name="Digits", family_name="Test", regex=r"(\d{4})"),
        Pattern(name="First Digits", family_name="Test", regex=r"(\d{4})", is_global_match=False),
        Pattern(name="Keyed", family_name="Test", regex=r"key=(\w+)|token=(\w+)"),
        Pattern(name="Bare", family_name="Test", regex=r"tk_[a-z]{3}"),
        Pattern(name="Upper", family_name="Test", regex=r"(ABC\d)", ignore_case=True),
    ])


@pytest.mark.unit
class TestFindSecretPosition:
    """Test find_secret_position."""

    def test_single_line(self):
        assert find_secret_position('const secret = "mysecret123";', "mysecret123") == (1, 17)

    def test_second_line(self):
        content = "first\nvar k = 'secretvalue';"
        assert find_secret_position(content, "secretvalue") == (2, 10)

    def test_not_found(self):
        assert find_secret_position("const a = 1;", "missing") == (-1, -1)

    def test_empty_inputs(self):
        assert find_secret_position("", "x") == (-1, -1)
        assert find_secret_position("abc", "") == (-1, -1)

    def test_offset_out_of_range(self):
        assert position_for_offset("abc", 10) == (-1, -1)


@pytest.mark.unit
class TestPatternExtractor:
    """Test PatternExtractor."""

    def test_global_match_dedups_values(self, test_registry):
        candidates = PatternExtractor(test_registry).extract("a1234 b5678 c1234", ["Digits"])

        assert [c.value for c in candidates] == ["1234", "5678"]
        assert candidates[0].offset == 1
        assert candidates[0].pattern_name == "Digits"

    def test_non_global_stops_after_first(self, test_registry):
        candidates = PatternExtractor(test_registry).extract("a1234 b5678", ["First Digits"])
        assert [c.value for c in candidates] == ["1234"]

    def test_first_non_empty_group(self, test_registry):
        candidates = PatternExtractor(test_registry).extract("token=abc key=def", ["Keyed"])
        assert [c.value for c in candidates] == ["abc", "def"]
        assert candidates[0].offset == 6

    def test_whole_match_without_groups(self, test_registry):
        candidates = PatternExtractor(test_registry).extract("x tk_abc y", ["Bare"])
        assert [(c.value, c.offset) for c in candidates] == [("tk_abc", 2)]

    def test_ignore_case(self, test_registry):
        candidates = PatternExtractor(test_registry).extract("abc1", ["Upper"])
        assert [c.value for c in candidates] == ["abc1"]

    def test_first_pattern_wins_for_shared_values(self, test_registry):
        candidates = PatternExtractor(test_registry).extract("a1234", ["First Digits", "Digits"])
        assert len(candidates) == 1
        assert candidates[0].pattern_name == "First Digits"

    def test_no_match(self, test_registry):
        assert PatternExtractor(test_registry).extract("nothing here", ["Digits"]) == []

    def test_first_match_and_contains(self, test_registry):
        extractor = PatternExtractor(test_registry)
        assert extractor.first_match("key=abc 1234", ["Bare", "Digits", "Keyed"]).value == "1234"
        assert extractor.first_match("nothing", ["Bare"]) is None
        assert extractor.contains("x tk_abc", "Bare") is True
        assert extractor.contains("x", "Bare") is False
