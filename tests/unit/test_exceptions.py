"""Unit tests for custom exceptions."""

import pytest

from leakguard.core.exceptions import (
    ConfigurationError,
    FingerprintError,
    LeakGuardError,
    PatternError,
    RepositoryError,
    ScanError,
    SourceMapError,
)


@pytest.mark.unit
class TestExceptions:
    """Test custom exception classes."""

    def test_base_error(self):
        error = LeakGuardError("Test error", {"key": "value"})
        assert str(error) == "Test error"
        assert error.message == "Test error"
        assert error.details == {"key": "value"}

    def test_details_default(self):
        assert LeakGuardError("Test").details == {}

    @pytest.mark.parametrize("cls", [
        ConfigurationError, PatternError, ScanError,
        SourceMapError, FingerprintError, RepositoryError,
    ])
    def test_hierarchy(self, cls):
        error = cls("Failed")
        assert isinstance(error, LeakGuardError)
        assert error.message == "Failed"

    def test_pattern_error_is_configuration_error(self):
        with pytest.raises(ConfigurationError):
            raise PatternError("Unknown pattern: X")
