"""LeakGuard - Leaked credential detection for web content."""

__version__ = "0.1.0"
__author__ = "LeakGuard Team"

from leakguard.core.models import (
    Finding,
    Occurrence,
    SourceContent,
    Validity,
)

__all__ = [
    "Finding",
    "Occurrence",
    "SourceContent",
    "Validity",
    "__version__",
]
