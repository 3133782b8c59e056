"""Storage of confirmed findings."""

import asyncio
import json
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Callable, List, Optional, Union

from leakguard.core.exceptions import RepositoryError
from leakguard.core.models import Finding, deserialize_findings, serialize_findings

logger = logging.getLogger(__name__)

FindingsMutator = Callable[[List[Finding]], List[Finding]]


class FindingsRepository(ABC):
    """
    Read/write store of findings.

    ``update`` is the only way to modify stored findings safely: it runs the
    read-modify-write under a single lock, so concurrent scans never
    overwrite each other.
    """

    def __init__(self):
        self._lock = asyncio.Lock()

    @abstractmethod
    async def _load(self) -> List[Finding]:
        """Read every stored finding."""

    @abstractmethod
    async def _save(self, findings: List[Finding]) -> None:
        """Replace the stored findings."""

    async def get_existing(self) -> List[Finding]:
        """Snapshot of the stored findings."""
        return await self._load()

    async def store(self, findings: List[Finding]) -> None:
        """Replace the stored findings, serialized with other writers."""
        async with self._lock:
            await self._save(list(findings))

    async def update(self, mutator: FindingsMutator) -> List[Finding]:
        """
        Apply a read-merge-write step atomically with respect to other writers.

        Args:
            mutator: Receives the current findings and returns the new list

        Returns:
            The findings as stored
        """
        async with self._lock:
            current = await self._load()
            updated = mutator(current)
            await self._save(updated)
            return updated


class InMemoryFindingsRepository(FindingsRepository):
    """Keeps findings in process, stored in their serialized form."""

    def __init__(self, findings: Optional[List[Finding]] = None):
        super().__init__()
        self._data = serialize_findings(findings or [])

    async def _load(self) -> List[Finding]:
        return deserialize_findings(self._data)

    async def _save(self, findings: List[Finding]) -> None:
        self._data = serialize_findings(findings)


class JsonFileFindingsRepository(FindingsRepository):
    """Keeps findings in a JSON file, written atomically."""

    def __init__(self, path: Union[str, Path]):
        super().__init__()
        self.path = Path(path).expanduser()

    async def _load(self) -> List[Finding]:
        if not self.path.exists():
            return []
        try:
            with open(self.path, "r") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise RepositoryError(f"Failed to read findings: {e}", {"path": str(self.path)}) from e

        if isinstance(data, dict):
            data = data.get("findings", [])
        if not isinstance(data, list):
            raise RepositoryError("Findings file must hold a list", {"path": str(self.path)})
        return deserialize_findings([item for item in data if isinstance(item, dict)])

    async def _save(self, findings: List[Finding]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, suffix=".tmp")
        try:
            with os.fdopen(fd, "w") as f:
                json.dump({"findings": serialize_findings(findings)}, f, indent=2)
            os.replace(tmp_path, self.path)
        except OSError as e:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise RepositoryError(f"Failed to write findings: {e}", {"path": str(self.path)}) from e
        logger.debug("Stored %d findings in %s", len(findings), self.path)
