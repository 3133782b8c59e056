"""
Scanning of content for every credential family.

``find_secrets`` runs all detectors against one piece of content and wraps
their occurrences into findings; ``merge_findings`` folds new findings into
stored ones by fingerprint; ``Scanner`` ties both to a repository.
"""

import asyncio
import copy
import logging
from datetime import datetime, timezone
from typing import Dict, List, Optional, Sequence
from urllib.parse import urlparse

import aiohttp

from leakguard.core.exceptions import ScanError
from leakguard.core.models import Finding, Occurrence, Validity
from leakguard.core.repository import FindingsRepository

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _origin(url: str) -> str:
    parsed = urlparse(url or "")
    return f"{parsed.scheme}://{parsed.netloc}" if parsed.netloc else url


def finding_from_occurrence(occurrence: Occurrence) -> Finding:
    """New, valid finding holding a single occurrence."""
    now = _utcnow()
    return Finding(
        fingerprint=occurrence.fingerprint,
        secret_type=occurrence.secret_type,
        secret_value=occurrence.secret_value,
        validity=Validity.VALID,
        occurrences={occurrence},
        validated_at=now,
        discovered_at=now,
        is_new=True,
    )


async def find_secrets(content: str, url: str, detectors: Sequence) -> List[Finding]:
    """
    Run every detector concurrently against content.

    Args:
        content: Text to scan
        url: Where the content came from
        detectors: ``SecretDetector`` instances

    Returns:
        One new Finding per occurrence, in detector order
    """
    if not content:
        return []
    results = await asyncio.gather(*(detector.detect(content, url) for detector in detectors))
    return [finding_from_occurrence(occurrence) for occurrences in results for occurrence in occurrences]


def _merge_occurrence(finding: Finding, occurrence: Occurrence) -> None:
    if occurrence in finding.occurrences:
        return
    same_origin = next(
        (o for o in finding.occurrences if _origin(o.url) == _origin(occurrence.url)),
        None,
    )
    if same_origin is not None:
        # Same site, new bundle name (usually a new build hash)
        finding.occurrences.discard(same_origin)
        finding.occurrences.add(same_origin.relocated(occurrence.url, occurrence.file_path))
    else:
        finding.occurrences.add(occurrence)


def merge_findings(existing: List[Finding], new: List[Finding]) -> List[Finding]:
    """
    Merge new findings into existing ones by fingerprint.

    Inputs are not modified; the result holds deep copies.
    """
    merged = copy.deepcopy(existing)
    by_fingerprint: Dict[str, Finding] = {finding.fingerprint: finding for finding in merged}

    for finding in new:
        target = by_fingerprint.get(finding.fingerprint)
        if target is None:
            target = copy.deepcopy(finding)
            merged.append(target)
            by_fingerprint[target.fingerprint] = target
            continue
        for occurrence in finding.occurrences:
            _merge_occurrence(target, occurrence)
        # Seen live again just now
        target.validity = Validity.VALID
        target.validated_at = finding.validated_at or target.validated_at

    return merged


class Scanner:
    """Scans content and records the results in a findings repository."""

    def __init__(
        self,
        repository: FindingsRepository,
        detectors: Optional[Sequence] = None,
        session: Optional[aiohttp.ClientSession] = None,
        timeout: int = 10,
        **detector_options,
    ):
        self.repository = repository
        self.session = session
        self.timeout = timeout
        if detectors is None:
            # Imported here: detectors depend on this package's core modules
            from leakguard.detectors import DetectorFactory

            detectors = DetectorFactory.create_detectors(
                repository, session=session, timeout=timeout, **detector_options
            )
        self.detectors = list(detectors)

    async def scan(self, content: str, url: str) -> List[Finding]:
        """
        Scan content and merge the results into the repository.

        Returns:
            The findings produced by this scan
        """
        findings = await find_secrets(content, url, self.detectors)
        if findings:
            await self.repository.update(lambda current: merge_findings(current, findings))
            logger.info("Recorded %d finding(s) from %s", len(findings), url)
        return findings

    async def fetch(self, url: str) -> str:
        """
        Download content to scan.

        Raises:
            ScanError: If the content cannot be downloaded
        """
        timeout = aiohttp.ClientTimeout(total=self.timeout)
        try:
            if self.session is not None:
                return await self._download(self.session, url)
            async with aiohttp.ClientSession(timeout=timeout) as session:
                return await self._download(session, url)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise ScanError(f"Failed to fetch {url}: {e}", {"url": url}) from e

    @staticmethod
    async def _download(session: aiohttp.ClientSession, url: str) -> str:
        async with session.get(url) as resp:
            if resp.status != 200:
                raise ScanError(f"Failed to fetch {url}: HTTP {resp.status}", {"url": url, "status": resp.status})
            try:
                return await resp.text()
            except UnicodeDecodeError as e:
                raise ScanError(f"Failed to decode {url}: {e.reason}", {"url": url}) from e

    async def scan_url(self, url: str) -> List[Finding]:
        """Download a script and scan it."""
        content = await self.fetch(url)
        return await self.scan(content, url)
