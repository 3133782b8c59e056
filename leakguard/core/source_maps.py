"""
Source map lookup for bundled JavaScript.

Finds the ``sourceMappingURL`` of a bundle, fetches the map and reverses
bundle positions to positions in the original sources. Every step is best
effort: callers always get a usable ``SourceContent`` back, falling back to
the unresolved bundle window when anything goes wrong.
"""

import asyncio
import base64
import binascii
import logging
import re
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Sequence
from urllib.parse import unquote, urljoin, urlparse

import aiohttp
import sourcemap

from leakguard.core.exceptions import SourceMapError
from leakguard.core.extractor import find_secret_position
from leakguard.core.models import SourceContent

logger = logging.getLogger(__name__)

SOURCE_MAPPING_URL = re.compile(r"//[#@]\s*sourceMappingURL=(\S+)")

# Lines of context shown on each side of a match
CONTEXT_LINES = 5


@dataclass(frozen=True)
class BundlePosition:
    """1-based line and column in the bundle."""

    line: int
    column: int

    @property
    def is_known(self) -> bool:
        return self.line > 0 and self.column > 0


@dataclass(frozen=True)
class OriginalPosition:
    """Position in an original source; ``source`` is None when unmapped."""

    source: Optional[str] = None
    line: Optional[int] = None
    column: Optional[int] = None


def get_source_map_url(bundle_url: str, bundle_content: str) -> Optional[str]:
    """
    Find the source map referenced by a bundle.

    The last ``//# sourceMappingURL=`` (or legacy ``//@``) comment wins.
    Absolute http(s) URLs and data URIs are returned as-is, root-relative paths are
    resolved against the bundle origin and anything else against the bundle
    directory.

    Returns:
        The map URL, or None if there is no comment or a relative reference
        cannot be resolved against the bundle URL
    """
    references = SOURCE_MAPPING_URL.findall(bundle_content or "")
    if not references:
        return None
    reference = references[-1]

    if reference.startswith("data:"):
        return reference
    if urlparse(reference).scheme in ("http", "https"):
        return reference

    parsed = urlparse(bundle_url or "")
    if not parsed.scheme or not parsed.netloc:
        logger.debug("Cannot resolve source map for non-absolute bundle URL %r", bundle_url)
        return None

    try:
        return urljoin(bundle_url, reference)
    except ValueError:
        return None


def decode_data_uri(uri: str) -> str:
    """Decode the payload of a ``data:`` URI as UTF-8 text."""
    header, separator, payload = uri[len("data:"):].partition(",")
    if not separator:
        raise SourceMapError("Malformed data URI")
    if header.endswith(";base64"):
        return base64.b64decode(payload).decode("utf-8")
    return unquote(payload)


class SourceMapConsumer:
    """Read-only view of a parsed source map, valid only inside its scope."""

    def __init__(self, index):
        self._index = index

    def _require_index(self):
        if self._index is None:
            raise SourceMapError("Source map consumer used outside of its scope")
        return self._index

    def original_position_for(self, line: int, column: int) -> OriginalPosition:
        """Map a 1-based bundle position to its original position."""
        index = self._require_index()
        if line < 1 or column < 1:
            return OriginalPosition()
        try:
            token = index.lookup(line - 1, column - 1)
        except (IndexError, KeyError):
            return OriginalPosition()
        if not token.src:
            return OriginalPosition()
        return OriginalPosition(source=token.src, line=token.src_line + 1, column=token.src_col)

    def source_content_for(self, source: str) -> Optional[str]:
        """Return the embedded text of an original source, if the map carries it."""
        index = self._require_index()
        raw = index.raw if isinstance(index.raw, dict) else {}
        contents = raw.get("sourcesContent") or []
        for sources in (list(index.sources or []), raw.get("sources") or []):
            if source in sources:
                position = sources.index(source)
                if position < len(contents) and contents[position] is not None:
                    return contents[position]
        return None

    def close(self) -> None:
        self._index = None


@contextmanager
def source_map_consumer(map_text: str) -> Iterator[SourceMapConsumer]:
    """
    Parse a source map for the duration of a ``with`` block.

    Raises:
        SourceMapError: If the map cannot be parsed
    """
    try:
        index = sourcemap.loads(map_text)
    except (ValueError, KeyError, TypeError, IndexError) as e:
        raise SourceMapError(f"Failed to parse source map: {e}") from e

    consumer = SourceMapConsumer(index)
    try:
        yield consumer
    finally:
        consumer.close()


class SourceMapResolver:
    """
    Locates, fetches and applies source maps for one detection run.

    Fetched maps are cached per instance, so a resolver should not outlive the
    scan it was created for.
    """

    def __init__(self, session: Optional[aiohttp.ClientSession] = None, timeout: int = 10):
        self._session = session
        self.timeout = aiohttp.ClientTimeout(total=timeout)
        self._cache: Dict[str, str] = {}

    # =========================================================================
    # Locate
    # =========================================================================
    def locate(self, bundle_url: str, bundle_content: str) -> Optional[str]:
        return get_source_map_url(bundle_url, bundle_content)

    # =========================================================================
    # Fetch
    # =========================================================================
    async def fetch(self, url: str) -> str:
        """
        Fetch source map text, decoding data URIs locally.

        Raises:
            SourceMapError: On a non-200 response or an undecodable data URI
            aiohttp.ClientError: On transport failures
        """
        if url in self._cache:
            return self._cache[url]

        if url.startswith("data:"):
            try:
                text = decode_data_uri(url)
            except (binascii.Error, UnicodeDecodeError) as e:
                raise SourceMapError(f"Failed to decode source map data URI: {e}") from e
        elif self._session is not None:
            text = await self._download(self._session, url)
        else:
            async with aiohttp.ClientSession(timeout=self.timeout) as session:
                text = await self._download(session, url)

        self._cache[url] = text
        return text

    @staticmethod
    async def _download(session: aiohttp.ClientSession, url: str) -> str:
        async with session.get(url) as resp:
            if resp.status != 200:
                raise SourceMapError(
                    f"Failed to fetch source map: HTTP {resp.status}", {"url": url}
                )
            try:
                return await resp.text()
            except UnicodeDecodeError as e:
                raise SourceMapError(f"Source map is not valid text: {e.reason}", {"url": url}) from e

    # =========================================================================
    # Resolve
    # =========================================================================
    def resolve(self, map_text: str, positions: Sequence[BundlePosition]) -> List[OriginalPosition]:
        """Reverse each bundle position through the source map."""
        with source_map_consumer(map_text) as consumer:
            return [consumer.original_position_for(p.line, p.column) for p in positions]

    def build_source_content(
        self, map_text: str, positions: Sequence[BundlePosition]
    ) -> Optional[SourceContent]:
        """
        Build the original source window for one or more secret parts.

        All parts must reverse to the same original source that the map
        carries content for; otherwise None is returned.
        """
        if not positions:
            return None

        with source_map_consumer(map_text) as consumer:
            resolved = [consumer.original_position_for(p.line, p.column) for p in positions]
            if any(position.source is None for position in resolved):
                logger.debug("Secret position not covered by the source map")
                return None

            sources = {position.source for position in resolved}
            if len(sources) != 1:
                logger.debug("Secret parts map to different sources: %s", sorted(sources))
                return None

            source = resolved[0].source
            content = consumer.source_content_for(source)
            if content is None:
                logger.debug("Source map has no content for %s", source)
                return None

        lines = [position.line for position in resolved]
        return SourceContent(
            content=content,
            content_filename=source,
            content_start_line_num=min(lines) - CONTEXT_LINES,
            content_end_line_num=max(lines) + CONTEXT_LINES,
            exact_match_numbers=tuple(lines),
        )

    # =========================================================================
    # Localize
    # =========================================================================
    async def localize(
        self,
        bundle_url: str,
        bundle_content: str,
        secrets: Sequence[str],
        fallback: SourceContent,
    ) -> SourceContent:
        """
        Localize secret parts to their original source, or return the fallback.

        Args:
            bundle_url: URL the bundle was loaded from
            bundle_content: Bundle text
            secrets: Literal secret parts, in order
            fallback: Unresolved content used when localization is not possible

        Returns:
            Resolved SourceContent, or ``fallback``
        """
        map_url = self.locate(bundle_url, bundle_content)
        if map_url is None:
            return fallback

        positions = [BundlePosition(*find_secret_position(bundle_content, s)) for s in secrets]
        if not positions or not all(p.is_known for p in positions):
            return fallback

        try:
            map_text = await self.fetch(map_url)
            resolved = self.build_source_content(map_text, positions)
        except (SourceMapError, aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.warning("Source map processing failed for %s: %s", bundle_url, e)
            return fallback

        return resolved or fallback
