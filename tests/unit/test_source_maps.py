"""Unit tests for source map resolution."""

import base64
import json
from unittest.mock import AsyncMock, MagicMock

import aiohttp
import pytest

from leakguard.core.exceptions import SourceMapError
from leakguard.core.models import SourceContent
from leakguard.core.source_maps import (
    BundlePosition,
    SourceMapResolver,
    decode_data_uri,
    get_source_map_url,
    source_map_consumer,
)

BUNDLE_URL = "http://localhost:3000/static/js/main.js"
SECRET = "Xk9mP2vQ7rL4wZ8nT5yB"
BUNDLE = f'const apiKey = "{SECRET}";\n//# sourceMappingURL=main.js.map'
ORIGINAL = "\n".join(f"line {n}" for n in range(1, 21))

# Generated column 0 maps to line 6 of src/config.js
SINGLE_SOURCE_MAP = json.dumps({
    "version": 3,
    "sources": ["src/config.js"],
    "sourcesContent": [ORIGINAL],
    "names": [],
    "mappings": "AAKA",
})

# Generated column 0 maps to src/a.js, column 16 to src/b.js
TWO_SOURCE_MAP = json.dumps({
    "version": 3,
    "sources": ["src/a.js", "src/b.js"],
    "sourcesContent": ["a", "b"],
    "names": [],
    "mappings": "AAAA,gBCAA",
})

FALLBACK = SourceContent(content='{"api_key":"x"}', content_filename="main.js")


@pytest.mark.unit
class TestGetSourceMapUrl:
    """Test get_source_map_url."""

    def test_relative(self):
        assert get_source_map_url(BUNDLE_URL, "x\n//# sourceMappingURL=main.js.map") == \
            "http://localhost:3000/static/js/main.js.map"

    def test_absolute(self):
        content = "//# sourceMappingURL=https://example.com/maps/main.js.map"
        assert get_source_map_url(BUNDLE_URL, content) == "https://example.com/maps/main.js.map"

    def test_root_relative(self):
        content = "//# sourceMappingURL=/maps/main.js.map"
        assert get_source_map_url(BUNDLE_URL, content) == "http://localhost:3000/maps/main.js.map"

    def test_data_uri(self):
        content = "//# sourceMappingURL=data:application/json;base64,eyJ2ZXJzaW9uIjozfQ=="
        assert get_source_map_url(BUNDLE_URL, content) == "data:application/json;base64,eyJ2ZXJzaW9uIjozfQ=="

    def test_legacy_marker_and_last_wins(self):
        content = "//@ sourceMappingURL=old.map\nx\n//# sourceMappingURL=new.map"
        assert get_source_map_url(BUNDLE_URL, content) == "http://localhost:3000/static/js/new.map"

    def test_missing(self):
        assert get_source_map_url(BUNDLE_URL, "const a = 1;") is None

    def test_invalid_bundle_url(self):
        assert get_source_map_url("invalid-url", "//# sourceMappingURL=main.js.map") is None

    def test_absolute_reference_from_relative_bundle(self):
        content = "//# sourceMappingURL=https://cdn.example.com/maps/main.js.map"
        assert get_source_map_url("static/js/main.js", content) == "https://cdn.example.com/maps/main.js.map"
        assert get_source_map_url("", content) == "https://cdn.example.com/maps/main.js.map"


@pytest.mark.unit
class TestSourceMapConsumer:
    """Test source_map_consumer."""

    def test_original_position(self):
        with source_map_consumer(SINGLE_SOURCE_MAP) as consumer:
            position = consumer.original_position_for(1, 17)
            assert position.source == "src/config.js"
            assert position.line == 6
            assert consumer.source_content_for("src/config.js") == ORIGINAL
            assert consumer.source_content_for("src/missing.js") is None

    def test_unmapped_position(self):
        with source_map_consumer(SINGLE_SOURCE_MAP) as consumer:
            assert consumer.original_position_for(50, 1).source is None
            assert consumer.original_position_for(-1, -1).source is None

    def test_unusable_after_scope(self):
        with source_map_consumer(SINGLE_SOURCE_MAP) as consumer:
            pass
        with pytest.raises(SourceMapError):
            consumer.original_position_for(1, 1)

    def test_invalid_map(self):
        with pytest.raises(SourceMapError):
            with source_map_consumer("not json"):
                pass

    def test_decode_data_uri(self):
        payload = base64.b64encode(b'{"version":3}').decode("ascii")
        assert decode_data_uri(f"data:application/json;base64,{payload}") == '{"version":3}'
        assert decode_data_uri("data:application/json,%7B%7D") == "{}"
        with pytest.raises(SourceMapError):
            decode_data_uri("data:nothing")


@pytest.mark.unit
class TestBuildSourceContent:
    """Test SourceMapResolver.build_source_content."""

    def test_single_position(self):
        source = SourceMapResolver().build_source_content(SINGLE_SOURCE_MAP, [BundlePosition(1, 17)])

        assert source.content == ORIGINAL
        assert source.content_filename == "src/config.js"
        assert source.content_start_line_num == 1
        assert source.content_end_line_num == 11
        assert source.exact_match_numbers == (6,)

    def test_parts_in_same_source(self):
        source = SourceMapResolver().build_source_content(
            SINGLE_SOURCE_MAP, [BundlePosition(1, 1), BundlePosition(1, 17)]
        )
        assert source.exact_match_numbers == (6, 6)

    def test_parts_in_different_sources(self):
        source = SourceMapResolver().build_source_content(
            TWO_SOURCE_MAP, [BundlePosition(1, 1), BundlePosition(1, 17)]
        )
        assert source is None

    def test_resolve(self):
        positions = SourceMapResolver().resolve(TWO_SOURCE_MAP, [BundlePosition(1, 1), BundlePosition(1, 17)])
        assert [p.source for p in positions] == ["src/a.js", "src/b.js"]


@pytest.mark.unit
class TestLocalize:
    """Test SourceMapResolver.localize."""

    @pytest.mark.asyncio
    async def test_fetches_and_resolves(self, session_factory, response_factory):
        session = session_factory(response_factory(200, text=SINGLE_SOURCE_MAP))
        resolver = SourceMapResolver(session=session)

        source = await resolver.localize(BUNDLE_URL, BUNDLE, [SECRET], FALLBACK)

        assert source.content_filename == "src/config.js"
        assert source.exact_match_numbers == (6,)
        session.get.assert_called_once_with("http://localhost:3000/static/js/main.js.map")

    @pytest.mark.asyncio
    async def test_maps_are_cached(self, session_factory, response_factory):
        session = session_factory(response_factory(200, text=SINGLE_SOURCE_MAP))
        resolver = SourceMapResolver(session=session)

        await resolver.localize(BUNDLE_URL, BUNDLE, [SECRET], FALLBACK)
        await resolver.localize(BUNDLE_URL, BUNDLE, [SECRET], FALLBACK)

        assert session.get.call_count == 1

    @pytest.mark.asyncio
    async def test_data_uri_map(self):
        payload = base64.b64encode(SINGLE_SOURCE_MAP.encode("utf-8")).decode("ascii")
        bundle = f'const apiKey = "{SECRET}";\n//# sourceMappingURL=data:application/json;base64,{payload}'

        source = await SourceMapResolver().localize(BUNDLE_URL, bundle, [SECRET], FALLBACK)

        assert source.content_filename == "src/config.js"

    @pytest.mark.asyncio
    async def test_http_error_falls_back(self, session_factory, response_factory):
        session = session_factory(response_factory(404, reason="Not Found"))
        source = await SourceMapResolver(session=session).localize(BUNDLE_URL, BUNDLE, [SECRET], FALLBACK)
        assert source is FALLBACK

    @pytest.mark.asyncio
    async def test_transport_error_falls_back(self):
        session = MagicMock()
        session.get = MagicMock(side_effect=aiohttp.ClientError("connection refused"))
        source = await SourceMapResolver(session=session).localize(BUNDLE_URL, BUNDLE, [SECRET], FALLBACK)
        assert source is FALLBACK

    @pytest.mark.asyncio
    async def test_no_comment_falls_back(self):
        session = MagicMock()
        source = await SourceMapResolver(session=session).localize(
            BUNDLE_URL, f'const apiKey = "{SECRET}";', [SECRET], FALLBACK
        )
        assert source is FALLBACK
        session.get.assert_not_called()

    @pytest.mark.asyncio
    async def test_secret_not_in_bundle_falls_back(self):
        source = await SourceMapResolver().localize(BUNDLE_URL, BUNDLE, ["missing"], FALLBACK)
        assert source is FALLBACK

    @pytest.mark.asyncio
    async def test_broken_map_falls_back(self, session_factory, response_factory):
        session = session_factory(response_factory(200, text="{broken"))
        source = await SourceMapResolver(session=session).localize(BUNDLE_URL, BUNDLE, [SECRET], FALLBACK)
        assert source is FALLBACK

    @pytest.mark.asyncio
    async def test_undecodable_map_falls_back(self, session_factory, response_factory):
        response = response_factory(200)
        response.text = AsyncMock(side_effect=UnicodeDecodeError("utf-8", b"\xff", 0, 1, "invalid start byte"))
        session = session_factory(response)

        source = await SourceMapResolver(session=session).localize(BUNDLE_URL, BUNDLE, [SECRET], FALLBACK)

        assert source is FALLBACK
