"""
Test Suite for SERP Sources

Tests:
- Simulated roster determinism and domain lookup
- Live results parsing and HTTP error handling (httpx.MockTransport)
- Fallback rankings
"""

import random
from unittest.mock import patch

import httpx
import pytest

from solar_rank.scoring import estimate_traffic
from solar_rank.serp import (
    LiveSerpSource,
    SIMULATED_ROSTER,
    SerpSourceError,
    SimulatedSerpSource,
    fallback_ranking,
    get_serp_source,
    parse_organic_results,
)
from solar_rank.utils.config import Settings


SAMPLE_PAGE = """
<html><body>
<div class="g"><a href="/url?q=https://www.sunrun.com/solar&amp;sa=U&amp;ved=abc"><h3>Sunrun <b>Solar</b></h3></a></div>
<div><a href="https://www.google.com/maps?q=solar">Maps</a></div>
<div class="g"><a href="/url?q=https://www.youtube.com/watch%3Fv%3Dabc&amp;sa=U"><h3>Video</h3></a></div>
<div class="g"><a href="/url?q=https://sunrun.com/other-page&amp;sa=U"><h3>Sunrun again</h3></a></div>
<div class="g"><a href="https://www.texassolarpros.com/"><h3>Texas Solar Pros &amp; Co</h3></a></div>
<div><a href="/search?q=more+results">More results</a></div>
<div class="g"><a href="/url?q=http://webcache.googleusercontent.com/search%3Fq%3Dcache&amp;sa=U"><h3>Cached</h3></a></div>
</body></html>
"""


def _mock_client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class TestSimulatedSource:
    """Test the deterministic roster."""

    @pytest.mark.asyncio
    async def test_same_roster_every_call(self, simulated_serp):
        first = await simulated_serp.search("solar installation", "Austin, TX")
        second = await simulated_serp.search("tesla powerwall", "Phoenix, AZ")

        assert [r.to_dict() for r in first] == [r.to_dict() for r in second]
        assert len(first) == len(SIMULATED_ROSTER)

    @pytest.mark.asyncio
    async def test_positions_ascending_and_bounded(self, simulated_serp):
        results = await simulated_serp.search("solar panels")
        positions = [r.position for r in results]

        assert positions == sorted(positions)
        assert positions[0] == 1
        assert all(1 <= p <= 100 for p in positions)

    @pytest.mark.asyncio
    async def test_find_domain_ranking(self, simulated_serp):
        ranking = await simulated_serp.find_domain_ranking("solar installation", "https://www.SunRun.com/", "Austin, TX")

        assert ranking.position == 10
        assert ranking.url == "https://www.sunrun.com/"
        assert ranking.estimated_traffic == estimate_traffic(10, "solar installation", "Austin, TX")
        assert ranking.source == "serp"

    @pytest.mark.asyncio
    async def test_hostname_containment(self, simulated_serp):
        """ecoflow.com matches the us.ecoflow.com result."""
        ranking = await simulated_serp.find_domain_ranking("solar panels", "ecoflow.com")
        assert ranking.position == 35

    @pytest.mark.asyncio
    async def test_absent_domain_is_null(self, simulated_serp):
        ranking = await simulated_serp.find_domain_ranking("solar installation", "affordablesolar-rr.com", "Round Rock, TX")

        assert ranking.position is None
        assert ranking.estimated_traffic == 0
        assert ranking.found is False

    @pytest.mark.asyncio
    async def test_empty_domain_is_null(self, simulated_serp):
        ranking = await simulated_serp.find_domain_ranking("solar installation", "")
        assert ranking.position is None

    def test_roster_contains_platforms_to_filter(self):
        urls = " ".join(url for _, url, _, _ in SIMULATED_ROSTER)
        for platform in ("youtube.com", "facebook.com", "yelp.com", "energysage.com"):
            assert platform in urls


class TestParseOrganicResults:
    """Test the BeautifulSoup results-page parser."""

    def test_extracts_organic_results_in_order(self):
        results = parse_organic_results(SAMPLE_PAGE)

        assert [r.hostname for r in results] == ["sunrun.com", "texassolarpros.com"]
        assert [r.position for r in results] == [1, 2]
        assert results[0].url == "https://www.sunrun.com/solar"

    def test_titles_are_unescaped_and_stripped(self):
        results = parse_organic_results(SAMPLE_PAGE)

        assert results[0].title == "Sunrun Solar"
        assert results[1].title == "Texas Solar Pros & Co"

    def test_caps_at_max_results(self):
        page = "".join(
            f'<a href="/url?q=https://site{i}.example.com/&amp;sa=U"><h3>Site {i}</h3></a>'
            for i in range(150)
        )
        results = parse_organic_results(page)

        assert len(results) == 100
        assert results[-1].position == 100

    def test_empty_page(self):
        assert parse_organic_results("") == []


class TestLiveSource:
    """Test HTTP behaviour with a mocked transport."""

    @pytest.mark.asyncio
    async def test_search_sends_query_with_location(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["q"] = request.url.params["q"]
            seen["num"] = request.url.params["num"]
            return httpx.Response(200, text=SAMPLE_PAGE)

        async with LiveSerpSource(client=_mock_client(handler)) as serp:
            results = await serp.search("solar installation", "Austin, TX")

        assert seen == {"q": "solar installation Austin, TX", "num": "100"}
        assert len(results) == 2

    @pytest.mark.asyncio
    async def test_location_not_repeated(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["q"] = request.url.params["q"]
            return httpx.Response(200, text="")

        serp = LiveSerpSource(client=_mock_client(handler))
        await serp.search("solar panels austin, tx", "Austin, TX")

        assert seen["q"] == "solar panels austin, tx"

    @pytest.mark.asyncio
    async def test_find_domain_ranking_on_live_page(self):
        serp = LiveSerpSource(client=_mock_client(lambda request: httpx.Response(200, text=SAMPLE_PAGE)))
        ranking = await serp.find_domain_ranking("solar installation", "texassolarpros.com", "Austin, TX")

        assert ranking.position == 2
        assert ranking.title == "Texas Solar Pros & Co"

    @pytest.mark.asyncio
    async def test_http_error_raises_serp_error(self):
        serp = LiveSerpSource(client=_mock_client(lambda request: httpx.Response(429, text="slow down")))

        with pytest.raises(SerpSourceError) as exc_info:
            await serp.search("solar installation", "Austin, TX")

        assert exc_info.value.status_code == 429

    @pytest.mark.asyncio
    async def test_network_error_raises_serp_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        serp = LiveSerpSource(client=_mock_client(handler))

        with pytest.raises(SerpSourceError):
            await serp.find_domain_ranking("solar installation", "sunrun.com")

    @pytest.mark.asyncio
    async def test_parse_error_raises_serp_error(self):
        serp = LiveSerpSource(client=_mock_client(lambda request: httpx.Response(200, text=SAMPLE_PAGE)))

        with patch("solar_rank.serp.live.parse_organic_results", side_effect=ValueError("bad markup")):
            with pytest.raises(SerpSourceError) as exc_info:
                await serp.search("solar installation", "Austin, TX")

        assert exc_info.value.query == "solar installation Austin, TX"
        assert exc_info.value.status_code is None


class TestFallbackAndSelection:
    """Test fallback rankings and source selection."""

    def test_fallback_in_range(self):
        rng = random.Random(7)
        for _ in range(200):
            ranking = fallback_ranking("solar installation", "Austin, TX", rng)
            assert 1 <= ranking.position <= 50
            assert ranking.source == "fallback"
            assert ranking.estimated_traffic == estimate_traffic(ranking.position, "solar installation", "Austin, TX")

    def test_fallback_reproducible_with_seed(self):
        a = fallback_ranking("solar panels", None, random.Random(3))
        b = fallback_ranking("solar panels", None, random.Random(3))
        assert a.position == b.position

    def test_simulated_by_default(self):
        assert isinstance(get_serp_source(Settings(LIVE_SCRAPER_ENABLED=False)), SimulatedSerpSource)

    @pytest.mark.asyncio
    async def test_live_when_enabled(self):
        serp = get_serp_source(Settings(LIVE_SCRAPER_ENABLED=True, SERP_TIMEOUT=5))
        try:
            assert isinstance(serp, LiveSerpSource)
            assert serp.mode == "live"
        finally:
            await serp.close()
