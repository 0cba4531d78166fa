"""Tests for the Getty layer: normalisation, token exchange, gateway, aggregator.

All HTTP goes through ``httpx.MockTransport``; nothing hits the real API.
"""

from __future__ import annotations

from unittest.mock import AsyncMock

import httpx
import pytest

from conftest import make_record, mock_http
from shotlist.constants import FETCH_PAGE_SIZE, RESULTS_PER_KIND
from shotlist.exceptions import AuthError, SearchError
from shotlist.getty.aggregator import SearchAggregator, build_query
from shotlist.getty.auth import fetch_access_token
from shotlist.getty.gateway import GettyGateway, build_search_params
from shotlist.getty.normalize import normalize_record, normalize_records, pick_rendition
from shotlist.getty.rate_limiter import FixedDelayRateLimiter
from shotlist.models import FilterConfig, MediaKind, Person


# ---------------------------------------------------------------------------
# Normalisation
# ---------------------------------------------------------------------------


class TestNormalize:
    def test_all_renditions_present(self):
        media = normalize_record(make_record("123", title="Red carpet"))
        assert media.id == "123"
        assert media.title == "Red carpet"
        assert media.thumbnail_url.endswith("/thumb")
        assert media.preview_url.endswith("/preview")
        assert media.comp_url.endswith("/comp")
        assert media.date_created == "2019-02-10T00:00:00"

    def test_comp_falls_back_to_preview(self):
        media = normalize_record(make_record("1", renditions=("thumb", "preview")))
        assert media.comp_url == "https://media.example/1/preview"

    def test_missing_renditions_are_empty(self):
        media = normalize_record(make_record("1", renditions=()))
        assert (media.thumbnail_url, media.preview_url, media.comp_url) == ("", "", "")

    def test_no_display_sizes_key(self):
        media = normalize_record({"id": 7, "title": None})
        assert media.id == "7"
        assert media.title == ""
        assert media.comp_url == ""

    def test_pick_rendition_order(self):
        sizes = [{"name": "preview", "uri": "p"}, {"name": "comp", "uri": "c"}]
        assert pick_rendition(sizes, "comp", "preview") == "c"
        assert pick_rendition(sizes, "high_res") == ""

    def test_caps_at_five_in_provider_order(self):
        records = [make_record(str(i)) for i in range(12)]
        media = normalize_records(records)
        assert [m.id for m in media] == ["0", "1", "2", "3", "4"]
        assert len(media) == RESULTS_PER_KIND


# ---------------------------------------------------------------------------
# Token exchange
# ---------------------------------------------------------------------------


class TestAccessToken:
    async def test_success(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["body"] = request.content.decode()
            seen["api_key"] = request.headers.get("Api-Key")
            return httpx.Response(
                200,
                json={"access_token": "tok", "token_type": "Bearer", "expires_in": 1800},
            )

        async with mock_http(handler) as http:
            token = await fetch_access_token(http, "key", "secret")

        assert token.access_token == "tok"
        assert token.authorization == "Bearer tok"
        assert "grant_type=client_credentials" in seen["body"]
        assert "client_id=key" in seen["body"]
        assert seen["api_key"] == "key"

    async def test_non_success_status(self):
        async with mock_http(lambda r: httpx.Response(401, json={"error": "bad"})) as http:
            with pytest.raises(AuthError, match="401"):
                await fetch_access_token(http, "key", "secret")

    async def test_missing_access_token(self):
        async with mock_http(lambda r: httpx.Response(200, json={"token_type": "Bearer"})) as http:
            with pytest.raises(AuthError, match="No access token"):
                await fetch_access_token(http, "key", "secret")

    async def test_network_failure(self):
        def handler(request):
            raise httpx.ConnectError("down", request=request)

        async with mock_http(handler) as http:
            with pytest.raises(AuthError):
                await fetch_access_token(http, "key", "secret")


# ---------------------------------------------------------------------------
# Gateway
# ---------------------------------------------------------------------------


class TestGateway:
    def test_defaults_do_not_override(self):
        params = build_search_params({"phrase": "x", "sort_order": "most_popular", "skip": None})
        assert params["sort_order"] == "most_popular"
        assert params["fields"] == "id,title,thumb,preview,date_created"
        assert "skip" not in params

    def test_defaults_applied(self):
        assert build_search_params({"phrase": "x"})["sort_order"] == "best_match"

    async def test_attaches_headers_and_route(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["path"] = request.url.path
            seen["headers"] = request.headers
            return httpx.Response(200, json={"images": [make_record("p1")]})

        async with mock_http(handler) as http:
            gateway = GettyGateway(http, api_key="the-key")
            data = await gateway.search(MediaKind.PHOTO, {"phrase": "x"}, "Bearer tok")

        assert seen["path"] == "/v3/search/images/editorial"
        assert seen["headers"]["Api-Key"] == "the-key"
        assert seen["headers"]["Authorization"] == "Bearer tok"
        assert data["images"][0]["id"] == "p1"

    async def test_video_route(self):
        seen = {}

        def handler(request):
            seen["path"] = request.url.path
            return httpx.Response(200, json={"videos": []})

        async with mock_http(handler) as http:
            await GettyGateway(http, "k").search(MediaKind.VIDEO, {"phrase": "x"}, "Bearer t")
        assert seen["path"] == "/v3/search/videos/editorial"

    @pytest.mark.parametrize("authorization", [None, "", "Basic abc", "tok"])
    async def test_rejects_non_bearer(self, authorization):
        async with mock_http(lambda r: httpx.Response(200, json={})) as http:
            with pytest.raises(AuthError, match="Invalid or missing authorization token"):
                await GettyGateway(http, "k").search(MediaKind.VIDEO, {}, authorization)

    async def test_forwards_provider_error(self):
        body = {"ErrorCode": "InvalidParameterValue", "ErrorMessage": "bad page_size"}
        async with mock_http(lambda r: httpx.Response(400, json=body)) as http:
            with pytest.raises(SearchError) as excinfo:
                await GettyGateway(http, "k").search(MediaKind.VIDEO, {}, "Bearer t")

        assert excinfo.value.status == 400
        assert excinfo.value.payload == body

    async def test_non_json_error_body(self):
        async with mock_http(lambda r: httpx.Response(502, text="Bad Gateway")) as http:
            with pytest.raises(SearchError) as excinfo:
                await GettyGateway(http, "k").search(MediaKind.PHOTO, {}, "Bearer t")
        assert excinfo.value.payload == "Bad Gateway"

    async def test_success_with_non_json_body(self):
        html = "<html>maintenance</html>"
        async with mock_http(lambda r: httpx.Response(200, text=html)) as http:
            with pytest.raises(SearchError) as excinfo:
                await GettyGateway(http, "k").search(MediaKind.VIDEO, {}, "Bearer t")
        assert excinfo.value.status == 200
        assert excinfo.value.payload == html

    async def test_success_with_non_object_body(self):
        async with mock_http(lambda r: httpx.Response(200, json=["unexpected"])) as http:
            with pytest.raises(SearchError, match="unreadable response"):
                await GettyGateway(http, "k").search(MediaKind.PHOTO, {}, "Bearer t")


# ---------------------------------------------------------------------------
# Aggregator
# ---------------------------------------------------------------------------


def getty_handler(records_by_phrase: dict[str, dict[str, list]], log: list | None = None):
    """MockTransport handler serving records keyed by (phrase, response key)."""

    def handler(request: httpx.Request) -> httpx.Response:
        params = request.url.params
        if log is not None:
            log.append((request.url.path, dict(params)))
        key = "videos" if "videos" in request.url.path else "images"
        records = records_by_phrase.get(params["phrase"], {}).get(key, [])
        return httpx.Response(200, json={key: records})

    return handler


def make_aggregator(http: httpx.AsyncClient) -> SearchAggregator:
    return SearchAggregator(GettyGateway(http, "k"), FixedDelayRateLimiter(0))


class TestBuildQuery:
    def test_full_query(self):
        query = build_query("Jane Doe PMCARC", FilterConfig.only("variety"))
        assert query == {
            "phrase": "Jane Doe PMCARC",
            "page": 1,
            "page_size": FETCH_PAGE_SIZE,
            "fields": "id,title,thumb,preview,comp,date_created",
            "sort_order": "most_popular",
            "collection_codes": "vrt",
        }

    def test_no_collections_omits_param(self):
        config = FilterConfig()
        config.set_all_collections(False)
        assert "collection_codes" not in build_query("x", config)


class TestSearchAggregator:
    async def test_one_result_set_per_person_in_order(self, people):
        data = {
            "Jane Doe": {"videos": [make_record("v1")], "images": [make_record("p1")]},
            # John Roe has no results at all
        }
        async with mock_http(getty_handler(data)) as http:
            results = await make_aggregator(http).search_all(
                people, FilterConfig(use_pmcarc=False), "tok"
            )

        assert [r.person for r in results] == people
        assert [m.id for m in results[0].videos] == ["v1"]
        assert [m.id for m in results[0].photos] == ["p1"]
        assert results[1].videos == [] and results[1].photos == []

    async def test_pmcarc_phrase_uses_bare_name(self):
        log: list = []
        people = [Person(name="Jane Doe", search_term="Jane Doe 2024 Met Gala")]
        async with mock_http(getty_handler({}, log)) as http:
            await make_aggregator(http).search_all(people, FilterConfig(use_pmcarc=True), "tok")

        phrases = [params["phrase"] for _, params in log]
        assert phrases == ["Jane Doe PMCARC", "Jane Doe PMCARC"]

    async def test_video_then_photo_per_person(self, people):
        log: list = []
        async with mock_http(getty_handler({}, log)) as http:
            await make_aggregator(http).search_all(people, FilterConfig(), "tok")

        paths = [path for path, _ in log]
        assert paths == [
            "/v3/search/videos/editorial",
            "/v3/search/images/editorial",
        ] * 2

    async def test_unrestricted_search_has_no_collection_codes(self, people):
        log: list = []
        config = FilterConfig()
        config.set_all_collections(False)
        async with mock_http(getty_handler({}, log)) as http:
            await make_aggregator(http).search_all(people, config, "tok")

        assert all("collection_codes" not in params for _, params in log)

    async def test_collection_codes_sent(self, people):
        log: list = []
        async with mock_http(getty_handler({}, log)) as http:
            await make_aggregator(http).search_all(
                people[:1], FilterConfig.only("billboard", "wwd"), "tok"
            )
        assert {params["collection_codes"] for _, params in log} == {"blb,wom"}
        assert {params["page_size"] for _, params in log} == {"30"}

    async def test_caps_results_per_kind(self):
        data = {"A": {"videos": [make_record(f"v{i}") for i in range(30)]}}
        async with mock_http(getty_handler(data)) as http:
            results = await make_aggregator(http).search_all(
                [Person("A", "A")], FilterConfig(use_pmcarc=False), "tok"
            )
        assert [m.id for m in results[0].videos] == ["v0", "v1", "v2", "v3", "v4"]

    async def test_no_token(self, people):
        async with mock_http(getty_handler({})) as http:
            with pytest.raises(SearchError, match="no access token"):
                await make_aggregator(http).search_all(people, FilterConfig(), None)

    async def test_failure_aborts_remaining_queue(self):
        log: list = []

        def handler(request: httpx.Request) -> httpx.Response:
            log.append(request.url.params["phrase"])
            if request.url.params["phrase"] == "B":
                return httpx.Response(429, json={"message": "Too many requests"})
            key = "videos" if "videos" in request.url.path else "images"
            return httpx.Response(200, json={key: []})

        people = [Person("A", "a"), Person("B", "b"), Person("C", "c")]
        async with mock_http(handler) as http:
            with pytest.raises(SearchError) as excinfo:
                await make_aggregator(http).search_all(
                    people, FilterConfig(use_pmcarc=False), "tok"
                )

        assert excinfo.value.status == 429
        assert excinfo.value.payload == {"message": "Too many requests"}
        assert "C" not in log

    async def test_maintenance_page_is_search_error(self, people):
        async with mock_http(lambda r: httpx.Response(200, text="<html>maintenance</html>")) as http:
            with pytest.raises(SearchError, match="unreadable response"):
                await make_aggregator(http).search_all(people, FilterConfig(), "tok")

    async def test_delay_after_each_person(self, people):
        limiter = FixedDelayRateLimiter(1.0)
        limiter.wait = AsyncMock()
        async with mock_http(getty_handler({})) as http:
            aggregator = SearchAggregator(GettyGateway(http, "k"), limiter)
            await aggregator.search_all(people, FilterConfig(), "tok")
        assert limiter.wait.await_count == len(people)

    async def test_progress_callback(self, people):
        calls = []
        async with mock_http(getty_handler({})) as http:
            await make_aggregator(http).search_all(
                people, FilterConfig(), "tok",
                on_progress=lambda done, total, person: calls.append((done, total, person.name)),
            )
        assert calls == [(1, 2, "Jane Doe"), (2, 2, "John Roe")]


class TestRateLimiter:
    def test_negative_delay_rejected(self):
        with pytest.raises(ValueError):
            FixedDelayRateLimiter(-1)

    async def test_zero_delay_does_not_sleep(self, monkeypatch):
        sleep = AsyncMock()
        monkeypatch.setattr("shotlist.getty.rate_limiter.asyncio.sleep", sleep)
        await FixedDelayRateLimiter(0).wait()
        sleep.assert_not_awaited()

    async def test_sleeps_configured_delay(self, monkeypatch):
        sleep = AsyncMock()
        monkeypatch.setattr("shotlist.getty.rate_limiter.asyncio.sleep", sleep)
        await FixedDelayRateLimiter(1.0).wait()
        sleep.assert_awaited_once_with(1.0)
