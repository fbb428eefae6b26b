"""
Tests for the polite sequential fetcher, using httpx.MockTransport.
"""
import threading

import httpx
import pytest

from jobintake.core.errors import FetchError
from jobintake.crawler.fetcher import (
    CrawlOptions,
    Fetcher,
    build_client,
    is_transient,
    load_checkpoint,
    save_checkpoint,
)
from jobintake.schemas.listing import RawListing


def page(title, company="Công ty ABC"):
    return f'<h1 class="title_container">{title}</h1><h2 class="name-cpn-title">{company}</h2>'


def make_fetcher(handler, sleeps, **options):
    options.setdefault("delay_ms", 100)
    options.setdefault("max_retries", 2)
    client = build_client(transport=httpx.MockTransport(handler))
    return Fetcher(CrawlOptions(**options), client=client, sleep=sleeps.append)


def test_client_sends_crawler_user_agent():
    seen = {}

    def handler(request):
        seen["ua"] = request.headers["User-Agent"]
        return httpx.Response(200, text="ok")

    fetcher = make_fetcher(handler, [])
    assert fetcher.fetch_html("https://viecoi.vn/a.html") == "ok"
    assert seen["ua"].startswith("Job4S-Crawler/1.0")


def test_transient_failure_is_retried_with_linear_backoff():
    calls = []

    def handler(request):
        calls.append(request.url)
        if len(calls) < 3:
            return httpx.Response(503)
        return httpx.Response(200, text="done")

    sleeps = []
    fetcher = make_fetcher(handler, sleeps)

    assert fetcher.fetch_with_retry("https://viecoi.vn/a.html") == "done"
    assert len(calls) == 3
    assert sleeps == [0.2, 0.4]


def test_gives_up_after_max_retries():
    def handler(request):
        raise httpx.ConnectTimeout("timed out", request=request)

    sleeps = []
    fetcher = make_fetcher(handler, sleeps, max_retries=2)

    with pytest.raises(FetchError) as exc_info:
        fetcher.fetch_with_retry("https://viecoi.vn/a.html")

    assert exc_info.value.attempts == 3
    assert exc_info.value.url == "https://viecoi.vn/a.html"
    assert len(sleeps) == 2


def test_client_errors_are_not_retried():
    calls = []

    def handler(request):
        calls.append(request.url)
        return httpx.Response(404)

    fetcher = make_fetcher(handler, [])
    with pytest.raises(FetchError):
        fetcher.fetch_with_retry("https://viecoi.vn/missing.html")
    assert len(calls) == 1


def test_is_transient():
    request = httpx.Request("GET", "https://viecoi.vn")
    assert is_transient(httpx.HTTPStatusError("x", request=request, response=httpx.Response(429, request=request)))
    assert is_transient(httpx.HTTPStatusError("x", request=request, response=httpx.Response(502, request=request)))
    assert not is_transient(httpx.HTTPStatusError("x", request=request, response=httpx.Response(403, request=request)))
    assert is_transient(httpx.ReadTimeout("slow", request=request))


def test_crawl_drops_failures_without_aborting_batch():
    def handler(request):
        path = request.url.path
        if path == "/down.html":
            return httpx.Response(500)
        if path == "/broken.html":
            return httpx.Response(200, text="<p>no title here</p>")
        return httpx.Response(200, text=page(path.strip("/").replace(".html", "")))

    sleeps = []
    fetcher = make_fetcher(handler, sleeps, max_retries=1)
    urls = [
        "https://viecoi.vn/first.html",
        "https://viecoi.vn/down.html",
        "https://viecoi.vn/broken.html",
        "https://viecoi.vn/last.html",
    ]

    listings = fetcher.crawl(urls)

    assert [listing.title for listing in listings] == ["first", "last"]
    assert fetcher.stats.requested == 4
    assert fetcher.stats.failed == ["https://viecoi.vn/down.html"]
    assert fetcher.stats.malformed == ["https://viecoi.vn/broken.html"]
    # three politeness delays between four URLs plus one retry backoff
    assert sleeps.count(0.1) == 3
    assert sleeps.count(0.2) == 1


def test_malformed_url_is_dropped_without_retry():
    requested = []

    def handler(request):
        requested.append(str(request.url))
        return httpx.Response(200, text=page("Bảo vệ"))

    sleeps = []
    fetcher = make_fetcher(handler, sleeps)
    urls = ["https://viecoi.vn:abc/viec-lam/x.html", "https://viecoi.vn/viec-lam/bao-ve.html"]

    listings = fetcher.crawl(urls)

    assert [listing.title for listing in listings] == ["Bảo vệ"]
    assert fetcher.stats.failed == [urls[0]]
    assert requested == [urls[1]]
    # only the politeness delay, no retry backoff
    assert sleeps == [0.1]


def test_malformed_url_raises_fetch_error_on_first_attempt():
    fetcher = make_fetcher(lambda request: httpx.Response(200, text="ok"), [])

    with pytest.raises(FetchError) as excinfo:
        fetcher.fetch_with_retry("https://viecoi.vn:port/a.html")

    assert excinfo.value.attempts == 1


def test_politeness_delay_between_urls_only():
    sleeps = []
    fetcher = make_fetcher(lambda request: httpx.Response(200, text=page("Job")), sleeps, delay_ms=250)

    fetcher.crawl([f"https://viecoi.vn/{i}.html" for i in range(3)])

    assert sleeps == [0.25, 0.25]


def test_limit_stops_issuing_requests():
    calls = []

    def handler(request):
        calls.append(request.url)
        return httpx.Response(200, text=page("Job"))

    fetcher = make_fetcher(handler, [], limit=2)
    listings = fetcher.crawl([f"https://viecoi.vn/{i}.html" for i in range(5)])

    assert len(listings) == 2
    assert len(calls) == 2


def test_stop_event_ends_crawl_early():
    stop = threading.Event()
    calls = []

    def handler(request):
        calls.append(request.url)
        stop.set()
        return httpx.Response(200, text=page("Job"))

    fetcher = make_fetcher(handler, [])
    listings = fetcher.crawl([f"https://viecoi.vn/{i}.html" for i in range(5)], stop_event=stop)

    assert len(listings) == 1
    assert len(calls) == 1


def test_checkpoint_round_trip(tmp_path):
    listings = [
        RawListing(url="https://viecoi.vn/viec-lam/1.html", title="Phục vụ", company="Quán A", requirements=["Vui vẻ"]),
        RawListing(url="https://viecoi.vn/viec-lam/2.html", title="Thu ngân", company="Siêu thị B"),
    ]
    path = tmp_path / "data" / "batch.json"

    written = save_checkpoint(listings, path)

    assert written.exists()
    assert not (written.parent / "batch.json.tmp").exists()
    assert "Phục vụ" in written.read_text(encoding="utf-8")
    assert load_checkpoint(path) == listings
