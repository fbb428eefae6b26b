"""
Sequential, polite fetcher for job pages.

URLs are processed strictly one at a time: a politeness delay separates
consecutive URLs, transient failures are retried with linear backoff, and a
URL that still fails is logged and dropped without aborting the batch.
"""
import json
import logging
import threading
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterable, List, Optional

import httpx

from jobintake.core.config import (
    CRAWL_DELAY_MS,
    CRAWL_MAX_RETRIES,
    CRAWL_TIMEOUT_SECONDS,
    CRAWL_USER_AGENT,
)
from jobintake.core.errors import FetchError
from jobintake.crawler.extractor import extract_listing
from jobintake.schemas.listing import RawListing

logger = logging.getLogger(__name__)


@dataclass
class CrawlOptions:
    delay_ms: int = CRAWL_DELAY_MS
    max_retries: int = CRAWL_MAX_RETRIES
    timeout_s: float = CRAWL_TIMEOUT_SECONDS
    limit: Optional[int] = None  # max listings to collect


@dataclass
class CrawlStats:
    requested: int = 0
    fetched: int = 0
    failed: List[str] = field(default_factory=list)
    malformed: List[str] = field(default_factory=list)


def build_client(timeout_s: float = CRAWL_TIMEOUT_SECONDS, transport: httpx.BaseTransport = None) -> httpx.Client:
    return httpx.Client(
        timeout=timeout_s,
        follow_redirects=True,
        headers={"User-Agent": CRAWL_USER_AGENT},
        transport=transport,
    )


def is_transient(exc: Exception) -> bool:
    """Network errors, timeouts, 429 and 5xx are worth retrying; other HTTP errors are not."""
    if isinstance(exc, httpx.HTTPStatusError):
        code = exc.response.status_code
        return code == 429 or code >= 500
    return isinstance(exc, httpx.TransportError)


class Fetcher:
    def __init__(self, options: CrawlOptions = None, client: httpx.Client = None,
                 sleep: Callable[[float], None] = time.sleep,
                 extractor: Callable[[str, str], Optional[RawListing]] = extract_listing):
        self.options = options or CrawlOptions()
        self._own_client = client is None
        self.client = client or build_client(self.options.timeout_s)
        self.sleep = sleep
        self.extractor = extractor
        self.stats = CrawlStats()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    def close(self) -> None:
        if self._own_client:
            self.client.close()

    def fetch_html(self, url: str) -> str:
        response = self.client.get(url)
        response.raise_for_status()
        return response.text

    def fetch_with_retry(self, url: str) -> str:
        """
        GET ``url``, retrying transient failures up to ``max_retries`` times.

        The n-th retry waits ``delay_ms * 2 * n`` milliseconds.

        Raises:
            FetchError: when the last attempt fails or the failure is not transient
        """
        attempt = 0
        while True:
            attempt += 1
            try:
                return self.fetch_html(url)
            except httpx.HTTPError as e:
                if not is_transient(e) or attempt > self.options.max_retries:
                    raise FetchError(url, attempt, e) from e
                backoff_s = self.options.delay_ms * 2 * attempt / 1000
                logger.info(f"Retry {attempt}/{self.options.max_retries} for {url} in {backoff_s:.1f}s ({type(e).__name__})")
                self.sleep(backoff_s)
            except (httpx.InvalidURL, ValueError) as e:
                # Malformed URL (bad host or port): never retried
                raise FetchError(url, attempt, e) from e

    def crawl(self, urls: Iterable[str], stop_event: threading.Event = None) -> List[RawListing]:
        """
        Fetch and extract every URL in order, returning the listings that survived.

        Stops issuing requests once ``limit`` listings are collected or
        ``stop_event`` is set; an in-flight request is never interrupted.
        """
        self.stats = CrawlStats()
        urls = list(urls)
        listings: List[RawListing] = []
        logger.info(f"Crawling {len(urls)} job pages (delay={self.options.delay_ms}ms, retries={self.options.max_retries})")

        for index, url in enumerate(urls):
            if self.options.limit is not None and len(listings) >= self.options.limit:
                logger.info(f"Reached crawl limit of {self.options.limit}")
                break
            if stop_event is not None and stop_event.is_set():
                logger.info("Crawl stopped early by request")
                break
            if index > 0:
                self.sleep(self.options.delay_ms / 1000)

            self.stats.requested += 1
            logger.debug(f"[{index + 1}/{len(urls)}] {url}")
            try:
                html = self.fetch_with_retry(url)
            except FetchError as e:
                logger.warning(f"Dropping {url}: {e}")
                self.stats.failed.append(url)
                continue

            self.stats.fetched += 1
            listing = self.extractor(html, url)
            if listing is None:
                self.stats.malformed.append(url)
                continue
            listings.append(listing)

        logger.info(
            f"Crawled {len(listings)}/{self.stats.requested} jobs "
            f"(failed={len(self.stats.failed)}, malformed={len(self.stats.malformed)})"
        )
        return listings


def save_checkpoint(listings: List[RawListing], path) -> Path:
    """Write the crawled batch to ``path`` atomically so a later crash does not require re-fetching."""
    out_path = Path(path).expanduser().resolve()
    out_path.parent.mkdir(parents=True, exist_ok=True)
    data = [listing.model_dump(mode="json") for listing in listings]
    tmp_path = out_path.with_suffix(out_path.suffix + ".tmp")
    tmp_path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
    tmp_path.replace(out_path)
    logger.info(f"Saved {len(listings)} jobs to {out_path}")
    return out_path


def load_checkpoint(path) -> List[RawListing]:
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    return [RawListing.model_validate(item) for item in data]
