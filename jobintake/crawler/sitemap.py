"""
Job URL discovery from the source site's sitemap index.

sitemap.xml -> job sub-sitemap -> /viec-lam/*.html URLs
"""
import logging
import re
from dataclasses import dataclass
from typing import List, Optional
from urllib.parse import urljoin

from bs4 import BeautifulSoup

from jobintake.crawler.fetcher import Fetcher

logger = logging.getLogger(__name__)

JOB_SITEMAP_HINT = "job.xml"
JOB_URL_RE = re.compile(r"/viec-lam/.*\.html$", re.IGNORECASE)


@dataclass(frozen=True)
class JobURL:
    url: str
    lastmod: Optional[str] = None


def find_job_sitemap(index_xml: str, sitemap_url: str) -> str:
    """Location of the job sub-sitemap, defaulting to <site>/job.xml."""
    soup = BeautifulSoup(index_xml, "html.parser")
    for sitemap in soup.find_all("sitemap"):
        loc = sitemap.find("loc")
        if loc is not None and JOB_SITEMAP_HINT in loc.get_text():
            return loc.get_text().strip()
    return urljoin(sitemap_url, "/" + JOB_SITEMAP_HINT)


def parse_job_urls(urlset_xml: str, limit: Optional[int] = None) -> List[JobURL]:
    soup = BeautifulSoup(urlset_xml, "html.parser")
    urls: List[JobURL] = []
    for entry in soup.find_all("url"):
        loc = entry.find("loc")
        if loc is None:
            continue
        url = loc.get_text().strip()
        if not JOB_URL_RE.search(url):
            continue
        lastmod = entry.find("lastmod")
        urls.append(JobURL(url=url, lastmod=lastmod.get_text().strip() if lastmod is not None else None))
        if limit is not None and len(urls) >= limit:
            break
    return urls


def discover_job_urls(fetcher: Fetcher, sitemap_url: str, limit: Optional[int] = None) -> List[JobURL]:
    """
    Fetch the sitemap index and the job sitemap it points to.

    Raises:
        FetchError: if either sitemap cannot be fetched
    """
    index_xml = fetcher.fetch_with_retry(sitemap_url)
    job_sitemap_url = find_job_sitemap(index_xml, sitemap_url)
    logger.info(f"Job sitemap URL: {job_sitemap_url}")

    fetcher.sleep(fetcher.options.delay_ms / 1000)
    urls = parse_job_urls(fetcher.fetch_with_retry(job_sitemap_url), limit=limit)
    logger.info(f"Found {len(urls)} job URLs")
    return urls
