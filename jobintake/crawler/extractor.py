"""
HTML extraction for viecoi.vn job pages.

Each field has an ordered tuple of CSS selectors and the first one that
matches wins. Every lookup is optional except title and company; a page
without them yields None and the caller skips it.
"""
import logging
import re
from typing import Dict, List, Optional, Tuple

from bs4 import BeautifulSoup, Comment

from jobintake.core.config import LOGO_CDN_BASE
from jobintake.schemas.listing import RawListing

logger = logging.getLogger(__name__)

FIELD_SELECTORS: Dict[str, Tuple[str, ...]] = {
    "title": ("h1.title_container", "h1"),
    "company": ("h2.name-cpn-title", ".name-cpn-title"),
    "company_logo": ("img.logo-company",),
    "location": ('[class*="location"]',),
    "salary": ('[class*="salary"]',),
    "description": ('[class*="description"]',),
    "requirements": (".requirements li", ".job-requirements li"),
    "benefits": (".benefits li", ".job-benefits li"),
    "skills": (".skills .tag", ".job-tags .tag", ".skill-tag"),
    "job_type": (".job-type", ".employment-type"),
    "category": (".category", ".job-category"),
    "expires_at": (".deadline", ".expire-date"),
    "contact_email": (".contact-email", ".email"),
    "contact_phone": (".contact-phone", ".phone"),
    "posted_date": (".posted-date", ".publish-date"),
}

DEFAULT_LOCATION = "Việt Nam"
DEFAULT_SALARY = "Thỏa thuận"
DEFAULT_JOB_TYPE = "Full-time"
DEFAULT_CATEGORY = "Other"
LOGO_PLACEHOLDER = "loadingImg"

WHITESPACE_RE = re.compile(r"\s+")


def strip_markup(element) -> str:
    """Visible text of a parsed element: no scripts, styles or comments, whitespace collapsed."""
    for hidden in element.find_all(["script", "style"]):
        hidden.decompose()
    for comment in element.find_all(string=lambda s: isinstance(s, Comment)):
        comment.extract()
    return WHITESPACE_RE.sub(" ", element.get_text(" ")).strip()


def _first(soup: BeautifulSoup, field: str):
    for selector in FIELD_SELECTORS[field]:
        element = soup.select_one(selector)
        if element is not None:
            return element
    return None


def _text(soup: BeautifulSoup, field: str) -> str:
    element = _first(soup, field)
    return element.get_text().strip() if element is not None else ""


def _first_line(soup: BeautifulSoup, field: str) -> str:
    for line in _text(soup, field).splitlines():
        if line.strip():
            return line.strip()
    return ""


def _items(soup: BeautifulSoup, field: str) -> List[str]:
    for selector in FIELD_SELECTORS[field]:
        items = [el.get_text().strip() for el in soup.select(selector)]
        items = [item for item in items if item]
        if items:
            return items
    return []


def resolve_logo(src: Optional[str], base: str = LOGO_CDN_BASE) -> Optional[str]:
    """Absolute logo URL, or None for missing/lazy-load placeholder images."""
    src = (src or "").strip()
    if not src or LOGO_PLACEHOLDER in src:
        return None
    if src.startswith("http"):
        return src
    if src.startswith("//"):
        return "https:" + src
    if src.startswith("/"):
        return base.rstrip("/") + src
    return base.rstrip("/") + "/" + src


def extract_listing(html: str, url: str) -> Optional[RawListing]:
    """Parse one job page into a RawListing, or None if title/company are missing."""
    soup = BeautifulSoup(html or "", "html.parser")

    title = _text(soup, "title")
    company = _text(soup, "company")
    if not title or not company:
        logger.warning(f"Skipping (missing title or company): {url}")
        return None

    logo = _first(soup, "company_logo")
    description = _first(soup, "description")

    return RawListing(
        url=url,
        title=title,
        company=company,
        company_logo=resolve_logo(logo.get("src") if logo is not None else None),
        location=_first_line(soup, "location") or DEFAULT_LOCATION,
        salary=_first_line(soup, "salary") or DEFAULT_SALARY,
        job_type=_text(soup, "job_type") or DEFAULT_JOB_TYPE,
        category=_text(soup, "category") or DEFAULT_CATEGORY,
        description=strip_markup(description) if description is not None else "",
        requirements=_items(soup, "requirements"),
        benefits=_items(soup, "benefits"),
        skills=_items(soup, "skills"),
        expires_at=_text(soup, "expires_at") or None,
        posted_date=_text(soup, "posted_date") or None,
        contact_email=_text(soup, "contact_email") or None,
        contact_phone=_text(soup, "contact_phone") or None,
    )
