"""
Normalization of crawled listings and quick-post submissions.

Keyword matching lives in ordered rule tables so each rule can be tested on
its own and extended without touching control flow:
- job type: first matching rule wins, "full-time" by default
- category: first matching rule wins, then the external categorizer,
  then "other" if the categorizer is missing or fails
"""
import logging
import re
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Iterable, List, Optional, Pattern, Tuple

from jobintake.core.config import AI_MAX_CONCURRENCY, QUICKPOST_TTL_DAYS
from jobintake.db.models.job import JobSource, JobStatus
from jobintake.schemas.job import NormalizedJob, QuickPostCreate
from jobintake.schemas.listing import RawListing
from jobintake.services.categorizer import Categorizer
from jobintake.services.salary import parse_salary

logger = logging.getLogger(__name__)

DEFAULT_JOB_TYPE = "full-time"
FALLBACK_CATEGORY = "other"
QUICK_POST_COMPANY = "Chưa xác định"


@dataclass(frozen=True)
class JobTypeRule:
    job_type_id: str
    keywords: Tuple[str, ...]


@dataclass(frozen=True)
class CategoryRule:
    category_id: str
    pattern: Pattern


JOB_TYPE_RULES: List[JobTypeRule] = [
    JobTypeRule("full-time", ("full", "toàn thời gian")),
    JobTypeRule("part-time", ("part", "bán thời gian")),
    JobTypeRule("internship", ("intern", "thực tập")),
    JobTypeRule("contract", ("contract", "hợp đồng", "thời vụ", "freelance")),
    JobTypeRule("remote", ("remote", "từ xa")),
]


def _rule(category_id: str, *alternatives: str) -> CategoryRule:
    return CategoryRule(category_id, re.compile("|".join(alternatives), re.IGNORECASE))


CATEGORY_RULES: List[CategoryRule] = [
    _rule("it-software", r"\bit\b", r"công nghệ", r"phần mềm", r"software", r"lập trình", r"developer", r"\bdevops\b"),
    _rule("marketing", r"marketing", r"tiếp thị", r"truyền thông", r"\bpr\b", r"\bseo\b"),
    _rule("sales", r"\bsales?\b", r"bán hàng", r"kinh doanh", r"business development", r"telesale"),
    _rule("design", r"design", r"thiết kế", r"đồ họa", r"\bui\b", r"\bux\b"),
    _rule("finance", r"kế toán", r"kiểm toán", r"tài chính", r"ngân hàng", r"account", r"finance", r"bank", r"audit"),
    _rule("hr", r"nhân sự", r"\bhr\b", r"human resource", r"tuyển dụng", r"recruit", r"hành chính"),
    _rule("healthcare", r"y tế", r"bác sĩ", r"điều dưỡng", r"dược", r"health", r"medical", r"nurse", r"pharma"),
    _rule("education", r"giáo dục", r"giáo viên", r"gia sư", r"education", r"teacher", r"tutor"),
    _rule("food-service", r"nhà hàng", r"phục vụ", r"pha chế", r"đầu bếp", r"cà phê", r"restaurant", r"\bf&b\b", r"food", r"barista", r"chef"),
    _rule("retail", r"bán lẻ", r"cửa hàng", r"siêu thị", r"thu ngân", r"retail", r"cashier", r"store"),
]

DEADLINE_RE = re.compile(r"(\d{1,2})[/\-.](\d{1,2})[/\-.](\d{4})")


def normalize_job_type(raw_type: str) -> str:
    """Map free-text job type to a canonical id; unknown text is full-time."""
    text = (raw_type or "").lower().strip()
    for rule in JOB_TYPE_RULES:
        if any(keyword in text for keyword in rule.keywords):
            return rule.job_type_id
    return DEFAULT_JOB_TYPE


def match_category(raw_category: str) -> Optional[str]:
    """Canonical category id of the first matching rule, or None."""
    text = (raw_category or "").strip()
    if not text:
        return None
    for rule in CATEGORY_RULES:
        if rule.pattern.search(text):
            return rule.category_id
    return None


def canonicalize_label(label: str) -> str:
    """'Food Service' -> 'food-service'."""
    return re.sub(r"\s+", "-", (label or "").strip().lower())


def parse_deadline(text: Optional[str]) -> Optional[datetime]:
    """Best-effort dd/mm/yyyy parse of a deadline string."""
    if not text:
        return None
    match = DEADLINE_RE.search(text)
    if not match:
        return None
    day, month, year = (int(part) for part in match.groups())
    try:
        return datetime(year, month, day, 23, 59, 59, tzinfo=timezone.utc)
    except ValueError:
        return None


class Normalizer:
    """
    Converts RawListing / QuickPostCreate into NormalizedJob.

    Pure apart from the optional categorizer call, which is only made for
    crawled listings whose category text matches no rule.
    """

    def __init__(self, categorizer: Optional[Categorizer] = None, max_workers: int = AI_MAX_CONCURRENCY):
        self.categorizer = categorizer
        self.max_workers = max(1, max_workers)

    def resolve_category(self, raw_category: str, title: str, description: str) -> Tuple[str, str]:
        """Return (category_id, method) where method is rule, ai or fallback."""
        category_id = match_category(raw_category)
        if category_id:
            return category_id, "rule"

        if self.categorizer is None:
            return FALLBACK_CATEGORY, "fallback"

        try:
            label = self.categorizer.classify(title, description)
        except Exception as e:
            logger.warning(f"Categorization failed for '{title}', using '{FALLBACK_CATEGORY}': {type(e).__name__}: {e}")
            return FALLBACK_CATEGORY, "fallback"

        return canonicalize_label(label) or FALLBACK_CATEGORY, "ai"

    def normalize(self, raw: RawListing) -> NormalizedJob:
        salary = parse_salary(raw.salary)
        category_id, method = self.resolve_category(raw.category, raw.title, raw.description)

        return NormalizedJob(
            title=raw.title,
            company_name=raw.company,
            company_logo=raw.company_logo,
            location=raw.location,
            salary_min=salary.min,
            salary_max=salary.max,
            salary_text=salary.text,
            job_type_id=normalize_job_type(raw.job_type),
            category_id=category_id,
            category_method=method,
            description=raw.description,
            requirements=list(raw.requirements),
            benefits=list(raw.benefits),
            skills=list(raw.skills),
            source=JobSource.CRAWLED,
            external_url=raw.url,
            status=JobStatus.PENDING,
            is_verified=False,
            expires_at=parse_deadline(raw.expires_at),
        )

    def normalize_many(self, raws: Iterable[RawListing]) -> List[NormalizedJob]:
        """
        Normalize a batch, preserving input order.

        Categorizer calls run on at most ``max_workers`` threads so a large
        batch cannot flood the external classifier.
        """
        raws = list(raws)
        if self.categorizer is None or self.max_workers == 1 or len(raws) < 2:
            return [self.normalize(raw) for raw in raws]

        with ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix="categorize") as pool:
            return list(pool.map(self.normalize, raws))

    def normalize_quick_post(self, submission: QuickPostCreate, spam_score: Optional[int] = None,
                             spam_reason: Optional[str] = None, poster_id: Optional[str] = None,
                             now: Optional[datetime] = None) -> NormalizedJob:
        """
        Lightweight path for user submissions: keyword rules only, no
        categorizer call, so the request stays synchronous and cheap.
        """
        now = now or datetime.now(timezone.utc)

        salary_text = submission.salary
        if not salary_text and submission.hourly_rate is not None:
            salary_text = f"{submission.hourly_rate:.0f} VNĐ/giờ"
        salary = parse_salary(salary_text or "")

        category_id = match_category(submission.category or "") or match_category(submission.title)
        method = "rule" if category_id else "fallback"

        description = submission.description
        if submission.work_schedule:
            description = f"{description}\n\nLịch làm việc: {submission.work_schedule}"

        return NormalizedJob(
            title=submission.title.strip(),
            company_name=(submission.company or "").strip() or QUICK_POST_COMPANY,
            location=submission.location.strip(),
            salary_min=salary.min,
            salary_max=salary.max,
            salary_text=salary.text,
            job_type_id=normalize_job_type(submission.type),
            category_id=category_id or FALLBACK_CATEGORY,
            category_method=method,
            description=description,
            source=JobSource.QUICK_POST,
            status=JobStatus.PENDING,
            is_verified=False,
            poster_id=poster_id,
            spam_score=spam_score,
            moderation_note=spam_reason or None,
            contact_info=submission.contact_info,
            expires_at=now + timedelta(days=QUICKPOST_TTL_DAYS),
        )
