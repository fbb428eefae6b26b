"""
Persistence helpers for Job rows.

Plain functions over a SQLAlchemy Session, following the route-level
session pattern; callers own the session lifecycle.
"""
import logging
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from jobintake.db.models.job import Job, JobStatus
from jobintake.schemas.job import NormalizedJob
from jobintake.services.dedup import dedup_key, job_dedup_key

logger = logging.getLogger(__name__)

INSERTED = "inserted"
UPDATED = "updated"
SKIPPED = "skipped"

# Fields refreshed when a crawled page is seen again; moderation state is kept
CONTENT_FIELDS = (
    "title", "company_name", "company_logo", "location",
    "salary_min", "salary_max", "salary_text",
    "job_type_id", "category_id", "category_method",
    "description", "requirements", "benefits", "skills", "expires_at",
)


def _row_values(job: NormalizedJob) -> dict:
    values = job.model_dump(mode="python")
    values["source"] = job.source.value
    values["status"] = job.status.value
    values["contact_info"] = job.contact_info.model_dump(exclude_none=True) if job.contact_info else None
    values["dedup_key"] = job_dedup_key(job)
    return values


def create_job(db: Session, job: NormalizedJob) -> Job:
    row = Job(**_row_values(job))
    db.add(row)
    db.commit()
    db.refresh(row)
    logger.info(f"Job created: job_id={row.id}, source={row.source}, status={row.status}")
    return row


def get_job(db: Session, job_id: int) -> Optional[Job]:
    return db.query(Job).filter(Job.id == job_id).first()


def find_by_external_url(db: Session, url: str) -> Optional[Job]:
    return db.query(Job).filter(Job.external_url == url).first()


def find_by_dedup_key(db: Session, title: str, company_name: str, location: str) -> Optional[Job]:
    return db.query(Job).filter(Job.dedup_key == dedup_key(title, company_name, location)).first()


def list_jobs(db: Session, status: str = JobStatus.PENDING.value, source: Optional[str] = None,
              limit: int = 200) -> List[Job]:
    query = db.query(Job).filter(Job.status == status)
    if source:
        query = query.filter(Job.source == source)
    return query.order_by(Job.created_at.desc(), Job.id.desc()).limit(limit).all()


def delete_job(db: Session, job: Job) -> None:
    db.delete(job)
    db.commit()


def upsert_crawled_job(db: Session, job: NormalizedJob) -> str:
    """
    Insert a crawled job, refresh an existing row with the same external_url,
    or skip it when another posting already holds the same dedup key.

    Returns one of "inserted", "updated", "skipped". Database connectivity
    errors propagate.
    """
    existing = find_by_external_url(db, job.external_url)
    if existing is not None:
        for field_name in CONTENT_FIELDS:
            setattr(existing, field_name, getattr(job, field_name))
        existing.dedup_key = job_dedup_key(job)
        db.commit()
        logger.debug(f"Job refreshed from crawl: job_id={existing.id}")
        return UPDATED

    if find_by_dedup_key(db, job.title, job.company_name, job.location) is not None:
        logger.debug(f"Skipping crawled job already stored under another URL: {job.external_url}")
        return SKIPPED

    try:
        create_job(db, job)
    except IntegrityError as e:
        db.rollback()
        logger.warning(f"Skipping crawled job {job.external_url}: {e.orig}")
        return SKIPPED
    return INSERTED
