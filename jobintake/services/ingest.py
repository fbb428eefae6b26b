"""
Crawl ingestion: Fetcher -> checkpoint -> Normalizer -> Deduplicator -> store.

Per-record problems (fetch failures, malformed pages, categorization
errors, duplicates) are logged and skipped. Store failures are not caught
here: an unavailable database must stop the batch and reach the operator.
"""
import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional

from sqlalchemy.exc import DataError
from sqlalchemy.orm import Session

from jobintake.crawler.fetcher import Fetcher, load_checkpoint, save_checkpoint
from jobintake.schemas.job import NormalizedJob
from jobintake.schemas.listing import RawListing
from jobintake.services import job_store
from jobintake.services.dedup import dedupe
from jobintake.services.normalizer import Normalizer

logger = logging.getLogger(__name__)


@dataclass
class IngestReport:
    fetched: int = 0
    normalized: int = 0
    unique: int = 0
    inserted: int = 0
    updated: int = 0
    skipped: int = 0

    def as_dict(self) -> dict:
        return dict(self.__dict__)


def store_batch(db: Session, jobs: Iterable[NormalizedJob], report: IngestReport) -> IngestReport:
    """
    Upsert each job, counting outcomes.

    A value the database cannot store only skips that record; connectivity
    errors (OperationalError and friends) propagate and end the batch.
    """
    for job in jobs:
        try:
            outcome = job_store.upsert_crawled_job(db, job)
        except (DataError, OverflowError) as e:
            db.rollback()
            logger.warning(f"Skipping unstorable job {job.external_url}: {type(e).__name__}: {e}")
            report.skipped += 1
            continue
        if outcome == job_store.INSERTED:
            report.inserted += 1
        elif outcome == job_store.UPDATED:
            report.updated += 1
        else:
            report.skipped += 1
    return report


def ingest_listings(db: Session, listings: List[RawListing], normalizer: Normalizer) -> IngestReport:
    report = IngestReport(fetched=len(listings))
    normalized = normalizer.normalize_many(listings)
    report.normalized = len(normalized)
    unique = dedupe(normalized)
    report.unique = len(unique)
    store_batch(db, unique, report)
    logger.info(f"Ingest finished: {report.as_dict()}")
    return report


def run_crawl_batch(db: Session, urls: Iterable[str], fetcher: Fetcher, normalizer: Normalizer,
                    checkpoint_path: Optional[str] = None, stop_event=None) -> IngestReport:
    listings = fetcher.crawl(urls, stop_event=stop_event)
    if checkpoint_path:
        save_checkpoint(listings, checkpoint_path)
    return ingest_listings(db, listings, normalizer)


def ingest_checkpoint(db: Session, checkpoint_path: str, normalizer: Normalizer) -> IngestReport:
    """Resume a batch from its checkpoint file without re-fetching."""
    listings = load_checkpoint(checkpoint_path)
    logger.info(f"Loaded {len(listings)} listings from {checkpoint_path}")
    return ingest_listings(db, listings, normalizer)
