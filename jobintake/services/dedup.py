"""
In-batch deduplication of normalized jobs.

Two jobs are the same posting when their case-insensitive
(title, company, location) match. This only protects a single batch;
cross-run protection is the job store's dedup_key lookup.
"""
import logging
from typing import Iterable, List

from jobintake.schemas.job import NormalizedJob

logger = logging.getLogger(__name__)


def dedup_key(title: str, company_name: str, location: str) -> str:
    return f"{title}|{company_name}|{location}".lower()


def job_dedup_key(job: NormalizedJob) -> str:
    return dedup_key(job.title, job.company_name, job.location)


def dedupe(jobs: Iterable[NormalizedJob]) -> List[NormalizedJob]:
    """Keep the first job for each dedup key, in input order."""
    seen = set()
    unique: List[NormalizedJob] = []
    total = 0
    for job in jobs:
        total += 1
        key = job_dedup_key(job)
        if key in seen:
            logger.debug(f"Dropping duplicate posting: {key}")
            continue
        seen.add(key)
        unique.append(job)

    logger.info(f"Deduplicated: {total} -> {len(unique)} unique jobs")
    return unique
