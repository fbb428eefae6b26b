"""
Quick-post submission: spam check, lightweight normalization, persistence.

Payload validation (required fields, contact details) already happened in
the QuickPostCreate schema before anything here runs.
"""
import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.orm import Session

from jobintake.core.errors import SpamRejectedError
from jobintake.core.logging_config import sanitize_log_data
from jobintake.db.models.job import Job
from jobintake.schemas.job import QuickPostCreate
from jobintake.services import job_store
from jobintake.services.normalizer import Normalizer
from jobintake.services.notifications import Notification, received_notification
from jobintake.services.spam import SpamCheckResult, score_submission

logger = logging.getLogger(__name__)


@dataclass
class QuickPostOutcome:
    job: Job
    spam: SpamCheckResult
    notification: Optional[Notification] = None


def submit_quick_post(db: Session, payload: QuickPostCreate, poster_id: Optional[str] = None,
                      normalizer: Optional[Normalizer] = None) -> QuickPostOutcome:
    """
    Score and persist a quick-post as ``pending``.

    Raises:
        SpamRejectedError: score at or above the spam threshold; nothing is stored
    """
    spam = score_submission(payload.title, payload.description, payload.contact_info)
    if spam.is_spam:
        logger.warning(f"Quick-post rejected as spam: score={spam.score}, rules={spam.matched}")
        logger.debug(f"Rejected payload: {sanitize_log_data(payload.model_dump())}")
        raise SpamRejectedError(spam)

    normalizer = normalizer or Normalizer()
    normalized = normalizer.normalize_quick_post(
        payload,
        spam_score=spam.score,
        spam_reason=spam.reason,
        poster_id=poster_id,
    )
    job = job_store.create_job(db, normalized)
    logger.info(f"Quick-post queued for moderation: job_id={job.id}, spam_score={spam.score}")

    return QuickPostOutcome(
        job=job,
        spam=spam,
        notification=received_notification(payload.contact_info.email, job.title),
    )
