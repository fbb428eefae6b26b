"""
Moderation Gate: the only way a job becomes publicly visible.

Transitions (admin-triggered only):
    pending --approve--> active     (is_verified=True, "approved" email)
    pending --reject---> rejected   (row deleted, "rejected" email with reason)
    active  --close----> closed

The state change is committed first and is the system of record. The
returned notification is dispatched separately and may fail without
affecting the transition.
"""
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from jobintake.core.errors import InvalidTransitionError, JobNotFoundError
from jobintake.db.models.job import Job, JobStatus
from jobintake.services import job_store
from jobintake.services.notifications import Notification, approved_notification, rejected_notification

logger = logging.getLogger(__name__)

APPROVE = "approve"
REJECT = "reject"
CLOSE = "close"

TRANSITIONS: Dict[Tuple[str, str], str] = {
    (JobStatus.PENDING.value, APPROVE): JobStatus.ACTIVE.value,
    (JobStatus.PENDING.value, REJECT): JobStatus.REJECTED.value,
    (JobStatus.ACTIVE.value, CLOSE): JobStatus.CLOSED.value,
}


def next_status(current: str, action: str) -> Optional[str]:
    return TRANSITIONS.get((current, action))


@dataclass
class ModerationResult:
    job_id: int
    status: str
    job: Optional[Job] = None
    notification: Optional[Notification] = None


class ModerationGate:
    def __init__(self, db: Session):
        self.db = db

    def list_pending(self, source: Optional[str] = None) -> List[Job]:
        return job_store.list_jobs(self.db, status=JobStatus.PENDING.value, source=source)

    def _load(self, job_id: int, action: str) -> Tuple[Job, str]:
        job = job_store.get_job(self.db, job_id)
        if job is None:
            raise JobNotFoundError(job_id)
        target = next_status(job.status, action)
        if target is None:
            raise InvalidTransitionError(job_id, job.status, action)
        return job, target

    def approve(self, job_id: int) -> ModerationResult:
        job, target = self._load(job_id, APPROVE)
        job.status = target
        job.is_verified = True
        self.db.commit()
        self.db.refresh(job)
        logger.info(f"Job approved: job_id={job.id}, source={job.source}")
        return ModerationResult(
            job_id=job.id,
            status=job.status,
            job=job,
            notification=approved_notification(job.contact_email, job.title),
        )

    def reject(self, job_id: int, reason: Optional[str] = None) -> ModerationResult:
        job, target = self._load(job_id, REJECT)
        # Build the notification before the row disappears
        notification = rejected_notification(job.contact_email, job.title, reason)
        job_store.delete_job(self.db, job)
        logger.info(f"Job rejected and deleted: job_id={job_id}, reason={reason or 'N/A'}")
        return ModerationResult(job_id=job_id, status=target, notification=notification)

    def close(self, job_id: int) -> ModerationResult:
        job, target = self._load(job_id, CLOSE)
        job.status = target
        self.db.commit()
        self.db.refresh(job)
        logger.info(f"Job closed: job_id={job.id}")
        return ModerationResult(job_id=job.id, status=job.status, job=job)
