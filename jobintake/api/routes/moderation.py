"""
Admin moderation endpoints: list the pending queue, approve, reject, close.

Notifications produced by a transition are sent after the response as
background tasks, so email failures never undo a committed decision.
"""
import logging
from typing import Optional
from fastapi import APIRouter, BackgroundTasks, Body, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from jobintake.core.auth_dependency import get_db, require_admin
from jobintake.core.errors import InvalidTransitionError, JobNotFoundError
from jobintake.db.models.job import JobSource
from jobintake.schemas.job import JobListResponse, JobResponse, ModerationResponse, RejectRequest
from jobintake.services.moderation import ModerationGate, ModerationResult
from jobintake.services.notifications import dispatch_notification

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin/jobs", tags=["Moderation"])


def _translate(e: Exception) -> HTTPException:
    if isinstance(e, JobNotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Job not found")
    if isinstance(e, InvalidTransitionError):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    logger.error(f"Moderation action failed: {e}", exc_info=True)
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Moderation action failed")


def _schedule(result: ModerationResult, background: BackgroundTasks) -> None:
    if result.notification is not None:
        background.add_task(dispatch_notification, result.notification)


@router.get("/pending", response_model=JobListResponse)
def list_pending_jobs(
    source: Optional[JobSource] = Query(None, description="Filter by provenance"),
    admin: str = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Pending jobs waiting for moderation, newest first."""
    try:
        jobs = ModerationGate(db).list_pending(source=source.value if source else None)
    except Exception as e:
        raise _translate(e)
    return JobListResponse(jobs=[JobResponse.model_validate(job) for job in jobs], count=len(jobs))


@router.patch("/{job_id}/approve", response_model=ModerationResponse)
def approve_job(
    job_id: int,
    background: BackgroundTasks,
    admin: str = Depends(require_admin),
    db: Session = Depends(get_db)
):
    try:
        result = ModerationGate(db).approve(job_id)
    except Exception as e:
        db.rollback()
        raise _translate(e)
    logger.info(f"Approved by {admin}: job_id={job_id}")
    _schedule(result, background)
    return ModerationResponse(message="Job approved and published!", job=JobResponse.model_validate(result.job))


@router.patch("/{job_id}/reject", response_model=ModerationResponse)
def reject_job(
    job_id: int,
    background: BackgroundTasks,
    body: Optional[RejectRequest] = Body(None),
    admin: str = Depends(require_admin),
    db: Session = Depends(get_db)
):
    reason = body.reason if body else None
    try:
        result = ModerationGate(db).reject(job_id, reason=reason)
    except Exception as e:
        db.rollback()
        raise _translate(e)
    logger.info(f"Rejected by {admin}: job_id={job_id}")
    _schedule(result, background)
    return ModerationResponse(message="Job rejected.")


@router.patch("/{job_id}/close", response_model=ModerationResponse)
def close_job(
    job_id: int,
    admin: str = Depends(require_admin),
    db: Session = Depends(get_db)
):
    try:
        result = ModerationGate(db).close(job_id)
    except Exception as e:
        db.rollback()
        raise _translate(e)
    return ModerationResponse(message="Job closed.", job=JobResponse.model_validate(result.job))
