"""
Public quick-post endpoint.

Anyone can submit; submissions are rate limited per client IP, scored for
spam, and stored as pending until an admin approves them.
"""
import logging
from typing import Optional
from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, status
from sqlalchemy.orm import Session

from jobintake.core.auth_dependency import get_db, get_optional_poster_id
from jobintake.core.config import QUICKPOST_RATE_LIMIT, QUICKPOST_RATE_WINDOW_SECONDS
from jobintake.core.errors import SpamRejectedError
from jobintake.core.rate_limit import FixedWindowRateLimiter, rate_limit_dependency
from jobintake.schemas.job import JobResponse, QuickPostCreate, QuickPostResponse
from jobintake.services.notifications import dispatch_notification
from jobintake.services.quickpost_service import submit_quick_post

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/quick-posts", tags=["Quick Posts"])

quickpost_limiter = FixedWindowRateLimiter(QUICKPOST_RATE_LIMIT, QUICKPOST_RATE_WINDOW_SECONDS)


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=QuickPostResponse,
    dependencies=[Depends(rate_limit_dependency(quickpost_limiter))],
)
def create_quick_post(
    payload: QuickPostCreate,
    background: BackgroundTasks,
    poster_id: Optional[str] = Depends(get_optional_poster_id),
    db: Session = Depends(get_db)
):
    """
    Submit a job without an employer account.
    
    Returns 400 with the spam reason when the submission is rejected;
    nothing is stored in that case.
    """
    try:
        outcome = submit_quick_post(db, payload, poster_id=poster_id)
    except SpamRejectedError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "message": "Submission rejected by spam filter.",
                "reason": e.result.reason,
                "score": e.result.score,
            }
        )
    except Exception as e:
        db.rollback()
        logger.error(f"Failed to create quick post: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to submit job"
        )

    if outcome.notification is not None:
        background.add_task(dispatch_notification, outcome.notification)

    return QuickPostResponse(
        message="Job submitted successfully! Waiting for admin approval.",
        job=JobResponse.model_validate(outcome.job),
    )
