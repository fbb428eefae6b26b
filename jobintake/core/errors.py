"""
Domain exceptions for the ingestion pipeline and moderation gate.

Routes translate these into HTTP errors; the crawl batch logs and skips
per-record failures but lets store failures propagate to the operator.
"""


class JobIntakeError(Exception):
    """Base class for all job intake errors."""


class FetchError(JobIntakeError):
    """A source page could not be fetched after all retries."""

    def __init__(self, url: str, attempts: int, cause: Exception = None):
        self.url = url
        self.attempts = attempts
        self.cause = cause
        super().__init__(f"Failed to fetch {url} after {attempts} attempt(s): {cause}")


class CategorizationError(JobIntakeError):
    """The external categorization service failed or returned nothing usable."""


class JobNotFoundError(JobIntakeError):
    def __init__(self, job_id: int):
        self.job_id = job_id
        super().__init__(f"Job {job_id} not found")


class InvalidTransitionError(JobIntakeError):
    """A moderation action is not allowed from the job's current status."""

    def __init__(self, job_id: int, status: str, action: str):
        self.job_id = job_id
        self.status = status
        self.action = action
        super().__init__(f"Cannot {action} job {job_id} in status '{status}'")


class SpamRejectedError(JobIntakeError):
    """A quick-post submission scored at or above the spam threshold."""

    def __init__(self, result):
        self.result = result
        super().__init__(f"Submission rejected as spam (score={result.score}): {result.reason}")
