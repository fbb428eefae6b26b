"""
Database models module.

This module imports all database models to ensure they are registered with SQLAlchemy's Base.metadata
before table creation.
"""
from jobintake.db.models.job import Job, JobSource, JobStatus

__all__ = [
    "Job",
    "JobSource",
    "JobStatus",
]
