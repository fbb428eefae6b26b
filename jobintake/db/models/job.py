"""
Job model: the single normalized, moderated record produced by both the
crawl pipeline and quick-post submissions.
"""
import enum
from sqlalchemy import Column, Integer, BigInteger, String, Text, DateTime, Boolean, JSON, Index
from sqlalchemy.sql import func
from jobintake.db.base import Base


class JobSource(str, enum.Enum):
    """Where a job record came from."""
    CRAWLED = "crawled"
    QUICK_POST = "quick-post"
    FEATURED = "featured"


class JobStatus(str, enum.Enum):
    """Visibility lifecycle; only ACTIVE jobs are public."""
    PENDING = "pending"
    ACTIVE = "active"
    REJECTED = "rejected"
    CLOSED = "closed"


class Job(Base):
    """
    Persisted NormalizedJob.

    Crawled rows carry ``external_url``; quick-post rows carry ``contact_info``
    and optionally ``poster_id``. ``status='active'`` implies ``is_verified``.
    """
    __tablename__ = "jobs"

    id = Column(Integer, primary_key=True, index=True)

    title = Column(String, nullable=False, index=True)
    company_name = Column(String, nullable=False, index=True)
    company_logo = Column(String, nullable=True)
    location = Column(String, nullable=False, default="")

    # Salary in VND, with the source text kept as a fallback for display
    salary_min = Column(BigInteger, nullable=True)
    salary_max = Column(BigInteger, nullable=True)
    salary_text = Column(String, nullable=False, default="")

    job_type_id = Column(String, nullable=False, default="full-time")
    category_id = Column(String, nullable=False, default="other", index=True)
    category_method = Column(String, nullable=True)  # rule | ai | fallback

    description = Column(Text, nullable=False, default="")
    requirements = Column(JSON, nullable=False, default=list)
    benefits = Column(JSON, nullable=False, default=list)
    skills = Column(JSON, nullable=False, default=list)

    # Provenance
    source = Column(String, nullable=False, index=True)
    external_url = Column(String, nullable=True, unique=True)
    poster_id = Column(String, nullable=True, index=True)
    contact_info = Column(JSON, nullable=True)
    dedup_key = Column(String, nullable=False, index=True)

    # Moderation
    status = Column(String, nullable=False, default=JobStatus.PENDING.value, index=True)
    is_verified = Column(Boolean, nullable=False, default=False)
    spam_score = Column(Integer, nullable=True)
    moderation_note = Column(Text, nullable=True)

    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        Index('idx_status_created', 'status', 'created_at'),
        Index('idx_source_status', 'source', 'status'),
    )

    @property
    def contact_email(self):
        return (self.contact_info or {}).get("email") or None

    def __repr__(self):
        return f"<Job(id={self.id}, title='{self.title}', source='{self.source}', status='{self.status}')>"
