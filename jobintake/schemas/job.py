"""
Pydantic schemas for normalized jobs, quick-post submissions and moderation endpoints.
"""
from typing import List, Literal, Optional
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from jobintake.db.models.job import JobSource, JobStatus


class ContactInfo(BaseModel):
    """How to reach a quick-post poster. At least phone or email is required."""
    phone: Optional[str] = Field(None, pattern=r"^\+?[0-9][0-9 .\-]{7,16}$")
    zalo: Optional[str] = Field(None, max_length=50)
    facebook: Optional[str] = Field(None, max_length=255)
    email: Optional[str] = Field(None, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$", max_length=255)

    @model_validator(mode="after")
    def require_phone_or_email(self):
        if not self.phone and not self.email:
            raise ValueError("At least phone or email is required")
        return self


class NormalizedJob(BaseModel):
    """
    Canonical job record produced by the normalizer, before persistence.

    Non-featured jobs have exactly one provenance: an ``external_url``
    (crawled) or a ``contact_info``/``poster_id`` (quick-post).
    """
    title: str
    company_name: str
    company_logo: Optional[str] = None
    location: str = ""
    salary_min: Optional[int] = None
    salary_max: Optional[int] = None
    salary_text: str = ""
    job_type_id: str = "full-time"
    category_id: str = "other"
    category_method: Optional[str] = None
    description: str = ""
    requirements: List[str] = Field(default_factory=list)
    benefits: List[str] = Field(default_factory=list)
    skills: List[str] = Field(default_factory=list)
    source: JobSource
    external_url: Optional[str] = None
    status: JobStatus = JobStatus.PENDING
    is_verified: bool = False
    poster_id: Optional[str] = None
    spam_score: Optional[int] = Field(None, ge=0, le=100)
    moderation_note: Optional[str] = None
    contact_info: Optional[ContactInfo] = None
    expires_at: Optional[datetime] = None

    @model_validator(mode="after")
    def check_invariants(self):
        if self.status == JobStatus.ACTIVE and not self.is_verified:
            raise ValueError("active jobs must be verified")
        if self.source != JobSource.FEATURED:
            crawled = self.external_url is not None
            posted = self.contact_info is not None or self.poster_id is not None
            if crawled == posted:
                raise ValueError("job must have either an external_url or poster contact details, not both")
        return self


class JobResponse(BaseModel):
    """Schema for job response."""
    id: int
    title: str
    company_name: str
    company_logo: Optional[str] = None
    location: str
    salary_min: Optional[int] = None
    salary_max: Optional[int] = None
    salary_text: str
    job_type_id: str
    category_id: str
    description: str
    requirements: List[str] = Field(default_factory=list)
    benefits: List[str] = Field(default_factory=list)
    skills: List[str] = Field(default_factory=list)
    source: str
    external_url: Optional[str] = None
    status: str
    is_verified: bool
    poster_id: Optional[str] = None
    spam_score: Optional[int] = None
    moderation_note: Optional[str] = None
    contact_info: Optional[dict] = None
    created_at: datetime
    updated_at: datetime
    expires_at: Optional[datetime] = None
    
    class Config:
        from_attributes = True


class JobListResponse(BaseModel):
    """Schema for the moderation queue."""
    jobs: list[JobResponse] = Field(..., description="Pending jobs, newest first")
    count: int = Field(..., description="Number of jobs returned")


class QuickPostCreate(BaseModel):
    """
    Anonymous quick-post submission, as sent by the mobile client (camelCase).
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    title: str = Field(..., min_length=10, max_length=200)
    description: str = Field(..., min_length=20, max_length=2000)
    company: Optional[str] = Field(None, max_length=100)
    location: str = Field(..., min_length=1, max_length=200)
    salary: Optional[str] = Field(None, max_length=100, description='e.g. "50k-70k/giờ", "5-7 triệu"')
    hourly_rate: Optional[float] = Field(None, ge=0)
    work_schedule: Optional[str] = Field(None, max_length=200)
    type: Literal["full-time", "part-time", "contract", "internship"] = "part-time"
    category: Optional[str] = Field(None, max_length=100)
    contact_info: ContactInfo


class QuickPostResponse(BaseModel):
    message: str
    job: JobResponse


class RejectRequest(BaseModel):
    reason: Optional[str] = Field(None, max_length=500)


class ModerationResponse(BaseModel):
    message: str
    job: Optional[JobResponse] = None
