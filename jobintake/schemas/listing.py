"""
Pydantic schema for a crawled listing, before normalization.
"""
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator


class RawListing(BaseModel):
    """
    One job page as extracted from the source site.

    Free-text fields are kept exactly as scraped; the normalizer owns all
    interpretation. ``title`` and ``company`` are mandatory.
    """
    url: str = Field(..., description="Source URL, unique per source")
    title: str
    company: str
    company_logo: Optional[str] = None
    location: str = ""
    salary: str = ""
    job_type: str = ""
    category: str = ""
    description: str = ""
    requirements: List[str] = Field(default_factory=list)
    benefits: List[str] = Field(default_factory=list)
    skills: List[str] = Field(default_factory=list)
    expires_at: Optional[str] = None
    posted_date: Optional[str] = None
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None

    @field_validator("title", "company")
    @classmethod
    def must_not_be_blank(cls, value: str) -> str:
        value = (value or "").strip()
        if not value:
            raise ValueError("must not be empty")
        return value
