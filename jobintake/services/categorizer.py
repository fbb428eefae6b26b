"""
External job categorization.

The normalizer only calls this when its keyword rules find no category.
Implementations raise on any failure; the caller decides the fallback.
"""
import logging
from abc import ABC, abstractmethod
from typing import Optional

from jobintake.core.config import AI_TIMEOUT_SECONDS, OPENAI_API_KEY, OPENAI_MODEL
from jobintake.core.errors import CategorizationError

logger = logging.getLogger(__name__)

VALID_CATEGORIES = [
    "it-software",
    "marketing",
    "sales",
    "design",
    "finance",
    "hr",
    "healthcare",
    "education",
    "food-service",
    "retail",
    "logistics",
    "construction",
    "manufacturing",
    "other",
]


class Categorizer(ABC):
    """Abstract black-box classifier: (title, description) -> category label."""

    @abstractmethod
    def classify(self, title: str, description: str) -> str:
        """
        Return a free-form category label for the job.
        
        Raises:
            CategorizationError: (or any transport error) when no label can be produced
        """
        pass


class OpenAICategorizer(Categorizer):
    """Categorizer backed by the OpenAI chat completions API."""

    def __init__(self, api_key: Optional[str] = None, model: str = OPENAI_MODEL,
                 timeout: float = AI_TIMEOUT_SECONDS, client=None):
        self.model = model
        if client is not None:
            self.client = client
            return
        api_key = api_key or OPENAI_API_KEY
        if not api_key:
            raise CategorizationError("OPENAI_API_KEY not configured")
        from openai import OpenAI
        self.client = OpenAI(api_key=api_key, timeout=timeout, max_retries=1)
        logger.info("OpenAI categorizer initialized")

    def build_prompt(self, title: str, description: str) -> str:
        categories = ", ".join(c for c in VALID_CATEGORIES if c != "other")
        return f"""Classify this job posting into exactly one of these categories:
{categories}

If none fits, answer "other".

Title: {title}
Description: {(description or "N/A")[:500]}

Answer with the category name only, no punctuation or explanation."""

    def classify(self, title: str, description: str) -> str:
        response = self.client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": "You are a job classification assistant for a Vietnamese job board."},
                {"role": "user", "content": self.build_prompt(title, description)},
            ],
            temperature=0.3,
            max_tokens=20,
        )
        label = (response.choices[0].message.content or "").strip().strip('."\'')
        if not label:
            raise CategorizationError(f"Empty category label for '{title}'")
        logger.debug(f"AI categorized '{title}' as '{label}'")
        return label


def get_default_categorizer() -> Optional[Categorizer]:
    """OpenAI categorizer when an API key is configured, else None."""
    if not OPENAI_API_KEY:
        logger.info("OPENAI_API_KEY not configured - uncategorized jobs fall back to 'other'")
        return None
    try:
        return OpenAICategorizer()
    except Exception as e:
        logger.warning(f"Failed to initialize OpenAI categorizer: {e}, falling back to rule-based only")
        return None
