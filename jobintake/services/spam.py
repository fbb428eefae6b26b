"""
Rule-based spam scoring for quick-post submissions.

Every rule is independent and adds a fixed weight when it fires; the fired
rules' reasons are joined into a human-readable explanation so moderators
can see exactly why a post was scored the way it was.
"""
import re
import unicodedata
from dataclasses import dataclass, field
from typing import Callable, List, Optional

SPAM_THRESHOLD = 50
MAX_SCORE = 100

SPAM_KEYWORDS = [
    "campuchia",
    "cambodia",
    "lừa đảo",
    "scam",
    "chuyển tiền",
    "western union",
    "moneygram",
    "đầu tư",
    "kiếm tiền online",
    "mlm",
    "đa cấp",
    "bán thận",
    "hiến thận",
    "việc nhẹ lương cao",
    "không cần kinh nghiệm",
    "bitcoin",
    "forex",
]

SUSPICIOUS_PHONE_PATTERNS = [
    re.compile(r"^\+855"),      # Cambodia
    re.compile(r"^\+84\s*0"),   # +84 followed by the domestic trunk prefix
    re.compile(r"^84\s*0"),
]

URL_SHORTENERS = ["bit.ly", "tinyurl.com", "goo.gl", "t.co"]

URL_RE = re.compile(r"(?:https?://|www\.)\S+", re.IGNORECASE)
SHORTENER_RE = re.compile(
    r"(?<![\w.-])(?:" + "|".join(re.escape(domain) for domain in URL_SHORTENERS) + r")(?![\w-])",
    re.IGNORECASE,
)
EMOJI_RE = re.compile("[\U0001F300-\U0001FAFF\U0001F1E6-\U0001F1FF\u2600-\u27BF]")

MAX_URLS = 2
MAX_EMOJIS = 10
CAPS_RATIO = 0.5
CAPS_MIN_LENGTH = 20


@dataclass(frozen=True)
class Submission:
    title: str
    description: str
    phone: Optional[str] = None


@dataclass(frozen=True)
class SpamRule:
    name: str
    weight: int
    reason: str
    check: Callable[[Submission], bool]


@dataclass
class SpamCheckResult:
    is_spam: bool
    score: int
    reason: str
    matched: List[str] = field(default_factory=list)


def _fold(text: str) -> str:
    return unicodedata.normalize("NFC", text or "").lower()


def contains_spam_keywords(text: str) -> bool:
    folded = _fold(text)
    return any(keyword in folded for keyword in SPAM_KEYWORDS)


def is_suspicious_phone(phone: Optional[str]) -> bool:
    if not phone:
        return False
    phone = phone.strip()
    return any(pattern.search(phone) for pattern in SUSPICIOUS_PHONE_PATTERNS)


def caps_ratio(text: str) -> float:
    letters = [char for char in text if char.isalpha()]
    if not letters:
        return 0.0
    return sum(1 for char in letters if char.isupper()) / len(letters)


def has_excessive_caps(text: str) -> bool:
    return len(text) > CAPS_MIN_LENGTH and caps_ratio(text) > CAPS_RATIO


def count_emojis(text: str) -> int:
    return len(EMOJI_RE.findall(text))


def count_urls(text: str) -> int:
    return len(URL_RE.findall(text))


def has_url_shortener(text: str) -> bool:
    return SHORTENER_RE.search(text) is not None


SPAM_RULES: List[SpamRule] = [
    SpamRule("title_keyword", 50, "Spam keywords in title",
             lambda s: contains_spam_keywords(s.title)),
    SpamRule("description_keyword", 40, "Spam keywords in description",
             lambda s: contains_spam_keywords(s.description)),
    SpamRule("suspicious_phone", 30, "Suspicious phone number",
             lambda s: is_suspicious_phone(s.phone)),
    SpamRule("excessive_caps", 20, "Excessive capital letters",
             lambda s: has_excessive_caps(s.description)),
    SpamRule("too_many_emojis", 15, "Too many emojis",
             lambda s: count_emojis(s.description) > MAX_EMOJIS),
    SpamRule("multiple_urls", 25, "Multiple URLs detected",
             lambda s: count_urls(s.description) > MAX_URLS),
    SpamRule("url_shortener", 30, "URL shortener detected",
             lambda s: has_url_shortener(s.description)),
]


def is_spam_score(score: int) -> bool:
    return score >= SPAM_THRESHOLD


def evaluate(submission: Submission, rules: List[SpamRule] = None) -> SpamCheckResult:
    """Run every rule against ``submission`` and sum the weights of those that fire."""
    rules = SPAM_RULES if rules is None else rules
    fired = [rule for rule in rules if rule.check(submission)]
    score = min(MAX_SCORE, sum(rule.weight for rule in fired))
    return SpamCheckResult(
        is_spam=is_spam_score(score),
        score=score,
        reason=", ".join(rule.reason for rule in fired),
        matched=[rule.name for rule in fired],
    )


def score_submission(title: str, description: str, contact_info=None) -> SpamCheckResult:
    """
    Score a quick-post submission.

    ``contact_info`` may be a ContactInfo model, a dict, or None.
    """
    phone = None
    if contact_info is not None:
        phone = contact_info.get("phone") if isinstance(contact_info, dict) else getattr(contact_info, "phone", None)
    return evaluate(Submission(title=title or "", description=description or "", phone=phone))
