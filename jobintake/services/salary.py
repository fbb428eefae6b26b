"""
Salary text parsing.

Turns free-text salary strings from Vietnamese job boards ("10-15 triệu",
"1000-1500$", "Thỏa thuận", "25,000 VNĐ/giờ") into an integer VND range.
The heuristic is deliberately lossy; the tests pin the ambiguous cases.
"""
import re
import unicodedata
from dataclasses import dataclass
from typing import Optional

NEGOTIABLE_TEXT = "Thỏa thuận"
NEGOTIABLE_KEYWORDS = ("thỏa thuận", "thoả thuận", "thỏa", "negotiate", "negotiable", "deal")

USD_TO_VND = 23_000
MILLION = 1_000_000
THOUSAND = 1_000
# Bare numbers below this are assumed to be written in millions ("10 - 15")
MILLIONS_THRESHOLD = 100_000
# Anything above this is a scraping artefact, not a salary; bounds are dropped
MAX_PLAUSIBLE_VND = 10 ** 12

# "tr" and "k" only count as standalone tokens ("10tr", "50k"), not inside words like "trên"
_LETTER = r"[^\W\d_]"
MILLION_RE = re.compile(rf"triệu|(?<!{_LETTER})tr(?!{_LETTER})")
USD_RE = re.compile(r"\$|usd")
THOUSAND_RE = re.compile(rf"nghìn|ngàn|(?<!{_LETTER})k(?!{_LETTER})")
VND_RE = re.compile(r"vnđ|vnd|đồng")

RANGE_RE = re.compile(r"(\d+(?:\.\d+)?)\s*(?:k|tr|triệu|\$|usd)?\s*[-–]\s*\$?\s*(\d+(?:\.\d+)?)")
NUMBER_RE = re.compile(r"(\d+(?:\.\d+)?)")
# "10.000.000" style grouping; a single dot followed by 1-2 digits is a decimal
DOT_GROUPING_RE = re.compile(r"(?<=\d)\.(?=\d{3}(?!\d))")


@dataclass(frozen=True)
class SalaryRange:
    min: Optional[int]
    max: Optional[int]
    text: str


def _multiplier(text: str) -> Optional[int]:
    """Unit multiplier implied by the text, or None when no unit is present."""
    if MILLION_RE.search(text):
        return MILLION
    if USD_RE.search(text):
        return USD_TO_VND
    if THOUSAND_RE.search(text):
        return THOUSAND
    if VND_RE.search(text):
        return 1
    return None


def _scale(value: float, multiplier: Optional[int]) -> float:
    if multiplier is None:
        multiplier = MILLION if value < MILLIONS_THRESHOLD else 1
    return value * multiplier


def _bounded(low: float, high: Optional[float], original: str) -> SalaryRange:
    # A huge digit run parses to inf, which also fails this check
    if low > MAX_PLAUSIBLE_VND or (high is not None and high > MAX_PLAUSIBLE_VND):
        return SalaryRange(min=None, max=None, text=original)
    return SalaryRange(
        min=int(round(low)),
        max=int(round(high)) if high is not None else None,
        text=original,
    )


def _strip_grouping(text: str) -> str:
    return DOT_GROUPING_RE.sub("", text.replace(",", ""))


def parse_salary(salary_text: str) -> SalaryRange:
    """
    Parse a salary string into ``SalaryRange(min, max, text)`` in VND.

    Order of checks:
      1. negotiable keywords -> no bounds, text "Thỏa thuận"
      2. "min-max" range (hyphen or en-dash), scaled by unit
      3. single number, scaled by unit, no max
      4. anything else -> original text only

    Units: "triệu"/"tr" x1,000,000; "$"/"usd" x23,000; "k"/"nghìn" x1,000;
    an explicit dong marker keeps the figure as-is; with no unit, numbers
    below 100,000 are read as millions. Figures above MAX_PLAUSIBLE_VND keep only
    the text.
    """
    original = (salary_text or "").strip()
    text = unicodedata.normalize("NFC", original).lower()

    if any(keyword in text for keyword in NEGOTIABLE_KEYWORDS):
        return SalaryRange(min=None, max=None, text=NEGOTIABLE_TEXT)

    clean = _strip_grouping(text)
    multiplier = _multiplier(clean)

    match = RANGE_RE.search(clean)
    if match:
        low, high = float(match.group(1)), float(match.group(2))
        if multiplier is None:
            # Both bounds share the unit implied by the lower one
            multiplier = MILLION if low < MILLIONS_THRESHOLD else 1
        return _bounded(_scale(low, multiplier), _scale(high, multiplier), original)

    single = NUMBER_RE.search(clean)
    if single:
        return _bounded(_scale(float(single.group(1)), multiplier), None, original)

    return SalaryRange(min=None, max=None, text=original)
