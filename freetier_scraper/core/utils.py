"""
Utility functions for text normalisation, number parsing and timestamps
"""
import re
import logging
from datetime import datetime, timezone
from typing import Optional

from bs4 import BeautifulSoup
from dateutil import parser as date_parser

logger = logging.getLogger(__name__)

# A limit as printed on pricing pages: "3,000", "12,000,000" or "150".
# The lookbehind keeps "13000" from matching as "3000".
NUMBER = r'(?<![\d,])(\d{1,3}(?:,\d{3})+|\d+)'

NBSP_PATTERN = re.compile(r'[\u00a0\u202f\u2007]')
WHITESPACE_PATTERN = re.compile(r'\s+')
MARKUP_PATTERN = re.compile(r'<\s*[a-zA-Z!/]')

def looks_like_markup(text: str) -> bool:
    """True when the text contains at least one HTML tag"""
    return bool(text) and bool(MARKUP_PATTERN.search(text))

def html_to_text(html: str) -> str:
    """Reduce an HTML document to its visible text"""
    soup = BeautifulSoup(html, 'html.parser')

    # Remove script and style elements
    for element in soup(["script", "style", "noscript"]):
        element.decompose()

    return soup.get_text(" ")

def normalize_page_text(raw: str, strip_markup: bool = True,
                        collapse_whitespace: bool = True) -> str:
    """
    Normalise raw page text before any extraction rule sees it

    Examples:
    - "3,000\\u00a0emails" -> "3,000 emails"
    - "<li>150</li>\\n<li>emails/day</li>" -> "150 emails/day"
    """
    if not raw:
        return ""

    text = NBSP_PATTERN.sub(' ', str(raw))

    if strip_markup and looks_like_markup(text):
        text = NBSP_PATTERN.sub(' ', html_to_text(text))

    if collapse_whitespace:
        text = WHITESPACE_PATTERN.sub(' ', text).strip()

    return text

def parse_limit(raw: Optional[str]) -> Optional[int]:
    """
    Parse a sending limit, stripping thousands separators

    Examples:
    - "3,000" -> 3000
    - "150" -> 150
    - "0" -> None (not a usable limit)
    """
    if raw is None:
        return None

    cleaned = str(raw).strip().replace(',', '')
    if not cleaned.isdigit():
        return None

    value = int(cleaned)
    return value if value > 0 else None

def utc_now_iso() -> str:
    """Current UTC time as an ISO-8601 string, e.g. 2025-10-19T06:00:00.000Z"""
    return format_timestamp(datetime.now(timezone.utc))

def format_timestamp(moment: datetime) -> str:
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    moment = moment.astimezone(timezone.utc)
    return moment.isoformat(timespec='milliseconds').replace('+00:00', 'Z')

def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp from a snapshot; None when absent or unreadable"""
    if not value:
        return None

    try:
        moment = date_parser.isoparse(value)
    except (ValueError, OverflowError) as e:
        logger.debug(f"Unreadable timestamp {value!r}: {e}")
        return None

    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment
