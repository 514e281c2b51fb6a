"""
Base extractor class and the candidate pattern used by every text rule
"""
import re
import logging
from abc import ABC, abstractmethod
from typing import Iterator, Optional

from ..config.schema import ExtractionResult, LimitRange
from ..core.utils import parse_limit

logger = logging.getLogger(__name__)

FIRST = "first"
SMALLEST = "smallest"

class AnchorPattern:
    """
    One candidate regex for a single limit

    The first capture group holds the number. With ``select=FIRST`` the first
    usable occurrence wins; ``select=SMALLEST`` scans every occurrence and keeps
    the smallest, which suits generic last-resort patterns on pages that list
    paid tiers next to the free one.
    """

    def __init__(self, pattern: str, select: str = FIRST, bounds: Optional[LimitRange] = None):
        if select not in (FIRST, SMALLEST):
            raise ValueError(f"Unknown selection mode: {select}")
        self.regex = re.compile(pattern, re.IGNORECASE | re.DOTALL)
        self.select = select
        self.bounds = bounds

    def values(self, text: str) -> Iterator[int]:
        """Yield every positive, in-bounds value in page order"""
        for match in self.regex.finditer(text):
            value = parse_limit(match.group(1))
            if value is None:
                continue
            if self.bounds is not None and value not in self.bounds:
                continue
            yield value

    def find(self, text: str, bounds: Optional[LimitRange] = None) -> Optional[int]:
        """Return the selected value, additionally filtered by the caller's bounds"""
        candidates = (v for v in self.values(text) if bounds is None or v in bounds)

        if self.select == SMALLEST:
            return min(candidates, default=None)
        return next(candidates, None)

    def __repr__(self):
        return f"AnchorPattern({self.regex.pattern!r}, select={self.select!r})"

def first_value(patterns, text: str, bounds: Optional[LimitRange] = None) -> Optional[int]:
    """Try patterns in priority order; the first one yielding a value wins"""
    for pattern in patterns:
        value = pattern.find(text, bounds)
        if value is not None:
            logger.debug(f"Matched {value} with {pattern!r}")
            return value
    return None

class BaseExtractor(ABC):
    """Abstract base class for all provider extraction rules"""

    # Normalisation the rule expects from the registry
    strip_markup = True
    collapse_whitespace = True

    def __init__(self, note: Optional[str] = None):
        self.note = note

    @abstractmethod
    def extract(self, text: str) -> Optional[ExtractionResult]:
        """
        Parse normalised page text into candidate limits

        Returns:
            ExtractionResult with both limits positive, or None when nothing
            usable was found. Never raises for unexpected page content.
        """
        pass
