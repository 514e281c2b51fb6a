"""
Extraction strategies shared by the provider rules

Free-tier phrasing differs between vendors, but every page so far falls into
one of four shapes:

- month-anchored: a monthly figure near "Free" or a plan name, daily derived
- day-anchored: a daily figure near "per day", monthly derived
- dual-anchored: both figures located separately and range-checked
- fixed/structured: a contractual constant or a JSON plans payload
"""
import json
import logging
import re
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from ..config.schema import ExtractionResult, LimitRange
from ..core.utils import parse_limit
from .base_extractor import AnchorPattern, BaseExtractor, first_value

logger = logging.getLogger(__name__)

DAYS_PER_MONTH = 30

class MonthAnchoredExtractor(BaseExtractor):
    """Locate the monthly allowance; daily = floor(monthly / daily_divisor)"""

    def __init__(self, patterns: Sequence[AnchorPattern], note: Optional[str] = None,
                 daily_divisor: int = DAYS_PER_MONTH, bounds: Optional[LimitRange] = None):
        super().__init__(note)
        self.patterns = list(patterns)
        self.daily_divisor = daily_divisor
        self.bounds = bounds

    def extract(self, text: str) -> Optional[ExtractionResult]:
        monthly = first_value(self.patterns, text, self.bounds)
        if monthly is None:
            return None

        return ExtractionResult.build(monthly // self.daily_divisor, monthly, self.note)

class DayAnchoredExtractor(BaseExtractor):
    """
    Locate the daily allowance; monthly = daily * 30

    Pages that also print a monthly figure can pass ``monthly_patterns``; when
    one of them matches its value is used instead of the derived one.
    """

    def __init__(self, patterns: Sequence[AnchorPattern], note: Optional[str] = None,
                 monthly_patterns: Sequence[AnchorPattern] = (),
                 bounds: Optional[LimitRange] = None):
        super().__init__(note)
        self.patterns = list(patterns)
        self.monthly_patterns = list(monthly_patterns)
        self.bounds = bounds

    def extract(self, text: str) -> Optional[ExtractionResult]:
        daily = first_value(self.patterns, text, self.bounds)
        if daily is None:
            return None

        monthly = first_value(self.monthly_patterns, text)
        if monthly is None:
            monthly = daily * DAYS_PER_MONTH

        return ExtractionResult.build(daily, monthly, self.note)

class DualAnchoredExtractor(BaseExtractor):
    """
    Locate monthly and daily figures independently

    Generic patterns easily hit paid-tier numbers elsewhere on a pricing page,
    so each figure is only accepted inside the provider's plausible free-tier
    range. A missing figure is derived from the other one.
    """

    def __init__(self, monthly_patterns: Sequence[AnchorPattern],
                 daily_patterns: Sequence[AnchorPattern],
                 monthly_range: LimitRange, daily_range: LimitRange,
                 note: Optional[str] = None):
        super().__init__(note)
        self.monthly_patterns = list(monthly_patterns)
        self.daily_patterns = list(daily_patterns)
        self.monthly_range = monthly_range
        self.daily_range = daily_range

    def extract(self, text: str) -> Optional[ExtractionResult]:
        monthly = first_value(self.monthly_patterns, text, self.monthly_range)
        daily = first_value(self.daily_patterns, text, self.daily_range)

        if monthly is None and daily is None:
            return None
        if daily is None:
            daily = monthly // DAYS_PER_MONTH
        elif monthly is None:
            monthly = daily * DAYS_PER_MONTH

        return ExtractionResult.build(daily, monthly, self.note)

class FixedLimitsExtractor(BaseExtractor):
    """
    Return contractual limits that are not printed as extractable figures

    With ``confirm`` set, the constant is only returned while the page still
    contains the confirming phrase, so a pricing change falls through to the
    next rule instead of silently reporting stale numbers.
    """

    def __init__(self, daily_limit: int, monthly_limit: int, note: Optional[str] = None,
                 confirm: Optional[str] = None):
        super().__init__(note)
        self.daily_limit = daily_limit
        self.monthly_limit = monthly_limit
        self.confirm = re.compile(confirm, re.IGNORECASE) if confirm else None

    def extract(self, text: str) -> Optional[ExtractionResult]:
        if self.confirm is not None and not self.confirm.search(text or ""):
            return None
        return ExtractionResult.build(self.daily_limit, self.monthly_limit, self.note)

class JsonPlanExtractor(BaseExtractor):
    """
    Read the free tier from a JSON plans payload

    The payload is a list of plan entries. The free entry is the one whose
    ``tier_field`` path equals ``tier_name``; inside it the feature with
    ``feature_name`` and ``period`` ("day" or "month") carries the limit.
    """

    strip_markup = False
    collapse_whitespace = False

    def __init__(self, tier_field: Tuple[str, ...], tier_name: str, feature_name: str,
                 period: str = "day", features_key: str = "features",
                 note: Optional[str] = None):
        super().__init__(note)
        if period not in ("day", "month"):
            raise ValueError(f"Unsupported feature period: {period}")
        self.tier_field = tier_field
        self.tier_name = tier_name.lower()
        self.feature_name = feature_name
        self.period = period
        self.features_key = features_key

    def extract(self, text: str) -> Optional[ExtractionResult]:
        try:
            payload = json.loads(text)
        except (TypeError, ValueError):
            logger.debug("Payload is not valid JSON")
            return None

        if not isinstance(payload, list):
            return None

        plan = self._find_plan(payload)
        if plan is None:
            return None

        value = self._find_feature_value(plan.get(self.features_key))
        if value is None:
            return None

        if self.period == "day":
            return ExtractionResult.build(value, value * DAYS_PER_MONTH, self.note)
        return ExtractionResult.build(value // DAYS_PER_MONTH, value, self.note)

    def _find_plan(self, entries: List[Any]) -> Optional[Dict[str, Any]]:
        for entry in entries:
            if not isinstance(entry, dict):
                continue
            tier = self._lookup(entry, self.tier_field)
            if isinstance(tier, str) and tier.lower() == self.tier_name:
                return entry
        return None

    def _find_feature_value(self, features: Any) -> Optional[int]:
        if not isinstance(features, list):
            return None
        for feature in features:
            if not isinstance(feature, dict):
                continue
            if feature.get('name') == self.feature_name and feature.get('period') == self.period:
                return self._as_limit(feature.get('value'))
        return None

    @staticmethod
    def _as_limit(value: Any) -> Optional[int]:
        if value is None or isinstance(value, bool):
            return None
        if isinstance(value, (int, float)):
            return int(value) if value > 0 else None
        return parse_limit(str(value))

    @staticmethod
    def _lookup(entry: Dict[str, Any], path: Iterable[str]) -> Any:
        current: Any = entry
        for key in path:
            if not isinstance(current, dict):
                return None
            current = current.get(key)
        return current

class ChainExtractor(BaseExtractor):
    """Try whole strategies in priority order; the first result wins"""

    def __init__(self, *extractors: BaseExtractor):
        super().__init__(None)
        if not extractors:
            raise ValueError("ChainExtractor needs at least one extractor")
        first = extractors[0]
        for extractor in extractors[1:]:
            if (extractor.strip_markup, extractor.collapse_whitespace) != \
                    (first.strip_markup, first.collapse_whitespace):
                raise ValueError("Chained extractors must share the same text normalisation")
        self.extractors = list(extractors)
        self.strip_markup = first.strip_markup
        self.collapse_whitespace = first.collapse_whitespace

    def extract(self, text: str) -> Optional[ExtractionResult]:
        for extractor in self.extractors:
            result = extractor.extract(text)
            if result is not None:
                return result
        return None
