"""
Extractor registry - one extraction rule per provider

Every rule receives text that has already been normalised by
``normalize_page_text`` (non-breaking spaces removed, markup reduced to visible
text, whitespace collapsed), so patterns can rely on single spaces.
"""
import logging
from types import MappingProxyType
from typing import Mapping, Optional

from ..config.schema import ExtractionResult, LimitRange
from ..core.utils import NUMBER, normalize_page_text
from .base_extractor import SMALLEST, AnchorPattern, BaseExtractor
from .strategies import (
    ChainExtractor,
    DayAnchoredExtractor,
    DualAnchoredExtractor,
    FixedLimitsExtractor,
    JsonPlanExtractor,
    MonthAnchoredExtractor,
)

logger = logging.getLogger(__name__)

PER_DAY = r'\s*(?:per|/)\s*day\b'
PER_MONTH = r'\s*(?:per|/)\s*month\b'
PER_MONTH_OR_MO = r'\s*(?:/|\bper\b)\s*(?:month|mo)\b'

# Plausible free-tier ranges. Generic patterns that land outside these have
# matched a paid tier or an unrelated figure.
RESEND_MONTHLY_RANGE = LimitRange(100, 5000)
RESEND_DAILY_RANGE = LimitRange(10, 500)
SMTP2GO_MONTHLY_RANGE = LimitRange(900, 1100)
SMTP2GO_DAILY_RANGE = LimitRange(150, 250)
MAILTRAP_MONTHLY_RANGE = LimitRange(500, 10000)
MAILTRAP_DAILY_RANGE = LimitRange(10, 1000)
POSTMARK_LOOSE_RANGE = LimitRange(1, 1000)

sendpulse = MonthAnchoredExtractor([
    AnchorPattern(NUMBER + r'\s*emails?\s*Free'),
    AnchorPattern(r'Free.*?' + NUMBER + r'\s*emails?'),
])

mailgun = DayAnchoredExtractor(
    [AnchorPattern(NUMBER + r'\s*emails?' + PER_DAY)],
    note='Free plan - no credit card required',
)

mailersend = ChainExtractor(
    FixedLimitsExtractor(
        100, 500,
        note='Requires credit card',
        confirm=r'(?<![\d,])500 emails?' + PER_MONTH,
    ),
    MonthAnchoredExtractor(
        [AnchorPattern(r'free.*?' + NUMBER + r'\s*emails?' + PER_MONTH)],
        note='Requires credit card',
    ),
)

resend = DualAnchoredExtractor(
    monthly_patterns=[
        AnchorPattern(r'Free.{0,300}?' + NUMBER + r'\s*emails?\s*(?:/\s*mo(?:nth)?|per\s*(?:month|mo))\b'),
        AnchorPattern(NUMBER + r'\s*emails?\s*(?:/\s*mo(?:nth)?|per\s*(?:month|mo))\b', select=SMALLEST),
    ],
    daily_patterns=[
        # "Daily Limit" row of the comparison table, Free column first
        AnchorPattern(r'Daily\s*Limit[^0-9]{0,50}(\d{2,3})\b'),
    ],
    monthly_range=RESEND_MONTHLY_RANGE,
    daily_range=RESEND_DAILY_RANGE,
)

brevo = DayAnchoredExtractor([
    AnchorPattern(NUMBER + r'\s+emails?\s+per\s+day\b'),
])

mailjet = DayAnchoredExtractor(
    [AnchorPattern(NUMBER + r'\s+emails?' + PER_DAY)],
    monthly_patterns=[AnchorPattern(NUMBER + r'\s+emails?' + PER_MONTH)],
)

smtp2go = DualAnchoredExtractor(
    monthly_patterns=[
        AnchorPattern(NUMBER + r'\s*emails?' + PER_MONTH_OR_MO),
        AnchorPattern(r'free\s+plan.*?' + NUMBER + r'\s*emails?.*?(?:month|mo)\b'),
    ],
    daily_patterns=[
        AnchorPattern(NUMBER + r'\s*emails?\s*(?:/|\bper\b)\s*day\b'),
    ],
    monthly_range=SMTP2GO_MONTHLY_RANGE,
    daily_range=SMTP2GO_DAILY_RANGE,
)

mailtrap = DualAnchoredExtractor(
    monthly_patterns=[
        AnchorPattern(r'Free.*?' + NUMBER + r'\s*emails\b'),
        AnchorPattern(r'Email\s*sending\s*limit\s*per\s*month\.*\s*' + NUMBER + r'\b'),
    ],
    daily_patterns=[
        AnchorPattern(NUMBER + r'\s*emails\s*/?\s*day\b'),
        AnchorPattern(r'Email\s*sending\s*limit\s*per\s*day\.*\s*' + NUMBER + r'\b'),
    ],
    monthly_range=MAILTRAP_MONTHLY_RANGE,
    daily_range=MAILTRAP_DAILY_RANGE,
    note='Email API/SMTP',
)

# Postmark's free developer tier has no separate daily cap: daily == monthly
postmark = MonthAnchoredExtractor(
    [
        AnchorPattern(r'free\s+developer\s+(?:plan|tier).{0,200}?' + NUMBER
                      + r'(?:\s*emails?)?\s*(?:per|a)\s*month', bounds=POSTMARK_LOOSE_RANGE),
        AnchorPattern(r'(?<![\d,])(100)\s*emails?\s*(?:per|a)\s*month\b'),
        AnchorPattern(NUMBER + r'\s*emails?\s*(?:per|a)\s*month\b', bounds=POSTMARK_LOOSE_RANGE),
    ],
    note='Free Developer plan',
    daily_divisor=1,
)

# The help page also lists an inbound allowance; outbound phrasing comes first
maileroo = MonthAnchoredExtractor([
    AnchorPattern(r'up\s*to\s*' + NUMBER + r'\s*outbound\s*emails?' + PER_MONTH),
    AnchorPattern(NUMBER + r'\s*outbound\s*emails?' + PER_MONTH),
    AnchorPattern(NUMBER + r'\s*emails?' + PER_MONTH + r'[^.]{0,80}?outbound'),
    AnchorPattern(r'(?<![\d,])(\d{3,4})\s*emails?' + PER_MONTH, select=SMALLEST),
])

# Queried as a JSON API rather than an HTML page
sweego = JsonPlanExtractor(
    tier_field=('plan', 'range_name'),
    tier_name='Free',
    feature_name='nb_emails',
    period='day',
)

EXTRACTORS: Mapping[str, BaseExtractor] = MappingProxyType({
    'sendpulse': sendpulse,
    'mailgun': mailgun,
    'mailersend': mailersend,
    'resend': resend,
    'brevo': brevo,
    'mailjet': mailjet,
    'smtp2go': smtp2go,
    'mailtrap': mailtrap,
    'postmark': postmark,
    'maileroo': maileroo,
    'sweego': sweego,
})

def get_extractor(extractor_name: str) -> Optional[BaseExtractor]:
    """Get extractor by name"""
    return EXTRACTORS.get(extractor_name)

def extract_limits(extractor_name: str, raw_text: str) -> Optional[ExtractionResult]:
    """
    Normalise raw page text once and run the provider's rule on it

    Returns None for unknown extractors, empty pages and pages where no
    pattern matched; extraction problems never raise.
    """
    extractor = get_extractor(extractor_name)
    if extractor is None:
        logger.warning(f"No extractor registered for {extractor_name}")
        return None

    if not raw_text:
        return None

    text = normalize_page_text(
        raw_text,
        strip_markup=extractor.strip_markup,
        collapse_whitespace=extractor.collapse_whitespace,
    )

    try:
        return extractor.extract(text)
    except Exception as e:
        logger.error(f"Extractor {extractor_name} failed on page content: {e}")
        return None
