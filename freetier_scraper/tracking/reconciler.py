"""
Reconciler - turns fetch/extract attempts into the authoritative provider records
"""
import asyncio
import logging
from typing import Dict, Iterable, List, Optional, Sequence

from ..config.enums import Outcome
from ..config.schema import ExtractionResult, ProviderProfile, ServiceRecord
from ..core.exceptions import FetchError
from ..extractors.registry import extract_limits

logger = logging.getLogger(__name__)

class Reconciler:
    """
    Scrape every configured provider in order and fall back to static data

    ``loader`` is anything with ``async fetch(url, method, headers) -> str``
    that raises FetchError on failure (see WebsiteLoader).
    """

    def __init__(self, providers: Sequence[ProviderProfile], loader,
                 previous_records: Iterable[ServiceRecord] = (),
                 politeness_delay: float = 2.0):
        self.providers = list(providers)
        self.loader = loader
        self.previous: Dict[str, ServiceRecord] = {}
        for record in previous_records:
            self.previous.setdefault(record.name, record)
        self.politeness_delay = politeness_delay
        self.outcomes: Dict[str, Outcome] = {}

    async def reconcile(self, now: str) -> List[ServiceRecord]:
        """Build one record per configured provider, in configuration order"""
        records = []
        fetched_before = False

        for profile in self.providers:
            if profile.enabled and fetched_before and self.politeness_delay > 0:
                # Polite delay between requests
                await asyncio.sleep(self.politeness_delay)

            records.append(await self.reconcile_provider(profile, now))
            fetched_before = fetched_before or profile.enabled

        return records

    async def reconcile_provider(self, profile: ProviderProfile, now: str) -> ServiceRecord:
        """Scraped record when extraction succeeds, fallback record otherwise"""
        if not profile.enabled:
            logger.info(f"📧 {profile.name}: disabled, using fallback")
            self.outcomes[profile.name] = Outcome.FALLBACK
            return self.fallback_record(profile, now)

        logger.info(f"📧 {profile.name}")
        result = await self.scrape(profile)

        if result is None:
            if self.outcomes.get(profile.name) != Outcome.ERROR:
                self.outcomes[profile.name] = Outcome.FALLBACK
            logger.info("   ⚠️ Could not extract data, using fallback")
            return self.fallback_record(profile, now)

        self.outcomes[profile.name] = Outcome.SCRAPED
        logger.info(f"   ✓ Scraped: {result.daily_limit}/day, {result.monthly_limit}/month")
        if result.monthly_limit < result.daily_limit:
            logger.warning(f"   Monthly limit below daily limit for {profile.name}, keeping values as scraped")

        return ServiceRecord(
            name=profile.name,
            url=profile.url,
            daily_limit=result.daily_limit,
            monthly_limit=result.monthly_limit,
            note=result.note,
            last_scraped=now,
            last_changed=None,
            scraped_successfully=True,
        )

    async def scrape(self, profile: ProviderProfile) -> Optional[ExtractionResult]:
        """Try the primary page, then the provider's alternate page if it has one"""
        result = await self._attempt(profile, profile.url)
        if result is not None or not profile.alternate_url:
            return result

        logger.info("   → Primary failed, trying alternate source...")
        result = await self._attempt(profile, profile.alternate_url)
        if result is not None:
            logger.info(f"   ✓ Scraped from alternate source: {profile.alternate_url}")
        return result

    async def _attempt(self, profile: ProviderProfile, url: str) -> Optional[ExtractionResult]:
        logger.info(f"   → Fetching {url}...")
        try:
            raw_text = await self.loader.fetch(url, profile.fetch_method, profile.headers)
        except FetchError as e:
            logger.info(f"   ✗ Error: {e}")
            self.outcomes[profile.name] = Outcome.ERROR
            return None
        except Exception as e:
            # One broken provider only costs that provider its scrape
            logger.exception(f"   ✗ Error: unexpected failure fetching {url}: {e}")
            self.outcomes[profile.name] = Outcome.ERROR
            return None

        return extract_limits(profile.extractor, raw_text)

    def fallback_record(self, profile: ProviderProfile, now: str) -> ServiceRecord:
        """Static fallback limits, keeping the previous lastScraped when there is one"""
        previous = self.previous.get(profile.name)
        fallback = profile.fallback

        return ServiceRecord(
            name=fallback.name,
            url=fallback.url,
            daily_limit=fallback.daily_limit,
            monthly_limit=fallback.monthly_limit,
            note=fallback.note,
            last_scraped=(previous.last_scraped if previous and previous.last_scraped else now),
            last_changed=previous.last_changed if previous else None,
            scraped_successfully=False,
        )

def build_fallback_snapshot(providers: Sequence[ProviderProfile],
                            previous_records: Iterable[ServiceRecord],
                            now: str) -> List[ServiceRecord]:
    """
    Complete fallback used when the run itself failed

    Every provider gets its static limits; lastScraped and lastChanged are
    carried over from the previous snapshot without change detection.
    """
    reconciler = Reconciler(providers, loader=None, previous_records=previous_records)
    return [reconciler.fallback_record(profile, now) for profile in providers]
