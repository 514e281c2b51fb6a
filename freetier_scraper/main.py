"""
Main execution script for the Free-Tier Email Limits Scraper
"""
import asyncio
import logging
import sys
from typing import List, Optional

from colorama import Fore, Style, init as colorama_init

from .config.enums import Outcome
from .config.schema import ServiceRecord
from .config.settings import RunConfig, load_config
from .core.exceptions import ConfigError, SnapshotWriteError
from .core.logger import setup_logger
from .core.utils import utc_now_iso
from .core.website_loader import WebsiteLoader
from .exporters.json_snapshot import SnapshotStore
from .exporters.readme_updater import update_readme
from .tracking.change_tracker import ChangeTracker, LimitChange
from .tracking.reconciler import Reconciler, build_fallback_snapshot

logger = logging.getLogger(__name__)

class FreeTierScraper:
    """Main scraper orchestrator"""

    def __init__(self, config: RunConfig, loader=None):
        self.config = config
        self.settings = config.settings
        self.loader = loader or WebsiteLoader(timeout=self.settings.request_timeout)
        self.store = SnapshotStore(self.settings.snapshot_path)
        self.results: List[ServiceRecord] = []
        self.changes: List[LimitChange] = []
        self.outcomes = {}
        self.used_complete_fallback = False

    async def scrape_all_providers(self, previous: List[ServiceRecord], now: str) -> List[ServiceRecord]:
        """Scrape, reconcile and stamp every configured provider"""
        logger.info("═══════════════════════════════════════")

        reconciler = Reconciler(
            self.config.providers,
            self.loader,
            previous_records=previous,
            politeness_delay=self.settings.politeness_delay,
        )
        try:
            records = await reconciler.reconcile(now)
        finally:
            self.outcomes = reconciler.outcomes

        logger.info("═══════════════════════════════════════")

        tracker = ChangeTracker(previous)
        stamped = tracker.stamp(records, now)
        self.changes = tracker.changes
        return stamped

    async def run(self) -> List[ServiceRecord]:
        """
        Run once: read the previous snapshot, scrape, write the new snapshot

        Any error inside the scrape loop falls back to the static provider table
        so a valid snapshot is always written. Only a failed write propagates.
        """
        logger.info("🚀 Starting email service scraper with change tracking...")

        now = utc_now_iso()
        previous = self.store.load()

        try:
            records = await self.scrape_all_providers(previous, now)
        except Exception as e:
            logger.exception(f"Fatal error during scrape: {e}")
            logger.warning("⚠️ Using complete fallback data")
            records = build_fallback_snapshot(self.config.providers, previous, now)
            self.used_complete_fallback = True

        self.results = self.store.save(records)

        if self.settings.update_readme:
            try:
                update_readme(self.settings.readme_path, self.results)
            except (OSError, ValueError) as e:
                logger.error(f"Failed to update README: {e}")

        self.print_summary()
        return self.results

    def print_summary(self):
        """Print summary of results"""
        colorama_init()

        scraped = sum(1 for record in self.results if record.scraped_successfully)
        fallback = len(self.results) - scraped
        errors = sum(1 for outcome in self.outcomes.values() if outcome == Outcome.ERROR)

        print()
        print(f"✅ Processed {len(self.results)} services total")
        print(f"{Fore.GREEN} - Scraped automatically: {scraped}{Style.RESET_ALL}")
        print(f"{Fore.YELLOW} - Using hardcoded fallback data: {fallback}{Style.RESET_ALL}")
        if errors:
            print(f"{Fore.RED} - Fetch errors: {errors}{Style.RESET_ALL}")
        if self.changes:
            print(f"{Fore.CYAN}🔄 {len(self.changes)} limit change(s):{Style.RESET_ALL}")
            for change in self.changes:
                print(f"   {change.describe()}")
        if self.used_complete_fallback:
            print(f"{Fore.RED}⚠️ Run failed, complete fallback data written{Style.RESET_ALL}")

    def close(self):
        close = getattr(self.loader, 'close', None)
        if close:
            close()

async def main(config_path: Optional[str] = None) -> int:
    """Entry point; returns the process exit status"""
    try:
        config = load_config(config_path)
    except ConfigError as e:
        setup_logger()
        logger.critical(f"Configuration error: {e}")
        return 1

    setup_logger(log_level=config.settings.log_level, log_dir=config.settings.log_dir)

    scraper = FreeTierScraper(config)
    try:
        await scraper.run()
    except SnapshotWriteError as e:
        logger.critical(f"Scraper failed: {e}")
        return 1
    finally:
        scraper.close()

    return 0

def cli():
    sys.exit(asyncio.run(main()))

if __name__ == "__main__":
    cli()
