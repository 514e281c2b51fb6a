"""
Exception hierarchy for the scraper
"""
from typing import Optional

class FreeTierScraperError(Exception):
    """Base class for all scraper errors"""

class ConfigError(FreeTierScraperError):
    """Provider table or settings are invalid"""

class FetchError(FreeTierScraperError):
    """A provider page could not be fetched"""

    def __init__(self, url: str, message: str):
        super().__init__(f"{message} ({url})")
        self.url = url

class FetchTimeoutError(FetchError):
    """The fetch did not complete within the configured timeout"""

class HttpStatusError(FetchError):
    """The server answered with a non-2xx status"""

    def __init__(self, url: str, status: int, reason: Optional[str] = None):
        message = f"HTTP {status}" + (f" {reason}" if reason else "")
        super().__init__(url, message)
        self.status = status

class SnapshotWriteError(FreeTierScraperError):
    """The snapshot could not be persisted; the previous file is left untouched"""
