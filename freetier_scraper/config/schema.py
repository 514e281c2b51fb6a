"""
Data schema definitions for free-tier limit extraction
"""
from dataclasses import dataclass, field
from typing import Optional, Dict, Any

from .enums import FetchMethod

@dataclass(frozen=True)
class LimitRange:
    """Inclusive plausibility range for an extracted limit"""
    minimum: int
    maximum: int

    def __contains__(self, value: int) -> bool:
        return self.minimum <= value <= self.maximum

@dataclass(frozen=True)
class ExtractionResult:
    """Candidate limits parsed from one provider page"""
    daily_limit: int
    monthly_limit: int
    note: Optional[str] = None

    @classmethod
    def build(cls, daily_limit: Optional[int], monthly_limit: Optional[int],
              note: Optional[str] = None) -> Optional["ExtractionResult"]:
        """Return a result, or None when either limit is missing or not positive"""
        if not daily_limit or not monthly_limit:
            return None
        if daily_limit <= 0 or monthly_limit <= 0:
            return None
        return cls(daily_limit=int(daily_limit), monthly_limit=int(monthly_limit), note=note)

@dataclass(frozen=True)
class FallbackEntry:
    """Known-good free-tier limits used when scraping fails"""
    name: str
    daily_limit: int
    monthly_limit: int
    url: str
    note: Optional[str] = None

@dataclass(frozen=True)
class ProviderProfile:
    """Configuration for each provider to scrape"""
    key: str
    name: str
    url: str
    extractor: str
    fallback: FallbackEntry
    alternate_url: Optional[str] = None
    fetch_method: FetchMethod = FetchMethod.HTTP
    headers: Dict[str, str] = field(default_factory=dict)
    enabled: bool = True

@dataclass(frozen=True)
class ServiceRecord:
    """One provider entry of the persisted snapshot"""

    name: str
    url: str
    daily_limit: int
    monthly_limit: int
    note: Optional[str]
    last_scraped: Optional[str]
    last_changed: Optional[str]
    scraped_successfully: bool

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the snapshot JSON representation"""
        return {
            'name': self.name,
            'url': self.url,
            'dailyLimit': self.daily_limit,
            'monthlyLimit': self.monthly_limit,
            'note': self.note,
            'lastScraped': self.last_scraped,
            'lastChanged': self.last_changed,
            'scrapedSuccessfully': self.scraped_successfully,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ServiceRecord":
        """Build a record from a snapshot entry (older snapshots may lack some keys)"""
        return cls(
            name=data['name'],
            url=data.get('url', ''),
            daily_limit=data['dailyLimit'],
            monthly_limit=data['monthlyLimit'],
            note=data.get('note'),
            last_scraped=data.get('lastScraped'),
            last_changed=data.get('lastChanged'),
            scraped_successfully=bool(data.get('scrapedSuccessfully', False)),
        )

@dataclass(frozen=True)
class Settings:
    """Global run settings"""
    snapshot_path: str = "data.json"
    request_timeout: int = 15000  # milliseconds
    politeness_delay: float = 2.0  # seconds
    log_level: str = "INFO"
    log_dir: str = "logs"
    readme_path: str = "README.md"
    update_readme: bool = False
