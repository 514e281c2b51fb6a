"""
Shared fixtures: in-memory page loader and provider profiles
"""
import sys
from pathlib import Path

import pytest

# Add the project root to Python path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

from freetier_scraper.config.enums import FetchMethod
from freetier_scraper.config.schema import FallbackEntry, ProviderProfile
from freetier_scraper.config.settings import load_config
from freetier_scraper.core.exceptions import FetchError

class FakeLoader:
    """Serves canned pages by URL; unknown URLs fail like an unreachable host"""

    def __init__(self, pages=None):
        self.pages = dict(pages or {})
        self.calls = []

    async def fetch(self, url, method=FetchMethod.HTTP, headers=None):
        self.calls.append(url)
        page = self.pages.get(url)
        if isinstance(page, BaseException):
            raise page
        if page is None:
            raise FetchError(url, "Connection refused")
        return page

def make_profile(name, extractor, daily=100, monthly=3000, url=None, alternate_url=None,
                 enabled=True, note=None):
    url = url or f"https://{name.lower().replace(' ', '')}.example/pricing"
    return ProviderProfile(
        key=name.lower(),
        name=name,
        url=url,
        extractor=extractor,
        alternate_url=alternate_url,
        enabled=enabled,
        fallback=FallbackEntry(
            name=name,
            daily_limit=daily,
            monthly_limit=monthly,
            url=url,
            note=note,
        ),
    )

@pytest.fixture
def provider_config():
    """The packaged provider table, without environment overrides"""
    return load_config(use_env=False)

@pytest.fixture
def fake_loader():
    return FakeLoader

@pytest.fixture
def profile_factory():
    return make_profile
