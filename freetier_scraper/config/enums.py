"""
Strict enum definitions for scrape outcomes and fetch backends
"""
from enum import Enum

class Outcome(Enum):
    SCRAPED = "SCRAPED"
    FALLBACK = "FALLBACK"
    ERROR = "ERROR"

class FetchMethod(Enum):
    HTTP = "http"
    BROWSER = "browser"
