"""
Free-Tier Email Limits Scraper

Fetches the public pricing pages of transactional-email providers, extracts
their free-tier daily/monthly sending caps and keeps a dated JSON snapshot with
change history.
"""

__version__ = "1.0.0"
__author__ = "FreeTier Scraper Team"
