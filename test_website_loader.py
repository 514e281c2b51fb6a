"""
Tests for the HTTP and browser backends of the website loader
"""
import asyncio

import pytest
import requests
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from freetier_scraper.config.enums import FetchMethod
from freetier_scraper.core import website_loader
from freetier_scraper.core.exceptions import FetchError, FetchTimeoutError, HttpStatusError
from freetier_scraper.core.website_loader import USER_AGENT, WebsiteLoader

class StubResponse:
    def __init__(self, status_code=200, text="", reason="OK"):
        self.status_code = status_code
        self.text = text
        self.reason = reason

    @property
    def ok(self):
        return self.status_code < 400

class StubSession:
    def __init__(self, response=None, error=None):
        self.headers = {}
        self.response = response
        self.error = error
        self.requests = []
        self.closed = False

    def get(self, url, **kwargs):
        self.requests.append((url, kwargs))
        if self.error is not None:
            raise self.error
        return self.response

    def close(self):
        self.closed = True

def test_http_fetch_returns_body_with_browser_headers():
    session = StubSession(StubResponse(text="<html>100 emails per day</html>"))
    loader = WebsiteLoader(timeout=15000, session=session)

    body = asyncio.run(loader.fetch("https://acme.example/pricing", headers={"Accept": "application/json"}))

    assert body == "<html>100 emails per day</html>"
    assert session.headers['User-Agent'] == USER_AGENT
    url, kwargs = session.requests[0]
    assert url == "https://acme.example/pricing"
    assert kwargs['timeout'] == 15
    assert kwargs['headers'] == {"Accept": "application/json"}

def test_http_error_status():
    loader = WebsiteLoader(session=StubSession(StubResponse(status_code=403, reason="Forbidden")))

    with pytest.raises(HttpStatusError) as excinfo:
        asyncio.run(loader.fetch("https://acme.example/pricing"))

    assert excinfo.value.status == 403
    assert excinfo.value.url == "https://acme.example/pricing"
    assert "HTTP 403 Forbidden" in str(excinfo.value)

def test_http_timeout():
    loader = WebsiteLoader(timeout=500, session=StubSession(error=requests.Timeout("slow")))

    with pytest.raises(FetchTimeoutError):
        asyncio.run(loader.fetch("https://acme.example/pricing"))

def test_http_connection_error():
    loader = WebsiteLoader(session=StubSession(error=requests.ConnectionError("refused")))

    with pytest.raises(FetchError):
        asyncio.run(loader.fetch("https://acme.example/pricing"))

def test_close_closes_session():
    session = StubSession()
    WebsiteLoader(session=session).close()

    assert session.closed is True

class StubBrowserResponse:
    def __init__(self, status=200, status_text="OK"):
        self.status = status
        self.status_text = status_text
        self.ok = 200 <= status < 300

class StubPage:
    def __init__(self, response=None, goto_error=None, idle_error=None, html="<html></html>"):
        self.response = response or StubBrowserResponse()
        self.goto_error = goto_error
        self.idle_error = idle_error
        self.html = html
        self.visited = []

    async def goto(self, url, timeout=None, wait_until=None):
        self.visited.append((url, timeout, wait_until))
        if self.goto_error is not None:
            raise self.goto_error
        return self.response

    async def wait_for_load_state(self, state, timeout=None):
        if self.idle_error is not None:
            raise self.idle_error

    async def content(self):
        return self.html

class StubContext:
    def __init__(self, page):
        self.page = page

    async def new_page(self):
        return self.page

class StubBrowser:
    def __init__(self, page):
        self.page = page
        self.context_options = None
        self.closed = False

    async def new_context(self, **options):
        self.context_options = options
        return StubContext(self.page)

    async def close(self):
        self.closed = True

class StubChromium:
    def __init__(self, browser):
        self.browser = browser

    async def launch(self, **options):
        return self.browser

class StubPlaywright:
    def __init__(self, browser):
        self.chromium = StubChromium(browser)

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        return False

def install_browser(monkeypatch, page):
    browser = StubBrowser(page)
    monkeypatch.setattr(website_loader, "async_playwright", lambda: StubPlaywright(browser))
    return browser

def test_browser_fetch_returns_rendered_html(monkeypatch):
    page = StubPage(html="<html>3,000 emails per month</html>")
    browser = install_browser(monkeypatch, page)
    loader = WebsiteLoader(timeout=15000, session=StubSession())

    html = asyncio.run(loader.fetch("https://acme.example/pricing", FetchMethod.BROWSER,
                                    {"Accept": "text/html"}))

    assert html == "<html>3,000 emails per month</html>"
    assert page.visited == [("https://acme.example/pricing", 15000, 'domcontentloaded')]
    assert browser.context_options['user_agent'] == USER_AGENT
    assert browser.context_options['extra_http_headers'] == {"Accept": "text/html"}
    assert browser.closed is True

def test_browser_keeps_dom_when_network_never_idles(monkeypatch):
    page = StubPage(idle_error=PlaywrightTimeoutError("networkidle timeout"), html="<p>ready</p>")
    install_browser(monkeypatch, page)

    html = asyncio.run(WebsiteLoader(session=StubSession()).fetch("https://acme.example", FetchMethod.BROWSER))

    assert html == "<p>ready</p>"

def test_browser_error_status_closes_browser(monkeypatch):
    browser = install_browser(monkeypatch, StubPage(response=StubBrowserResponse(503, "Service Unavailable")))

    with pytest.raises(HttpStatusError) as excinfo:
        asyncio.run(WebsiteLoader(session=StubSession()).fetch("https://acme.example", FetchMethod.BROWSER))

    assert excinfo.value.status == 503
    assert browser.closed is True

def test_browser_navigation_timeout(monkeypatch):
    browser = install_browser(monkeypatch, StubPage(goto_error=PlaywrightTimeoutError("Timeout 15000ms exceeded")))

    with pytest.raises(FetchTimeoutError):
        asyncio.run(WebsiteLoader(session=StubSession()).fetch("https://acme.example", FetchMethod.BROWSER))

    assert browser.closed is True

def test_browser_failure_becomes_fetch_error(monkeypatch):
    browser = install_browser(monkeypatch, StubPage(goto_error=PlaywrightError("net::ERR_NAME_NOT_RESOLVED")))

    with pytest.raises(FetchError) as excinfo:
        asyncio.run(WebsiteLoader(session=StubSession()).fetch("https://acme.example", FetchMethod.BROWSER))

    assert not isinstance(excinfo.value, FetchTimeoutError)
    assert browser.closed is True
