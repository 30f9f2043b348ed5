"""
Unit Test Fixtures

An in-process stand-in for a Playwright page backed by a scripted
application and WorkOS provider, so the session cache can be exercised
without a browser.
"""

import itertools

import pytest
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

BASE_URL = "https://falcon.test/"
ORG_URL = "https://falcon.test/o/acme"
IDP_URL = "https://auth.workos.com/sign-in"
SESSION_COOKIE = "wos-session"

SIGN_IN = ("button", "Sign In")
CONTINUE = ("button", "Continue")
EMAIL = '[name="email"]'
PASSWORD = '[name="password"]'
SUBMIT = 'form [value="password"]'


def cookie_dict(value: str, name: str = SESSION_COOKIE) -> dict:
    return {
        "name": name,
        "value": value,
        "domain": "falcon.test",
        "path": "/",
        "expires": -1,
        "httpOnly": True,
        "secure": True,
        "sameSite": "Lax",
    }


class FakeApp:
    """Server side of the fake: valid sessions and provider behaviour knobs."""

    base_url = BASE_URL
    org_url = ORG_URL
    idp_url = IDP_URL
    email = "qa@example.com"
    password = "correct horse"

    def __init__(self):
        self.valid_sessions: set[str] = set()
        self._ids = itertools.count(1)
        # Provider still has its own session: Sign In lands on the org page
        self.provider_session = False
        # Sign In click does nothing
        self.redirect_stalls = False
        # Email input never renders on the provider page
        self.email_form_missing = False
        # Sign In visibility query raises
        self.sign_in_error = False
        # networkidle never reached
        self.idle_times_out = False

    def issue_session(self) -> str:
        value = f"session-{next(self._ids)}"
        self.valid_sessions.add(value)
        return value

    def expire_all(self) -> None:
        self.valid_sessions.clear()


class FakeContext:
    def __init__(self):
        self._cookies: list[dict] = []
        self.added: list[dict] = []

    async def cookies(self) -> list[dict]:
        return [dict(c) for c in self._cookies]

    async def add_cookies(self, cookies: list[dict]) -> None:
        for cookie in cookies:
            self._set(dict(cookie))
            self.added.append(dict(cookie))

    async def clear_cookies(self) -> None:
        self._cookies = []

    def _set(self, cookie: dict) -> None:
        self._cookies = [c for c in self._cookies if c["name"] != cookie["name"]]
        self._cookies.append(cookie)


class FakeLocator:
    def __init__(self, page: "FakePage", key):
        self.page = page
        self.key = key

    async def is_visible(self) -> bool:
        return self.page._visible(self.key)

    async def wait_for(self, state: str = "visible", timeout: float | None = None) -> None:
        self.page.waited.append(self.key)
        if not self.page._visible(self.key):
            raise PlaywrightTimeoutError(
                f"Locator.wait_for: Timeout {timeout}ms exceeded waiting for {self.key}"
            )

    async def fill(self, value: str) -> None:
        self.page.filled[self.key] = value

    async def click(self) -> None:
        await self.page._click(self.key)


class FakePage:
    """Implements the slice of ``playwright.async_api.Page`` the suite uses."""

    def __init__(self, app: FakeApp):
        self.app = app
        self.context = FakeContext()
        self.url = "about:blank"
        self.screen = "blank"
        self.filled: dict = {}
        self.clicks: list = []
        self.waited: list = []
        self.visited: list[str] = []
        self.evaluated: list[str] = []

    # -- navigation ---------------------------------------------------------

    async def goto(self, url: str, **kwargs):
        self.visited.append(url)
        self.url = url
        self.screen = "app" if url.startswith(BASE_URL) else "blank"

    async def title(self) -> str:
        if self.screen == "app":
            return "Falcon | Financial Planning"
        if self.screen.startswith("idp"):
            return "Sign in"
        return ""

    async def wait_for_load_state(self, state: str = "load", timeout: float | None = None):
        if self.app.idle_times_out:
            raise PlaywrightTimeoutError(f"Timeout {timeout}ms exceeded.")

    async def wait_for_url(self, url, timeout: float | None = None):
        matched = url(self.url) if callable(url) else url == self.url
        if not matched:
            raise PlaywrightTimeoutError(f"Timeout {timeout}ms exceeded waiting for URL")

    async def evaluate(self, expression: str):
        self.evaluated.append(expression)

    # -- locators -----------------------------------------------------------

    def get_by_role(self, role: str, name: str | None = None) -> FakeLocator:
        return FakeLocator(self, (role, name))

    def locator(self, selector: str) -> FakeLocator:
        return FakeLocator(self, selector)

    # -- scripted behaviour -------------------------------------------------

    def authenticated(self) -> bool:
        return any(
            c["name"] == SESSION_COOKIE and c["value"] in self.app.valid_sessions
            for c in self.context._cookies
        )

    def _visible(self, key) -> bool:
        if key == SIGN_IN:
            if self.app.sign_in_error:
                raise PlaywrightError("Target page, context or browser has been closed")
            return self.screen == "app" and not self.authenticated()
        if key == EMAIL:
            return self.screen == "idp_email" and not self.app.email_form_missing
        if key == CONTINUE:
            return self.screen == "idp_email"
        if key in (PASSWORD, SUBMIT):
            return self.screen == "idp_password"
        return False

    async def _click(self, key) -> None:
        self.clicks.append(key)
        if key == SIGN_IN:
            if self.app.redirect_stalls:
                return
            if self.app.provider_session:
                self._land_in_organization()
            else:
                self.url = IDP_URL
                self.screen = "idp_email"
        elif key == CONTINUE:
            self.screen = "idp_password"
        elif key == SUBMIT:
            if (
                self.filled.get(EMAIL) == self.app.email
                and self.filled.get(PASSWORD) == self.app.password
            ):
                self._land_in_organization()

    def _land_in_organization(self) -> None:
        self.context._set(cookie_dict(self.app.issue_session()))
        self.url = ORG_URL
        self.screen = "app"


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def make_cookie():
    """Builder for cookie dicts shaped like BrowserContext.cookies() output."""
    return cookie_dict


@pytest.fixture
def fake_app() -> FakeApp:
    return FakeApp()


@pytest.fixture
def fake_page(fake_app) -> FakePage:
    return FakePage(fake_app)


@pytest.fixture
async def app_page(fake_page) -> FakePage:
    """Fake page already showing the application's landing page."""
    await fake_page.goto(BASE_URL)
    return fake_page


@pytest.fixture
def settings(auth_state_path):
    """Settings pointed at the fake app with short bounds."""
    from falcon_e2e.config import Settings
    from falcon_e2e.timeouts import AuthTimeouts

    return Settings(
        base_url=BASE_URL,
        organization_path="/o/acme",
        app_title_pattern="Falcon",
        identity_provider_domain="workos.com",
        auth_state_path=auth_state_path,
        auth_timeouts=AuthTimeouts(title=50, navigation_url=50),
    )


@pytest.fixture
def credentials():
    from falcon_e2e.config import Credentials

    return Credentials(email=FakeApp.email, password=FakeApp.password)


@pytest.fixture
def store(auth_state_path):
    from falcon_e2e.auth.store import SessionStore

    return SessionStore(auth_state_path)


@pytest.fixture
def reconciler(settings, credentials, store):
    from falcon_e2e.auth.session import SessionReconciler

    return SessionReconciler(settings, credentials, store=store)
