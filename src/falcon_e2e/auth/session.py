"""
Session Reconciler

Gets a page into a signed-in state as cheaply as possible:

1. the page is already signed in: nothing to do
2. cookies stored by an earlier run still work: apply them
3. otherwise: live login, then store the new cookies

Navigation helpers used by the test fixtures live here as well.
"""

import logging
import re
from enum import Enum

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page

from ..config import Credentials, Settings
from .exceptions import UnexpectedPage
from .login import LoginFlow
from .probe import AuthProber, UnknownPolicy
from .store import SessionStore
from .waits import wait_for_network_idle, wait_for_url_match

logger = logging.getLogger(__name__)

ANCHOR_PATH = "/"

_RESET_PAGE_SCRIPT = """() => {
    localStorage.clear();
    sessionStorage.clear();
    document.querySelectorAll("form").forEach((form) => form.reset());
}"""


class SessionSource(str, Enum):
    """Where the authenticated session came from."""

    CURRENT = "current"
    STORED = "stored"
    LIVE_LOGIN = "live_login"


class SessionReconciler:
    """
    Orchestrates the probe, the stored session and the live login.

    All collaborators are injected so tests can point the store at a
    temporary file and swap the login flow.
    """

    def __init__(
        self,
        settings: Settings,
        credentials: Credentials,
        store: SessionStore | None = None,
        prober: AuthProber | None = None,
        login_flow: LoginFlow | None = None,
    ):
        self.settings = settings
        self.credentials = credentials
        self.store = store or SessionStore(settings.auth_state_path)
        self.prober = prober or AuthProber()
        self.login_flow = login_flow or LoginFlow(settings, self.prober)

    def _on_application(self, page: Page) -> bool:
        return page.url.startswith(self.settings.base_url.rstrip("/"))

    async def _open_anchor(self, page: Page) -> bool:
        await page.goto(self.settings.absolute_url(ANCHOR_PATH))
        return await wait_for_network_idle(page, self.settings.auth_timeouts.anchor_idle)

    async def _probe_authenticated(self, page: Page) -> bool:
        result = await self.prober.probe(page)
        return result.is_authenticated(UnknownPolicy.TREAT_AS_PRESENT)

    async def _try_stored(self, page: Page, cookies: list) -> bool:
        """Apply stored cookies, reload the anchor page and re-check."""
        await page.context.add_cookies([c.to_playwright() for c in cookies])
        if not await self._open_anchor(page):
            logger.debug("Anchor page did not go idle, probing anyway")
        return await self._probe_authenticated(page)

    async def ensure_authenticated(
        self, page: Page, force_login: bool = False
    ) -> SessionSource:
        """
        Make sure ``page`` is signed in.

        Args:
            page: Page to authenticate
            force_login: Skip the current page and the stored session

        Returns:
            Where the session came from

        Raises:
            AuthError: Live login failed; the stored session is left as it was
        """
        if not force_login:
            # Fast path: no filesystem access, no navigation
            if self._on_application(page) and await self._probe_authenticated(page):
                logger.debug("Page already authenticated")
                return SessionSource.CURRENT

            cookies = self.store.load()
            if cookies:
                try:
                    if await self._try_stored(page, cookies):
                        logger.info("User is already authenticated with stored cookies")
                        return SessionSource.STORED
                    logger.warning("Stored session is stale, falling back to live login")
                except PlaywrightError as e:
                    logger.warning(
                        f"Stored session could not be applied ({e}), falling back to live login"
                    )
                    await page.context.clear_cookies()

        if not self._on_application(page):
            await self._open_anchor(page)

        result = await self.login_flow.login(page, self.credentials)
        if not result.is_fresh:
            return SessionSource.CURRENT
        self.store.save(result.cookies)
        return SessionSource.LIVE_LOGIN

    async def is_authenticated(self, page: Page) -> bool:
        """Navigate to the anchor page and probe. Never raises for page errors."""
        try:
            if not await self._open_anchor(page):
                logger.warning("Anchor page did not go idle; reporting not authenticated")
                return False
            return await self._probe_authenticated(page)
        except PlaywrightError as e:
            logger.error(f"Error checking authentication status: {e}")
            return False

    async def clear_session(self, page: Page | None) -> None:
        """Full logout: clear the context's cookies and the stored session."""
        if page is not None:
            await page.context.clear_cookies()
        self.store.invalidate()
        logger.info("Cleared authentication state")

    async def navigate_to_page(
        self, page: Page, path: str, require_auth: bool = True
    ) -> None:
        """
        Open an application path, signing in first when required.

        Raises:
            UnexpectedPage: URL does not contain ``path`` after navigation
            AuthError: Sign-in failed
        """
        if require_auth:
            await self.ensure_authenticated(page)
        await self.navigate_to_page_only(page, path)

    async def navigate_to_page_only(self, page: Page, path: str) -> None:
        await page.goto(self.settings.absolute_url(path))
        pattern = re.compile(re.escape(path))
        timeout = self.settings.auth_timeouts.navigation_url
        if not await wait_for_url_match(page, lambda url: bool(pattern.search(url)), timeout):
            raise UnexpectedPage(
                f"Expected URL containing {path!r}, got {page.url}",
                step="navigate",
                url=page.url,
            )

    async def reset_page_state(self, page: Page) -> None:
        """Clear storage and forms, keep cookies, return to the anchor page."""
        await page.evaluate(_RESET_PAGE_SCRIPT)
        await self._open_anchor(page)

    async def debug_auth_state(self, page: Page) -> dict:
        """Snapshot of the signals behind the authentication decision."""
        result = await self.prober.probe(page)
        cookies = await page.context.cookies()
        return {
            "url": result.url,
            "sign_in": result.sign_in.value,
            "is_on_org_url": result.on_organization_url,
            "cookie_names": sorted(c["name"] for c in cookies),
            "is_authenticated": result.is_authenticated(UnknownPolicy.TREAT_AS_PRESENT),
        }
