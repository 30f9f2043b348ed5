"""
WorkOS Login Flow

Drives the identity provider's two-step form (email, then password) from
the application's Sign In button to the organization landing page:

    Start -> Redirecting -> EmailEntry -> PasswordEntry -> Finalizing -> Done

Every edge is a bounded wait. A missed wait ends the attempt with a typed
error naming the step; nothing is retried here.
"""

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from urllib.parse import urlparse

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page

from ..config import Credentials, Settings
from ..timeouts import AuthTimeouts
from .exceptions import (
    ControlNotFound,
    FormFieldMissing,
    LoginVerificationFailed,
    RedirectTimeout,
    UnexpectedPage,
)
from .probe import SIGN_IN_NAME, SIGN_IN_ROLE, AuthProber, UnknownPolicy
from .store import Cookie, parse_cookies
from .waits import wait_for_network_idle, wait_for_url_match, wait_until, wait_visible

logger = logging.getLogger(__name__)

# Identity provider form controls
EMAIL_INPUT = '[name="email"]'
PASSWORD_INPUT = '[name="password"]'
PASSWORD_SUBMIT = 'form [value="password"]'
CONTINUE_NAME = "Continue"

# Generic markers of an authentication page
REDIRECT_MARKERS = ("auth", "login")


class LoginOutcome(str, Enum):
    # Page was already signed in; nothing new to persist
    ALREADY_AUTHENTICATED = "already_authenticated"
    # Provider re-authenticated silently from its own session
    PROVIDER_SESSION = "provider_session"
    # Email and password were submitted
    CREDENTIALS = "credentials"


@dataclass
class LoginResult:
    outcome: LoginOutcome
    cookies: list[Cookie] = field(default_factory=list)

    @property
    def is_fresh(self) -> bool:
        """True when the flow produced a new session worth persisting."""
        return self.outcome is not LoginOutcome.ALREADY_AUTHENTICATED


def same_location(url: str, target: str) -> bool:
    """Compare scheme, host and path, ignoring query, fragment and trailing slash."""
    a, b = urlparse(url), urlparse(target)
    return (
        a.scheme == b.scheme
        and a.netloc == b.netloc
        and a.path.rstrip("/") == b.path.rstrip("/")
    )


class LoginFlow:
    """
    Live login through the identity provider.

    Expects the page to be showing the application already.
    """

    def __init__(
        self,
        settings: Settings,
        prober: AuthProber | None = None,
        timeouts: AuthTimeouts | None = None,
    ):
        self.settings = settings
        self.prober = prober or AuthProber()
        self.timeouts = timeouts or settings.auth_timeouts
        self._title_pattern = re.compile(settings.app_title_pattern)

    def _is_redirect_target(self, url: str) -> bool:
        return (
            self.settings.identity_provider_domain in url
            or same_location(url, self.settings.organization_url)
            or any(marker in url for marker in REDIRECT_MARKERS)
        )

    async def login(self, page: Page, credentials: Credentials) -> LoginResult:
        """
        Sign in and return the resulting context cookies.

        Raises:
            UnexpectedPage: Page title does not match the application
            ControlNotFound: Sign In, Continue or submit button not visible
            RedirectTimeout: No redirect to provider or organization
            FormFieldMissing: Email or password input never appeared
            LoginVerificationFailed: Flow did not land on the organization URL
        """
        t = self.timeouts
        org_url = self.settings.organization_url

        # Start
        last_title = ""

        async def title_matches() -> bool:
            nonlocal last_title
            try:
                last_title = await page.title()
            except PlaywrightError as e:
                # Page mid-navigation; try again until the bound expires
                logger.debug(f"Page title unavailable: {e}")
                return False
            return bool(self._title_pattern.search(last_title))

        if not await wait_until(title_matches, t.title):
            raise UnexpectedPage(
                f"Title {last_title!r} does not match "
                f"{self.settings.app_title_pattern!r}",
                step="start",
                url=page.url,
            )

        probe = await self.prober.probe(page)
        if probe.is_authenticated(UnknownPolicy.TREAT_AS_PRESENT):
            logger.info("Already authenticated - skipping live login")
            return LoginResult(LoginOutcome.ALREADY_AUTHENTICATED)

        sign_in = page.get_by_role(SIGN_IN_ROLE, name=SIGN_IN_NAME)
        if not await wait_visible(sign_in, t.sign_in_visible):
            raise ControlNotFound(
                f"{SIGN_IN_NAME!r} button not visible within {t.sign_in_visible}ms",
                step="start",
                url=page.url,
            )
        await sign_in.click()
        logger.info("Clicked Sign In, waiting for redirect")

        # Redirecting
        if not await wait_for_network_idle(page, t.redirect_idle):
            raise RedirectTimeout(
                f"Network did not go idle within {t.redirect_idle}ms",
                step="redirecting",
                url=page.url,
            )
        if not await wait_for_url_match(page, self._is_redirect_target, t.redirect_url):
            raise RedirectTimeout(
                f"No redirect to identity provider or organization within {t.redirect_url}ms",
                step="redirecting",
                url=page.url,
            )

        if same_location(page.url, org_url):
            logger.info("Identity provider session still valid - landed on organization")
            return await self._finish(page, LoginOutcome.PROVIDER_SESSION)

        # EmailEntry
        email_input = page.locator(EMAIL_INPUT)
        if not await wait_visible(email_input, t.email_field):
            raise FormFieldMissing(
                f"Email input not visible within {t.email_field}ms",
                step="email_entry",
                url=page.url,
            )
        await email_input.fill(credentials.email)

        continue_button = page.get_by_role("button", name=CONTINUE_NAME)
        if not await wait_visible(continue_button, t.continue_visible):
            raise ControlNotFound(
                f"{CONTINUE_NAME!r} button not visible within {t.continue_visible}ms",
                step="email_entry",
                url=page.url,
            )
        await continue_button.click()
        logger.info("Submitted email, waiting for password form")

        # PasswordEntry
        password_input = page.locator(PASSWORD_INPUT)
        if not await wait_visible(password_input, t.password_field):
            raise FormFieldMissing(
                f"Password input not visible within {t.password_field}ms",
                step="password_entry",
                url=page.url,
            )
        await password_input.fill(credentials.password.get_secret_value())

        submit = page.locator(PASSWORD_SUBMIT)
        if not await wait_visible(submit, t.submit_visible):
            raise ControlNotFound(
                f"Password submit control not visible within {t.submit_visible}ms",
                step="password_entry",
                url=page.url,
            )
        await submit.click()
        logger.info("Submitted password, waiting for organization")

        # Finalizing
        if not await wait_for_network_idle(page, t.final_idle):
            raise LoginVerificationFailed(
                f"Network did not go idle within {t.final_idle}ms after submit",
                step="finalizing",
                url=page.url,
            )
        if not await wait_for_url_match(
            page, lambda url: same_location(url, org_url), t.final_url
        ):
            raise LoginVerificationFailed(
                f"Expected {org_url} after login, got {page.url}",
                step="finalizing",
                url=page.url,
            )

        return await self._finish(page, LoginOutcome.CREDENTIALS)

    async def _finish(self, page: Page, outcome: LoginOutcome) -> LoginResult:
        probe = await self.prober.probe(page)
        if not probe.is_authenticated(UnknownPolicy.TREAT_AS_PRESENT):
            raise LoginVerificationFailed(
                "Probe does not confirm authentication",
                step="done",
                url=page.url,
            )
        cookies = parse_cookies(await page.context.cookies())
        logger.info(f"Login complete ({outcome.value}), {len(cookies)} cookies in context")
        return LoginResult(outcome, cookies)
