"""
Authentication probe.

Classifies the live page as signed in or not from two independent signals:
whether the "Sign In" button is showing, and whether the URL is inside an
organization. A failing visibility query is reported as UNKNOWN and each
caller states how to resolve it through an UnknownPolicy.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from urllib.parse import urlparse

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page

logger = logging.getLogger(__name__)

SIGN_IN_ROLE = "button"
SIGN_IN_NAME = "Sign In"
ORGANIZATION_SEGMENT = "/o/"


class Visibility(str, Enum):
    PRESENT = "present"
    ABSENT = "absent"
    UNKNOWN = "unknown"


class UnknownPolicy(str, Enum):
    """How a caller resolves an UNKNOWN sign-in visibility."""

    TREAT_AS_PRESENT = "present"
    TREAT_AS_ABSENT = "absent"


def is_organization_scoped(url: str) -> bool:
    """Return True when the URL path points inside an organization."""
    return ORGANIZATION_SEGMENT in urlparse(url).path


@dataclass(frozen=True)
class AuthProbeResult:
    """Signals read from the page by one probe."""

    url: str
    sign_in: Visibility
    on_organization_url: bool

    def is_authenticated(self, unknown: UnknownPolicy) -> bool:
        """Authenticated if the Sign In button is gone or the URL is org-scoped."""
        if self.on_organization_url:
            return True
        if self.sign_in is Visibility.UNKNOWN:
            return unknown is UnknownPolicy.TREAT_AS_ABSENT
        return self.sign_in is Visibility.ABSENT


class AuthProber:
    """Read-only inspection of a page's authentication state."""

    async def sign_in_visibility(self, page: Page) -> Visibility:
        button = page.get_by_role(SIGN_IN_ROLE, name=SIGN_IN_NAME)
        try:
            visible = await button.is_visible()
        except PlaywrightError as e:
            logger.warning(f"Sign In visibility check failed on {page.url}: {e}")
            return Visibility.UNKNOWN
        return Visibility.PRESENT if visible else Visibility.ABSENT

    async def probe(self, page: Page) -> AuthProbeResult:
        sign_in = await self.sign_in_visibility(page)
        url = page.url
        result = AuthProbeResult(
            url=url,
            sign_in=sign_in,
            on_organization_url=is_organization_scoped(url),
        )
        logger.debug(
            f"Probe: url={url} sign_in={sign_in.value} "
            f"org={result.on_organization_url}"
        )
        return result
