"""
Timeout configuration for E2E tests.

Centralized timeout management for the different kinds of browser
operations. All values are milliseconds, which is what Playwright expects.
"""

from pydantic import BaseModel

TIMEOUTS = {
    # Standard timeouts
    "SHORT": 10_000,
    "MEDIUM": 30_000,

    # Specific operation timeouts
    "NAVIGATION": 60_000,
    "DATA_LOADING": 30_000,
    "FILTER_RESULTS": 15_000,
}

# Playwright's default bound for expect() assertions
ASSERTION_DEFAULT = 5_000


def get_timeout(operation: str) -> int:
    """
    Return the timeout for a named operation.

    Raises:
        KeyError: Unknown operation name
    """
    try:
        return TIMEOUTS[operation]
    except KeyError:
        raise KeyError(f"Unknown timeout operation: {operation}") from None


def timeout_options(operation: str) -> dict:
    """Build a ``{"timeout": ...}`` kwargs dict for Playwright calls."""
    return {"timeout": get_timeout(operation)}


class AuthTimeouts(BaseModel):
    """Bounds for every wait in the authentication flow."""

    # Start: application title check
    title: int = ASSERTION_DEFAULT
    # Sign-In button must be visible before clicking
    sign_in_visible: int = ASSERTION_DEFAULT
    # Redirecting: network idle, then provider/organization URL
    redirect_idle: int = TIMEOUTS["MEDIUM"]
    redirect_url: int = TIMEOUTS["MEDIUM"]
    # EmailEntry / PasswordEntry
    email_field: int = TIMEOUTS["SHORT"]
    continue_visible: int = ASSERTION_DEFAULT
    password_field: int = TIMEOUTS["FILTER_RESULTS"]
    submit_visible: int = ASSERTION_DEFAULT
    # Finalizing
    final_idle: int = TIMEOUTS["MEDIUM"]
    final_url: int = ASSERTION_DEFAULT
    # Anchor navigation used by is_authenticated and the stored-cookie path
    anchor_idle: int = 5_000
    # navigate_to_page URL verification
    navigation_url: int = ASSERTION_DEFAULT
