#!/usr/bin/env python3
"""
Save Falcon Authentication State

Logs in through WorkOS once and writes the session cookies to the auth
state file, so the E2E suite starts from a signed-in browser.

Setup:
    pip install -e ".[test]"
    playwright install chromium
    export WORKOS_TEST_EMAIL=... WORKOS_TEST_PASSWORD=...

Usage:
    python scripts/save_auth_state.py              # Reuse stored session if still valid
    python scripts/save_auth_state.py --force      # Discard stored session and log in again
    python scripts/save_auth_state.py --headed     # Watch the browser
"""

import argparse
import asyncio
import logging
import sys

from playwright.async_api import async_playwright

from falcon_e2e.auth import AuthError, SessionReconciler, SessionSource
from falcon_e2e.config import ConfigurationError, Settings, load_credentials


async def main(headed: bool = False, force: bool = False) -> int:
    settings = Settings()
    logging.basicConfig(
        level=logging.DEBUG if settings.debug else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        credentials = load_credentials()
    except ConfigurationError as e:
        print(f"ERROR: {e}")
        return 2

    reconciler = SessionReconciler(settings, credentials)

    print("=" * 60)
    print("Falcon Session Saver")
    print("=" * 60)
    print(f"App: {settings.base_url}")
    print(f"State file: {settings.auth_state_path}")
    print(f"Force login: {force}")
    print()

    if force:
        await reconciler.clear_session(None)

    async with async_playwright() as p:
        browser = await p.chromium.launch(
            headless=not (headed or settings.headed),
            slow_mo=50 if headed else settings.slow_mo,
        )
        context = await browser.new_context(
            viewport={"width": settings.viewport_width, "height": settings.viewport_height},
        )
        page = await context.new_page()

        try:
            source = await reconciler.ensure_authenticated(page, force_login=force)
        except AuthError as e:
            print(f"\nLogin failed: {e}")
            await browser.close()
            return 1

        state = await reconciler.debug_auth_state(page)
        print(f"\nSession source: {source.value}")
        print(f"URL: {state['url']}")
        print(f"Cookies: {', '.join(state['cookie_names'])}")
        if source is SessionSource.LIVE_LOGIN:
            print(f"\nSaved: {settings.auth_state_path}")
        else:
            print(f"\nUnchanged: {settings.auth_state_path}")

        await browser.close()
    return 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser()
    parser.add_argument(
        "--headed",
        action="store_true",
        help="Show the browser window",
    )
    parser.add_argument(
        "--force",
        action="store_true",
        help="Ignore any stored session and log in again",
    )
    args = parser.parse_args()

    sys.exit(asyncio.run(main(args.headed, args.force)))
