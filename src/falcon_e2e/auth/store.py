"""
Session State Store

Persists the browser's cookies to a single JSON file so later test runs can
skip the live login. The file is a cache, never a source of truth: anything
unreadable is reported as a miss and the caller logs in again.
"""

import json
import logging
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from .exceptions import StoreReadError, StoreWriteError

logger = logging.getLogger(__name__)


class Cookie(BaseModel):
    """One cookie record as Playwright reads and writes it."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    name: str
    value: str
    domain: str
    path: str
    expires: float
    http_only: bool = Field(alias="httpOnly")
    secure: bool
    same_site: Literal["Strict", "Lax", "None"] = Field(alias="sameSite")

    def to_playwright(self) -> dict:
        """Return the dict shape accepted by ``BrowserContext.add_cookies``."""
        return self.model_dump(by_alias=True)


_cookie_list = TypeAdapter(list[Cookie])


def parse_cookies(raw: list[dict]) -> list[Cookie]:
    """Validate cookie dicts returned by ``BrowserContext.cookies()``."""
    return _cookie_list.validate_python(raw)


class SessionStore:
    """
    File-backed store for one session artifact set.

    Concurrent writers are not coordinated: the last write wins.
    """

    def __init__(self, path: Path | str):
        self.path = Path(path)

    def exists(self) -> bool:
        return self.path.is_file()

    def load(self) -> list[Cookie] | None:
        """
        Load the stored cookies.

        Returns:
            The cookie set, or None when the file is missing, empty, or does
            not hold a valid JSON array of cookie records.
        """
        try:
            return self._read()
        except StoreReadError as e:
            logger.warning(f"Ignoring stored session: {e}")
            return None

    def save(self, cookies: list[Cookie]) -> None:
        """
        Overwrite the stored cookies.

        Raises:
            StoreWriteError: Directory or file could not be written
        """
        payload = [cookie.model_dump(by_alias=True) for cookie in cookies]
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        except OSError as e:
            raise StoreWriteError(
                f"Could not write session state: {e}",
                path=str(self.path),
            ) from e
        logger.info(f"Saved {len(cookies)} cookies to {self.path}")

    def invalidate(self) -> None:
        """Delete the stored session if there is one."""
        try:
            self.path.unlink(missing_ok=True)
        except OSError as e:
            raise StoreWriteError(
                f"Could not delete session state: {e}",
                path=str(self.path),
            ) from e
        logger.debug(f"Invalidated session state at {self.path}")

    def _read(self) -> list[Cookie] | None:
        if not self.path.exists():
            logger.debug(f"No stored session at {self.path}")
            return None

        try:
            text = self.path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise StoreReadError(f"Unreadable file: {e}", path=str(self.path)) from e

        if not text.strip():
            logger.debug(f"Stored session at {self.path} is empty")
            return None

        try:
            cookies = _cookie_list.validate_json(text)
        except ValidationError as e:
            raise StoreReadError(
                f"Malformed session state ({e.error_count()} errors)",
                path=str(self.path),
            ) from e

        logger.debug(f"Loaded {len(cookies)} cookies from {self.path}")
        return cookies
