"""Configuration management for the Falcon E2E suite."""

from pathlib import Path
from urllib.parse import urljoin

from pydantic import Field, SecretStr, ValidationError
from pydantic_settings import BaseSettings

from .timeouts import AuthTimeouts

# =============================================================================
# Page Timeouts (per fixture)
# =============================================================================

PAGE_TIMEOUTS = {
    "authenticated_page": 40_000,
    "public_page": 15_000,
}


class ConfigurationError(Exception):
    """Required configuration is missing or invalid."""


class Settings(BaseSettings):
    """Suite settings loaded from environment variables."""

    # Application under test
    base_url: str = "https://cloudflare-playwright-example.airelabs.workers.dev/"
    app_title_pattern: str = "Falcon"
    organization_path: str = "/o/airelabs"

    # Identity provider (WorkOS AuthKit)
    identity_provider_domain: str = "workos.com"

    # Session credential cache
    auth_state_path: Path = Path(".auth/user.json")

    # Bounded waits of the login flow (milliseconds)
    auth_timeouts: AuthTimeouts = AuthTimeouts()

    # Browser
    headed: bool = False
    slow_mo: int = 0
    viewport_width: int = 1280
    viewport_height: int = 720

    # Pause before and after each fixture-wrapped test (milliseconds)
    settle_delay_ms: int = 1_000

    # Development
    debug: bool = False

    model_config = {
        "env_prefix": "",
        "case_sensitive": False,
        "env_nested_delimiter": "__",
    }

    @property
    def organization_url(self) -> str:
        """Return the absolute organization landing URL."""
        return self.absolute_url(self.organization_path)

    def absolute_url(self, path: str) -> str:
        """Resolve an application path against the base URL."""
        return urljoin(self.base_url, path)


class Credentials(BaseSettings):
    """
    Test-account credentials for the identity provider.

    Both values are mandatory and must be non-empty: there is no built-in
    fallback account.
    """

    email: str = Field(min_length=1)
    password: SecretStr = Field(min_length=1)

    model_config = {
        "env_prefix": "WORKOS_TEST_",
        "case_sensitive": False,
    }


def load_credentials() -> Credentials:
    """
    Load credentials from the environment.

    Raises:
        ConfigurationError: WORKOS_TEST_EMAIL or WORKOS_TEST_PASSWORD unset or empty
    """
    try:
        return Credentials()
    except ValidationError as e:
        missing = sorted(
            f"WORKOS_TEST_{'_'.join(str(part) for part in err['loc']).upper()}"
            for err in e.errors()
        )
        raise ConfigurationError(
            f"Missing or empty test credentials: {', '.join(missing)}"
        ) from e
