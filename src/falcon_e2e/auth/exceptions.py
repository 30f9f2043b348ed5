"""
Authentication Error Handling

Typed errors for the session credential cache and the live login flow.
Each login-flow error names the step that failed so a broken test run
points straight at the wait that timed out.

Error Code Reference:
- UNEXPECTED_PAGE: the loaded page is not the application
- CONTROL_NOT_FOUND: a button did not become visible in time
- REDIRECT_TIMEOUT: no redirect to the provider or organization
- FORM_FIELD_MISSING: email/password input never appeared
- LOGIN_VERIFICATION_FAILED: the flow ended off the organization URL
- STORE_READ_ERROR: stored session unreadable (never surfaced)
- STORE_WRITE_ERROR: stored session could not be written
"""

from typing import Any


class AuthError(Exception):
    """Base exception for all authentication errors."""

    error_code: str = "AUTH_ERROR"

    def __init__(self, message: str, step: str | None = None, **kwargs: Any):
        super().__init__(message)
        self.message = message
        self.step = step
        self.details = kwargs

    def to_dict(self) -> dict:
        """Convert error to a JSON-friendly dict for reports."""
        error = {
            "code": self.error_code,
            "message": self.message,
        }
        if self.step:
            error["step"] = self.step
        for key, value in self.details.items():
            error[key] = value
        return {"error": error}

    def __str__(self) -> str:
        if self.step:
            return f"[{self.error_code}] {self.step}: {self.message}"
        return f"[{self.error_code}] {self.message}"


class UnexpectedPage(AuthError):
    """The page loaded is not the expected application page."""

    error_code = "UNEXPECTED_PAGE"


class ControlNotFound(AuthError):
    """A required button was not visible within its bound."""

    error_code = "CONTROL_NOT_FOUND"


class RedirectTimeout(AuthError):
    """The Sign-In click did not lead to the provider or organization in time."""

    error_code = "REDIRECT_TIMEOUT"


class FormFieldMissing(AuthError):
    """The provider's email or password input never appeared."""

    error_code = "FORM_FIELD_MISSING"


class LoginVerificationFailed(AuthError):
    """The flow finished but the browser is not on the organization URL."""

    error_code = "LOGIN_VERIFICATION_FAILED"


class StoreReadError(AuthError):
    """Stored session could not be read or parsed."""

    error_code = "STORE_READ_ERROR"


class StoreWriteError(AuthError):
    """Stored session could not be written."""

    error_code = "STORE_WRITE_ERROR"
