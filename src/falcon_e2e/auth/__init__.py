"""Session credential cache: stored cookies, probing and live WorkOS login."""

from .exceptions import (
    AuthError,
    ControlNotFound,
    FormFieldMissing,
    LoginVerificationFailed,
    RedirectTimeout,
    StoreReadError,
    StoreWriteError,
    UnexpectedPage,
)
from .login import LoginFlow, LoginOutcome, LoginResult
from .probe import AuthProbeResult, AuthProber, UnknownPolicy, Visibility
from .session import SessionReconciler, SessionSource
from .store import Cookie, SessionStore

__all__ = [
    "SessionReconciler",
    "SessionSource",
    "SessionStore",
    "Cookie",
    "AuthProber",
    "AuthProbeResult",
    "UnknownPolicy",
    "Visibility",
    "LoginFlow",
    "LoginOutcome",
    "LoginResult",
    # Exceptions
    "AuthError",
    "UnexpectedPage",
    "ControlNotFound",
    "RedirectTimeout",
    "FormFieldMissing",
    "LoginVerificationFailed",
    "StoreReadError",
    "StoreWriteError",
]
