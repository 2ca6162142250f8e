# Error taxonomy.
# Created: 2026-10-12
#
# Every error carries a machine-readable ``code`` (returned to API callers as
# ``error``) and an HTTP status used at the app boundary.

from __future__ import annotations

from typing import NamedTuple


class LuxBridgeError(Exception):
    """Base class for errors surfaced to API callers."""

    code = "internal_error"
    status_code = 500

    def __init__(self, message: str | None = None, *, code: str | None = None):
        if code is not None:
            self.code = code
        self.message = message or self.code.replace("_", " ")
        super().__init__(self.message)


class MalformedRecordError(LuxBridgeError):
    """A stored record failed to decode (wrong tag, version, or shape)."""


class StoreUnavailableError(LuxBridgeError):
    code = "store_unavailable"
    status_code = 503


class InvalidRequestError(LuxBridgeError):
    code = "invalid_request"
    status_code = 400


class InvalidPlatformError(LuxBridgeError):
    code = "invalid_platform"
    status_code = 400


class InvalidSessionError(LuxBridgeError):
    code = "invalid_session"
    status_code = 401


class SessionNotFoundError(LuxBridgeError):
    code = "session_not_found"
    status_code = 404


class PlatformNotLinkedError(LuxBridgeError):
    code = "platform_not_linked_or_inactive"
    status_code = 409


class PlatformAuthExpiredError(LuxBridgeError):
    code = "platform_auth_expired"
    status_code = 401


class PlatformAPIError(LuxBridgeError):
    code = "platform_api_error"
    status_code = 502


class ConfigurationError(LuxBridgeError):
    code = "configuration_error"
    status_code = 500


class UnauthorizedError(LuxBridgeError):
    code = "unauthorized"
    status_code = 401


class OAuthError(LuxBridgeError):
    """OAuth protocol rejection carrying the exact OAuth error code."""

    status_code = 400

    _MESSAGES = {
        "invalid_request": "Missing or malformed request parameters",
        "unsupported_grant_type": "Only authorization_code is supported",
        "invalid_client": "Invalid client",
        "invalid_client_name": "client_name must be a non-empty string",
        "invalid_redirect_uris": "At least one valid absolute redirect URI is required",
        "invalid_redirect_uri": "redirect_uri is not registered for this client",
        "invalid_code": "Invalid authorization code",
        "invalid_or_expired_code": "Invalid or expired authorization code",
        "code_expired": "Authorization code expired",
        "user_not_bound": "Authorization code has not been bound to a user",
        "missing_code_verifier": "code_verifier is required for PKCE",
        "invalid_code_verifier": "Invalid code_verifier for PKCE",
        "invalid_identity_token": "Identity token could not be verified",
    }

    def __init__(self, code: str, message: str | None = None, *, status_code: int | None = None):
        super().__init__(message or self._MESSAGES.get(code), code=code)
        if status_code is not None:
            self.status_code = status_code
        elif code == "invalid_client":
            self.status_code = 401


class Outcome(NamedTuple):
    """Result of a best-effort operation; callers log ``error`` and move on."""

    ok: bool
    error: str | None = None


OK = Outcome(True)


def failed(exc: BaseException) -> Outcome:
    return Outcome(False, f"{type(exc).__name__}: {exc}")
