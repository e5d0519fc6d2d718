"""
Exception Classes - Strongly typed exception hierarchy.

Every exception carries the HTTP status it maps to, a human readable
message and optional structured details for the caller.
"""

from typing import Any, ClassVar


class PlaygateError(Exception):
    """Base exception for all verification service errors."""

    status_code: ClassVar[int] = 500

    def __init__(self, message: str, details: Any = None) -> None:
        self.message = message
        self.details = details
        super().__init__(message)


# ============================================================================
# Input errors (400) - never reach an upstream call
# ============================================================================


class InputError(PlaygateError):
    """Raised when the request is missing or has malformed fields."""

    status_code: ClassVar[int] = 400


class MissingAssertionError(InputError):
    """Raised when no ID token was supplied."""

    def __init__(self) -> None:
        super().__init__("Missing idToken")


class MissingFieldsError(InputError):
    """Raised when a purchase query lacks its required field combination."""

    def __init__(self, details: str) -> None:
        super().__init__("Missing parameters", details)


# ============================================================================
# Configuration errors (500) - raised before any upstream call
# ============================================================================


class ConfigurationError(PlaygateError):
    """Raised when required configuration is missing or invalid."""

    status_code: ClassVar[int] = 500


class MissingCredentialError(ConfigurationError):
    """Raised when no service account secret is configured."""

    def __init__(self, secret_name: str) -> None:
        self.secret_name = secret_name
        super().__init__(f"Missing {secret_name}")


# ============================================================================
# Verification errors (401)
# ============================================================================


class AuthError(PlaygateError):
    """Raised when an identity assertion fails verification."""

    status_code: ClassVar[int] = 401


class InvalidAssertionError(AuthError):
    """Raised when the token is malformed, expired or badly signed."""

    def __init__(self, details: str | None = None) -> None:
        super().__init__("Invalid token", details)


class InvalidIssuerError(AuthError):
    """Raised when the token was not issued by Google."""

    def __init__(self, issuer: str | None) -> None:
        self.issuer = issuer
        super().__init__("Invalid token issuer", {"iss": issuer})


class InvalidAudienceError(AuthError):
    """Raised when the token audience is not in the allowlist."""

    def __init__(self, audience: str | None, allowlist: list[str]) -> None:
        self.audience = audience
        self.allowlist = allowlist
        super().__init__(
            "Invalid token audience",
            {"aud": audience, "allowedAudiences": allowlist},
        )


class EmailNotVerifiedError(AuthError):
    """Raised when the token carries an email Google has not verified."""

    def __init__(self) -> None:
        super().__init__("Email not verified")


# ============================================================================
# Backend errors (500)
# ============================================================================


class BackendError(PlaygateError):
    """Raised when the Google Play Developer API call fails."""

    status_code: ClassVar[int] = 500

    def __init__(self, details: str, upstream_status: int | None = None) -> None:
        self.upstream_status = upstream_status
        super().__init__("Server error", details)
