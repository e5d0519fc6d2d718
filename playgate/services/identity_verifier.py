"""
Identity Verification - Validate Google ID tokens against an audience allowlist.

The cryptographic checks (signature, expiry, issuer format) are delegated to
google-auth. Issuer, audience and email claims are then re-checked here so a
permissive verifier cannot widen what this service accepts.
"""

import asyncio
from collections.abc import Callable, Mapping
from typing import Any

from google.auth import exceptions as google_auth_exceptions
from google.auth.transport import requests as google_requests
from google.oauth2 import id_token
from structlog import get_logger

from playgate.exceptions import (
    ConfigurationError,
    EmailNotVerifiedError,
    InvalidAssertionError,
    InvalidAudienceError,
    InvalidIssuerError,
    MissingAssertionError,
)
from playgate.models.domain import GOOGLE_ISSUERS, AudienceAllowlist, VerifiedIdentity
from playgate.observability.metrics import metrics
from playgate.observability.tracing import trace_operation

logger = get_logger(__name__)

# (token, accepted audiences) -> decoded claims; raises on invalid tokens
TokenVerifier = Callable[[str, list[str]], Mapping[str, Any]]


def verify_with_google(token: str, audiences: list[str]) -> Mapping[str, Any]:
    """Verify token signature and standard claims against Google's public keys."""
    return id_token.verify_oauth2_token(  # type: ignore[no-untyped-call,no-any-return]
        token,
        google_requests.Request(),  # type: ignore[no-untyped-call]
        audiences,
    )


def _claim_is_true(value: Any) -> bool:
    """email_verified arrives as a bool, or as "true"/"false" from older token formats."""
    if isinstance(value, str):
        return value.strip().lower() == "true"
    return value is True


class IdentityVerifier:
    """Verifies Google ID tokens."""

    def __init__(self, token_verifier: TokenVerifier = verify_with_google) -> None:
        self._token_verifier = token_verifier

    async def verify(self, assertion: str | None, allowlist: AudienceAllowlist) -> VerifiedIdentity:
        """
        Verify an ID token.

        Args:
            assertion: Raw ID token from the client
            allowlist: Accepted audiences; must be non-empty

        Returns:
            VerifiedIdentity for the token subject

        Raises:
            MissingAssertionError: No token supplied
            ConfigurationError: Empty allowlist (raised before any network call)
            InvalidAssertionError: Token rejected by the verifier or has no subject
            InvalidIssuerError: Issuer is not Google
            InvalidAudienceError: Audience not in the allowlist
            EmailNotVerifiedError: Token email present but unverified
        """
        if not assertion:
            raise MissingAssertionError()

        if not allowlist:
            metrics.record_identity_verification("misconfigured")
            raise ConfigurationError("Server misconfiguration: no Google audiences configured")

        try:
            with trace_operation("google.verify_id_token", audiences=len(allowlist)):
                claims = await asyncio.to_thread(
                    self._token_verifier, assertion, allowlist.as_list()
                )
        except (ValueError, google_auth_exceptions.GoogleAuthError) as exc:
            logger.warning("id_token_rejected", error=str(exc))
            metrics.record_identity_verification("invalid_token")
            raise InvalidAssertionError(str(exc)) from exc
        except Exception as exc:
            logger.warning("id_token_verifier_failed", error=repr(exc), exc_info=True)
            metrics.record_identity_verification("invalid_token")
            raise InvalidAssertionError(str(exc) or type(exc).__name__) from exc

        audience = claims.get("aud")
        issuer = claims.get("iss")
        logger.info(
            "id_token_claims",
            aud=audience,
            iss=issuer,
            azp=claims.get("azp"),
        )

        if issuer not in GOOGLE_ISSUERS:
            metrics.record_identity_verification("invalid_issuer")
            raise InvalidIssuerError(issuer)

        if audience not in allowlist:
            logger.warning(
                "id_token_audience_rejected",
                aud=audience,
                allowed_audiences=allowlist.as_list(),
            )
            metrics.record_identity_verification("invalid_audience")
            raise InvalidAudienceError(audience, allowlist.as_list())

        email = claims.get("email")
        email_verified = _claim_is_true(claims.get("email_verified"))
        if email and not email_verified:
            metrics.record_identity_verification("email_not_verified")
            raise EmailNotVerifiedError()

        subject = claims.get("sub")
        if not subject:
            metrics.record_identity_verification("invalid_token")
            raise InvalidAssertionError("Token has no subject")

        metrics.record_identity_verification("verified")
        return VerifiedIdentity(
            subject=subject,
            issuer=issuer,
            audience=audience,
            email=email,
            email_verified=email_verified,
            display_name=claims.get("name"),
            picture_url=claims.get("picture"),
            authorized_party=claims.get("azp"),
        )
