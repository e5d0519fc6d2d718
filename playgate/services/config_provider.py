"""
Configuration Provider - Resolve audiences and service account credentials.

Resolution happens per invocation so a rotated secret is picked up without a
restart. Settings themselves are cached read-only for the process lifetime.
"""

import base64
import binascii
import json

from structlog import get_logger

from playgate.config import Settings
from playgate.exceptions import ConfigurationError, MissingCredentialError
from playgate.models.domain import AudienceAllowlist, ServiceCredential

logger = get_logger(__name__)

SERVICE_ACCOUNT_SECRET = "GP_SERVICE_ACCOUNT_JSON"


def parse_service_account(raw: str) -> ServiceCredential:
    """
    Parse a service account key from raw JSON or base64 encoded JSON.

    Raises:
        ConfigurationError: If the secret cannot be parsed or lacks required fields
    """
    text = raw.strip()
    if not text.startswith("{"):
        try:
            text = base64.b64decode(text, validate=True).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError) as exc:
            raise ConfigurationError(
                f"{SERVICE_ACCOUNT_SECRET} is neither JSON nor base64 encoded JSON"
            ) from exc

    try:
        info = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ConfigurationError(f"{SERVICE_ACCOUNT_SECRET} is not valid JSON") from exc

    if not isinstance(info, dict):
        raise ConfigurationError(f"{SERVICE_ACCOUNT_SECRET} must be a JSON object")

    missing = [name for name in ServiceCredential.REQUIRED_FIELDS if not info.get(name)]
    if missing:
        raise ConfigurationError(
            f"{SERVICE_ACCOUNT_SECRET} is missing fields", details={"missing": missing}
        )

    return ServiceCredential(
        client_email=info["client_email"],
        private_key=info["private_key"],
        project_id=info.get("project_id"),
        token_uri=info["token_uri"],
        info=info,
    )


class ConfigurationProvider:
    """Resolves per-request configuration from settings."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings

    def resolve_allowlist(self) -> AudienceAllowlist:
        """
        Resolve accepted ID token audiences.

        Sources are tried in priority order. Each value is comma split, trimmed
        and de-duplicated, and the first source that yields at least one
        audience wins. When none does, an empty allowlist is returned; callers
        fail closed on it.
        """
        for source, value in self.settings.audience_sources:
            allowlist = AudienceAllowlist.from_values((value or "").split(","))
            if allowlist:
                logger.debug("audience_allowlist_resolved", source=source, count=len(allowlist))
                return allowlist

        logger.warning("audience_allowlist_not_configured")
        return AudienceAllowlist()

    def resolve_service_credential(self) -> ServiceCredential:
        """
        Resolve the Google Play service account.

        Raises:
            MissingCredentialError: If no secret is configured
            ConfigurationError: If the secret is malformed
        """
        raw = self.settings.GP_SERVICE_ACCOUNT_JSON
        if not raw or not raw.strip():
            logger.error("service_account_not_configured", secret=SERVICE_ACCOUNT_SECRET)
            raise MissingCredentialError(SERVICE_ACCOUNT_SECRET)

        credential = parse_service_account(raw)
        logger.debug("service_account_resolved", client_email=credential.client_email)
        return credential
