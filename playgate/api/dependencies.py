"""
FastAPI Dependencies - Injection seams for configuration and upstream clients.

Tests replace any of these through app.dependency_overrides.
"""

from functools import lru_cache

from fastapi import Depends

from playgate.config import Settings, get_settings
from playgate.services.config_provider import ConfigurationProvider
from playgate.services.identity_verifier import IdentityVerifier
from playgate.services.purchase_verifier import PurchaseVerifier
from playgate.services.session_tokens import FirebaseAdminHandle, SessionTokenMinter


def get_config_provider(settings: Settings = Depends(get_settings)) -> ConfigurationProvider:
    return ConfigurationProvider(settings)


def get_identity_verifier() -> IdentityVerifier:
    return IdentityVerifier()


def get_purchase_verifier() -> PurchaseVerifier:
    return PurchaseVerifier()


@lru_cache(maxsize=1)
def get_firebase_handle() -> FirebaseAdminHandle:
    """Process-wide Firebase Admin handle (initialized on first mint)."""
    return FirebaseAdminHandle(get_settings())


def get_session_minter(settings: Settings = Depends(get_settings)) -> SessionTokenMinter | None:
    """Session token minter, or None when minting is disabled."""
    if not settings.MINT_SESSION_TOKENS:
        return None
    return SessionTokenMinter(get_firebase_handle())
