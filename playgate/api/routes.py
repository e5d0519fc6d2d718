"""
API Routes - Google sign-in and Google Play purchase verification.

Errors are raised as PlaygateError subclasses and rendered by the exception
handler registered in playgate.main.
"""

from fastapi import APIRouter, Depends, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from structlog import get_logger

from playgate.api.dependencies import (
    get_config_provider,
    get_identity_verifier,
    get_purchase_verifier,
    get_session_minter,
)
from playgate.models.api import (
    ErrorResponse,
    GoogleUser,
    InAppPurchaseResponse,
    SubscriptionPurchaseResponse,
    VerifyIdTokenRequest,
    VerifyIdTokenResponse,
    VerifyPurchaseRequest,
)
from playgate.models.domain import InAppResult, PurchaseQuery
from playgate.services.best_effort import best_effort
from playgate.services.config_provider import ConfigurationProvider
from playgate.services.identity_verifier import IdentityVerifier
from playgate.services.purchase_verifier import PurchaseVerifier
from playgate.services.session_tokens import SessionTokenMinter

logger = get_logger(__name__)

router = APIRouter()

# Fallback token source when the body has no idToken
bearer_scheme = HTTPBearer(auto_error=False)

ERROR_RESPONSES: dict[int | str, dict[str, type[ErrorResponse]]] = {
    status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse},
    status.HTTP_401_UNAUTHORIZED: {"model": ErrorResponse},
    status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": ErrorResponse},
}


@router.post(
    "/verifyGoogleIdToken",
    response_model=VerifyIdTokenResponse,
    responses=ERROR_RESPONSES,
)
async def verify_google_id_token(
    body: VerifyIdTokenRequest | None = None,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    config: ConfigurationProvider = Depends(get_config_provider),
    verifier: IdentityVerifier = Depends(get_identity_verifier),
    minter: SessionTokenMinter | None = Depends(get_session_minter),
) -> VerifyIdTokenResponse:
    """
    Verify a Google ID token and mint a Firebase custom token.

    Token source: body.idToken, falling back to Authorization: Bearer {id_token}.
    The custom token is best effort; when minting fails the response is still
    200 with firebaseCustomToken = null.
    """
    assertion = body.id_token if body and body.id_token else None
    if assertion is None and credentials is not None:
        assertion = credentials.credentials

    identity = await verifier.verify(assertion, config.resolve_allowlist())

    custom_token = None
    if minter is not None:
        custom_token = await best_effort("mint_session_token", minter.mint, identity.subject)

    logger.info(
        "identity_verified",
        aud=identity.audience,
        azp=identity.authorized_party,
        has_email=identity.email is not None,
        session_token_issued=custom_token is not None,
    )

    return VerifyIdTokenResponse(
        google_user=GoogleUser.from_identity(identity),
        firebase_custom_token=custom_token,
    )


@router.post(
    "/verifyPurchase",
    response_model=InAppPurchaseResponse | SubscriptionPurchaseResponse,
    responses=ERROR_RESPONSES,
)
async def verify_purchase(
    body: VerifyPurchaseRequest | None = None,
    config: ConfigurationProvider = Depends(get_config_provider),
    verifier: PurchaseVerifier = Depends(get_purchase_verifier),
) -> InAppPurchaseResponse | SubscriptionPurchaseResponse:
    """
    Verify a Google Play in-app product or subscription purchase.

    Exactly one of productId / subscriptionId selects the branch. With
    acknowledge=true a valid, unacknowledged purchase is acknowledged; a failed
    acknowledgement does not change the response.
    """
    body = body or VerifyPurchaseRequest()

    # Validate input before touching configuration
    query = PurchaseQuery(
        package_name=body.package_name or "",
        purchase_token=body.purchase_token or "",
        product_id=body.product_id or None,
        subscription_id=body.subscription_id or None,
        developer_payload=body.developer_payload,
    )
    credential = config.resolve_service_credential()

    result = await verifier.verify(query, credential, acknowledge=body.acknowledge)

    if isinstance(result, InAppResult):
        return InAppPurchaseResponse.from_result(result)
    return SubscriptionPurchaseResponse.from_result(result)
