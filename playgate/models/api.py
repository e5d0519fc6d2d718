"""
API Models - Pydantic models for request/response bodies.

Wire names are camelCase to match the mobile clients; Python attributes
are snake_case.
"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from playgate.models.domain import InAppResult, SubscriptionResult, VerifiedIdentity


class CamelModel(BaseModel):
    """Base model accepting either camelCase aliases or field names."""

    model_config = ConfigDict(populate_by_name=True)


# ============================================================================
# Identity Verification Models
# ============================================================================


class VerifyIdTokenRequest(CamelModel):
    """POST /verifyGoogleIdToken request body."""

    id_token: str | None = Field(None, alias="idToken")


class GoogleUser(CamelModel):
    """Public profile of a verified Google user."""

    uid: str
    email: str | None = None
    name: str | None = None
    picture: str | None = None

    @classmethod
    def from_identity(cls, identity: VerifiedIdentity) -> "GoogleUser":
        return cls(
            uid=identity.subject,
            email=identity.email,
            name=identity.display_name,
            picture=identity.picture_url,
        )


class VerifyIdTokenResponse(CamelModel):
    """POST /verifyGoogleIdToken success response."""

    ok: Literal[True] = True
    google_user: GoogleUser = Field(..., alias="googleUser")
    firebase_custom_token: str | None = Field(None, alias="firebaseCustomToken")


# ============================================================================
# Purchase Verification Models
# ============================================================================


class VerifyPurchaseRequest(CamelModel):
    """POST /verifyPurchase request body."""

    package_name: str | None = Field(None, alias="packageName")
    purchase_token: str | None = Field(None, alias="purchaseToken")
    product_id: str | None = Field(None, alias="productId")
    subscription_id: str | None = Field(None, alias="subscriptionId")
    acknowledge: bool = False
    # Accepted for client compatibility; not compared against any API field
    developer_payload: str | None = Field(None, alias="developerPayload")


class InAppPurchaseResponse(CamelModel):
    """Verification result for a one-time product."""

    ok: bool
    type: Literal["inapp"] = "inapp"
    product_id: str = Field(..., alias="productId")
    order_id: str | None = Field(None, alias="orderId")
    purchase_state: int | None = Field(None, alias="purchaseState")
    acknowledgement_state: int | None = Field(None, alias="acknowledgementState")
    consumption_state: int | None = Field(None, alias="consumptionState")
    purchase_time_millis: int | None = Field(None, alias="purchaseTimeMillis")
    purchase_type: int | None = Field(None, alias="purchaseType")

    @classmethod
    def from_result(cls, result: InAppResult) -> "InAppPurchaseResponse":
        return cls(
            ok=result.ok,
            product_id=result.product_id,
            order_id=result.order_id,
            purchase_state=result.purchase_state,
            acknowledgement_state=result.acknowledgement_state,
            consumption_state=result.consumption_state,
            purchase_time_millis=result.purchase_time_millis,
            purchase_type=result.purchase_type,
        )


class SubscriptionPurchaseResponse(CamelModel):
    """Verification result for a subscription."""

    ok: bool
    type: Literal["subs"] = "subs"
    subscription_id: str = Field(..., alias="subscriptionId")
    order_id: str | None = Field(None, alias="orderId")
    expiry_time_millis: int | None = Field(None, alias="expiryTimeMillis")
    auto_renewing: bool | None = Field(None, alias="autoRenewing")
    payment_state: int | None = Field(None, alias="paymentState")
    cancel_reason: int | None = Field(None, alias="cancelReason")
    acknowledgement_state: int | None = Field(None, alias="acknowledgementState")

    @classmethod
    def from_result(cls, result: SubscriptionResult) -> "SubscriptionPurchaseResponse":
        return cls(
            ok=result.ok,
            subscription_id=result.subscription_id,
            order_id=result.order_id,
            expiry_time_millis=result.expiry_time_millis,
            auto_renewing=result.auto_renewing,
            payment_state=result.payment_state,
            cancel_reason=result.cancel_reason,
            acknowledgement_state=result.acknowledgement_state,
        )


# ============================================================================
# Shared Models
# ============================================================================


class ErrorResponse(BaseModel):
    """Error body returned for every failed request."""

    ok: Literal[False] = False
    error: str
    details: Any = None


class ServiceInfoResponse(BaseModel):
    """GET / response."""

    service: str
    version: str
    status: str
