"""
Domain Models - Immutable dataclasses for identity and purchase verification.

NO DICTIONARIES - All data uses strongly typed models.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any, Literal

from playgate.exceptions import MissingFieldsError

GOOGLE_ISSUERS = frozenset({"accounts.google.com", "https://accounts.google.com"})


@dataclass(frozen=True)
class AudienceAllowlist:
    """Ordered set of accepted ID token audiences."""

    audiences: tuple[str, ...] = ()

    @classmethod
    def from_values(cls, values: Iterable[str]) -> "AudienceAllowlist":
        """Build from raw values: trim, drop empties, keep first occurrence."""
        seen: list[str] = []
        for value in values:
            value = value.strip()
            if value and value not in seen:
                seen.append(value)
        return cls(tuple(seen))

    def __contains__(self, audience: object) -> bool:
        return audience in self.audiences

    def __len__(self) -> int:
        return len(self.audiences)

    def __bool__(self) -> bool:
        return bool(self.audiences)

    def as_list(self) -> list[str]:
        return list(self.audiences)


@dataclass(frozen=True)
class VerifiedIdentity:
    """Google identity whose token passed signature and claim validation."""

    subject: str
    issuer: str
    audience: str
    email: str | None = None
    email_verified: bool = False
    display_name: str | None = None
    picture_url: str | None = None
    authorized_party: str | None = None


@dataclass(frozen=True)
class ServiceCredential:
    """Parsed Google service account key."""

    client_email: str
    private_key: str
    project_id: str | None
    token_uri: str
    info: Mapping[str, Any] = field(repr=False, compare=False)

    REQUIRED_FIELDS = ("client_email", "private_key", "token_uri")

    def __repr__(self) -> str:
        return f"ServiceCredential(client_email={self.client_email!r})"


@dataclass(frozen=True)
class PurchaseQuery:
    """Validated purchase verification query."""

    package_name: str
    purchase_token: str
    product_id: str | None = None
    subscription_id: str | None = None
    developer_payload: str | None = None

    def __post_init__(self) -> None:
        """Validate required fields and the product/subscription choice."""
        if not self.package_name or not self.purchase_token:
            raise MissingFieldsError(
                "packageName, purchaseToken and one of productId/subscriptionId are required"
            )
        if bool(self.product_id) == bool(self.subscription_id):
            raise MissingFieldsError("Exactly one of productId or subscriptionId is required")

    @property
    def kind(self) -> Literal["inapp", "subs"]:
        return "inapp" if self.product_id else "subs"


@dataclass(frozen=True)
class InAppResult:
    """Result of a one-time product purchase lookup."""

    product_id: str
    order_id: str | None
    purchase_state: int | None  # 0: purchased, 1: canceled, 2: pending
    acknowledgement_state: int | None  # 0: not acknowledged, 1: acknowledged
    consumption_state: int | None  # 0: not consumed, 1: consumed
    purchase_time_millis: int | None
    purchase_type: int | None = None  # None: real, 0: test, 1: promo, 2: rewarded

    kind: Literal["inapp"] = field(default="inapp", init=False)

    @property
    def ok(self) -> bool:
        return self.purchase_state == 0

    @property
    def acknowledged(self) -> bool:
        return self.acknowledgement_state == 1

    def is_test_purchase(self) -> bool:
        """Check if this is a test purchase (license tester account)."""
        return self.purchase_type == 0


@dataclass(frozen=True)
class SubscriptionResult:
    """Result of a subscription purchase lookup."""

    subscription_id: str
    order_id: str | None
    expiry_time_millis: int | None
    auto_renewing: bool | None
    payment_state: int | None
    cancel_reason: int | None
    acknowledgement_state: int | None
    now_millis: int = field(repr=False, compare=False, default=0)

    kind: Literal["subs"] = field(default="subs", init=False)

    @property
    def ok(self) -> bool:
        """Active means an expiry exists and lies in the future."""
        return self.expiry_time_millis is not None and self.expiry_time_millis > self.now_millis

    @property
    def acknowledged(self) -> bool:
        return self.acknowledgement_state == 1


PurchaseResult = InAppResult | SubscriptionResult
