"""
Purchase Verification - Check Google Play purchases and optionally acknowledge them.

Flow:
1. Fetch the purchase (product or subscription, never both)
2. Derive ok from the purchase state / expiry
3. If requested and still needed, acknowledge (best effort)
"""

import time
from collections.abc import Callable
from typing import Any

from structlog import get_logger

from playgate.exceptions import BackendError
from playgate.models.domain import (
    InAppResult,
    PurchaseQuery,
    PurchaseResult,
    ServiceCredential,
    SubscriptionResult,
)
from playgate.observability.metrics import metrics
from playgate.services.best_effort import best_effort
from playgate.services.google_play_provider import GooglePlayProvider

logger = get_logger(__name__)

ProviderFactory = Callable[[ServiceCredential], GooglePlayProvider]


def current_time_millis() -> int:
    return int(time.time() * 1000)


def _optional_int(value: Any) -> int | None:
    # The API returns int64 fields (e.g. expiryTimeMillis) as strings
    return int(value) if value is not None else None


class PurchaseVerifier:
    """Verifies in-app and subscription purchases against Google Play."""

    def __init__(
        self,
        provider_factory: ProviderFactory = GooglePlayProvider,
        now_millis: Callable[[], int] = current_time_millis,
    ) -> None:
        self._provider_factory = provider_factory
        self._now_millis = now_millis

    async def verify(
        self,
        query: PurchaseQuery,
        credential: ServiceCredential,
        acknowledge: bool = False,
    ) -> PurchaseResult:
        """
        Verify a purchase token.

        Args:
            query: Validated purchase query
            credential: Service account used to call the Play Developer API
            acknowledge: Acknowledge the purchase if it is valid and not yet acknowledged

        Returns:
            InAppResult or SubscriptionResult

        Raises:
            BackendError: If the purchase lookup fails
        """
        logger.info(
            "verifying_purchase",
            kind=query.kind,
            package_name=query.package_name,
            product_id=query.product_id,
            subscription_id=query.subscription_id,
            acknowledge=acknowledge,
            has_developer_payload=query.developer_payload is not None,
        )

        try:
            provider = self._provider_factory(credential)
        except Exception as exc:
            logger.exception("google_play_client_init_failed")
            metrics.record_purchase_verification(query.kind, "error")
            raise BackendError(f"Failed to initialize Google Play client: {exc}") from exc

        try:
            if query.product_id:
                result: PurchaseResult = await self._verify_product(provider, query, acknowledge)
            else:
                result = await self._verify_subscription(provider, query, acknowledge)
        except Exception:
            metrics.record_purchase_verification(query.kind, "error")
            raise

        metrics.record_purchase_verification(query.kind, "ok" if result.ok else "not_ok")
        return result

    async def _verify_product(
        self, provider: GooglePlayProvider, query: PurchaseQuery, acknowledge: bool
    ) -> InAppResult:
        assert query.product_id is not None
        data = await provider.get_product(
            query.package_name, query.product_id, query.purchase_token
        )

        try:
            result = InAppResult(
                product_id=query.product_id,
                order_id=data.get("orderId"),
                purchase_state=_optional_int(data.get("purchaseState")),
                acknowledgement_state=_optional_int(data.get("acknowledgementState")),
                consumption_state=_optional_int(data.get("consumptionState")),
                purchase_time_millis=_optional_int(data.get("purchaseTimeMillis")),
                purchase_type=_optional_int(data.get("purchaseType")),
            )
        except (TypeError, ValueError) as exc:
            raise BackendError(f"Unexpected Google Play response: {exc}") from exc

        logger.info(
            "google_play_purchase_verified",
            order_id=result.order_id,
            product_id=result.product_id,
            purchase_state=result.purchase_state,
            acknowledgement_state=result.acknowledgement_state,
            is_test=result.is_test_purchase(),
        )

        if acknowledge and result.ok and not result.acknowledged:
            await best_effort(
                "acknowledge_product",
                provider.acknowledge_product,
                query.package_name,
                query.product_id,
                query.purchase_token,
            )

        return result

    async def _verify_subscription(
        self, provider: GooglePlayProvider, query: PurchaseQuery, acknowledge: bool
    ) -> SubscriptionResult:
        assert query.subscription_id is not None
        data = await provider.get_subscription(
            query.package_name, query.subscription_id, query.purchase_token
        )

        try:
            result = SubscriptionResult(
                subscription_id=query.subscription_id,
                order_id=data.get("orderId"),
                expiry_time_millis=_optional_int(data.get("expiryTimeMillis")),
                auto_renewing=data.get("autoRenewing"),
                payment_state=_optional_int(data.get("paymentState")),
                cancel_reason=_optional_int(data.get("cancelReason")),
                acknowledgement_state=_optional_int(data.get("acknowledgementState")),
                now_millis=self._now_millis(),
            )
        except (TypeError, ValueError) as exc:
            raise BackendError(f"Unexpected Google Play response: {exc}") from exc

        logger.info(
            "google_play_subscription_verified",
            order_id=result.order_id,
            subscription_id=result.subscription_id,
            expiry_time_millis=result.expiry_time_millis,
            active=result.ok,
            auto_renewing=result.auto_renewing,
        )

        if acknowledge and result.ok and not result.acknowledged:
            await best_effort(
                "acknowledge_subscription",
                provider.acknowledge_subscription,
                query.package_name,
                query.subscription_id,
                query.purchase_token,
            )

        return result
