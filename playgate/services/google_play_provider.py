"""
Google Play Provider - Android Publisher API client.

Thin wrapper over androidpublisher v3 purchases.products and
purchases.subscriptions. Every upstream failure is raised as BackendError and
never retried.
"""

import asyncio
from typing import Any

from google.oauth2 import service_account
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError
from structlog import get_logger

from playgate.exceptions import BackendError
from playgate.models.domain import ServiceCredential
from playgate.observability.tracing import trace_operation

logger = get_logger(__name__)

ANDROID_PUBLISHER_SCOPE = "https://www.googleapis.com/auth/androidpublisher"


def _http_error_message(exc: HttpError) -> str:
    return exc.content.decode("utf-8") if exc.content else str(exc)


class GooglePlayProvider:
    """
    Google Play Developer API client for purchase lookups and acknowledgement.
    """

    def __init__(self, credential: ServiceCredential, service: Any = None) -> None:
        """
        Initialize Google Play provider.

        Args:
            credential: Parsed service account key
            service: Prebuilt androidpublisher resource (built from credential if omitted)
        """
        if service is None:
            creds = service_account.Credentials.from_service_account_info(  # type: ignore[no-untyped-call]
                dict(credential.info),
                scopes=[ANDROID_PUBLISHER_SCOPE],
            )
            service = build("androidpublisher", "v3", credentials=creds, cache_discovery=False)
        self.service = service

    async def _execute(self, operation: str, request: Any, **log_fields: Any) -> dict[str, Any]:
        """Execute one API request, mapping failures to BackendError."""
        try:
            with trace_operation(f"androidpublisher.{operation}", **log_fields):
                result = await asyncio.to_thread(request.execute)
        except HttpError as exc:
            error_content = _http_error_message(exc)
            logger.error(
                "google_play_api_failed",
                operation=operation,
                status=exc.resp.status,
                error=error_content,
                **log_fields,
            )
            if exc.resp.status == 404:
                raise BackendError(
                    "Purchase not found or invalid token", upstream_status=404
                ) from exc
            if exc.resp.status == 410:
                raise BackendError("Purchase token expired", upstream_status=410) from exc
            raise BackendError(
                f"Google Play API error: {error_content}", upstream_status=exc.resp.status
            ) from exc
        except Exception as exc:
            logger.exception("google_play_api_unexpected_error", operation=operation)
            raise BackendError(f"Google Play API call failed: {exc}") from exc

        return dict(result or {})

    async def get_product(
        self, package_name: str, product_id: str, purchase_token: str
    ) -> dict[str, Any]:
        """Fetch a one-time product purchase."""
        request = (
            self.service.purchases()
            .products()
            .get(packageName=package_name, productId=product_id, token=purchase_token)
        )
        return await self._execute(
            "products.get", request, package_name=package_name, product_id=product_id
        )

    async def get_subscription(
        self, package_name: str, subscription_id: str, purchase_token: str
    ) -> dict[str, Any]:
        """Fetch a subscription purchase."""
        request = (
            self.service.purchases()
            .subscriptions()
            .get(packageName=package_name, subscriptionId=subscription_id, token=purchase_token)
        )
        return await self._execute(
            "subscriptions.get",
            request,
            package_name=package_name,
            subscription_id=subscription_id,
        )

    async def acknowledge_product(
        self, package_name: str, product_id: str, purchase_token: str
    ) -> None:
        """Acknowledge a one-time product purchase (required within 3 days)."""
        request = (
            self.service.purchases()
            .products()
            .acknowledge(
                packageName=package_name, productId=product_id, token=purchase_token, body={}
            )
        )
        await self._execute(
            "products.acknowledge", request, package_name=package_name, product_id=product_id
        )
        logger.info("google_play_product_acknowledged", product_id=product_id)

    async def acknowledge_subscription(
        self, package_name: str, subscription_id: str, purchase_token: str
    ) -> None:
        """Acknowledge a subscription purchase."""
        request = (
            self.service.purchases()
            .subscriptions()
            .acknowledge(
                packageName=package_name,
                subscriptionId=subscription_id,
                token=purchase_token,
                body={},
            )
        )
        await self._execute(
            "subscriptions.acknowledge",
            request,
            package_name=package_name,
            subscription_id=subscription_id,
        )
        logger.info("google_play_subscription_acknowledged", subscription_id=subscription_id)
