"""Subscriptions and one-time credit purchases."""
from __future__ import annotations

from typing import Any, Dict, List

from adforge.api.base import Resource
from adforge.models.catalog import CreditBalance, Subscription


class SubscriptionsAPI(Resource):
    async def plans(self) -> List[Dict[str, Any]]:
        data = await self._client.request_data("GET", "/api/v1/subscriptions/plans")
        if isinstance(data, dict):
            return data.get("plans", [])
        return data or []

    async def current(self) -> Subscription:
        data = await self._client.request_data("GET", "/api/v1/subscriptions/subscription")
        if isinstance(data, dict) and isinstance(data.get("subscription"), dict):
            data = data["subscription"]
        return Subscription.model_validate(data or {})

    async def checkout(self, plan: str, success_url: str, cancel_url: str) -> Any:
        return await self._client.request_data(
            "POST",
            "/api/v1/subscriptions/checkout",
            json={"plan": plan, "success_url": success_url, "cancel_url": cancel_url},
        )

    async def billing_portal(self, return_url: str) -> Any:
        return await self._client.request_data(
            "POST", "/api/v1/subscriptions/billing-portal", json={"return_url": return_url}
        )

    async def check_credits(self, operation_type: str, quantity: int = 1) -> Any:
        return await self._client.request_data(
            "POST",
            "/api/v1/subscriptions/check-credits",
            json={"operation_type": operation_type, "quantity": quantity},
        )

    async def deduct_credits(self, operation_type: str, quantity: int = 1) -> Any:
        return await self._client.request_data(
            "POST",
            "/api/v1/subscriptions/deduct-credits",
            json={"operation_type": operation_type, "quantity": quantity},
        )

    async def schedule_cancellation(self) -> Any:
        return await self._client.request_data("POST", "/api/v1/subscriptions/schedule-cancellation", json={})

    async def reactivate(self) -> Any:
        return await self._client.request_data("POST", "/api/v1/subscriptions/reactivate", json={})

    async def schedule_downgrade(self, target_plan: str) -> Any:
        return await self._client.request_data(
            "POST", "/api/v1/subscriptions/schedule-downgrade", json={"target_plan": target_plan}
        )


class CreditsAPI(Resource):
    async def packages(self) -> List[Dict[str, Any]]:
        data = await self._client.request_data("GET", "/api/v1/credits/packages")
        if isinstance(data, dict):
            return data.get("packages", [])
        return data or []

    async def balance(self) -> CreditBalance:
        data = await self._client.request_data("GET", "/api/v1/credits/balance")
        return CreditBalance.model_validate(data or {})

    async def purchase(self, package_id: str, success_url: str, cancel_url: str) -> Any:
        return await self._client.request_data(
            "POST",
            "/api/v1/credits/purchase",
            json={"package_id": package_id, "success_url": success_url, "cancel_url": cancel_url},
        )

    async def transactions(self, limit: int = 50) -> List[Dict[str, Any]]:
        data = await self._client.request_data("GET", "/api/v1/credits/transactions", params={"limit": limit})
        if isinstance(data, dict):
            return data.get("transactions", [])
        return data or []
