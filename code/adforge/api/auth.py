"""Account endpoints. Sign-up and token verification are public routes."""
from __future__ import annotations

from typing import Any, Dict

from adforge.api.base import Resource
from adforge.validation import require


class AuthAPI(Resource):
    async def signup(self, email: str, password: str, display_name: str = "") -> Any:
        require(email=email, password=password)
        return await self._client.request_data(
            "POST",
            "/api/v1/auth/signup",
            json={"email": email, "password": password, "display_name": display_name},
        )

    async def verify_token(self, id_token: str) -> Any:
        return await self._client.request_data("POST", "/api/v1/auth/verify-token", json={"id_token": id_token})

    async def me(self) -> Any:
        return await self._client.request_data("GET", "/api/v1/auth/me")

    async def update_profile(self, changes: Dict[str, Any]) -> Any:
        return await self._client.request_data("PATCH", "/api/v1/auth/me", json=changes)

    async def delete_account(self) -> Any:
        return await self._client.request_data("DELETE", "/api/v1/auth/me")

    async def logout(self) -> Any:
        return await self._client.request_data("POST", "/api/v1/auth/logout")

    async def resend_verification(self, email: str) -> Any:
        return await self._client.request_data(
            "POST", "/api/v1/auth/resend-verification", json={"email": email}
        )
