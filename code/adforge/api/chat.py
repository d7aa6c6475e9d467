"""Image chat conversations. Their ids feed ``client.ads.remix``."""
from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

from adforge.api.base import Resource
from adforge.models.creative import image_file
from adforge.validation import require


class ChatAPI(Resource):
    async def create_conversation(
        self,
        brand_id: str,
        product_id: str,
        image_path: Path,
        initial_message: Optional[str] = None,
    ) -> Any:
        """Upload the starting image; the backend renders a first version."""
        require(brand_id=brand_id, product_id=product_id, image_path=image_path)
        data = {"brand_id": brand_id, "product_id": product_id}
        if initial_message:
            data["initial_message"] = initial_message
        return await self._client.request_data(
            "POST",
            "/api/v1/chat/conversations",
            data=data,
            files={"initial_image": image_file(Path(image_path))},
            timeout=280.0,
        )

    async def send_message(self, conversation_id: str, text: str, backend: str = "openai") -> Any:
        body = {"text": text}
        if backend and backend != "openai":
            body["backend"] = backend
        # Image edits run inline
        return await self._client.request_data(
            "POST", f"/api/v1/chat/conversations/{conversation_id}/messages", json=body, timeout=300.0
        )

    async def get_conversation(self, brand_id: str, product_id: str, conversation_id: str) -> Any:
        return await self._client.request_data(
            "GET",
            f"/api/v1/chat/brands/{brand_id}/products/{product_id}/conversations/{conversation_id}",
            timeout=30.0,
        )

    async def list_conversations(self, brand_id: str, product_id: str, limit: int = 50) -> Any:
        return await self._client.request_data(
            "GET",
            f"/api/v1/chat/brands/{brand_id}/products/{product_id}/conversations",
            params={"limit": limit},
            timeout=30.0,
        )
