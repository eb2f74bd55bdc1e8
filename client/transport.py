from __future__ import annotations

from typing import Any, Dict, Optional

import httpx

from config.settings import get_settings


class RelayClient:
    """Thin HTTP client for the relay's send and reset endpoints."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        *,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._client = httpx.Client(
            base_url=base_url or get_settings().backend_url,
            headers={"Content-Type": "application/json"},
            transport=transport,
            timeout=None,
        )

    def send_message(self, text: str) -> Optional[str]:
        response = self._client.post("/", json={"message": text})
        response.raise_for_status()
        data = response.json()
        if not isinstance(data, dict):
            return None
        reply = data.get("reply")
        return reply if isinstance(reply, str) else None

    def reset(self) -> Dict[str, Any]:
        response = self._client.post("/reset")
        response.raise_for_status()
        return response.json()

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "RelayClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()
