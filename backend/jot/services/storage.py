from __future__ import annotations

import logging
from typing import Iterable

import httpx

from jot.core.config import Settings

logger = logging.getLogger(__name__)


class StorageError(RuntimeError):
    pass


class UploadthingClient:
    """Minimal Uploadthing REST client; only object deletion is needed server-side."""

    def __init__(self, *, api_key: str | None, base_url: str, timeout: float = 10.0) -> None:
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings: Settings) -> UploadthingClient:
        return cls(
            api_key=settings.uploadthing_secret,
            base_url=settings.uploadthing_api_url,
            timeout=settings.uploadthing_timeout_seconds,
        )

    def delete_files(self, keys: Iterable[str]) -> None:
        file_keys = [key for key in keys if key]
        if not file_keys:
            return
        if not self.api_key:
            raise StorageError("Uploadthing is not configured")

        headers = {
            "X-Uploadthing-Api-Key": self.api_key,
            "Content-Type": "application/json",
        }
        try:
            with httpx.Client(timeout=self.timeout) as client:
                response = client.post(
                    f"{self.base_url}/v6/deleteFiles",
                    json={"fileKeys": file_keys},
                    headers=headers,
                )
                response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            logger.error("Uploadthing API error: %s - %s", exc.response.status_code, exc.response.text)
            raise StorageError(f"Uploadthing API error: {exc.response.status_code}") from exc
        except httpx.HTTPError as exc:
            raise StorageError(f"Uploadthing request failed: {exc}") from exc
