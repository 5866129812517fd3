"""Room image storage on Supabase Storage, plus object path helpers.

Objects live at {bucket}/{property_id}/{room_folder}/{storage_key}, where
room_folder is the sanitized room name. The storage key is the last segment of
the public URL, so (property id, room name, storage key) is enough to find the
object again.
"""

from __future__ import annotations

import re
import uuid
from pathlib import PurePosixPath
from typing import Protocol

import httpx

from app.config import StorageConfig
from app.exceptions import StorageFailure, StorageTimeout

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9_-]")
_DEFAULT_EXT = "jpg"


def room_folder(room_name: str) -> str:
    """Replace anything outside [A-Za-z0-9_-] with '-' and lowercase the result."""
    return _UNSAFE_CHARS.sub("-", room_name).lower()


def object_path(property_id: str, room_name: str, storage_key: str) -> str:
    return f"{property_id}/{room_folder(room_name)}/{storage_key}"


def new_storage_key(filename: str | None) -> str:
    """Random object name that keeps the upload's extension (jpg when there is none)."""
    ext = PurePosixPath(filename or "").suffix.lstrip(".") or _DEFAULT_EXT
    return f"{uuid.uuid4()}.{ext}"


def storage_key_from_url(url: str) -> str:
    return url.rsplit("/", 1)[-1]


class BlobStore(Protocol):
    async def upload(self, data: bytes, path: str, content_type: str = "application/octet-stream") -> str: ...

    async def delete(self, path: str) -> None: ...


class SupabaseBlobStore:
    """BlobStore over the Supabase Storage REST API."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        bucket: str,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._bucket = bucket
        self._timeout = timeout
        self._transport = transport

    @classmethod
    def from_config(cls, cfg: StorageConfig) -> "SupabaseBlobStore":
        return cls(cfg.url, cfg.anon_key, cfg.bucket, timeout=cfg.timeout_seconds)

    def public_url(self, path: str) -> str:
        return f"{self._base_url}/storage/v1/object/public/{self._bucket}/{path}"

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=f"{self._base_url}/storage/v1",
            headers={"Authorization": f"Bearer {self._api_key}", "apikey": self._api_key},
            timeout=self._timeout,
            transport=self._transport,
        )

    async def upload(self, data: bytes, path: str, content_type: str = "application/octet-stream") -> str:
        """Upload bytes to ``path`` inside the bucket. Returns the public URL."""
        await self._request(
            "POST", f"/object/{self._bucket}/{path}",
            content=data, headers={"Content-Type": content_type},
        )
        return self.public_url(path)

    async def delete(self, path: str) -> None:
        await self._request("DELETE", f"/object/{self._bucket}", json={"prefixes": [path]})

    async def _request(self, method: str, url: str, **kwargs) -> httpx.Response:
        try:
            async with self._client() as client:
                resp = await client.request(method, url, **kwargs)
                resp.raise_for_status()
                return resp
        except httpx.TimeoutException as exc:
            raise StorageTimeout(f"Storage {method} {url} timed out", exc) from exc
        except httpx.HTTPError as exc:
            raise StorageFailure(f"Storage {method} {url} failed: {exc}", exc) from exc
