# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Cloudinary adapter for the remote asset store."""

from __future__ import annotations

import hashlib
import time
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import httpx

from vidhub.domain.assets.entities import AssetKind, RemoteAsset
from vidhub.domain.assets.exceptions import DeleteError, UploadError
from vidhub.domain.assets.repositories import AssetStore
from vidhub.shared.logging import logger

_FOLDERS = {AssetKind.AVATAR: "avatars", AssetKind.COVER: "covers"}


def sign_params(params: Mapping[str, Any], api_secret: str) -> str:
    """SHA-1 request signature: sorted ``key=value`` pairs joined by ``&`` plus the secret."""
    to_sign = "&".join(
        f"{key}={value}" for key, value in sorted(params.items()) if value not in (None, "")
    )
    return hashlib.sha1(f"{to_sign}{api_secret}".encode()).hexdigest()


class CloudinaryAssetStore(AssetStore):
    def __init__(
        self,
        *,
        cloud_name: str,
        api_key: str,
        api_secret: str,
        base_url: str = "https://api.cloudinary.com/v1_1",
        folder: str | None = None,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._endpoint = f"{base_url.rstrip('/')}/{cloud_name}/image"
        self._api_key = api_key
        self._api_secret = api_secret
        self._folder = folder
        self._timeout = timeout
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self._timeout, transport=self._transport)

    def _signed(self, params: dict[str, Any]) -> dict[str, Any]:
        params = {key: value for key, value in params.items() if value is not None}
        params["timestamp"] = int(time.time())
        params["signature"] = sign_params(params, self._api_secret)
        params["api_key"] = self._api_key
        return params

    def _folder_for(self, kind: AssetKind) -> str:
        sub = _FOLDERS[kind]
        return f"{self._folder.strip('/')}/{sub}" if self._folder else sub

    async def upload(self, local_path: str, *, kind: AssetKind) -> RemoteAsset:
        path = Path(local_path)
        try:
            content = path.read_bytes()
        except OSError as exc:
            logger.error(f"assets.upload: cannot read {local_path}: {exc}")
            raise UploadError(local_path, reason="unreadable") from exc

        data = self._signed({"folder": self._folder_for(kind)})
        logger.info(f"assets.upload: {kind.value} {path.name} ({len(content)} bytes)")
        try:
            async with self._client() as http:
                response = await http.post(
                    f"{self._endpoint}/upload",
                    data=data,
                    files={"file": (path.name, content)},
                )
                response.raise_for_status()
                payload = response.json()
        except httpx.HTTPStatusError as exc:
            logger.error(
                f"assets.upload: store answered {exc.response.status_code} for {path.name}"
            )
            raise UploadError(local_path, reason=f"http_{exc.response.status_code}") from exc
        except (httpx.HTTPError, ValueError) as exc:
            logger.error(f"assets.upload: transport error for {path.name}: {exc}")
            raise UploadError(local_path, reason=type(exc).__name__) from exc

        remote_id = payload.get("public_id")
        url = payload.get("secure_url") or payload.get("url")
        if not remote_id or not url:
            raise UploadError(local_path, reason="malformed_response")
        logger.info(f"assets.upload: stored {kind.value} as {remote_id}")
        return RemoteAsset(kind=kind, remote_id=remote_id, url=url)

    async def delete(self, remote_id: str) -> None:
        data = self._signed({"public_id": remote_id})
        try:
            async with self._client() as http:
                response = await http.post(f"{self._endpoint}/destroy", data=data)
                response.raise_for_status()
                result = response.json().get("result")
        except httpx.HTTPStatusError as exc:
            raise DeleteError(remote_id, reason=f"http_{exc.response.status_code}") from exc
        except (httpx.HTTPError, ValueError) as exc:
            raise DeleteError(remote_id, reason=type(exc).__name__) from exc

        if result == "not found":
            logger.info(f"assets.delete: {remote_id} already gone")
            return
        if result != "ok":
            raise DeleteError(remote_id, reason=f"result_{result}")
        logger.info(f"assets.delete: removed {remote_id}")


__all__ = ["CloudinaryAssetStore", "sign_params"]
