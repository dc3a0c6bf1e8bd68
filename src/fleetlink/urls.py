"""Rewrite media/document URLs into addresses reachable from the device."""

from __future__ import annotations

import re
from typing import Protocol

from fleetlink._constants import STORAGE_PORT, STORAGE_PREFIX


class AddressSource(Protocol):
    def get_current_address(self) -> str | None:
        ...


class UrlResolver:
    """Resolve API-provided paths against the current backend.

    * direct object-storage URLs (``http://host:9000/bucket/key``) go
      through the reverse proxy instead (``http://host/storage/bucket/key``),
      keeping the storage URL's own host;
    * other absolute ``http(s)`` URLs are returned unchanged;
    * relative paths are joined to the resolved backend address, or give
      ``None`` while no address is known yet ("not loadable yet").
    """

    def __init__(
        self,
        resolver: AddressSource,
        *,
        storage_port: int = STORAGE_PORT,
        storage_prefix: str = STORAGE_PREFIX,
    ) -> None:
        self._resolver = resolver
        self._storage_prefix = storage_prefix.strip("/")
        self._storage_pattern = re.compile(rf"^(https?)://([^/:]+):{storage_port}/(.+)$", re.IGNORECASE)

    def resolve(self, path: str | None) -> str | None:
        if not path:
            return None

        match = self._storage_pattern.match(path)
        if match:
            scheme, host, bucket_path = match.groups()
            return f"{scheme}://{host}/{self._storage_prefix}/{bucket_path}"

        if path.lower().startswith(("http://", "https://")):
            return path

        base_url = self._resolver.get_current_address()
        if not base_url:
            return None
        return f"{base_url.rstrip('/')}/{path.lstrip('/')}"

    __call__ = resolve
