"""Supabase client for job-sheet storage and the quotes table."""

from __future__ import annotations

import logging
from typing import Any

import httpx

log = logging.getLogger("piano-quote.supabase")


class SupabaseClient:
    def __init__(
        self,
        url: str,
        service_key: str,
        bucket: str = "piano-quotes",
        table: str = "quotes",
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.url = url.rstrip("/")
        self.service_key = service_key
        self.bucket = bucket
        self.table = table
        self.timeout = timeout
        self._transport = transport
        self._headers = {
            "apikey": self.service_key,
            "Authorization": f"Bearer {self.service_key}",
        }

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self._transport)

    # ------------------------------------------------------------------
    # Storage
    # ------------------------------------------------------------------

    def public_url(self, path: str) -> str:
        return f"{self.url}/storage/v1/object/public/{self.bucket}/{path}"

    async def upload(
        self,
        path: str,
        content: bytes,
        content_type: str,
        upsert: bool = False,
        cache_control: str = "3600",
    ) -> str:
        """Store ``content`` at ``path`` in the bucket and return its public URL.

        Without ``upsert`` an existing object at the same path is an error.
        """
        endpoint = f"{self.url}/storage/v1/object/{self.bucket}/{path}"
        headers = {
            **self._headers,
            "Content-Type": content_type,
            "cache-control": f"max-age={cache_control}",
            "x-upsert": "true" if upsert else "false",
        }
        async with self._client() as client:
            resp = await client.post(endpoint, headers=headers, content=content)
            resp.raise_for_status()
        log.info("Uploaded %s (%d bytes) to bucket %s", path, len(content), self.bucket)
        return self.public_url(path)

    # ------------------------------------------------------------------
    # Quotes table
    # ------------------------------------------------------------------

    async def insert_quote(self, row: dict[str, Any]) -> None:
        """Insert a single submissions row. No reads, no updates."""
        endpoint = f"{self.url}/rest/v1/{self.table}"
        headers = {
            **self._headers,
            "Content-Type": "application/json",
            "Prefer": "return=minimal",
        }
        async with self._client() as client:
            resp = await client.post(endpoint, headers=headers, json=row)
            resp.raise_for_status()
        log.info("Quote row saved for %s", row.get("job_ref"))
