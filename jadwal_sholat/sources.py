# sources.py
# Where table bytes come from. The codec only ever sees the resulting bytes;
# timeouts and retries belong to the caller.

from __future__ import annotations
import asyncio
import logging
from pathlib import Path

import httpx

log = logging.getLogger(__name__)


def file_source(path):
    path = Path(path)

    async def read() -> bytes:
        log.debug("Reading %s", path)
        return await asyncio.to_thread(path.read_bytes)
    return read

def url_source(url: str, timeout=httpx.Timeout(30.0, pool=None), client: httpx.AsyncClient | None = None):
    async def fetch() -> bytes:
        log.debug("Fetching %s", url)
        if client is not None:
            response = await client.get(url)
            response.raise_for_status()
            return response.content
        async with httpx.AsyncClient(timeout=timeout) as c:
            response = await c.get(url)
            response.raise_for_status()
            return response.content
    return fetch
