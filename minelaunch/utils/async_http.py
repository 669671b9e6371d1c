"""Async HTTP client utilities."""

import asyncio
import aiohttp
import aiofiles
from pathlib import Path
from typing import Optional, Dict

from ..errors import TransportError

CHUNK_SIZE = 64 * 1024


class AsyncHTTPClient:
    """Reusable async HTTP client."""

    def __init__(self, headers: Optional[Dict[str, str]] = None,
                 timeout: Optional[aiohttp.ClientTimeout] = None):
        self.default_headers = headers or {}
        self.timeout = timeout or aiohttp.ClientTimeout(total=None, sock_connect=30, sock_read=60)
        self.session: Optional[aiohttp.ClientSession] = None

    async def __aenter__(self):
        self.session = aiohttp.ClientSession(headers=self.default_headers, timeout=self.timeout)
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()

    async def close(self):
        if self.session:
            await self.session.close()
            self.session = None

    def _session(self) -> aiohttp.ClientSession:
        if self.session is None:
            self.session = aiohttp.ClientSession(headers=self.default_headers, timeout=self.timeout)
        return self.session

    async def get_text(self, url: str) -> str:
        """GET request returning the body as text."""
        try:
            async with self._session().get(url) as resp:
                resp.raise_for_status()
                return await resp.text(encoding=resp.charset or "utf-8")
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise TransportError(url, str(e) or type(e).__name__) from e

    async def download(self, url: str, dest: Path) -> int:
        """Stream a response body into ``dest``, returning the byte count."""
        written = 0
        try:
            async with self._session().get(url) as resp:
                resp.raise_for_status()
                async with aiofiles.open(dest, 'wb') as f:
                    async for chunk in resp.content.iter_chunked(CHUNK_SIZE):
                        await f.write(chunk)
                        written += len(chunk)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise TransportError(url, str(e) or type(e).__name__) from e
        return written
