"""Shared fixtures."""

import asyncio
import hashlib
from collections import Counter
from typing import Dict, Optional

import pytest
import pytest_asyncio
from aiohttp import web
from aiohttp.test_utils import TestServer

from minelaunch.core.platform import Platform


class FakeOrigin:
    """In-process stand-in for every remote host the launcher talks to."""

    def __init__(self):
        self.files: Dict[str, bytes] = {}
        self.hits: Counter = Counter()
        self.in_flight = 0
        self.max_in_flight = 0
        self.delay = 0.0
        self.server: Optional[TestServer] = None

    def url(self, path: str) -> str:
        return str(self.server.make_url(path))

    def add(self, path: str, body: bytes) -> str:
        self.files[path] = body
        return self.url(path)

    def descriptor(self, path: str, body: bytes, rel_path: Optional[str] = None) -> dict:
        """Serve ``body`` at ``path`` and return its download descriptor."""
        desc = {
            "sha1": hashlib.sha1(body).hexdigest(),
            "size": len(body),
            "url": self.add(path, body),
        }
        if rel_path is not None:
            desc["path"] = rel_path
        return desc

    async def handler(self, request: web.Request) -> web.StreamResponse:
        self.hits[request.path] += 1
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
            if request.path not in self.files:
                raise web.HTTPNotFound()
            return web.Response(body=self.files[request.path])
        finally:
            self.in_flight -= 1


@pytest_asyncio.fixture
async def origin():
    fake = FakeOrigin()
    app = web.Application()
    app.router.add_get("/{tail:.*}", fake.handler)
    server = TestServer(app)
    await server.start_server()
    fake.server = server
    yield fake
    await server.close()


@pytest.fixture
def linux():
    return Platform(os="linux", arch="x64", version="6.1.0")


@pytest.fixture
def minecraft_dir(tmp_path):
    path = tmp_path / ".minecraft"
    path.mkdir()
    return path


@pytest.fixture
def make_spec(origin):
    """Build a version spec dict whose client jar and asset index are served by ``origin``."""
    def _make(version_id="1.16.5", libraries=None, asset_index=None, arguments=None,
              minecraft_arguments=None, java_major=8, client=b"client jar bytes"):
        index_body = asset_index if asset_index is not None else b'{"objects": {}}'
        spec = {
            "id": version_id,
            "type": "release",
            "mainClass": "net.minecraft.client.main.Main",
            "assets": "1.16",
            "assetIndex": dict(origin.descriptor("/indexes/1.16.json", index_body), id="1.16"),
            "downloads": {
                "client": origin.descriptor(f"/versions/{version_id}/client.jar", client),
            },
            "libraries": libraries or [],
            "javaVersion": {"component": "jre-legacy", "majorVersion": java_major},
        }
        if arguments is not None:
            spec["arguments"] = arguments
        if minecraft_arguments is not None:
            spec["minecraftArguments"] = minecraft_arguments
        if arguments is None and minecraft_arguments is None:
            spec["minecraftArguments"] = "--username ${auth_player_name} --version ${version_name}"
        return spec

    return _make
