"""Version manifest and spec manager."""

import logging
import aiofiles
import aiofiles.os
from pathlib import Path
from typing import Optional

from .download_manager import DownloadManager
from .models import VersionInfo, VersionManifest, VersionSpec, parse_document
from ..errors import VersionNotFoundError
from ..utils.async_http import AsyncHTTPClient
from ..utils.integrity import verify_file

logger = logging.getLogger(__name__)


class VersionManager:
    MANIFEST_URL = "https://launchermeta.mojang.com/mc/game/version_manifest.json"

    def __init__(self, minecraft_dir: Optional[Path] = None, http: Optional[AsyncHTTPClient] = None,
                 manifest_url: Optional[str] = None):
        self.minecraft_dir = minecraft_dir or (Path.home() / ".minecraft")
        self.versions_dir = self.minecraft_dir / "versions"
        self.manifest_url = manifest_url or self.MANIFEST_URL
        self.http = http
        self._owns_http = http is None

    async def __aenter__(self):
        if self.http is None:
            self.http = AsyncHTTPClient()
        return self

    async def __aexit__(self, exc_type, exc, tb):
        if self._owns_http and self.http:
            await self.http.close()
            self.http = None

    def spec_path(self, version_id: str) -> Path:
        return self.versions_dir / version_id / f"{version_id}.json"

    def jar_path(self, version_id: str) -> Path:
        return self.versions_dir / version_id / f"{version_id}.jar"

    async def fetch_manifest(self) -> VersionManifest:
        """Fetch the launcher version manifest."""
        text = await self.http.get_text(self.manifest_url)
        return parse_document(VersionManifest, text, self.manifest_url)

    async def get_version_info(self, version_id: str, manifest: Optional[VersionManifest] = None) -> VersionInfo:
        """Get version info for a version id, ``latest``/``release`` or ``snapshot``."""
        if not manifest:
            manifest = await self.fetch_manifest()
        return select_version(manifest, version_id)

    async def get_version_spec(self, version_info: VersionInfo, downloader: DownloadManager) -> VersionSpec:
        """Return the parsed spec, installing the version if needed.

        A cached spec is trusted as is; only its client jar is checked and
        downloaded again when missing or damaged.
        """
        spec_path = self.spec_path(version_info.id)
        if not await aiofiles.os.path.isfile(spec_path):
            logger.info("Minecraft %s spec not found", version_info.id)
            return await self.download_version(version_info, downloader)

        async with aiofiles.open(spec_path, 'r', encoding='utf-8') as f:
            spec = parse_document(VersionSpec, await f.read(), str(spec_path))

        client = spec.downloads.client
        if not await verify_file(self.jar_path(spec.id), client.sha1, client.size):
            logger.info("Minecraft %s jar damaged, downloading", spec.id)
            await self.download_jar(spec, downloader)

        return spec

    async def download_version(self, version_info: VersionInfo, downloader: DownloadManager) -> VersionSpec:
        """Download the spec verbatim, then the client jar."""
        spec_path = self.spec_path(version_info.id)
        await aiofiles.os.makedirs(spec_path.parent, exist_ok=True)

        logger.info("Downloading Minecraft %s version spec", version_info.id)
        text = await self.http.get_text(version_info.url)
        async with aiofiles.open(spec_path, 'w', encoding='utf-8', newline='') as f:
            await f.write(text)

        spec = parse_document(VersionSpec, text, version_info.url)
        await self.download_jar(spec, downloader)
        return spec

    async def download_jar(self, spec: VersionSpec, downloader: DownloadManager):
        await downloader.download_file(spec.downloads.client.url, self.jar_path(spec.id),
                                       f"Minecraft {spec.id} jar")


def select_version(manifest: VersionManifest, selection: str) -> VersionInfo:
    """Find a manifest entry by id or by the ``latest``/``snapshot`` aliases."""
    if selection in ("latest", "release"):
        version_id = manifest.latest.release
    elif selection == "snapshot":
        version_id = manifest.latest.snapshot
    else:
        version_id = selection

    for version in manifest.versions:
        if version.id == version_id:
            return version
    raise VersionNotFoundError(f"Version {version_id} is not in the manifest")
