"""Download manager for assets and libraries."""

import asyncio
import logging
import shutil
import aiofiles
import aiofiles.os
from pathlib import Path
from typing import List, NamedTuple, Optional, Tuple, Union

from .models import AssetIndex, Download, VersionLibrary, VersionSpec, parse_document
from ..core.platform import Platform
from ..core.rules import rules_satisfied
from ..errors import DownloadError, LaunchError
from ..utils.async_http import AsyncHTTPClient
from ..utils.integrity import verify_file

logger = logging.getLogger(__name__)


class DownloadItem(NamedTuple):
    dest: Path
    url: str
    label: str


def library_artifact(library: VersionLibrary) -> Optional[Download]:
    return library.downloads.artifact


def library_path(libraries_dir: Path, library: VersionLibrary, download: Download,
                 classifier: Optional[str] = None) -> Path:
    """Absolute path of a library artifact or native bundle."""
    return libraries_dir / (download.path or library.maven_path(classifier))


def native_classifier(library: VersionLibrary, platform: Platform) -> Optional[Tuple[str, Download]]:
    """Classifier name and download of the library's native bundle for ``platform``."""
    if not library.natives:
        return None
    classifier = library.natives.get(platform.minecraft_os)
    if classifier is None:
        return None
    classifier = classifier.replace("${arch}", platform.bits)
    download = (library.downloads.classifiers or {}).get(classifier)
    if download is None:
        raise LaunchError(f"Library {library.name} names native classifier {classifier} but does not declare it")
    return classifier, download


class DownloadManager:
    RESOURCES_URL = "https://resources.download.minecraft.net"
    CONCURRENT_DOWNLOADS = 25

    def __init__(self, minecraft_dir: Optional[Path] = None, concurrent_downloads: Optional[int] = None,
                 http: Optional[AsyncHTTPClient] = None, resources_url: Optional[str] = None):
        self.minecraft_dir = minecraft_dir or (Path.home() / ".minecraft")
        self.libraries_dir = self.minecraft_dir / "libraries"
        self.assets_dir = self.minecraft_dir / "assets"
        self.resources_dir = self.minecraft_dir / "resources"
        self.resources_url = (resources_url or self.RESOURCES_URL).rstrip("/")
        self.concurrent_downloads = concurrent_downloads or self.CONCURRENT_DOWNLOADS
        self.semaphore = asyncio.Semaphore(self.concurrent_downloads)
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

    def library_path(self, library: VersionLibrary, download: Download, classifier: Optional[str] = None) -> Path:
        return library_path(self.libraries_dir, library, download, classifier)

    async def download_file(self, url: str, dest: Path, label: Optional[str] = None) -> str:
        """Download ``url`` to ``dest`` through a temporary file.

        At most ``concurrent_downloads`` transfers run at once; callers
        beyond that wait for a free slot.
        """
        label = label or dest.name
        async with self.semaphore:
            await aiofiles.os.makedirs(dest.parent, exist_ok=True)
            part = dest.with_name(dest.name + ".part")
            try:
                await self.http.download(url, part)
                await aiofiles.os.replace(part, dest)
            except BaseException:
                if await aiofiles.os.path.exists(part):
                    await aiofiles.os.remove(part)
                raise
        logger.info("%s downloaded", label)
        return label

    async def download_batch(self, items: List[DownloadItem]) -> List[Union[str, BaseException]]:
        """Download every item, letting failures settle without cancelling siblings."""
        tasks = [self.download_file(item.url, item.dest, item.label) for item in items]
        return await asyncio.gather(*tasks, return_exceptions=True)

    async def fetch_all(self, items: List[DownloadItem]):
        """Run a batch and raise once it has drained if anything failed."""
        if not items:
            return
        results = await self.download_batch(items)
        failures = [(item.label, result) for item, result in zip(items, results)
                    if isinstance(result, BaseException)]
        for label, error in failures:
            logger.error("%s failed: %s", label, error)
        if failures:
            raise DownloadError(failures)

    async def check_libraries(self, spec: VersionSpec, platform: Platform):
        """Download every missing or damaged library and native bundle."""
        items: List[DownloadItem] = []
        queued = set()

        for library in spec.libraries:
            if not rules_satisfied(library.rules, platform):
                logger.debug("Library %s skipped by rules", library.name)
                continue

            artifact = library_artifact(library)
            if artifact is not None:
                jar_path = self.library_path(library, artifact)
                if jar_path in queued:
                    logger.debug("Library %s already queued", library.name)
                elif await verify_file(jar_path, artifact.sha1, artifact.size):
                    logger.debug("Library %s already exists", library.name)
                else:
                    logger.info("Library %s not found or damaged, downloading", library.name)
                    queued.add(jar_path)
                    items.append(DownloadItem(jar_path, artifact.url, f"Library {library.name}"))

            native = native_classifier(library, platform)
            if native is not None:
                classifier, download = native
                native_path = self.library_path(library, download, classifier)
                if native_path in queued:
                    logger.debug("Native for %s already queued", library.name)
                elif await verify_file(native_path, download.sha1, download.size):
                    logger.debug("Native for %s already exists", library.name)
                else:
                    logger.info("Native for %s not found or damaged, downloading", library.name)
                    queued.add(native_path)
                    items.append(DownloadItem(native_path, download.url, f"Native for {library.name}"))

        await self.fetch_all(items)
        logger.info("All libraries checked and downloaded")

    async def load_asset_index(self, spec: VersionSpec) -> AssetIndex:
        """Validate or download the asset index and parse it."""
        descriptor = spec.assetIndex
        index_path = self.assets_dir / "indexes" / f"{spec.assets}.json"

        if not await verify_file(index_path, descriptor.sha1, descriptor.size):
            logger.info("Asset index %s not found or damaged, downloading", spec.assets)
            await self.fetch_all([DownloadItem(index_path, descriptor.url, f"Asset index {spec.assets}")])

        async with aiofiles.open(index_path, 'r', encoding='utf-8') as f:
            text = await f.read()
        return parse_document(AssetIndex, text, str(index_path))

    async def check_assets(self, spec: VersionSpec) -> AssetIndex:
        """Download missing assets and replicate legacy layouts."""
        asset_index = await self.load_asset_index(spec)
        objects_dir = self.assets_dir / "objects"

        items: List[DownloadItem] = []
        queued = set()
        for name, obj in asset_index.objects.items():
            # Several names can share one object
            if obj.hash in queued:
                continue
            asset_path = objects_dir / obj.relative_path
            if await verify_file(asset_path, obj.hash, obj.size):
                logger.debug("Asset %s already exists", name)
                continue
            logger.debug("Asset %s not found or damaged, downloading", name)
            queued.add(obj.hash)
            items.append(DownloadItem(asset_path, f"{self.resources_url}/{obj.relative_path}", f"Asset {name}"))

        await self.fetch_all(items)

        if asset_index.virtual:
            await self._replicate(asset_index, self.assets_dir / "virtual" / spec.assets, "Virtual asset")
        if asset_index.map_to_resources:
            await self._replicate(asset_index, self.resources_dir, "Resource asset")

        logger.info("All assets checked and downloaded")
        return asset_index

    async def _replicate(self, asset_index: AssetIndex, root: Path, kind: str):
        """Copy objects to ``root/<name>`` where the copy is missing or damaged."""
        objects_dir = self.assets_dir / "objects"
        loop = asyncio.get_running_loop()

        for name, obj in asset_index.objects.items():
            target = root / name
            if await verify_file(target, obj.hash, obj.size):
                logger.debug("%s %s already exists", kind, name)
                continue
            logger.debug("%s %s not found or damaged, copying", kind, name)
            await aiofiles.os.makedirs(target.parent, exist_ok=True)
            await loop.run_in_executor(None, shutil.copyfile, objects_dir / obj.relative_path, target)
