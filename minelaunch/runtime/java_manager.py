"""Java runtime manager for Minecraft."""

import asyncio
import logging
import shutil
import tarfile
import tempfile
import zipfile
from pathlib import Path
from typing import Optional

from ..core.platform import Platform
from ..errors import ProvisioningError, TransportError
from ..utils.async_http import AsyncHTTPClient

logger = logging.getLogger(__name__)


def _extract_zip(archive_path: Path, dest: Path):
    with zipfile.ZipFile(archive_path, 'r') as zip_ref:
        zip_ref.extractall(dest)


def _extract_tar(archive_path: Path, dest: Path):
    with tarfile.open(archive_path, "r:gz") as tar_ref:
        if hasattr(tarfile, "data_filter"):
            tar_ref.extractall(dest, filter="data")
        else:
            tar_ref.extractall(dest)


class JavaManager:
    ADOPTIUM_API = "https://api.adoptium.net/v3/binary/latest"
    # Majors from here on ship as a JDK that has to be jlinked into a runtime
    JLINK_BASELINE = 16
    JLINK_ARGS = ["--add-modules", "ALL-MODULE-PATH", "--strip-debug",
                  "--no-man-pages", "--no-header-files", "--compress=2"]

    def __init__(self, platform: Platform, minecraft_dir: Optional[Path] = None,
                 http: Optional[AsyncHTTPClient] = None, api_url: Optional[str] = None):
        self.platform = platform
        self.minecraft_dir = minecraft_dir or (Path.home() / ".minecraft")
        self.runtime_dir = self.minecraft_dir / "runtime"
        self.api_url = (api_url or self.ADOPTIUM_API).rstrip("/")
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

    def runtime_path(self, major: int) -> Path:
        return self.runtime_dir / f"java{major}-{self.platform.runtime_name}"

    def java_executable(self, major: int) -> Path:
        name = "java.exe" if self.platform.os == "windows" else "java"
        return self.runtime_path(major) / "bin" / name

    def image_type(self, major: int) -> str:
        return "jdk" if major >= self.JLINK_BASELINE else "jre"

    def get_adoptium_url(self, major: int) -> str:
        """Get Adoptium download URL for the platform."""
        return (f"{self.api_url}/{major}/ga/{self.platform.java_os}/{self.platform.java_arch}/"
                f"{self.image_type(major)}/hotspot/normal/eclipse")

    async def ensure_java(self, major: int) -> Path:
        """Ensure the runtime for ``major`` is installed and return its java executable."""
        if self.runtime_path(major).exists():
            return self.java_executable(major)

        logger.info("Java %d installation not found", major)
        await self.download_java(major)
        return self.java_executable(major)

    async def download_java(self, major: int):
        """Download, extract and install the runtime for ``major``."""
        url = self.get_adoptium_url(major)
        archive_suffix = ".zip" if self.platform.os == "windows" else ".tar.gz"
        loop = asyncio.get_running_loop()

        logger.info("Downloading Java %d for %s", major, self.platform.runtime_name)
        with tempfile.TemporaryDirectory(prefix="minelaunch-java-") as tmp:
            archive_path = Path(tmp) / f"java{archive_suffix}"
            extract_dir = Path(tmp) / "extracted"
            extract_dir.mkdir()

            try:
                await self.http.download(url, archive_path)
            except TransportError as e:
                raise ProvisioningError(f"Could not download Java {major}: {e}") from e

            logger.info("Extracting Java %d", major)
            extractor = _extract_zip if self.platform.os == "windows" else _extract_tar
            try:
                await loop.run_in_executor(None, extractor, archive_path, extract_dir)
            except (zipfile.BadZipFile, tarfile.TarError, EOFError) as e:
                raise ProvisioningError(f"Corrupt Java {major} archive from {url}: {e}") from e

            version_folder = self._top_level_folder(extract_dir)
            self.runtime_dir.mkdir(parents=True, exist_ok=True)
            target = self.runtime_path(major)

            if self.image_type(major) == "jre":
                logger.info("Moving JRE to runtime folder")
                await loop.run_in_executor(None, self._install_jre, version_folder, target)
            else:
                logger.info("Creating JRE using jlink")
                await self._jlink(version_folder, target)

        logger.info("Java extracted to %s", target)

    @staticmethod
    def _top_level_folder(extract_dir: Path) -> Path:
        folders = [entry for entry in extract_dir.iterdir() if entry.is_dir()]
        if len(folders) != 1:
            raise ProvisioningError(f"Expected one top-level folder in the Java archive, found {len(folders)}")
        return folders[0]

    def _install_jre(self, version_folder: Path, target: Path):
        try:
            if self.platform.os == "windows":
                # A rename can't cross drive letters
                shutil.copytree(version_folder, target)
            elif self.platform.os == "macos":
                shutil.move(str(version_folder / "Contents" / "Home"), str(target))
                shutil.move(str(version_folder / "Contents" / "MacOS" / "libjli.dylib"),
                            str(target / "bin" / "libjli.dylib"))
            else:
                shutil.move(str(version_folder), str(target))
        except FileNotFoundError as e:
            self._discard(target)
            raise ProvisioningError(f"Unexpected JRE layout: {e}") from e
        except BaseException:
            self._discard(target)
            raise

    @staticmethod
    def _discard(target: Path):
        # A half-built runtime would pass the presence check on the next run
        if target.exists():
            shutil.rmtree(target, ignore_errors=True)

    async def _jlink(self, version_folder: Path, target: Path):
        home = version_folder / "Contents" / "Home" if self.platform.os == "macos" else version_folder
        jlink = home / "bin" / ("jlink.exe" if self.platform.os == "windows" else "jlink")
        if not jlink.is_file():
            raise ProvisioningError(f"jlink not found at {jlink}")

        process = await asyncio.create_subprocess_exec(
            str(jlink), *self.JLINK_ARGS, "--output", str(target),
            stdout=asyncio.subprocess.PIPE, stderr=asyncio.subprocess.STDOUT)
        output, _ = await process.communicate()
        logger.info("jlink exited with %d", process.returncode)
        if process.returncode != 0:
            self._discard(target)
            raise ProvisioningError(
                f"jlink failed with exit code {process.returncode}: {output.decode(errors='replace').strip()}")
