"""Version management module."""

from .manager import VersionManager, select_version
from .download_manager import DownloadManager
from .models import VersionManifest, VersionInfo, VersionSpec

__all__ = ["VersionManager", "select_version", "DownloadManager", "VersionManifest", "VersionInfo", "VersionSpec"]
