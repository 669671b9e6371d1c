"""Launcher error types."""

from typing import List, Tuple


class LauncherError(Exception):
    """Base class for every error raised by the launcher core."""


class TransportError(LauncherError):
    """A remote host could not be reached or answered with a non-2xx status."""

    def __init__(self, url: str, reason: str):
        super().__init__(f"Failed to fetch {url}: {reason}")
        self.url = url
        self.reason = reason


class SpecParseError(LauncherError):
    """A manifest, version spec or asset index could not be parsed."""

    def __init__(self, source: str, reason: str):
        super().__init__(f"Could not parse {source}: {reason}")
        self.source = source
        self.reason = reason


class DownloadError(LauncherError):
    """One or more items of a download batch failed."""

    def __init__(self, failures: List[Tuple[str, BaseException]]):
        labels = ", ".join(label for label, _ in failures)
        super().__init__(f"Failed to download {len(failures)} item(s): {labels}")
        self.failures = failures


class ProvisioningError(LauncherError):
    """The Java runtime could not be downloaded, extracted or linked."""


class VersionNotFoundError(LauncherError):
    """The requested version is not listed in the manifest."""


class LaunchError(LauncherError):
    """The version spec does not describe a launchable game."""
