"""Platform facts for the machine a launch runs on."""

import platform as _platform
from typing import Optional

from pydantic import BaseModel, ConfigDict

from ..errors import LauncherError


class Platform(BaseModel):
    """Immutable OS/arch description, built once and passed around.

    ``os`` is one of ``windows``, ``macos``, ``linux`` and ``arch`` one of
    ``x86``, ``x64``, ``arm64``. These are the names used for the runtime
    directory; the properties below translate them to the naming schemes
    of version specs and of the Java vendor.
    """

    model_config = ConfigDict(frozen=True)

    os: str
    arch: str
    version: Optional[str] = None

    @classmethod
    def current(cls) -> "Platform":
        """Detect the running platform."""
        os_map = {
            "windows": "windows",
            "darwin": "macos",
            "linux": "linux",
        }
        arch_map = {
            "x86": "x86",
            "i386": "x86",
            "i686": "x86",
            "amd64": "x64",
            "x86_64": "x64",
            "arm64": "arm64",
            "aarch64": "arm64",
        }

        system = _platform.system().lower()
        machine = _platform.machine().lower()
        if system not in os_map:
            raise LauncherError(f"Unsupported operating system: {system}")
        if machine not in arch_map:
            raise LauncherError(f"Unsupported architecture: {machine}")

        # Match what the JVM reports as os.version
        if system == "darwin":
            version = _platform.mac_ver()[0]
        elif system == "windows":
            version = _platform.version()
        else:
            version = _platform.release()

        return cls(os=os_map[system], arch=arch_map[machine], version=version or None)

    @property
    def minecraft_os(self) -> str:
        """OS name as written in version spec rules and natives maps."""
        return "osx" if self.os == "macos" else self.os

    @property
    def java_os(self) -> str:
        return "mac" if self.os == "macos" else self.os

    @property
    def java_arch(self) -> str:
        return {"x86": "x32", "x64": "x64", "arm64": "aarch64"}[self.arch]

    @property
    def bits(self) -> str:
        """Value substituted for ``${arch}`` in classifier names."""
        return "32" if self.arch == "x86" else "64"

    @property
    def classpath_separator(self) -> str:
        return ";" if self.os == "windows" else ":"

    @property
    def runtime_name(self) -> str:
        return f"{self.os}-{self.arch}"
