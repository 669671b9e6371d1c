"""Game launcher for Minecraft."""

import asyncio
import logging
import tempfile
import zipfile
from pathlib import Path
from typing import List, Optional, Union

from .environment import Environment
from .platform import Platform
from .rules import rules_satisfied
from ..errors import LaunchError
from ..runtime.java_manager import JavaManager
from ..utils.async_http import AsyncHTTPClient
from ..versions.download_manager import DownloadManager, library_artifact, library_path, native_classifier
from ..versions.manager import VersionManager
from ..versions.models import Argument, DynamicArgument, VersionInfo, VersionSpec

logger = logging.getLogger(__name__)


class GameLauncher:
    """Turns an installed version spec into a running game process."""

    def __init__(self, platform: Platform, minecraft_dir: Optional[Path] = None):
        self.platform = platform
        self.minecraft_dir = minecraft_dir or (Path.home() / ".minecraft")
        self.libraries_dir = self.minecraft_dir / "libraries"
        self.versions_dir = self.minecraft_dir / "versions"

    def client_jar(self, spec: VersionSpec) -> Path:
        return self.versions_dir / spec.id / f"{spec.id}.jar"

    def assemble_classpath(self, spec: VersionSpec) -> str:
        """Library artifacts in spec order, followed by the client jar."""
        paths = []
        for lib in spec.libraries:
            if not rules_satisfied(lib.rules, self.platform):
                continue
            artifact = library_artifact(lib)
            if artifact is not None:
                paths.append(str(library_path(self.libraries_dir, lib, artifact)))

        paths.append(str(self.client_jar(spec)))
        return self.platform.classpath_separator.join(paths)

    def extract_natives(self, spec: VersionSpec, natives_dir: Path):
        """Unpack every applicable native bundle into ``natives_dir``."""
        for lib in spec.libraries:
            if not rules_satisfied(lib.rules, self.platform):
                continue
            native = native_classifier(lib, self.platform)
            if native is None:
                continue

            classifier, download = native
            exclude = lib.extract.exclude if lib.extract else []
            with zipfile.ZipFile(library_path(self.libraries_dir, lib, download, classifier), 'r') as zip_ref:
                for member in zip_ref.infolist():
                    if any(member.filename.startswith(prefix) for prefix in exclude):
                        continue
                    zip_ref.extract(member, natives_dir)
            logger.info("Extracted native for %s", lib.name)

    def _expand(self, arguments: List[Argument]) -> List[str]:
        expanded = []
        for arg in arguments:
            if isinstance(arg, DynamicArgument) and not rules_satisfied(arg.rules, self.platform):
                continue
            expanded.extend(arg.values())
        return expanded

    def build_arguments(self, spec: VersionSpec) -> List[str]:
        """Unresolved JVM arguments, main class and game arguments."""
        if spec.arguments is not None:
            return self._expand(spec.arguments.jvm) + [spec.mainClass] + self._expand(spec.arguments.game)

        if spec.minecraftArguments is None:
            raise LaunchError(f"Version {spec.id} declares no launch arguments")

        # Old specs leave the JVM arguments to the launcher
        args = []
        if self.platform.os == "windows":
            args.append("-XX:HeapDumpPath=MojangTricksIntelDriversForPerformance_javaw.exe_minecraft.exe.heapdump")
        if self.platform.os == "macos":
            args.append("-XstartOnFirstThread")
        if self.platform.arch == "x86":
            args.append("-Xss1M")
        args.extend([
            "-Djava.library.path=${natives_directory}",
            "-Dminecraft.launcher.brand=${launcher_name}",
            "-Dminecraft.launcher.version=${launcher_version}",
            f"-Dminecraft.client.jar={self.client_jar(spec)}",
            "-cp",
            "${classpath}",
            spec.mainClass,
        ])
        args.extend(spec.minecraftArguments.split(" "))
        return args

    async def prepare_launch(self, spec: VersionSpec, env: Environment, natives_dir: Path) -> List[str]:
        """Bind classpath and natives, then resolve every argument template."""
        classpath = self.assemble_classpath(spec)
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, self.extract_natives, spec, natives_dir)
        env.set("classpath", classpath)
        env.set("natives_directory", str(natives_dir))

        return [env.resolve(arg) for arg in self.build_arguments(spec)]

    async def launch_game(self, java_path: Path, args: List[str]) -> int:
        """Run the game and wait for it to exit."""
        process = await asyncio.create_subprocess_exec(str(java_path), *args, cwd=str(self.minecraft_dir))
        return await process.wait()


def bind_version_facts(env: Environment, spec: VersionSpec, minecraft_dir: Path, platform: Platform):
    assets_root = minecraft_dir / "assets"
    env.set("version_name", spec.id)
    env.set("version_type", spec.type)
    env.set("assets_root", str(assets_root))
    env.set("assets_index_name", spec.assets)
    env.set("game_assets", str(assets_root / "virtual" / spec.assets))
    env.set("library_directory", str(minecraft_dir / "libraries"))
    env.set("classpath_separator", platform.classpath_separator)


async def launch_version(version: Union[str, VersionInfo], env: Environment,
                         minecraft_dir: Optional[Path] = None, platform: Optional[Platform] = None,
                         manifest_url: Optional[str] = None, resources_url: Optional[str] = None,
                         java_api_url: Optional[str] = None) -> int:
    """Install ``version`` as needed, run it and return its exit code.

    ``env`` belongs to this launch attempt; it is seeded with version
    facts and the classpath before arguments are resolved.
    """
    minecraft_dir = minecraft_dir or (Path.home() / ".minecraft")
    platform = platform or Platform.current()

    async with AsyncHTTPClient() as http:
        versions = VersionManager(minecraft_dir, http=http, manifest_url=manifest_url)
        downloads = DownloadManager(minecraft_dir, http=http, resources_url=resources_url)
        java = JavaManager(platform, minecraft_dir, http=http, api_url=java_api_url)

        if isinstance(version, str):
            version = await versions.get_version_info(version)
        spec = await versions.get_version_spec(version, downloads)
        bind_version_facts(env, spec, minecraft_dir, platform)

        results = await asyncio.gather(
            java.ensure_java(spec.java_major),
            downloads.check_libraries(spec, platform),
            downloads.check_assets(spec),
            return_exceptions=True,
        )
        # Let all three steps settle before the session closes
        for result in results:
            if isinstance(result, BaseException):
                raise result
        java_path = results[0]

    launcher = GameLauncher(platform, minecraft_dir)
    with tempfile.TemporaryDirectory(prefix="natives-") as natives_dir:
        args = await launcher.prepare_launch(spec, env, Path(natives_dir))
        logger.info("Launching Minecraft %s", spec.id)
        status = await launcher.launch_game(java_path, args)
    logger.info("Minecraft exited with %d", status)
    return status
