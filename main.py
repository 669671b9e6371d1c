#!/usr/bin/env python3
"""Minecraft Launcher Entry Point"""

import sys
import asyncio
import logging
from pathlib import Path

from minelaunch.core import default_environment
from minelaunch.core.game_launcher import launch_version
from minelaunch.errors import LauncherError
from minelaunch.utils import setup_logging


async def main(version: str, username: str) -> int:
    """Launch ``version`` as ``username`` from the default install directory"""
    minecraft_dir = Path.home() / ".minecraft"
    env = default_environment(minecraft_dir, username)
    return await launch_version(version, env, minecraft_dir)


if __name__ == "__main__":
    setup_logging()
    selection = sys.argv[1] if len(sys.argv) > 1 else "latest"
    player = sys.argv[2] if len(sys.argv) > 2 else "Player"
    try:
        sys.exit(asyncio.run(main(selection, player)))
    except LauncherError as e:
        logging.getLogger(__name__).error("%s", e)
        sys.exit(1)
    except KeyboardInterrupt:
        pass
