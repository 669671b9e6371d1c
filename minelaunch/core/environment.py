"""Key/value store used to fill ``${...}`` placeholders in launch arguments."""

import logging
import re
from pathlib import Path
from typing import Dict, Iterator, Optional

from .. import __version__

logger = logging.getLogger(__name__)

PLACEHOLDER = re.compile(r"\$\{([^}]*)\}")

LAUNCHER_NAME = "minelaunch"


class Environment:
    """Ordered mapping of template variables for one launch attempt."""

    def __init__(self, values: Optional[Dict[str, str]] = None):
        self._values: Dict[str, str] = dict(values or {})

    def get(self, key: str) -> Optional[str]:
        return self._values.get(key)

    def set(self, key: str, value: str):
        self._values[key] = value

    def remove(self, key: str):
        self._values.pop(key, None)

    def copy(self) -> "Environment":
        return Environment(self._values)

    def __contains__(self, key: str) -> bool:
        return key in self._values

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def resolve(self, template: str) -> str:
        """Substitute every ``${key}`` with its value.

        Unknown keys are logged and replaced with an empty string.
        """
        def _replace(match: "re.Match[str]") -> str:
            key = match.group(1)
            value = self._values.get(key)
            if value is None:
                logger.warning("Need to define '%s'", key)
                return ""
            return value

        return PLACEHOLDER.sub(_replace, template)


def default_environment(minecraft_dir: Path, username: Optional[str] = None) -> Environment:
    """Environment seeded with the facts that do not depend on a version."""
    env = Environment({
        "launcher_name": LAUNCHER_NAME,
        "launcher_version": __version__,
        "game_directory": str(minecraft_dir),
        "user_type": "legacy",
    })
    if username:
        env.set("auth_player_name", username)
    return env
