"""Evaluation of library and argument rules."""

import logging
import re
from typing import TYPE_CHECKING, Iterable, Optional

from .platform import Platform

if TYPE_CHECKING:
    from ..versions.models import Rule, RuleOs

logger = logging.getLogger(__name__)


def os_matches(rule_os: Optional["RuleOs"], platform: Platform) -> bool:
    """Check a rule's OS constraint; absent fields match anything."""
    if rule_os is None:
        return True
    if rule_os.name is not None and rule_os.name != platform.minecraft_os:
        return False
    if rule_os.arch is not None and rule_os.arch != platform.arch:
        return False
    if rule_os.version is not None and platform.version is not None:
        if not re.search(rule_os.version, platform.version):
            return False
    return True


def rules_satisfied(rules: Optional[Iterable["Rule"]], platform: Platform) -> bool:
    """Return True if the rule list allows inclusion on ``platform``.

    Every rule has to agree with its own action: an ``allow`` rule must
    match the platform and a ``disallow`` rule must not. Feature flags
    (demo user, custom resolution) are not tracked, so any rule that names
    features fails the whole list.
    """
    for rule in rules or ():
        allow = rule.action == "allow"
        if os_matches(rule.os, platform) != allow:
            return False
        if rule.features is not None:
            logger.debug("Rule depends on features %s, treating as unsatisfied", sorted(rule.features))
            return False
    return True
