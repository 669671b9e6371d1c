"""Launch engine building blocks."""

from .environment import Environment, default_environment
from .platform import Platform
from .rules import rules_satisfied

__all__ = ["Environment", "default_environment", "Platform", "rules_satisfied"]
