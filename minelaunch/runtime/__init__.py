"""Java runtime provisioning."""

from .java_manager import JavaManager

__all__ = ["JavaManager"]
