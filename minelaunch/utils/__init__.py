"""Common utilities."""

from .async_http import AsyncHTTPClient
from .integrity import verify_file
from .logger import setup_logging

__all__ = ["AsyncHTTPClient", "verify_file", "setup_logging"]
