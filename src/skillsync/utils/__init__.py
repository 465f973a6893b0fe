"""Utilities package."""

from skillsync.utils.config import Config, ToolConfig
from skillsync.utils.logging import setup_logging

__all__ = ["Config", "ToolConfig", "setup_logging"]
