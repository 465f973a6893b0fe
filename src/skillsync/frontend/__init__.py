"""Frontend abstraction for skillsync."""

from skillsync.frontend.base import Frontend, SilentFrontend
from skillsync.frontend.console import ConsoleFrontend

__all__ = ["Frontend", "SilentFrontend", "ConsoleFrontend"]
