"""Backends that store skills and materialize them into tools."""

from skillsync.backend.base import Backend
from skillsync.backend.invoke import InvokeBackend, SubprocessTransport
from skillsync.backend.local import LocalBackend

__all__ = ["Backend", "InvokeBackend", "LocalBackend", "SubprocessTransport"]
