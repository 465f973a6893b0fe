"""Backend adapter for an external process that reports errors as wire strings."""

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Awaitable, Callable

from pydantic import ValidationError

from skillsync.backend.base import Backend
from skillsync.core.errors import BackendFailure, TransportError, decode_backend_error
from skillsync.core.models import Skill, SyncTarget, Tool

logger = logging.getLogger(__name__)

Transport = Callable[[str, dict[str, Any]], Awaitable[Any]]


class SubprocessTransport:
    """
    Runs the backend executable once per command.

    The request ``{"command": ..., "args": {...}}`` is written to stdin as
    JSON and the JSON result is read from stdout. A non-zero exit code means
    failure, with the wire error string on stderr.
    """

    def __init__(self, command: list[str]):
        self.command = list(command)

    async def __call__(self, command: str, args: dict[str, Any]) -> Any:
        payload = json.dumps({"command": command, "args": args})
        try:
            process = await asyncio.create_subprocess_exec(
                *self.command,
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise TransportError(f"Failed to start backend {self.command[0]}: {e}") from e

        stdout, stderr = await process.communicate(payload.encode())

        if process.returncode != 0:
            error = stderr.decode(errors="replace").strip() if stderr else ""
            raise TransportError(error or f"Backend exited with code {process.returncode}")

        output = stdout.decode(errors="replace").strip() if stdout else ""
        if not output:
            return None
        try:
            return json.loads(output)
        except json.JSONDecodeError as e:
            raise TransportError(f"Invalid backend response: {e}") from e


class InvokeBackend(Backend):
    """
    Backend implemented by invoking named commands over a transport.

    Transport failures arrive as prefix-tagged strings and are decoded into
    typed BackendErrors here, once.
    """

    def __init__(self, transport: Transport):
        self.transport = transport

    async def _invoke(self, command: str, **args: Any) -> Any:
        logger.debug(f"Invoking backend command {command}")
        try:
            return await self.transport(command, args)
        except TransportError as e:
            raise decode_backend_error(e.message) from e

    @staticmethod
    def _parse(model: type, data: Any, command: str) -> Any:
        try:
            return model.model_validate(data)
        except ValidationError as e:
            raise BackendFailure(f"Unexpected response from {command}: {e}") from e

    async def materialize(
        self,
        central_path: str,
        skill_id: str,
        tool_id: str,
        skill_name: str,
        overwrite: bool = False,
    ) -> SyncTarget:
        result = await self._invoke(
            "sync_skill_to_tool",
            central_path=central_path,
            skill_id=skill_id,
            tool=tool_id,
            name=skill_name,
            overwrite=overwrite,
        )
        return self._parse(SyncTarget, result, "sync_skill_to_tool")

    async def dematerialize(self, skill_id: str, tool_id: str) -> None:
        await self._invoke("unsync_skill_from_tool", skill_id=skill_id, tool=tool_id)

    async def persist_order(self, skill_ids: list[str]) -> None:
        await self._invoke("reorder_skills", skill_ids=list(skill_ids))

    async def refresh_external_menu(self) -> None:
        await self._invoke("refresh_tray_menu")

    async def list_skills(self) -> list[Skill]:
        result = await self._invoke("get_managed_skills")
        return [self._parse(Skill, item, "get_managed_skills") for item in result or []]

    async def list_tools(self) -> list[Tool]:
        result = await self._invoke("get_tools")
        return [self._parse(Tool, item, "get_tools") for item in result or []]

    async def add_skill(self, source_path: Path, overwrite: bool = False) -> Skill:
        result = await self._invoke(
            "import_skill", source_path=str(source_path), overwrite=overwrite
        )
        return self._parse(Skill, result, "import_skill")

    async def update_skill(self, skill_id: str) -> Skill:
        result = await self._invoke("update_managed_skill", skill_id=skill_id)
        return self._parse(Skill, result, "update_managed_skill")

    async def delete_skill(self, skill_id: str) -> None:
        await self._invoke("delete_managed_skill", skill_id=skill_id)
