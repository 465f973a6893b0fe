"""Conflict resolution for occupied sync targets."""

import logging
from enum import Enum
from typing import TYPE_CHECKING

from skillsync.core.models import ConflictChoice, ConflictOutcome

if TYPE_CHECKING:
    from skillsync.frontend.base import Frontend

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    """States of a conflict session.

    AUTO_OVERWRITE is absorbing for the rest of the session.
    """

    PROMPTING = "prompting"
    AUTO_OVERWRITE = "auto_overwrite"
    DONE = "done"


class ConflictSession:
    """
    Conflict decisions for a single sync invocation of one skill.

    A session starts in PROMPTING. Choosing "overwrite all" moves it to
    AUTO_OVERWRITE, after which every later conflict is overwritten without
    asking. Closing the session moves it to DONE; a closed session answers
    ABORT and never prompts.
    """

    def __init__(self, frontend: "Frontend", skill_name: str):
        self.frontend = frontend
        self.skill_name = skill_name
        self.state = SessionState.PROMPTING

    async def resolve(
        self, tool_label: str, target_path: str, has_more_pending: bool = False
    ) -> ConflictOutcome:
        """
        Decide what to do with one occupied target.

        Args:
            tool_label: Display label of the tool whose target is occupied
            target_path: Existing path at the destination
            has_more_pending: Whether more tools remain after this one

        Returns:
            PROCEED_OVERWRITE, SKIP, or ABORT if the session is closed
        """
        if self.state is SessionState.DONE:
            return ConflictOutcome.ABORT

        if self.state is SessionState.AUTO_OVERWRITE:
            logger.debug(f"Auto-overwriting {target_path} for {tool_label}")
            return ConflictOutcome.PROCEED_OVERWRITE

        choice = await self.frontend.ask_conflict(
            self.skill_name, tool_label, target_path, has_more_pending
        )

        if choice is ConflictChoice.OVERWRITE_ALL:
            if has_more_pending:
                self.state = SessionState.AUTO_OVERWRITE
            return ConflictOutcome.PROCEED_OVERWRITE
        if choice is ConflictChoice.OVERWRITE:
            return ConflictOutcome.PROCEED_OVERWRITE

        # An explicit skip and a cancelled prompt are the same outcome
        return ConflictOutcome.SKIP

    def close(self) -> None:
        self.state = SessionState.DONE


class ConflictResolver:
    """Opens conflict sessions bound to the presentation layer."""

    def __init__(self, frontend: "Frontend"):
        self.frontend = frontend

    def open_session(self, skill_name: str) -> ConflictSession:
        return ConflictSession(self.frontend, skill_name)

    async def resolve_single(
        self, skill_name: str, tool_label: str, target_path: str
    ) -> ConflictOutcome:
        """Resolve a lone conflict. Overwrite-all is never offered."""
        session = self.open_session(skill_name)
        try:
            return await session.resolve(tool_label, target_path, has_more_pending=False)
        finally:
            session.close()
