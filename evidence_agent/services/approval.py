"""
Approval gate: operator consent for outbound web-search commands.

States: locked (initial) -> session_approved -> reset() -> locked, plus an
auto_approve mode that lets every command through. The first command in a
locked session is shown verbatim to the prompter, which blocks until answered.
A "yes" approves the rest of the session; a "no" skips only that command.
"""

import logging
import threading
from enum import Enum
from typing import Callable

logger = logging.getLogger(__name__)

# Receives the verbatim outbound command, returns True to approve.
Prompter = Callable[[str], bool]


class ApprovalMode(str, Enum):
    INTERACTIVE = "interactive"
    AUTO_APPROVE = "auto_approve"


def console_prompter(command: str) -> bool:
    """Ask the operator on stdin. Accepts y/yes (and s/sim); anything else, or EOF, rejects."""
    print("\nOUTBOUND COMMAND DETECTED")
    print(f"Command: {command}")
    try:
        answer = input("Approve executing this command for this session? (y/n): ")
    except EOFError:
        logger.warning("[approval:console_prompter] stdin closed; treating as rejected")
        return False
    answer = answer.strip().lower()
    return answer.startswith("y") or answer.startswith("s")


def deny_prompter(command: str) -> bool:
    """Non-interactive prompter: nobody can answer, so the command is rejected."""
    logger.info("[approval:deny_prompter] no operator attached; rejecting command=%r", command)
    return False


class ApprovalGate:
    """
    Session-scoped consent checkpoint. One instance per session; inject it into
    the web collector. Decisions are made under a lock held across the prompt,
    so concurrent requests wait for the pending answer instead of prompting twice.
    """

    def __init__(
        self,
        mode: ApprovalMode = ApprovalMode.INTERACTIVE,
        prompter: Prompter | None = None,
    ) -> None:
        self.mode = mode
        self._prompter = prompter or console_prompter
        self._session_approved = False
        self._lock = threading.Lock()
        self.prompt_count = 0

    @property
    def state(self) -> str:
        if self.mode is ApprovalMode.AUTO_APPROVE:
            return "auto_approve"
        return "session_approved" if self._session_approved else "locked"

    def request(self, command: str) -> bool:
        """Return True if the command may run. May block on the prompter while locked."""
        if self.mode is ApprovalMode.AUTO_APPROVE:
            logger.info("[approval:request] auto-approved command=%r", command)
            return True
        with self._lock:
            if self._session_approved:
                logger.info("[approval:request] already approved this session command=%r", command)
                return True
            self.prompt_count += 1
            approved = bool(self._prompter(command))
            if approved:
                self._session_approved = True
                logger.info("[approval:request] approval granted for this session")
            else:
                logger.warning("[approval:request] command rejected command=%r", command)
            return approved

    def approve_session(self) -> None:
        """Grant approval for the rest of the session without prompting (locked -> session_approved)."""
        with self._lock:
            self._session_approved = True
        logger.info("[approval:approve_session] session approved")

    def reset(self) -> None:
        """Return to locked so the next command prompts again."""
        with self._lock:
            self._session_approved = False
        logger.info("[approval:reset] session approval cleared")
