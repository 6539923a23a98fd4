"""
In-memory approval-gate store. Keyed by session_id; one gate per session.

HTTP sessions cannot answer a console prompt, so their gates use the denying
prompter and get consent explicitly through approve_session().
"""

import logging
import threading

from evidence_agent.core.config import WEB_AUTO_APPROVE
from evidence_agent.core.errors import InvalidRequestError
from evidence_agent.services.approval import ApprovalGate, ApprovalMode, deny_prompter

logger = logging.getLogger(__name__)

# session_id -> gate
_gates: dict[str, ApprovalGate] = {}
_lock = threading.Lock()


def get_gate(session_id: str) -> ApprovalGate:
    """Return the session's gate, creating a locked (or auto-approve) one on first use."""
    if not session_id or not isinstance(session_id, str):
        raise InvalidRequestError("session_id is required")
    with _lock:
        gate = _gates.get(session_id)
        if gate is None:
            mode = ApprovalMode.AUTO_APPROVE if WEB_AUTO_APPROVE else ApprovalMode.INTERACTIVE
            gate = ApprovalGate(mode=mode, prompter=deny_prompter)
            _gates[session_id] = gate
            logger.info("[session_store:get_gate] created session_id=%s mode=%s", session_id[:16], mode.value)
    return gate


def reset_gate(session_id: str) -> ApprovalGate:
    """Reset the session's gate to locked (no-op for auto-approve gates)."""
    gate = get_gate(session_id)
    gate.reset()
    logger.info("[session_store:reset_gate] session_id=%s state=%s", session_id[:16], gate.state)
    return gate


def clear_sessions() -> None:
    with _lock:
        _gates.clear()
