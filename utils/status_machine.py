import logging
from typing import List, Optional

from schemas.job_contract import (
    JOB_STATE_CLEANING_UP,
    JOB_STATE_CREATED,
    JOB_STATE_FAILED,
    JOB_STATE_GRANT_ISSUED,
    JOB_STATE_POLLING,
    JOB_STATE_SOURCE_UPLOADED,
    JOB_STATE_SUBMITTED,
    JOB_STATE_SUCCEEDED,
    JOB_STATES,
    TERMINAL_STATES,
)

logger = logging.getLogger("translator.status_machine")

# Every state after the upload may jump to CLEANING_UP; only CREATED may fail directly.
_ALLOWED = {
    None: {JOB_STATE_CREATED},
    JOB_STATE_CREATED: {JOB_STATE_SOURCE_UPLOADED, JOB_STATE_FAILED},
    JOB_STATE_SOURCE_UPLOADED: {JOB_STATE_GRANT_ISSUED, JOB_STATE_CLEANING_UP},
    JOB_STATE_GRANT_ISSUED: {JOB_STATE_SUBMITTED, JOB_STATE_CLEANING_UP},
    JOB_STATE_SUBMITTED: {JOB_STATE_POLLING, JOB_STATE_CLEANING_UP},
    JOB_STATE_POLLING: {JOB_STATE_CLEANING_UP},
    JOB_STATE_CLEANING_UP: {JOB_STATE_SUCCEEDED, JOB_STATE_FAILED},
    JOB_STATE_SUCCEEDED: set(),
    JOB_STATE_FAILED: set(),
}


class InvalidTransition(RuntimeError):
    pass


def _norm(state: Optional[str]) -> Optional[str]:
    if state is None:
        return None
    s = str(state).strip().upper()
    return s or None


def is_allowed_transition(current: Optional[str], target: Optional[str]) -> bool:
    target_n = _norm(target)
    if target_n not in JOB_STATES:
        return False
    return target_n in _ALLOWED.get(_norm(current), set())


class WorkflowRun:
    """Tracks the state of one translation job; a fresh run per job id."""

    def __init__(self, job_id: str):
        self.job_id = job_id
        self.state: Optional[str] = None
        self.history: List[str] = []
        self.advance(JOB_STATE_CREATED)

    @property
    def is_terminal(self) -> bool:
        return self.state in TERMINAL_STATES

    def advance(self, target: str) -> None:
        if not is_allowed_transition(self.state, target):
            logger.warning(
                "status_transition_blocked job_id=%s current=%s target=%s",
                self.job_id,
                self.state,
                target,
            )
            raise InvalidTransition(f"cannot move job {self.job_id} from {self.state} to {target}")

        logger.debug("status_transition job_id=%s current=%s target=%s", self.job_id, self.state, target)
        self.state = _norm(target)
        self.history.append(self.state)

    def finish(self, succeeded: bool) -> None:
        self.advance(JOB_STATE_SUCCEEDED if succeeded else JOB_STATE_FAILED)
