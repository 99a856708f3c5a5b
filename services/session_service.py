# services/session_service.py
"""State transitions of the student's session.

The UI never edits a ``SessionState`` directly: it builds one of the action
objects below and passes it to ``reduce``, which returns the next state.
"""
import dataclasses
import logging
from dataclasses import dataclass
from typing import Optional, Union

from models.assignment_models import Assignment
from models.session_models import PersistedSnapshot, SessionState, ViewMode
from models.submission_models import Answer, BackupDocument

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UpdateStudent:
    field: str  # "student_name" or "student_id"
    value: str


@dataclass(frozen=True)
class UpdateAnswer:
    key: str
    answer: Answer


@dataclass(frozen=True)
class LoadAssignment:
    assignment: Assignment


@dataclass(frozen=True)
class RestoreBackup:
    backup: BackupDocument
    restored_at: Optional[str] = None


@dataclass(frozen=True)
class HydrateSession:
    snapshot: PersistedSnapshot


@dataclass(frozen=True)
class MarkSaved:
    timestamp: str


@dataclass(frozen=True)
class ToggleView:
    pass


@dataclass(frozen=True)
class AcknowledgePrivacy:
    pass


@dataclass(frozen=True)
class ClearSession:
    pass


Action = Union[
    UpdateStudent, UpdateAnswer, LoadAssignment, RestoreBackup, HydrateSession,
    MarkSaved, ToggleView, AcknowledgePrivacy, ClearSession,
]

STUDENT_FIELDS = ("student_name", "student_id")

# Actions after which the persisted record is out of date.
PERSISTED_ACTIONS = (UpdateStudent, UpdateAnswer, LoadAssignment, RestoreBackup)


def reduce(state: SessionState, action: Action) -> SessionState:
    """Return the session state that results from applying ``action``.

    Args:
        state (SessionState): Current state. Not modified.
        action (Action): The user action or timer event to apply.

    Returns:
        SessionState: The next state.

    Raises:
        ValueError: ``UpdateStudent`` names an unknown field, or the action
            type is not recognised.
    """
    if isinstance(action, UpdateStudent):
        if action.field not in STUDENT_FIELDS:
            raise ValueError(f"Unknown student field: {action.field}")
        return dataclasses.replace(state, **{action.field: action.value})

    if isinstance(action, UpdateAnswer):
        submission_data = dict(state.submission_data)
        submission_data[action.key] = action.answer
        return dataclasses.replace(state, submission_data=submission_data)

    if isinstance(action, LoadAssignment):
        # Submission keys are positional, so answers to the previous assignment
        # would land on the wrong subsections.
        return dataclasses.replace(state, assignment=action.assignment, submission_data={})

    if isinstance(action, RestoreBackup):
        backup = action.backup
        return dataclasses.replace(
            state,
            student_name=backup.student_name,
            student_id=backup.student_id,
            submission_data=dict(backup.submission_data),
            last_saved=action.restored_at or state.last_saved,
        )

    if isinstance(action, HydrateSession):
        snapshot = action.snapshot
        return dataclasses.replace(
            state,
            student_name=snapshot.student_name,
            student_id=snapshot.student_id,
            assignment=snapshot.assignment,
            submission_data=dict(snapshot.submission_data),
            last_saved=snapshot.last_saved,
        )

    if isinstance(action, MarkSaved):
        return dataclasses.replace(state, last_saved=action.timestamp)

    if isinstance(action, ToggleView):
        next_mode = ViewMode.PREVIEW if state.view_mode is ViewMode.EDIT else ViewMode.EDIT
        return dataclasses.replace(state, view_mode=next_mode)

    if isinstance(action, AcknowledgePrivacy):
        return dataclasses.replace(state, privacy_acknowledged=True)

    if isinstance(action, ClearSession):
        logger.info("Session cleared")
        return SessionState(privacy_acknowledged=state.privacy_acknowledged)

    raise ValueError(f"Unknown action: {action!r}")


def needs_persist(action: Action) -> bool:
    return isinstance(action, PERSISTED_ACTIONS)
