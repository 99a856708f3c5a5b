# services/backup_service.py
import json
import logging
import os
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Callable, Optional

from models.assignment_models import Assignment
from models.session_models import SessionState
from models.submission_models import BackupDocument
from services.session_service import RestoreBackup, reduce
from utils.constants import VERSION
from utils.errors import CourseMismatch, NoAssignmentLoaded, SubmissionError
from utils.file_utils import backup_filename
from utils.schema_validator import RawInput, validate_backup

logger = logging.getLogger(__name__)

NO_ASSIGNMENT_WARNING = (
    "You haven't loaded an assignment file yet. This backup might not display "
    "correctly without the original assignment structure. Continue?"
)


class ImportAction(str, Enum):
    ACCEPT = "accept"
    WARN = "warn"
    REJECT = "reject"


@dataclass(frozen=True)
class ImportDecision:
    """Outcome of checking a backup before it is applied.

    Attributes:
        action (ImportAction): ACCEPT, WARN (needs the user's confirmation) or REJECT.
        reason (Optional[str]): Message to show the user for WARN and REJECT.
        error (Optional[SubmissionError]): The error behind a WARN or REJECT.
        backup (Optional[BackupDocument]): The parsed backup, absent on REJECT.
    """
    action: ImportAction
    reason: Optional[str] = None
    error: Optional[SubmissionError] = None
    backup: Optional[BackupDocument] = None

    @property
    def needs_confirmation(self) -> bool:
        return self.action is ImportAction.WARN


class BackupService:
    """Exports the student's work to a portable backup and restores it.

    The service never touches the persisted session record; a restored backup
    reaches storage through the normal state change and autosave path.
    """

    def __init__(self, clock: Optional[Callable[[], datetime]] = None) -> None:
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._last_exported_at: Optional[datetime] = None

    def _next_export_time(self) -> datetime:
        now = self._clock()
        if self._last_exported_at is not None and now <= self._last_exported_at:
            now = self._last_exported_at + timedelta(microseconds=1)
        self._last_exported_at = now
        return now

    def export(self, session: SessionState) -> BackupDocument:
        """Snapshot the current work.

        Args:
            session (SessionState): The current session.

        Returns:
            BackupDocument: The backup, stamped with a strictly increasing export time.

        Raises:
            NoAssignmentLoaded: No assignment is loaded.
        """
        if session.assignment is None:
            raise NoAssignmentLoaded()
        return BackupDocument(
            student_name=session.student_name,
            student_id=session.student_id,
            submission_data=dict(session.submission_data),
            assignment_title=session.assignment.title,
            course_code=session.assignment.course_code,
            exported_at=self._next_export_time().isoformat(),
            version=VERSION,
        )

    @staticmethod
    def serialize(backup: BackupDocument) -> str:
        return json.dumps(backup.to_dict(), ensure_ascii=False, indent=2)

    def export_to_directory(self, session: SessionState, directory: str) -> str:
        """Export the work and write it to ``directory`` under the conventional name.

        Returns:
            str: Path of the written backup file.

        Raises:
            NoAssignmentLoaded: No assignment is loaded.
            OSError: The file could not be written.
        """
        backup = self.export(session)
        file_path = os.path.join(directory, backup_filename(session.assignment))
        self.write(backup, file_path)
        return file_path

    def write(self, backup: BackupDocument, file_path: str) -> None:
        with open(file_path, 'w', encoding='utf-8') as f:
            f.write(self.serialize(backup))
        logger.info("Exported backup for %s to %s", backup.course_code, file_path)

    def import_backup(self, raw: RawInput, current_assignment: Optional[Assignment]) -> ImportDecision:
        """Validate a backup and decide whether it can be applied.

        Args:
            raw (RawInput): Content of the backup file.
            current_assignment (Optional[Assignment]): The loaded assignment, if any.

        Returns:
            ImportDecision: REJECT for anything that is not a valid backup, WARN when
            no assignment is loaded or the course codes differ, ACCEPT otherwise.
        """
        try:
            backup = validate_backup(raw)
        except SubmissionError as e:
            logger.info("Rejected backup: %s", e.user_message)
            return ImportDecision(ImportAction.REJECT, reason=e.user_message, error=e)

        if current_assignment is None:
            return ImportDecision(ImportAction.WARN, reason=NO_ASSIGNMENT_WARNING, backup=backup)

        if current_assignment.course_code != backup.course_code:
            mismatch = CourseMismatch(backup.course_code, current_assignment.course_code)
            return ImportDecision(ImportAction.WARN, reason=mismatch.user_message, error=mismatch, backup=backup)

        return ImportDecision(ImportAction.ACCEPT, backup=backup)

    def apply(self, session: SessionState, decision: ImportDecision, confirmed: bool = False) -> SessionState:
        """Apply a checked backup to the session.

        Student name, ID and submission data are replaced wholesale; the loaded
        assignment is left as it is.

        Args:
            session (SessionState): The current session.
            decision (ImportDecision): Result of ``import_backup``.
            confirmed (bool): Whether the user confirmed a WARN decision.

        Returns:
            SessionState: The new session, or ``session`` unchanged when a warning
            was not confirmed.

        Raises:
            SubmissionError: The decision is REJECT.
        """
        if decision.action is ImportAction.REJECT:
            raise decision.error or SubmissionError(decision.reason or "Invalid backup file.")
        if decision.action is ImportAction.WARN and not confirmed:
            logger.info("Backup restore cancelled by the user")
            return session
        logger.info("Restored backup for %s (%d answers)",
                    decision.backup.course_code, len(decision.backup.submission_data))
        return reduce(session, RestoreBackup(decision.backup, restored_at=self._clock().isoformat()))
