# models/session_models.py
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple

from models.assignment_models import Assignment
from models.submission_models import StudentIdentity, SubmissionData


class ViewMode(str, Enum):
    EDIT = "edit"
    PREVIEW = "preview"


@dataclass(frozen=True)
class SessionState:
    """The whole state of one student's working session.

    Instances are never modified in place; ``services.session_service.reduce``
    returns a new state for every user action.

    Attributes:
        student_name (str): Free-text student name, required before export.
        student_id (str): Free-text student ID, required before export.
        assignment (Optional[Assignment]): The loaded assignment, if any.
        submission_data (SubmissionData): Answers keyed by submission key.
        last_saved (Optional[str]): ISO 8601 time of the last autosave.
        view_mode (ViewMode): Whether the editor or the page preview is shown.
        privacy_acknowledged (bool): Whether the privacy notice was accepted.
    """
    student_name: str = ""
    student_id: str = ""
    assignment: Optional[Assignment] = None
    submission_data: SubmissionData = field(default_factory=dict)
    last_saved: Optional[str] = None
    view_mode: ViewMode = ViewMode.EDIT
    privacy_acknowledged: bool = False

    @property
    def identity(self) -> StudentIdentity:
        return StudentIdentity(name=self.student_name, student_id=self.student_id)

    def has_content(self) -> bool:
        """Whether there is anything worth persisting."""
        return bool(self.student_name or self.student_id or self.submission_data)

    def can_export_document(self) -> bool:
        return self.assignment is not None and self.identity.is_complete()

    def document_inputs(self) -> Tuple[Optional[Assignment], SubmissionData, str, str]:
        """Everything the paginated document depends on, for change detection."""
        return self.assignment, self.submission_data, self.student_name, self.student_id


@dataclass(frozen=True)
class PersistedSnapshot:
    """What the persistence store could recover from the stored record.

    Every field has a default so a partially corrupted record still restores
    whatever survived.
    """
    student_name: str = ""
    student_id: str = ""
    assignment: Optional[Assignment] = None
    submission_data: SubmissionData = field(default_factory=dict)
    last_saved: Optional[str] = None
