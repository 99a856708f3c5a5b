# utils/errors.py
"""Exception types raised by the submission core.

Every error carries a ``user_message`` that the UI handlers show verbatim, so
the distinction between the error kinds survives all the way to the dialog.
"""
from typing import Iterable, Optional


class SubmissionError(Exception):
    """Base class for all errors raised by the submission core.

    Attributes:
        user_message (str): Message suitable for display to the student.
    """

    def __init__(self, user_message: str) -> None:
        super().__init__(user_message)
        self.user_message = user_message


class MalformedInput(SubmissionError):
    """The input could not be parsed as JSON at all."""

    def __init__(self, detail: str = "") -> None:
        message = "This file is not valid JSON."
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)
        self.detail = detail


class WrongFileKind(SubmissionError):
    """The input parsed, but it is the other kind of file.

    Attributes:
        expected (str): The kind of file the caller asked for ("backup" or "assignment").
        actual (str): The kind of file that was detected.
    """

    MESSAGES = {
        ("backup", "assignment"): (
            "This looks like an assignment file, not a backup. "
            "Use \"Load Assignment\" to open it."
        ),
        ("assignment", "backup"): (
            "This looks like a work backup, not an assignment file. "
            "Use \"Load Work\" to restore it."
        ),
    }

    def __init__(self, expected: str, actual: str) -> None:
        message = self.MESSAGES.get(
            (expected, actual), f"Expected a {expected} file but got a {actual} file."
        )
        super().__init__(message)
        self.expected = expected
        self.actual = actual


class SchemaIncomplete(SubmissionError):
    """The input is the right kind of file but required fields are missing or invalid.

    Attributes:
        kind (str): The kind of file being validated.
        missing (List[str]): Names of the missing or invalid fields.
    """

    def __init__(self, kind: str, missing: Iterable[str], detail: Optional[str] = None) -> None:
        self.kind = kind
        self.missing = list(missing)
        if detail:
            message = f"Invalid {kind} file: {detail}"
        else:
            message = f"Invalid {kind} file: missing {', '.join(self.missing)}."
        super().__init__(message)


class NoAssignmentLoaded(SubmissionError):
    def __init__(self) -> None:
        super().__init__("Load an assignment before exporting your work.")


class MissingStudentIdentity(SubmissionError):
    def __init__(self) -> None:
        super().__init__("Enter your name and student ID before downloading the PDF.")


class CourseMismatch(SubmissionError):
    """Soft error: the backup was produced against a different course.

    Attributes:
        backup_course (str): Course code stamped into the backup.
        current_course (str): Course code of the loaded assignment.
    """

    def __init__(self, backup_course: str, current_course: str) -> None:
        super().__init__(
            f"Warning: this backup is for {backup_course} but the loaded assignment "
            f"is {current_course}. Restore it anyway?"
        )
        self.backup_course = backup_course
        self.current_course = current_course


class RenderUnavailable(SubmissionError):
    def __init__(self, detail: str = "") -> None:
        message = "The document could not be generated. Please try again."
        if detail:
            message = f"{message}\n{detail}"
        super().__init__(message)


class StorageUnavailable(SubmissionError):
    def __init__(self, detail: str = "") -> None:
        message = "Local storage is unavailable; your work will not be saved automatically."
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)
