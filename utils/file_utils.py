# utils/file_utils.py
import re

from models.assignment_models import Assignment
from models.submission_models import StudentIdentity
from utils.constants import BACKUP_EXTENSION, DOCUMENT_EXTENSION

_UNSAFE_FILENAME_CHARS = re.compile(r"[^a-z0-9_\-.]", re.IGNORECASE)


def sanitize_filename(name: str) -> str:
    """Replace every character outside ``[A-Za-z0-9_.-]`` with an underscore."""
    return _UNSAFE_FILENAME_CHARS.sub("_", name)


def backup_filename(assignment: Assignment) -> str:
    return sanitize_filename(f"{assignment.course_code}_{assignment.title}_backup{BACKUP_EXTENSION}")


def document_filename(identity: StudentIdentity, assignment: Assignment, extension: str = DOCUMENT_EXTENSION) -> str:
    return sanitize_filename(f"{identity.student_id}_{identity.name}_{assignment.course_code}{extension}")
