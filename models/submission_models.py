# models/submission_models.py
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class Answer:
    """A student's answer to one subsection.

    A field left as None was never filled in, which is different from an empty
    string. ``to_dict`` only writes the fields that are set so a stored answer
    round-trips unchanged.

    Attributes:
        text_answer (Optional[str]): Text answer (markup allowed).
        image_answers (Optional[List[str]]): Image payloads as data URLs, in upload order.
        ai_reflective (Optional[str]): Description of AI tool usage.
    """
    text_answer: Optional[str] = None
    image_answers: Optional[List[str]] = None
    ai_reflective: Optional[str] = None

    @property
    def images(self) -> List[str]:
        return list(self.image_answers or [])

    def is_empty(self) -> bool:
        return not (self.text_answer or self.image_answers or self.ai_reflective)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {}
        if self.text_answer is not None:
            data["textAnswer"] = self.text_answer
        if self.image_answers is not None:
            data["imageAnswers"] = list(self.image_answers)
        if self.ai_reflective is not None:
            data["aiReflective"] = self.ai_reflective
        return data

    @classmethod
    def from_dict(cls, data: Any) -> "Answer":
        """Build an answer from stored data, dropping fields of the wrong type."""
        if not isinstance(data, dict):
            return cls()
        text = data.get("textAnswer")
        images = data.get("imageAnswers")
        ai = data.get("aiReflective")
        if isinstance(images, list):
            images = [img for img in images if isinstance(img, str)]
        else:
            images = None
        return cls(
            text_answer=text if isinstance(text, str) else None,
            image_answers=images,
            ai_reflective=ai if isinstance(ai, str) else None,
        )


SubmissionData = Dict[str, Answer]


def submission_data_to_dict(data: SubmissionData) -> Dict[str, Dict[str, Any]]:
    return {key: answer.to_dict() for key, answer in data.items()}


def submission_data_from_dict(raw: Any) -> SubmissionData:
    """Parse a stored submission mapping; non-mapping input yields an empty mapping."""
    if not isinstance(raw, dict):
        return {}
    return {str(key): Answer.from_dict(value) for key, value in raw.items()}


@dataclass(frozen=True)
class StudentIdentity:
    name: str = ""
    student_id: str = ""

    def is_complete(self) -> bool:
        return bool(self.name.strip() and self.student_id.strip())


@dataclass(frozen=True)
class BackupDocument:
    """Portable snapshot of a student's work, produced against one assignment.

    It never carries problem definitions; restoring it needs the matching
    assignment file to be loaded separately.

    Attributes:
        student_name (str): Student name at export time.
        student_id (str): Student ID at export time.
        submission_data (SubmissionData): Every answer, keyed by submission key.
        assignment_title (str): Title of the assignment at export time.
        course_code (str): Course code of the assignment at export time.
        exported_at (str): ISO 8601 export timestamp.
        version (str): Application version that wrote the backup.
    """
    student_name: str
    student_id: str
    submission_data: SubmissionData = field(default_factory=dict)
    assignment_title: str = ""
    course_code: str = ""
    exported_at: str = ""
    version: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "student_name": self.student_name,
            "student_id": self.student_id,
            "submission_data": submission_data_to_dict(self.submission_data),
            "assignment_title": self.assignment_title,
            "course_code": self.course_code,
            "exported_at": self.exported_at,
            "version": self.version,
        }
