# models/assignment_models.py
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Union

Points = Union[int, float]


class SubmissionType(str, Enum):
    """Answer kinds an assignment maker can declare for a subsection."""
    TEXT = "Text"
    IMAGE = "Image"
    AI_REFLECTIVE = "AI Reflective"
    MATLAB_GRADER = "MatlabGrader"
    CODE = "Code"
    FILE_UPLOAD = "File Upload"

    @classmethod
    def resolve(cls, raw: str) -> "SubmissionType":
        """Map a declared type to the behaviour used for answering and rendering.

        Only Text, Image and AI Reflective have dedicated behaviour; every other
        value, known or not, is answered and rendered as text.

        Args:
            raw (str): The ``submissionType`` value from the assignment file.

        Returns:
            SubmissionType: TEXT, IMAGE or AI_REFLECTIVE.
        """
        if raw == cls.IMAGE.value:
            return cls.IMAGE
        if raw == cls.AI_REFLECTIVE.value:
            return cls.AI_REFLECTIVE
        return cls.TEXT


@dataclass(frozen=True)
class Subsection:
    """A gradable part of a problem.

    Attributes:
        id (str): Identifier assigned by the assignment maker.
        name (str): Short title of the part.
        description (str): Statement of the part (markup allowed).
        points (Points): Non-negative point value.
        submission_type (str): Declared submission type, kept verbatim.
        max_images (int): Number of image slots; only meaningful for image answers.
        config (Optional[str]): Opaque type-specific configuration.
    """
    id: str
    name: str
    description: str
    points: Points
    submission_type: str
    max_images: int = 0
    config: Optional[str] = None

    @property
    def answer_kind(self) -> SubmissionType:
        return SubmissionType.resolve(self.submission_type)

    @property
    def has_overflow_pages(self) -> bool:
        return self.max_images > 1

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "points": self.points,
            "submissionType": self.submission_type,
            "maxImages": self.max_images,
        }
        if self.config is not None:
            data["config"] = self.config
        return data


@dataclass(frozen=True)
class Problem:
    """A numbered problem made of ordered subsections."""
    id: str
    name: str
    description: str
    subsections: List[Subsection] = field(default_factory=list)

    @property
    def total_points(self) -> Points:
        return sum((sub.points for sub in self.subsections), 0)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "subsections": [sub.to_dict() for sub in self.subsections],
        }


@dataclass(frozen=True)
class Assignment:
    """A loaded assignment. Never mutated; a new load replaces it wholesale.

    Attributes:
        id (str): Identifier assigned by the assignment maker.
        course_code (str): Course code, e.g. "MATH 101".
        title (str): Assignment title.
        due_date (str): Due date as written in the file.
        due_time (str): Due time as written in the file.
        preamble (str): Free-text instructions.
        problems (List[Problem]): Ordered problems.
        created_at (Optional[int]): Creation timestamp from the assignment maker.
        updated_at (Optional[int]): Last update timestamp from the assignment maker.
        declared_total_points (Optional[Points]): Denormalized total found in the
            file, if any. Kept for diagnostics only; totals are always recomputed.
    """
    id: str
    course_code: str
    title: str
    due_date: str = ""
    due_time: str = ""
    preamble: str = ""
    problems: List[Problem] = field(default_factory=list)
    created_at: Optional[int] = None
    updated_at: Optional[int] = None
    declared_total_points: Optional[Points] = None

    @property
    def total_points(self) -> Points:
        return sum((problem.total_points for problem in self.problems), 0)

    def subsection_keys(self) -> List[str]:
        """Return the submission keys of every subsection, in document order."""
        return [
            submission_key(p_idx, s_idx)
            for p_idx, problem in enumerate(self.problems)
            for s_idx, _ in enumerate(problem.subsections)
        ]

    def to_dict(self) -> Dict[str, Any]:
        """Serialize back to the assignment file shape."""
        data: Dict[str, Any] = {
            "id": self.id,
            "courseCode": self.course_code,
            "title": self.title,
            "dueDate": self.due_date,
            "dueTime": self.due_time,
            "preamble": self.preamble,
            "problems": [problem.to_dict() for problem in self.problems],
        }
        if self.created_at is not None:
            data["createdAt"] = self.created_at
        if self.updated_at is not None:
            data["updatedAt"] = self.updated_at
        if self.declared_total_points is not None:
            data["total_points"] = self.declared_total_points
        return data


def submission_key(problem_index: int, subsection_index: int) -> str:
    """Build the composite SubmissionData key for a subsection.

    Args:
        problem_index (int): 0-based problem position.
        subsection_index (int): 0-based subsection position within the problem.

    Returns:
        str: Key of the form ``p<problem>_s<subsection>``.
    """
    return f"p{problem_index}_s{subsection_index}"


def part_letter(subsection_index: int) -> str:
    """Return the display letter of a subsection (a=0, b=1, ...)."""
    return chr(ord("a") + subsection_index)


def format_points(points: Points) -> str:
    """Format a point value without a trailing ``.0`` for whole numbers."""
    if isinstance(points, float) and points.is_integer():
        return str(int(points))
    return str(points)
