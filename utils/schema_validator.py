# utils/schema_validator.py
"""Classify and validate assignment files and work backups.

Both file kinds are plain JSON objects that differ only in which fields are
present, so "does it parse" is not enough to tell a wrong file from a corrupt
one. The validators below first detect the file kind and only then check the
fields required for that kind.
"""
import json
import logging
import numbers
from typing import Any, Dict, List, Union

from models.assignment_models import Assignment, Problem, Subsection
from models.submission_models import BackupDocument, submission_data_from_dict
from utils.errors import MalformedInput, SchemaIncomplete, WrongFileKind

logger = logging.getLogger(__name__)

RawInput = Union[str, bytes, Dict[str, Any]]

LEGACY_ASSIGNMENT_FIELDS = ("assignment_title", "course_code", "problem_statement")


def parse_json_object(raw: RawInput, kind: str = "file") -> Dict[str, Any]:
    """Parse raw file content into a JSON object.

    Args:
        raw (RawInput): File content as text or bytes, or an already parsed dict.
        kind (str): What the file is expected to be, used in error messages.

    Returns:
        Dict[str, Any]: The parsed object.

    Raises:
        MalformedInput: The content is not JSON.
        SchemaIncomplete: The content is valid JSON but not an object, so it
            cannot be a file of the expected kind.
    """
    if isinstance(raw, dict):
        return raw
    if isinstance(raw, bytes):
        try:
            raw = raw.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise MalformedInput("the file is not UTF-8 text") from e
    try:
        data = json.loads(raw)
    except (TypeError, ValueError) as e:
        raise MalformedInput(str(e)) from e
    if not isinstance(data, dict):
        raise SchemaIncomplete(
            kind, [], detail="the top level is not a JSON object, so this is not the right kind of file."
        )
    return data


def looks_like_assignment(data: Dict[str, Any]) -> bool:
    return "problems" in data and "courseCode" in data


def looks_like_backup(data: Dict[str, Any]) -> bool:
    return "submission_data" in data and "problems" not in data


def looks_like_legacy_assignment(data: Dict[str, Any]) -> bool:
    if "courseCode" in data or "problems" not in data:
        return False
    if any(field in data for field in LEGACY_ASSIGNMENT_FIELDS[:2]):
        return True
    problems = data.get("problems")
    return isinstance(problems, list) and any(
        isinstance(p, dict) and "problem_statement" in p for p in problems
    )


def _text(value: Any, default: str = "") -> str:
    if value is None:
        return default
    if isinstance(value, str):
        return value
    return str(value)


def _is_number(value: Any) -> bool:
    return isinstance(value, numbers.Real) and not isinstance(value, bool)


def _max_images(value: Any) -> int:
    if _is_number(value) and value > 0:
        return int(value)
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return 0


def _parse_subsection(raw: Any, p_idx: int, s_idx: int) -> Subsection:
    where = f"problems[{p_idx}].subsections[{s_idx}]"
    if not isinstance(raw, dict):
        raise SchemaIncomplete("assignment", [where], detail=f"{where} is not an object.")
    missing = [f"{where}.{name}" for name in ("points", "submissionType") if name not in raw]
    if missing:
        raise SchemaIncomplete("assignment", missing)
    points = raw["points"]
    if not _is_number(points) or points < 0:
        raise SchemaIncomplete(
            "assignment", [f"{where}.points"],
            detail=f"{where}.points must be a non-negative number."
        )
    config = raw.get("config")
    return Subsection(
        id=_text(raw.get("id"), f"p{p_idx}_s{s_idx}"),
        name=_text(raw.get("name")),
        description=_text(raw.get("description")),
        points=points,
        submission_type=_text(raw["submissionType"]),
        max_images=_max_images(raw.get("maxImages")),
        config=None if config is None else _text(config),
    )


def _parse_problem(raw: Any, p_idx: int) -> Problem:
    where = f"problems[{p_idx}]"
    if not isinstance(raw, dict):
        raise SchemaIncomplete("assignment", [where], detail=f"{where} is not an object.")
    subsections = raw.get("subsections", [])
    if not isinstance(subsections, list):
        raise SchemaIncomplete(
            "assignment", [f"{where}.subsections"],
            detail=f"{where}.subsections must be a list."
        )
    return Problem(
        id=_text(raw.get("id"), f"p{p_idx}"),
        name=_text(raw.get("name")),
        description=_text(raw.get("description")),
        subsections=[_parse_subsection(sub, p_idx, s_idx) for s_idx, sub in enumerate(subsections)],
    )


def validate_assignment(raw: RawInput) -> Assignment:
    """Validate an assignment file and build the Assignment it describes.

    Args:
        raw (RawInput): File content or an already parsed object.

    Returns:
        Assignment: The validated assignment.

    Raises:
        MalformedInput: The content is not JSON.
        WrongFileKind: The content is a work backup.
        SchemaIncomplete: The top level is not an object, required fields are
            missing, or the file uses the legacy assignment format.
    """
    data = parse_json_object(raw, "assignment")

    if looks_like_backup(data):
        raise WrongFileKind(expected="assignment", actual="backup")
    if looks_like_legacy_assignment(data):
        raise SchemaIncomplete(
            "assignment", ["courseCode", "title"],
            detail=("this file uses the old assignment format "
                    "(assignment_title/course_code). Export it again from the assignment maker."),
        )

    missing: List[str] = []
    problems = data.get("problems")
    if not isinstance(problems, list) or not problems:
        missing.append("problems")
    for name in ("title", "courseCode"):
        value = data.get(name)
        if not isinstance(value, str) or not value.strip():
            missing.append(name)
    if missing:
        raise SchemaIncomplete("assignment", missing)

    declared_total = data.get("total_points", data.get("totalPoints"))
    created_at = data.get("createdAt")
    updated_at = data.get("updatedAt")
    assignment = Assignment(
        id=_text(data.get("id")),
        course_code=data["courseCode"],
        title=data["title"],
        due_date=_text(data.get("dueDate")),
        due_time=_text(data.get("dueTime")),
        preamble=_text(data.get("preamble")),
        problems=[_parse_problem(problem, p_idx) for p_idx, problem in enumerate(problems)],
        created_at=created_at if _is_number(created_at) else None,
        updated_at=updated_at if _is_number(updated_at) else None,
        declared_total_points=declared_total if _is_number(declared_total) else None,
    )
    logger.debug("Validated assignment %s (%d problems)", assignment.course_code, len(assignment.problems))
    return assignment


def validate_backup(raw: RawInput) -> BackupDocument:
    """Validate a work backup file.

    Args:
        raw (RawInput): File content or an already parsed object.

    Returns:
        BackupDocument: The validated backup.

    Raises:
        MalformedInput: The content is not JSON.
        WrongFileKind: The content is an assignment file.
        SchemaIncomplete: The top level is not an object, or ``submission_data``
            or ``course_code`` is missing or invalid.
    """
    data = parse_json_object(raw, "backup")

    if looks_like_assignment(data) and "submission_data" not in data:
        raise WrongFileKind(expected="backup", actual="assignment")

    missing = [name for name in ("submission_data", "course_code") if name not in data]
    if missing:
        raise SchemaIncomplete("backup", missing)
    if not isinstance(data["submission_data"], dict):
        raise SchemaIncomplete(
            "backup", ["submission_data"], detail="submission_data must be an object."
        )

    return BackupDocument(
        student_name=_text(data.get("student_name")),
        student_id=_text(data.get("student_id")),
        submission_data=submission_data_from_dict(data["submission_data"]),
        assignment_title=_text(data.get("assignment_title")),
        course_code=_text(data["course_code"]),
        exported_at=_text(data.get("exported_at")),
        version=_text(data.get("version")),
    )
