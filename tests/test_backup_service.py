import json
from datetime import datetime, timezone

import pytest

from models.session_models import SessionState
from models.submission_models import Answer
from services.backup_service import NO_ASSIGNMENT_WARNING, BackupService, ImportAction
from utils.errors import CourseMismatch, NoAssignmentLoaded, WrongFileKind
from utils.schema_validator import validate_assignment

FIXED_TIME = datetime(2024, 9, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def service():
    return BackupService(clock=lambda: FIXED_TIME)


@pytest.fixture
def session(assignment):
    return SessionState(
        student_name="Ada Lovelace",
        student_id="S123",
        assignment=assignment,
        submission_data={"p0_s0": Answer(text_answer="2x"), "p0_s1": Answer(image_answers=["data:,x"])},
    )


def test_export_requires_assignment(service):
    with pytest.raises(NoAssignmentLoaded):
        service.export(SessionState(student_name="Ada"))


def test_export_fields(service, session):
    backup = service.export(session)
    data = json.loads(service.serialize(backup))
    assert data["student_name"] == "Ada Lovelace"
    assert data["course_code"] == "MATH 101"
    assert data["assignment_title"] == "Homework 1"
    assert data["version"] == "v2.1.0"
    assert data["submission_data"]["p0_s0"] == {"textAnswer": "2x"}
    assert "problems" not in data


def test_export_times_strictly_increase(service, session):
    first = service.export(session).exported_at
    second = service.export(session).exported_at
    assert second > first


def test_round_trip_restores_answers(service, session, assignment):
    serialized = service.serialize(service.export(session))
    decision = service.import_backup(serialized, assignment)
    assert decision.action is ImportAction.ACCEPT

    restored = service.apply(SessionState(assignment=assignment), decision)
    assert restored.student_name == "Ada Lovelace"
    assert restored.student_id == "S123"
    assert restored.submission_data == session.submission_data
    assert restored.assignment is assignment


def test_course_mismatch_needs_confirmation(service, session, assignment_data):
    serialized = service.serialize(service.export(session))
    assignment_data["courseCode"] = "PHYS 201"
    physics = validate_assignment(assignment_data)
    current = SessionState(assignment=physics, student_name="Someone")

    decision = service.import_backup(serialized, physics)
    assert decision.action is ImportAction.WARN
    assert isinstance(decision.error, CourseMismatch)
    assert "MATH 101" in decision.reason and "PHYS 201" in decision.reason

    assert service.apply(current, decision, confirmed=False) is current
    applied = service.apply(current, decision, confirmed=True)
    assert applied.student_name == "Ada Lovelace"
    assert applied.assignment is physics


def test_no_assignment_loaded_warns(service, session):
    serialized = service.serialize(service.export(session))
    decision = service.import_backup(serialized, None)
    assert decision.action is ImportAction.WARN
    assert decision.reason == NO_ASSIGNMENT_WARNING


def test_assignment_file_is_rejected(service, assignment_data, assignment):
    decision = service.import_backup(json.dumps(assignment_data), assignment)
    assert decision.action is ImportAction.REJECT
    assert isinstance(decision.error, WrongFileKind)
    with pytest.raises(WrongFileKind):
        service.apply(SessionState(), decision, confirmed=True)


def test_corrupt_file_is_rejected(service, assignment):
    decision = service.import_backup("{truncated", assignment)
    assert decision.action is ImportAction.REJECT
    assert decision.backup is None


def test_export_to_directory(service, session, tmp_path):
    path = service.export_to_directory(session, str(tmp_path))
    assert path.endswith("MATH_101_Homework_1_backup.json")
    with open(path, encoding="utf-8") as f:
        assert json.load(f)["student_id"] == "S123"
