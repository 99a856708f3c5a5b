import pytest

from models.session_models import PersistedSnapshot, SessionState, ViewMode
from models.submission_models import Answer, BackupDocument
from services.session_service import (
    AcknowledgePrivacy, ClearSession, HydrateSession, LoadAssignment, MarkSaved, RestoreBackup,
    ToggleView, UpdateAnswer, UpdateStudent, needs_persist, reduce
)


def test_update_student_fields():
    state = reduce(SessionState(), UpdateStudent("student_name", "Ada"))
    state = reduce(state, UpdateStudent("student_id", "S1"))
    assert state.identity.is_complete()


def test_update_student_rejects_unknown_field():
    with pytest.raises(ValueError):
        reduce(SessionState(), UpdateStudent("email", "x"))


def test_update_answer_does_not_mutate_previous_state():
    before = SessionState()
    after = reduce(before, UpdateAnswer("p0_s0", Answer(text_answer="2x")))
    assert before.submission_data == {}
    assert after.submission_data["p0_s0"].text_answer == "2x"


def test_load_assignment_resets_answers(assignment):
    state = SessionState(student_name="Ada", submission_data={"p0_s0": Answer(text_answer="old")})
    state = reduce(state, LoadAssignment(assignment))
    assert state.assignment is assignment
    assert state.submission_data == {}
    assert state.student_name == "Ada"


def test_restore_backup_keeps_assignment(assignment):
    backup = BackupDocument("Ada", "S1", {"p0_s0": Answer(text_answer="2x")}, "Homework 1", "MATH 101")
    state = reduce(SessionState(assignment=assignment), RestoreBackup(backup, restored_at="now"))
    assert state.assignment is assignment
    assert state.student_id == "S1"
    assert state.last_saved == "now"


def test_hydrate_session(assignment):
    snapshot = PersistedSnapshot("Ada", "S1", assignment, {}, "2024-09-01")
    state = reduce(SessionState(), HydrateSession(snapshot))
    assert state.assignment is assignment
    assert state.last_saved == "2024-09-01"


def test_toggle_view():
    state = reduce(SessionState(), ToggleView())
    assert state.view_mode is ViewMode.PREVIEW
    assert reduce(state, ToggleView()).view_mode is ViewMode.EDIT


def test_clear_session_keeps_privacy_acknowledgement(assignment):
    state = reduce(SessionState(student_name="Ada", assignment=assignment), AcknowledgePrivacy())
    cleared = reduce(state, ClearSession())
    assert cleared == SessionState(privacy_acknowledged=True)


def test_can_export_document(assignment):
    assert not SessionState(student_name="Ada", student_id="S1").can_export_document()
    assert not SessionState(student_name="Ada", student_id=" ", assignment=assignment).can_export_document()
    assert SessionState(student_name="Ada", student_id="S1", assignment=assignment).can_export_document()


def test_needs_persist(assignment):
    assert needs_persist(UpdateStudent("student_name", "Ada"))
    assert needs_persist(LoadAssignment(assignment))
    assert not needs_persist(MarkSaved("now"))
    assert not needs_persist(ToggleView())


def test_document_inputs_ignore_bookkeeping_actions(assignment):
    state = SessionState(assignment=assignment, student_name="Ada", student_id="S1")
    inputs = state.document_inputs()
    for action in (MarkSaved("2024-09-01T12:00:00"), ToggleView(), AcknowledgePrivacy()):
        state = reduce(state, action)
        assert state.document_inputs() == inputs


@pytest.mark.parametrize("action", [
    UpdateAnswer("p0_s0", Answer(text_answer="2x")),
    UpdateStudent("student_name", "Grace"),
    UpdateStudent("student_id", "S2"),
    ClearSession(),
])
def test_document_inputs_follow_content_changes(assignment, action):
    state = SessionState(assignment=assignment, student_name="Ada", student_id="S1")
    assert reduce(state, action).document_inputs() != state.document_inputs()
