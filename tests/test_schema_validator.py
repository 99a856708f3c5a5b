import json

import pytest

from models.assignment_models import SubmissionType
from utils.errors import MalformedInput, SchemaIncomplete, SubmissionError, WrongFileKind
from utils.schema_validator import parse_json_object, validate_assignment, validate_backup

BACKUP = {
    "student_name": "Ada Lovelace",
    "student_id": "S123",
    "submission_data": {"p0_s0": {"textAnswer": "2x"}},
    "assignment_title": "Homework 1",
    "course_code": "MATH 101",
    "exported_at": "2024-09-01T12:00:00+00:00",
    "version": "v2.1.0",
}


class TestParseJsonObject:
    def test_text_and_bytes(self):
        assert parse_json_object('{"a": 1}') == {"a": 1}
        assert parse_json_object(b'\xef\xbb\xbf{"a": 1}') == {"a": 1}

    def test_not_json(self):
        with pytest.raises(MalformedInput):
            parse_json_object("{not json")

    def test_top_level_array(self):
        with pytest.raises(SchemaIncomplete) as exc_info:
            parse_json_object("[1, 2]", "backup")
        assert exc_info.value.kind == "backup"
        assert "not a JSON object" in exc_info.value.user_message

    def test_not_utf8(self):
        with pytest.raises(MalformedInput):
            parse_json_object(b"\xff\xfe\x00garbage")


class TestValidateAssignment:
    def test_valid(self, assignment_data):
        assignment = validate_assignment(json.dumps(assignment_data))
        assert assignment.course_code == "MATH 101"
        assert len(assignment.problems) == 2
        assert assignment.problems[0].subsections[1].max_images == 3
        assert assignment.problems[1].subsections[0].answer_kind is SubmissionType.AI_REFLECTIVE

    def test_backup_is_wrong_kind(self):
        with pytest.raises(WrongFileKind) as exc_info:
            validate_assignment(BACKUP)
        assert exc_info.value.expected == "assignment"
        assert exc_info.value.actual == "backup"
        assert "Load Work" in exc_info.value.user_message

    @pytest.mark.parametrize("field", ["problems", "title", "courseCode"])
    def test_missing_required_field(self, assignment_data, field):
        del assignment_data[field]
        with pytest.raises(SchemaIncomplete) as exc_info:
            validate_assignment(assignment_data)
        assert field in exc_info.value.missing

    def test_empty_problem_list(self, assignment_data):
        assignment_data["problems"] = []
        with pytest.raises(SchemaIncomplete):
            validate_assignment(assignment_data)

    def test_subsection_without_points(self, assignment_data):
        del assignment_data["problems"][0]["subsections"][0]["points"]
        with pytest.raises(SchemaIncomplete) as exc_info:
            validate_assignment(assignment_data)
        assert exc_info.value.missing == ["problems[0].subsections[0].points"]

    def test_negative_points(self, assignment_data):
        assignment_data["problems"][0]["subsections"][0]["points"] = -1
        with pytest.raises(SchemaIncomplete):
            validate_assignment(assignment_data)

    def test_legacy_format(self):
        legacy = {
            "assignment_title": "Old HW",
            "course_code": "MATH 101",
            "problems": [{"problem_statement": "Solve it"}],
        }
        with pytest.raises(SchemaIncomplete) as exc_info:
            validate_assignment(legacy)
        assert "old assignment format" in exc_info.value.user_message

    def test_unknown_submission_type_kept_and_rendered_as_text(self, assignment_data):
        assignment_data["problems"][0]["subsections"][0]["submissionType"] = "MatlabGrader"
        subsection = validate_assignment(assignment_data).problems[0].subsections[0]
        assert subsection.submission_type == "MatlabGrader"
        assert subsection.answer_kind is SubmissionType.TEXT

    def test_missing_max_images_defaults_to_zero(self, assignment_data):
        del assignment_data["problems"][0]["subsections"][1]["maxImages"]
        assert validate_assignment(assignment_data).problems[0].subsections[1].max_images == 0

    def test_total_is_recomputed(self, assignment_data):
        assignment = validate_assignment(assignment_data)
        assert assignment.declared_total_points == 40
        assert assignment.total_points == 35


class TestValidateBackup:
    def test_valid(self):
        backup = validate_backup(json.dumps(BACKUP))
        assert backup.student_name == "Ada Lovelace"
        assert backup.course_code == "MATH 101"
        assert backup.submission_data["p0_s0"].text_answer == "2x"

    def test_assignment_is_wrong_kind(self, assignment_data):
        with pytest.raises(WrongFileKind) as exc_info:
            validate_backup(assignment_data)
        assert exc_info.value.expected == "backup"
        assert "Load Assignment" in exc_info.value.user_message

    @pytest.mark.parametrize("field", ["submission_data", "course_code"])
    def test_missing_required_field(self, field):
        data = dict(BACKUP)
        del data[field]
        with pytest.raises(SchemaIncomplete) as exc_info:
            validate_backup(data)
        assert exc_info.value.missing == [field]

    def test_submission_data_must_be_object(self):
        data = dict(BACKUP, submission_data=["p0_s0"])
        with pytest.raises(SchemaIncomplete):
            validate_backup(data)

    @pytest.mark.parametrize("raw", ["[1, 2]", '"hello"', "42", "null"])
    def test_json_that_is_not_an_object(self, raw):
        with pytest.raises(SchemaIncomplete) as exc_info:
            validate_backup(raw)
        assert exc_info.value.kind == "backup"
        assert not isinstance(exc_info.value, MalformedInput)

    def test_error_kinds_share_a_base(self):
        for raw in ("nope", {"courseCode": "X", "problems": []}, {"course_code": "X"}):
            with pytest.raises(SubmissionError):
                validate_backup(raw)
