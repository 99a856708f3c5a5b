import logging

from models.page_models import PageGeometry
from models.submission_models import StudentIdentity
from utils.app_config import AppConfig
from utils.demo_assignment import load_demo_assignment
from utils.file_utils import backup_filename, document_filename, sanitize_filename
from utils.request_tracker import RequestGenerations


def test_sanitize_filename():
    assert sanitize_filename("MATH 101: HW/1 (final).json") == "MATH_101__HW_1__final_.json"


def test_document_and_backup_names(assignment):
    identity = StudentIdentity(name="Ada Lovelace", student_id="S123")
    assert document_filename(identity, assignment) == "S123_Ada_Lovelace_MATH_101.pdf"
    assert document_filename(identity, assignment, ".docx").endswith(".docx")
    assert backup_filename(assignment) == "MATH_101_Homework_1_backup.json"


def test_config_defaults(monkeypatch):
    for name in ("STUDENT_SUBMISSION_DATA_DIR", "STUDENT_SUBMISSION_AUTOSAVE_MS", "STUDENT_SUBMISSION_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    config = AppConfig.from_env()
    assert config.data_dir.endswith(".student_submission")
    assert config.autosave_delay_ms == 1000
    assert config.log_level == "INFO"
    assert config.page_geometry == PageGeometry()


def test_config_from_env(monkeypatch, tmp_path):
    monkeypatch.setenv("STUDENT_SUBMISSION_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("STUDENT_SUBMISSION_AUTOSAVE_MS", "250")
    monkeypatch.setenv("STUDENT_SUBMISSION_LOG_LEVEL", "debug")
    config = AppConfig.from_env()
    assert config.data_dir == str(tmp_path)
    assert config.autosave_delay_ms == 250
    assert config.log_level == "DEBUG"


def test_config_ignores_bad_delay(monkeypatch, caplog):
    monkeypatch.setenv("STUDENT_SUBMISSION_AUTOSAVE_MS", "soon")
    with caplog.at_level(logging.WARNING, logger="utils.app_config"):
        assert AppConfig.from_env().autosave_delay_ms == 1000
    assert "STUDENT_SUBMISSION_AUTOSAVE_MS" in caplog.text
    assert "'soon'" in caplog.text


def test_demo_assignment_is_valid():
    demo = load_demo_assignment()
    assert demo.course_code == "MATH 101"
    kinds = {sub.submission_type for problem in demo.problems for sub in problem.subsections}
    assert {"Text", "Image", "AI Reflective"} <= kinds


class TestRequestGenerations:
    def test_only_newest_request_applies_when_results_arrive_out_of_order(self):
        generations = RequestGenerations()
        applied = []

        def complete(generation, content):
            if generations.is_current("assignment", generation):
                applied.append(content)

        first = generations.next("assignment")
        second = generations.next("assignment")
        # the newer read finishes first, the older one straggles in afterwards
        complete(second, "newer.json")
        complete(first, "older.json")
        assert applied == ["newer.json"]

    def test_kinds_are_tracked_separately(self):
        generations = RequestGenerations()
        assignment_read = generations.next("assignment")
        generations.next("backup")
        assert generations.is_current("assignment", assignment_read)

    def test_superseded_request_is_logged(self, caplog):
        generations = RequestGenerations()
        stale = generations.next("backup")
        generations.next("backup")
        with caplog.at_level(logging.DEBUG, logger="utils.request_tracker"):
            assert not generations.is_current("backup", stale)
        assert "superseded backup read #1" in caplog.text
