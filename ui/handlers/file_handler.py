from __future__ import annotations
import logging
import os
from typing import TYPE_CHECKING, Callable, Set

from PyQt6.QtWidgets import QFileDialog, QMessageBox

from services.backup_service import ImportAction
from services.session_service import LoadAssignment
from utils.errors import SubmissionError
from utils.request_tracker import RequestGenerations
from utils.schema_validator import validate_assignment
from utils.worker_threads import FileReadThread

if TYPE_CHECKING:
    from ..main_window import MainWindow

logger = logging.getLogger(__name__)

JSON_FILTER = "JSON Files (*.json);;All Files (*)"


class FileHandler:
    """
    Loads assignment files and work backups chosen by the student.

    Files are read on a background thread. When the student starts a second
    load of the same kind before the first finishes, only the latest request is
    applied.
    """
    def __init__(self, main_window: MainWindow) -> None:
        """
        FileHandler constructor.

        Args:
            main_window (MainWindow): The owning main window.
        """
        self.main: MainWindow = main_window
        self._generations: RequestGenerations = RequestGenerations()
        self._threads: Set[FileReadThread] = set()

    def open_assignment(self) -> None:
        """Ask for an assignment file and load it."""
        file_path, _ = QFileDialog.getOpenFileName(self.main, "Load Assignment", os.path.expanduser("~"), JSON_FILTER)
        if file_path:
            self._start_read("assignment", file_path, self._on_assignment_read)

    def open_backup(self) -> None:
        """Ask for a work backup and restore it."""
        file_path, _ = QFileDialog.getOpenFileName(self.main, "Load Work", os.path.expanduser("~"), JSON_FILTER)
        if file_path:
            self._start_read("backup", file_path, self._on_backup_read)

    def _start_read(self, kind: str, file_path: str, on_result: Callable[[int, str, str], None]) -> None:
        generation = self._generations.next(kind)
        thread = FileReadThread(file_path, generation, self.main)
        thread.result_ready.connect(on_result)
        thread.error_occurred.connect(lambda gen, path, message: self._on_read_error(kind, gen, message))
        thread.finished.connect(lambda: self._threads.discard(thread))
        self._threads.add(thread)
        thread.start()

    def shutdown(self) -> None:
        """Wait for reads still in flight so no QThread outlives the window."""
        for thread in list(self._threads):
            if thread.isRunning():
                logger.info("Waiting for a file read to finish before closing")
                thread.wait()
        self._threads.clear()

    def _on_read_error(self, kind: str, generation: int, message: str) -> None:
        if not self._generations.is_current(kind, generation):
            return
        QMessageBox.critical(self.main, "Error", message)

    def _on_assignment_read(self, generation: int, file_path: str, content: str) -> None:
        if not self._generations.is_current("assignment", generation):
            return
        try:
            assignment = validate_assignment(content)
        except SubmissionError as e:
            logger.info("Rejected assignment file %s: %s", file_path, e.user_message)
            QMessageBox.critical(self.main, "Error loading assignment", e.user_message)
            return

        if self.main.state.submission_data:
            reply = QMessageBox.question(
                self.main, "Load Assignment",
                "Loading a new assignment clears your current answers. Export a backup first if you "
                "need them. Continue?",
            )
            if reply != QMessageBox.StandardButton.Yes:
                return

        self.main.dispatch(LoadAssignment(assignment))
        self.main.show_status(f"Loaded {assignment.course_code}: {assignment.title}")

    def _on_backup_read(self, generation: int, file_path: str, content: str) -> None:
        if not self._generations.is_current("backup", generation):
            return
        backup_service = self.main.backup_service
        decision = backup_service.import_backup(content, self.main.state.assignment)
        if decision.action is ImportAction.REJECT:
            QMessageBox.critical(self.main, "Invalid backup file", decision.reason or "Invalid backup file.")
            return

        confirmed = False
        if decision.needs_confirmation:
            reply = QMessageBox.question(self.main, "Load Work", decision.reason or "Continue?")
            confirmed = reply == QMessageBox.StandardButton.Yes
            if not confirmed:
                return

        self.main.commit_state(backup_service.apply(self.main.state, decision, confirmed), persist=True)
        QMessageBox.information(self.main, "Load Work", "Work restored successfully.")
