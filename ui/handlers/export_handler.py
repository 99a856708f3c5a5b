from __future__ import annotations
import logging
import os
from typing import TYPE_CHECKING, Optional

from PyQt6.QtWidgets import QFileDialog, QMessageBox

from services.render_service import renderer_for
from ui.dialogs import EXPORT_NOTICE_TEXT
from utils.constants import DOCUMENT_EXTENSION, WORD_EXTENSION
from utils.errors import MissingStudentIdentity, NoAssignmentLoaded, SubmissionError
from utils.file_utils import backup_filename, document_filename
from utils.worker_threads import DocumentExportThread

if TYPE_CHECKING:
    from ..main_window import MainWindow

logger = logging.getLogger(__name__)


class ExportHandler:
    """
    Exports the student's work: the JSON backup on its own, and the paginated
    document (PDF or Word) preceded by an automatic backup.
    """
    def __init__(self, main_window: MainWindow) -> None:
        """
        ExportHandler constructor.

        Args:
            main_window (MainWindow): The owning main window.
        """
        self.main: MainWindow = main_window
        self._export_thread: Optional[DocumentExportThread] = None

    def export_backup(self) -> Optional[str]:
        """
        Save a backup of the current work to a file chosen by the student.

        Returns:
            Optional[str]: The written path, or None when cancelled or failed.
        """
        state = self.main.state
        if state.assignment is None:
            QMessageBox.warning(self.main, "Export Work", NoAssignmentLoaded().user_message)
            return None

        initial_path = os.path.join(os.path.expanduser("~"), backup_filename(state.assignment))
        file_path, _ = QFileDialog.getSaveFileName(self.main, "Export Work", initial_path, "JSON Files (*.json)")
        if not file_path:
            return None
        if not file_path.lower().endswith('.json'):
            file_path += '.json'

        try:
            backup = self.main.backup_service.export(state)
            self.main.backup_service.write(backup, file_path)
        except SubmissionError as e:
            QMessageBox.critical(self.main, "Export Work", e.user_message)
            return None
        except OSError as e:
            QMessageBox.critical(self.main, "Export Work", f"Could not save the backup.\n{e}")
            return None
        self.main.show_status(f"Backup saved to {file_path}")
        return file_path

    def save_as_pdf(self) -> None:
        self.export_document(DOCUMENT_EXTENSION)

    def save_as_word(self) -> None:
        self.export_document(WORD_EXTENSION)

    def export_document(self, extension: str = DOCUMENT_EXTENSION) -> None:
        """
        Write a backup next to the chosen document path, then render the
        document on a background thread.

        The backup is written before rendering starts. Nothing in the session
        changes, whether the export succeeds or fails.
        """
        if self._export_thread is not None and self._export_thread.isRunning():
            self.main.show_status("An export is already in progress.")
            return

        state = self.main.state
        try:
            if state.assignment is None:
                raise NoAssignmentLoaded()
            if not state.identity.is_complete():
                raise MissingStudentIdentity()
        except SubmissionError as e:
            QMessageBox.warning(self.main, "Download", e.user_message)
            return

        flags = self.main.notice_flags
        if not flags.export_notice_shown:
            QMessageBox.information(self.main, "About the exported document", EXPORT_NOTICE_TEXT)
            flags.mark_export_notice_shown()

        default_name = document_filename(state.identity, state.assignment, extension)
        initial_path = os.path.join(os.path.expanduser("~"), default_name)
        file_filter = "Word Documents (*.docx)" if extension == WORD_EXTENSION else "PDF Files (*.pdf)"
        file_path, _ = QFileDialog.getSaveFileName(self.main, "Download", initial_path, file_filter)
        if not file_path:
            return
        if not file_path.lower().endswith(extension):
            file_path += extension

        self.main.show_status("Saving JSON backup...")
        try:
            backup_path = self.main.backup_service.export_to_directory(state, os.path.dirname(file_path))
        except (SubmissionError, OSError) as e:
            logger.error("Automatic backup before export failed: %s", e)
            reply = QMessageBox.question(
                self.main, "Download",
                "The automatic backup could not be saved. Generate the document anyway?",
            )
            if reply != QMessageBox.StandardButton.Yes:
                self.main.show_status("")
                return
        else:
            logger.info("Automatic backup written to %s", backup_path)

        pages = self.main.pagination_service.paginate(state.assignment, state.submission_data, state.identity)
        thread = DocumentExportThread(renderer_for(file_path), pages, self.main.config.page_geometry,
                                      file_path, self.main)
        thread.export_finished.connect(self._on_export_finished)
        thread.export_failed.connect(self._on_export_failed)
        self._export_thread = thread
        self.main.show_status("Generating document... Please wait.")
        thread.start()

    def shutdown(self) -> None:
        """Block until a running export has written its file."""
        thread = self._export_thread
        if thread is not None and thread.isRunning():
            logger.info("Waiting for the document export to finish before closing")
            thread.wait()
        self._export_thread = None

    def _on_export_finished(self, file_path: str) -> None:
        self.main.show_status("Document downloaded successfully!")
        QMessageBox.information(self.main, "Download complete", f"Saved your submission.\n{file_path}")

    def _on_export_failed(self, message: str) -> None:
        logger.error("Document export failed: %s", message)
        self.main.show_status("Error generating document.")
        QMessageBox.critical(self.main, "Download failed",
                             f"{message}\nYour work is unchanged; please try again.")
