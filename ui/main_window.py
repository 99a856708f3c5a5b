# ui/main_window.py
import logging
from typing import List, Optional

from PyQt6.QtCore import Qt, QTimer
from PyQt6.QtWidgets import (
    QFormLayout, QFrame, QHBoxLayout, QLabel, QLineEdit, QMainWindow, QMessageBox,
    QPushButton, QScrollArea, QStackedWidget, QVBoxLayout, QWidget
)

from models.session_models import SessionState, ViewMode
from models.submission_models import Answer
from services.backup_service import BackupService
from services.pagination_service import PaginationService
from services.persistence_service import NoticeFlags, PersistenceService
from services.session_service import (
    AcknowledgePrivacy, Action, ClearSession, HydrateSession, LoadAssignment, MarkSaved,
    ToggleView, UpdateAnswer, UpdateStudent, needs_persist, reduce
)
from services.storage_service import StorageService
from ui.dialogs import PrivacyNoticeDialog
from ui.handlers.export_handler import ExportHandler
from ui.handlers.file_handler import FileHandler
from ui.widgets import PagePreviewWidget, ProblemWidget
from utils.app_config import AppConfig
from utils.constants import APP_NAME, PREVIEW_REFRESH_DELAY_MS, VERSION
from utils.demo_assignment import DEMO_LOADED_MESSAGE, load_demo_assignment

logger = logging.getLogger(__name__)

# Actions after which the editor no longer matches the assignment or answers on screen.
REBUILD_ACTIONS = (LoadAssignment, HydrateSession, ClearSession)


class MainWindow(QMainWindow):
    """
    Main window: a sidebar with the student's details and the file actions, and
    a central area that switches between the answer editor and the page preview.

    All session changes go through ``dispatch``; the window only renders the
    resulting ``SessionState``.
    """

    def __init__(self, config: Optional[AppConfig] = None) -> None:
        super().__init__()
        self.config = config or AppConfig.from_env()
        self.setWindowTitle(f"{APP_NAME} {VERSION}")
        self.setGeometry(80, 60, 1400, 900)

        self.state = SessionState()
        storage = StorageService(self.config.data_dir)
        self.notice_flags = NoticeFlags(storage)
        self.autosave_timer = QTimer(self)
        self.persistence = PersistenceService(
            storage,
            self.config.autosave_delay_ms,
            timer=self.autosave_timer,
            on_saved=lambda timestamp: self.dispatch(MarkSaved(timestamp)),
        )
        self.backup_service = BackupService()
        self.pagination_service = PaginationService()

        self.file_handler = FileHandler(self)
        self.export_handler = ExportHandler(self)

        # Preview re-renders are coalesced while the student types in the sidebar.
        self.preview_timer = QTimer(self)
        self.preview_timer.setSingleShot(True)
        self.preview_timer.setInterval(PREVIEW_REFRESH_DELAY_MS)
        self.preview_timer.timeout.connect(self.refresh_preview)
        self._previewed_inputs: Optional[tuple] = None

        self.setup_ui()
        self.connect_signals()

        snapshot = self.persistence.restore()
        if snapshot is not None:
            self.dispatch(HydrateSession(snapshot))
        if self.notice_flags.privacy_acknowledged:
            self.dispatch(AcknowledgePrivacy())
        else:
            QTimer.singleShot(0, self.show_privacy_notice)
        self.refresh_view(rebuild=True)

    # ---- layout ----

    def setup_ui(self) -> None:
        central = QWidget()
        layout = QHBoxLayout(central)
        layout.addWidget(self.create_sidebar())

        self.center_stack = QStackedWidget()
        self.editor_scroll_area = QScrollArea()
        self.editor_scroll_area.setWidgetResizable(True)
        self.center_stack.addWidget(self.editor_scroll_area)
        self.preview_widget = PagePreviewWidget()
        self.center_stack.addWidget(self.preview_widget)
        layout.addWidget(self.center_stack, 1)
        self.setCentralWidget(central)

    def create_sidebar(self) -> QWidget:
        sidebar = QFrame()
        sidebar.setFrameShape(QFrame.Shape.StyledPanel)
        sidebar.setFixedWidth(300)
        layout = QVBoxLayout(sidebar)

        self.assignment_label = QLabel()
        self.assignment_label.setWordWrap(True)
        layout.addWidget(self.assignment_label)

        form = QFormLayout()
        self.name_edit = QLineEdit()
        self.name_edit.setPlaceholderText("Full name")
        self.student_id_edit = QLineEdit()
        self.student_id_edit.setPlaceholderText("Student ID")
        form.addRow("Name", self.name_edit)
        form.addRow("Student ID", self.student_id_edit)
        layout.addLayout(form)

        self.load_assignment_button = QPushButton("Load Assignment")
        self.demo_button = QPushButton("Try Demo")
        self.load_work_button = QPushButton("Load Work")
        self.export_work_button = QPushButton("Export Work")
        self.clear_work_button = QPushButton("Clear Work")
        self.preview_button = QPushButton("Preview")
        self.preview_button.setCheckable(True)
        self.download_pdf_button = QPushButton("Download PDF")
        self.word_save_button = QPushButton("Save as Word")
        for button in (self.load_assignment_button, self.demo_button, self.load_work_button,
                       self.export_work_button, self.clear_work_button, self.preview_button,
                       self.download_pdf_button, self.word_save_button):
            layout.addWidget(button)

        layout.addStretch()
        self.status_label = QLabel()
        self.status_label.setWordWrap(True)
        self.last_saved_label = QLabel()
        self.last_saved_label.setStyleSheet("color: #6b7280;")
        layout.addWidget(self.status_label)
        layout.addWidget(self.last_saved_label)
        return sidebar

    def connect_signals(self) -> None:
        # textEdited fires for user edits only, not for setText during refresh.
        self.name_edit.textEdited.connect(lambda text: self.dispatch(UpdateStudent("student_name", text)))
        self.student_id_edit.textEdited.connect(lambda text: self.dispatch(UpdateStudent("student_id", text)))
        self.load_assignment_button.clicked.connect(self.file_handler.open_assignment)
        self.demo_button.clicked.connect(self.load_demo)
        self.load_work_button.clicked.connect(self.file_handler.open_backup)
        self.export_work_button.clicked.connect(self.export_handler.export_backup)
        self.clear_work_button.clicked.connect(self.clear_work)
        self.preview_button.clicked.connect(lambda: self.dispatch(ToggleView()))
        self.download_pdf_button.clicked.connect(self.export_handler.save_as_pdf)
        self.word_save_button.clicked.connect(self.export_handler.save_as_word)

    # ---- state ----

    def dispatch(self, action: Action) -> None:
        """Apply ``action`` to the session and update the window."""
        self.commit_state(reduce(self.state, action), persist=needs_persist(action),
                          rebuild=isinstance(action, REBUILD_ACTIONS))

    def commit_state(self, state: SessionState, persist: bool = False, rebuild: bool = True) -> None:
        """
        Replace the session state.

        Args:
            state (SessionState): The new state.
            persist (bool): Schedule an autosave of the new state.
            rebuild (bool): Recreate the editor widgets from the new state.
        """
        self.state = state
        if persist:
            self.persistence.schedule_save(state)
        self.refresh_view(rebuild=rebuild)

    def on_answer_changed(self, key: str, answer: Answer) -> None:
        self.dispatch(UpdateAnswer(key, answer))

    def refresh_view(self, rebuild: bool = False) -> None:
        state = self.state
        if self.name_edit.text() != state.student_name:
            self.name_edit.setText(state.student_name)
        if self.student_id_edit.text() != state.student_id:
            self.student_id_edit.setText(state.student_id)

        if state.assignment is None:
            self.assignment_label.setText("<b>No assignment loaded</b>")
        else:
            self.assignment_label.setText(
                f"<b>{state.assignment.course_code}</b><br>{state.assignment.title}"
            )
        has_assignment = state.assignment is not None
        self.export_work_button.setEnabled(has_assignment)
        self.preview_button.setEnabled(has_assignment)
        self.download_pdf_button.setEnabled(state.can_export_document())
        self.word_save_button.setEnabled(state.can_export_document())
        self.last_saved_label.setText(f"Last saved: {state.last_saved}" if state.last_saved else "")

        if rebuild:
            self.rebuild_editor()

        preview = state.view_mode is ViewMode.PREVIEW
        self.preview_button.setChecked(preview)
        self.preview_button.setText("Edit" if preview else "Preview")
        if not preview:
            self.preview_timer.stop()
            self.center_stack.setCurrentWidget(self.editor_scroll_area)
            return
        if state.document_inputs() != self._previewed_inputs:
            if self.center_stack.currentWidget() is self.preview_widget:
                self.preview_timer.start()
            else:
                self.refresh_preview()
        self.center_stack.setCurrentWidget(self.preview_widget)

    def rebuild_editor(self) -> None:
        container = QWidget()
        layout = QVBoxLayout(container)
        assignment = self.state.assignment
        if assignment is None:
            hint = QLabel("Load an assignment file or try the demo to get started.")
            hint.setAlignment(Qt.AlignmentFlag.AlignCenter)
            layout.addWidget(hint)
        else:
            if assignment.preamble:
                preamble = QLabel(assignment.preamble)
                preamble.setWordWrap(True)
                layout.addWidget(preamble)
            widgets: List[ProblemWidget] = [
                ProblemWidget(problem, p_idx, self.state.submission_data, self.on_answer_changed)
                for p_idx, problem in enumerate(assignment.problems)
            ]
            for widget in widgets:
                layout.addWidget(widget)
        layout.addStretch()
        self.editor_scroll_area.setWidget(container)

    def refresh_preview(self) -> None:
        state = self.state
        self._previewed_inputs = state.document_inputs()
        if state.assignment is None:
            self.preview_widget.set_pages([], self.config.page_geometry)
            return
        pages = self.pagination_service.paginate(state.assignment, state.submission_data, state.identity)
        self.preview_widget.set_pages(pages, self.config.page_geometry)

    def show_status(self, message: str) -> None:
        self.status_label.setText(message)

    # ---- actions ----

    def show_privacy_notice(self) -> None:
        PrivacyNoticeDialog(self).exec()
        self.notice_flags.acknowledge_privacy()
        self.dispatch(AcknowledgePrivacy())

    def load_demo(self) -> None:
        if self.state.submission_data:
            reply = QMessageBox.question(
                self, "Try Demo", "Loading the demo clears your current answers. Continue?"
            )
            if reply != QMessageBox.StandardButton.Yes:
                return
        self.dispatch(LoadAssignment(load_demo_assignment()))
        self.show_status(DEMO_LOADED_MESSAGE)

    def clear_work(self) -> None:
        reply = QMessageBox.question(
            self, "Clear Work",
            "This deletes your saved name, ID, assignment and all answers from this computer. Continue?",
        )
        if reply != QMessageBox.StandardButton.Yes:
            return
        reply = QMessageBox.question(
            self, "Clear Work", "Are you sure? This cannot be undone unless you exported a backup.",
        )
        if reply != QMessageBox.StandardButton.Yes:
            return
        self.persistence.clear()
        self.dispatch(ClearSession())
        self.show_status("All work cleared.")

    def closeEvent(self, event):
        self.preview_timer.stop()
        self.export_handler.shutdown()
        self.file_handler.shutdown()
        self.persistence.flush()
        event.accept()
