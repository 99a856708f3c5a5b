# utils/worker_threads.py
"""Background threads for file reads and document rendering.

Both keep the UI responsive; results come back to the main thread through Qt
signals.
"""

from typing import List, Optional

from PyQt6.QtCore import QObject, QThread, pyqtSignal

from models.page_models import Page, PageGeometry
from services.render_service import DocumentRenderer
from utils.errors import SubmissionError


class FileReadThread(QThread):
    """Reads a text file in the background.

    Every read carries a generation number chosen by the caller, so when reads
    overlap the caller can keep only the result of the latest request.

    Signals:
        result_ready (pyqtSignal): (generation, file_path, content) on success.
        error_occurred (pyqtSignal): (generation, file_path, message) on failure.
    """
    result_ready = pyqtSignal(int, str, str)
    error_occurred = pyqtSignal(int, str, str)

    def __init__(self, file_path: str, generation: int, parent: Optional[QObject] = None) -> None:
        """FileReadThread constructor.

        Args:
            file_path (str): File to read as UTF-8 text.
            generation (int): Request number echoed back in the signals.
            parent (Optional[QObject]): Parent object.
        """
        super().__init__(parent)
        self.file_path = file_path
        self.generation = generation

    def run(self) -> None:
        try:
            with open(self.file_path, 'r', encoding='utf-8-sig') as f:
                content = f.read()
            self.result_ready.emit(self.generation, self.file_path, content)
        except (OSError, UnicodeDecodeError) as e:
            self.error_occurred.emit(self.generation, self.file_path, f"Could not read the file.\n{e}")


class DocumentExportThread(QThread):
    """Renders the page sequence to a file without blocking the UI.

    Signals:
        export_finished (pyqtSignal): Emits the written file path.
        export_failed (pyqtSignal): Emits a message for the user.
    """
    export_finished = pyqtSignal(str)
    export_failed = pyqtSignal(str)

    def __init__(self, renderer: DocumentRenderer, pages: List[Page], geometry: PageGeometry,
                 file_path: str, parent: Optional[QObject] = None) -> None:
        super().__init__(parent)
        self.renderer = renderer
        self.pages = pages
        self.geometry = geometry
        self.file_path = file_path

    def run(self) -> None:
        try:
            self.renderer.render(self.pages, self.geometry, self.file_path)
            self.export_finished.emit(self.file_path)
        except SubmissionError as e:
            self.export_failed.emit(e.user_message)
        except Exception as e:
            self.export_failed.emit(f"Unexpected error while generating the document: {e}")
