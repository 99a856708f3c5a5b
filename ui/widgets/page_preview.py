# ui/widgets/page_preview.py
import logging
from typing import List, Optional

from PyQt6.QtCore import Qt
from PyQt6.QtGui import QPixmap
from PyQt6.QtWidgets import QLabel, QScrollArea, QVBoxLayout, QWidget

from models.page_models import Page, PageGeometry
from services.render_service import PdfRenderer
from utils.errors import RenderUnavailable
from utils.pdf_utils import PDFUtils

logger = logging.getLogger(__name__)


class PagePreviewWidget(QScrollArea):
    """
    Print preview: the page sequence rendered through the PDF renderer and
    shown as one image per sheet, top to bottom.
    """

    PREVIEW_SCALE = 1.0

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.setWidgetResizable(True)
        self.renderer = PdfRenderer()
        self._container = QWidget()
        self._layout = QVBoxLayout(self._container)
        self._layout.setAlignment(Qt.AlignmentFlag.AlignHCenter)
        self._container.setStyleSheet("background-color: #6b7280;")
        self.setWidget(self._container)

    def clear(self) -> None:
        while self._layout.count():
            item = self._layout.takeAt(0)
            if item.widget():
                item.widget().deleteLater()

    def set_pages(self, pages: List[Page], geometry: PageGeometry) -> None:
        """Render and show ``pages``. An empty list shows a hint instead."""
        self.clear()
        if not pages:
            self._layout.addWidget(QLabel("Load an assignment to see the preview."))
            return
        try:
            pdf_bytes = self.renderer.render_to_bytes(pages, geometry)
        except RenderUnavailable as e:
            self._layout.addWidget(QLabel(e.user_message))
            return
        for image in PDFUtils.render_document(pdf_bytes, self.PREVIEW_SCALE):
            label = QLabel()
            label.setPixmap(QPixmap.fromImage(image))
            self._layout.addWidget(label)
        logger.debug("Preview shows %d pages", len(pages))
