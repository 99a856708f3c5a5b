# ui/widgets/submission_widget.py
import base64
import dataclasses
import mimetypes
import os
from typing import Callable, List, Optional

from PyQt6.QtCore import QSize
from PyQt6.QtGui import QIcon, QImage, QPixmap
from PyQt6.QtWidgets import (
    QFileDialog, QHBoxLayout, QLabel, QListWidget, QListWidgetItem, QMessageBox,
    QPlainTextEdit, QPushButton, QVBoxLayout, QWidget
)

from models.assignment_models import Subsection, SubmissionType
from models.submission_models import Answer
from utils.pdf_utils import decode_image_payload

AnswerCallback = Callable[[str, Answer], None]

IMAGE_FILTER = "Images (*.png *.jpg *.jpeg *.gif *.bmp)"


def file_to_data_url(file_path: str) -> str:
    """Read an image file and encode it as a data URL."""
    mime_type = mimetypes.guess_type(file_path)[0] or "image/png"
    with open(file_path, 'rb') as f:
        encoded = base64.b64encode(f.read()).decode("ascii")
    return f"data:{mime_type};base64,{encoded}"


class SubmissionWidget(QWidget):
    """
    Answer input for one subsection.

    Shows a text box for text and AI-reflective answers, or an image list with
    add/remove buttons for image answers. Every edit is reported through
    ``on_change`` with the complete new Answer.
    """

    def __init__(self, key: str, subsection: Subsection, answer: Optional[Answer],
                 on_change: AnswerCallback, parent: Optional[QWidget] = None) -> None:
        """
        SubmissionWidget constructor.

        Args:
            key (str): Submission key of the subsection.
            subsection (Subsection): The subsection being answered.
            answer (Optional[Answer]): The existing answer, if any.
            on_change (AnswerCallback): Called with (key, answer) after every edit.
            parent (Optional[QWidget]): Parent widget.
        """
        super().__init__(parent)
        self.key = key
        self.subsection = subsection
        self.answer = answer or Answer()
        self.on_change = on_change
        self.kind = subsection.answer_kind

        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)

        if self.kind is SubmissionType.IMAGE:
            self._build_image_input(layout)
        else:
            self._build_text_input(layout)

    def _build_text_input(self, layout: QVBoxLayout) -> None:
        if self.kind is SubmissionType.AI_REFLECTIVE:
            label = "AI Tool Usage Documentation:"
            value = self.answer.ai_reflective or ""
            placeholder = "Describe how you used AI tools for this problem (prompts used, validation steps, etc.)..."
        else:
            label = "Your Answer (Text/LaTeX math format supported):"
            value = self.answer.text_answer or ""
            placeholder = "Type your answer here... Use $...$ for inline math and $$...$$ for display math."

        layout.addWidget(QLabel(label))
        self.text_edit = QPlainTextEdit()
        self.text_edit.setPlaceholderText(placeholder)
        self.text_edit.setPlainText(value)
        self.text_edit.setMinimumHeight(120)
        self.text_edit.textChanged.connect(self._on_text_changed)
        layout.addWidget(self.text_edit)

    def _on_text_changed(self) -> None:
        text = self.text_edit.toPlainText()
        if self.kind is SubmissionType.AI_REFLECTIVE:
            self.answer = dataclasses.replace(self.answer, ai_reflective=text)
        else:
            self.answer = dataclasses.replace(self.answer, text_answer=text)
        self.on_change(self.key, self.answer)

    @property
    def max_images(self) -> int:
        return max(self.subsection.max_images, 1)

    def _build_image_input(self, layout: QVBoxLayout) -> None:
        layout.addWidget(QLabel(f"Your Answer (Images - Max {self.max_images}):"))
        self.image_list = QListWidget()
        self.image_list.setViewMode(QListWidget.ViewMode.IconMode)
        self.image_list.setIconSize(QSize(140, 105))
        self.image_list.setMinimumHeight(150)
        layout.addWidget(self.image_list)

        buttons = QHBoxLayout()
        add_button = QPushButton("Upload images")
        add_button.clicked.connect(self.add_images)
        remove_button = QPushButton("Remove selected")
        remove_button.clicked.connect(self.remove_selected_image)
        self.count_label = QLabel()
        buttons.addWidget(add_button)
        buttons.addWidget(remove_button)
        buttons.addStretch()
        buttons.addWidget(self.count_label)
        layout.addLayout(buttons)
        self._refresh_images()

    def _refresh_images(self) -> None:
        self.image_list.clear()
        for index, payload in enumerate(self.answer.images):
            image = QImage()
            try:
                image.loadFromData(decode_image_payload(payload))
            except ValueError:
                pass  # listed without a thumbnail
            item = QListWidgetItem(QIcon(QPixmap.fromImage(image)), f"Image {index + 1}")
            self.image_list.addItem(item)
        self.count_label.setText(f"{len(self.answer.images)} / {self.max_images} images uploaded")

    def add_images(self) -> None:
        file_paths, _ = QFileDialog.getOpenFileNames(self, "Upload images", os.path.expanduser("~"), IMAGE_FILTER)
        if not file_paths:
            return
        current = self.answer.images
        if len(current) + len(file_paths) > self.max_images:
            QMessageBox.warning(self, "Too many images",
                                f"Maximum {self.max_images} images allowed for this problem.")
            return
        try:
            added: List[str] = [file_to_data_url(path) for path in file_paths]
        except OSError as e:
            QMessageBox.critical(self, "Upload failed", f"Could not read the image.\n{e}")
            return
        self._set_images(current + added)

    def remove_selected_image(self) -> None:
        row = self.image_list.currentRow()
        if row < 0:
            return
        images = self.answer.images
        del images[row]
        self._set_images(images)

    def _set_images(self, images: List[str]) -> None:
        self.answer = dataclasses.replace(self.answer, image_answers=images)
        self._refresh_images()
        self.on_change(self.key, self.answer)
