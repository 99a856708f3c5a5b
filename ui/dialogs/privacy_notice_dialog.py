# ui/dialogs/privacy_notice_dialog.py
"""
First-run privacy notice.

Shown once per profile; acceptance is recorded in ``NoticeFlags``.
"""
from typing import Optional

from PyQt6.QtCore import Qt
from PyQt6.QtWidgets import QDialog, QDialogButtonBox, QLabel, QVBoxLayout, QWidget

from utils.constants import APP_NAME

PRIVACY_TEXT = (
    "<h3>100% Local Execution</h3>"
    "<p>This application runs entirely on your computer. No student data, answers, images "
    "or files are ever sent to a server.</p>"
    "<h3>Data Persistence</h3>"
    "<p>Your work is saved automatically on this computer. Export a backup regularly; "
    "clearing the application data deletes your saved work.</p>"
)

EXPORT_NOTICE_TEXT = (
    "The PDF has one page per problem statement and one page per answer part, with extra pages "
    "for additional image slots. Upload it as-is; a backup of your work is saved next to it."
)


class PrivacyNoticeDialog(QDialog):
    """Modal dialog the student must accept before using the application."""

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.setWindowTitle(f"Welcome to {APP_NAME}")
        self.setModal(True)
        self.setWindowModality(Qt.WindowModality.ApplicationModal)

        layout = QVBoxLayout(self)
        text = QLabel(PRIVACY_TEXT)
        text.setWordWrap(True)
        layout.addWidget(text)

        button_box = QDialogButtonBox(QDialogButtonBox.StandardButton.Ok)
        button_box.button(QDialogButtonBox.StandardButton.Ok).setText("I Understand")
        button_box.accepted.connect(self.accept)
        layout.addWidget(button_box)
