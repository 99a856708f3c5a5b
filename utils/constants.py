# utils/constants.py
"""Fixed keys, version tag and display strings shared across the application."""

APP_NAME = "Student Submission"
VERSION = "v2.1.0"

# Keys in the scoped storage
STORAGE_KEY = "student_submission_state"
PRIVACY_KEY = "student_submission_privacy_acknowledged"
EXPORT_NOTICE_KEY = "student_submission_export_notice_shown"

AUTOSAVE_DELAY_MS = 1000
PREVIEW_REFRESH_DELAY_MS = 300

START_MARKER_TEXT = "Start of Answer"
END_MARKER_TEXT = "End of Answer"
NO_ANSWER_TEXT = "No answer submitted."
NO_IMAGE_TEXT = "No image submitted for this slot"
AI_REFLECTION_LABEL = "AI Reflection & Tools Used:"
GENERATED_BY_TEXT = f"Generated by {APP_NAME}"

BACKUP_EXTENSION = ".json"
DOCUMENT_EXTENSION = ".pdf"
WORD_EXTENSION = ".docx"
