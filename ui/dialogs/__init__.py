from .privacy_notice_dialog import EXPORT_NOTICE_TEXT, PrivacyNoticeDialog

__all__ = [
    "PrivacyNoticeDialog",
    "EXPORT_NOTICE_TEXT",
]
