# services/persistence_service.py
import json
import logging
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from PyQt6.QtCore import QTimer

from models.session_models import PersistedSnapshot, SessionState
from models.submission_models import submission_data_from_dict, submission_data_to_dict
from services.storage_service import ScopedStorage
from utils.constants import AUTOSAVE_DELAY_MS, EXPORT_NOTICE_KEY, PRIVACY_KEY, STORAGE_KEY
from utils.errors import StorageUnavailable, SubmissionError
from utils.schema_validator import validate_assignment

logger = logging.getLogger(__name__)


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _text(value: Any) -> str:
    return value if isinstance(value, str) else ""


class PersistenceService:
    """Owns the single persisted session record and the debounced autosave.

    Every call to ``schedule_save`` restarts a single-shot timer; the record is
    only written once the timer fires without a further call, and only the
    latest scheduled session is written. Storage failures are logged and switch
    the service to a no-persistence mode instead of propagating.

    Attributes:
        storage (ScopedStorage): Backing string store.
        available (bool): False once the storage has failed.
    """

    def __init__(
        self,
        storage: ScopedStorage,
        delay_ms: int = AUTOSAVE_DELAY_MS,
        timer: Optional[QTimer] = None,
        on_saved: Optional[Callable[[str], None]] = None,
        clock: Callable[[], str] = _utc_now_iso,
    ) -> None:
        """PersistenceService constructor.

        Args:
            storage (ScopedStorage): Backing string store.
            delay_ms (int): Quiet period before a scheduled save is written.
            timer (Optional[QTimer]): Timer to use; a new single-shot QTimer by default.
            on_saved (Optional[Callable[[str], None]]): Called with the save timestamp
                after every successful write.
            clock (Callable[[], str]): Returns the timestamp stored as ``lastSaved``.
        """
        self.storage = storage
        self.available = True
        self.on_saved = on_saved
        self._clock = clock
        self._pending: Optional[SessionState] = None
        self._timer = timer if timer is not None else QTimer()
        self._timer.setSingleShot(True)
        self._timer.setInterval(delay_ms)
        self._timer.timeout.connect(self.flush)

    def _degrade(self, error: StorageUnavailable) -> None:
        if self.available:
            logger.error("Persistence disabled for this session: %s", error.user_message)
        self.available = False
        self._pending = None
        self._timer.stop()

    @property
    def has_pending_save(self) -> bool:
        return self._pending is not None

    def restore(self) -> Optional[PersistedSnapshot]:
        """Read back the persisted session, tolerating damaged fields.

        Returns:
            Optional[PersistedSnapshot]: The recovered fields, or None when there is
            no record or it cannot be read at all.
        """
        try:
            raw = self.storage.get(STORAGE_KEY)
        except StorageUnavailable as e:
            self._degrade(e)
            return None
        if raw is None:
            return None

        try:
            data = json.loads(raw)
        except ValueError as e:
            logger.error("Failed to restore session, stored record is not JSON: %s", e)
            return None
        if not isinstance(data, dict):
            logger.error("Failed to restore session, stored record is not an object")
            return None

        assignment = None
        if data.get("assignment") is not None:
            try:
                assignment = validate_assignment(data["assignment"])
            except SubmissionError as e:
                logger.warning("Stored assignment could not be restored: %s", e.user_message)

        last_saved = data.get("lastSaved")
        snapshot = PersistedSnapshot(
            student_name=_text(data.get("studentName")),
            student_id=_text(data.get("studentId")),
            assignment=assignment,
            submission_data=submission_data_from_dict(data.get("submissionData")),
            last_saved=last_saved if isinstance(last_saved, str) else None,
        )
        logger.info("Restored session (%d answers)", len(snapshot.submission_data))
        return snapshot

    def schedule_save(self, session: SessionState) -> None:
        """Schedule ``session`` to be written after the quiet period.

        A save scheduled earlier and not yet written is superseded.
        """
        if not self.available:
            return
        self._pending = session
        self._timer.start()

    def flush(self) -> Optional[str]:
        """Write the pending session now.

        Returns:
            Optional[str]: The save timestamp, or None when nothing was written.
        """
        self._timer.stop()
        session, self._pending = self._pending, None
        if session is None or not self.available:
            return None
        if not session.has_content():
            logger.debug("Skipping autosave of an empty session")
            return None

        timestamp = self._clock()
        record = {
            "studentName": session.student_name,
            "studentId": session.student_id,
            "assignment": session.assignment.to_dict() if session.assignment else None,
            "submissionData": submission_data_to_dict(session.submission_data),
            "lastSaved": timestamp,
        }
        try:
            self.storage.set(STORAGE_KEY, json.dumps(record, ensure_ascii=False))
        except StorageUnavailable as e:
            self._degrade(e)
            return None

        logger.debug("Autosaved session at %s", timestamp)
        if self.on_saved:
            self.on_saved(timestamp)
        return timestamp

    def clear(self) -> None:
        """Cancel any pending save and delete the persisted record."""
        self._timer.stop()
        self._pending = None
        try:
            self.storage.remove(STORAGE_KEY)
        except StorageUnavailable as e:
            self._degrade(e)


class NoticeFlags:
    """One-time notice flags stored next to the session record.

    A missing or unreadable flag counts as not set.
    """

    def __init__(self, storage: ScopedStorage) -> None:
        self.storage = storage

    def _is_set(self, key: str) -> bool:
        try:
            return self.storage.get(key) == "true"
        except StorageUnavailable as e:
            logger.warning("Could not read flag %s: %s", key, e.user_message)
            return False

    def _set(self, key: str) -> None:
        try:
            self.storage.set(key, "true")
        except StorageUnavailable as e:
            logger.warning("Could not store flag %s: %s", key, e.user_message)

    @property
    def privacy_acknowledged(self) -> bool:
        return self._is_set(PRIVACY_KEY)

    def acknowledge_privacy(self) -> None:
        self._set(PRIVACY_KEY)

    @property
    def export_notice_shown(self) -> bool:
        return self._is_set(EXPORT_NOTICE_KEY)

    def mark_export_notice_shown(self) -> None:
        self._set(EXPORT_NOTICE_KEY)
