# services/storage_service.py
import logging
import os
import re
from abc import ABC, abstractmethod
from typing import Dict, Optional

from utils.errors import StorageUnavailable

logger = logging.getLogger(__name__)


class ScopedStorage(ABC):
    """A persistent, key-scoped string store (get/set/remove by key).

    Implementations raise ``StorageUnavailable`` when the medium cannot be
    read or written. Callers decide whether to degrade or surface the error.
    """

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Return the stored string, or None when the key is absent."""

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store a string under ``key``, replacing any previous value."""

    @abstractmethod
    def remove(self, key: str) -> None:
        """Delete ``key``. Removing an absent key is not an error."""


class StorageService(ScopedStorage):
    """Directory-backed storage: each key is one UTF-8 file under ``base_path``."""

    _UNSAFE_KEY_CHARS = re.compile(r"[^A-Za-z0-9_.-]")

    def __init__(self, base_path: str = "data") -> None:
        """StorageService constructor.

        Args:
            base_path (str): Directory holding the stored records. Created on
                first write if it does not exist.
        """
        self.base_path = base_path

    def get_path(self, key: str) -> str:
        """Return the file path used for ``key``.

        Args:
            key (str): Storage key.

        Returns:
            str: Full path of the record file.
        """
        file_name = self._UNSAFE_KEY_CHARS.sub("_", key) + ".json"
        return os.path.join(self.base_path, file_name)

    def get(self, key: str) -> Optional[str]:
        file_path = self.get_path(key)
        if not os.path.exists(file_path):
            return None
        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                return f.read()
        except (OSError, UnicodeDecodeError) as e:
            raise StorageUnavailable(f"could not read {file_path}: {e}") from e

    def set(self, key: str, value: str) -> None:
        file_path = self.get_path(key)
        tmp_path = file_path + ".tmp"
        try:
            os.makedirs(self.base_path, exist_ok=True)
            with open(tmp_path, 'w', encoding='utf-8') as f:
                f.write(value)
            os.replace(tmp_path, file_path)
        except OSError as e:
            raise StorageUnavailable(f"could not write {file_path}: {e}") from e
        logger.debug("Stored %s (%d chars)", file_path, len(value))

    def remove(self, key: str) -> None:
        file_path = self.get_path(key)
        try:
            os.remove(file_path)
        except FileNotFoundError:
            return
        except OSError as e:
            raise StorageUnavailable(f"could not delete {file_path}: {e}") from e


class MemoryStorage(ScopedStorage):
    """In-process storage with no persistence across runs."""

    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self.items: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self.items.get(key)

    def set(self, key: str, value: str) -> None:
        self.items[key] = value

    def remove(self, key: str) -> None:
        self.items.pop(key, None)
