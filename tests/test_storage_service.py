import os

import pytest

from services.storage_service import StorageService
from utils.errors import StorageUnavailable


def test_set_get_remove(tmp_path):
    storage = StorageService(str(tmp_path / "data"))
    assert storage.get("state") is None
    storage.set("state", '{"a": 1}')
    assert storage.get("state") == '{"a": 1}'
    storage.remove("state")
    assert storage.get("state") is None
    storage.remove("state")


def test_keys_map_to_safe_file_names(tmp_path):
    storage = StorageService(str(tmp_path))
    path = storage.get_path("../evil key")
    assert os.path.dirname(path) == str(tmp_path)
    assert os.path.basename(path) == ".._evil_key.json"


def test_unwritable_directory_raises(tmp_path):
    blocker = tmp_path / "file"
    blocker.write_text("x")
    storage = StorageService(str(blocker))
    with pytest.raises(StorageUnavailable):
        storage.set("state", "{}")
