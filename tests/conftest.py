"""
Shared fixtures: a sample assignment, in-memory storage and a manual timer.
No Qt event loop is needed for anything except test_main.
"""
import base64
import copy

import fitz
import pytest

from services.storage_service import MemoryStorage
from utils.schema_validator import validate_assignment

SAMPLE_ASSIGNMENT = {
    "id": "math-101-hw1",
    "courseCode": "MATH 101",
    "title": "Homework 1",
    "dueDate": "2024-09-30",
    "dueTime": "23:59",
    "preamble": "Show your work.",
    "total_points": 40,
    "problems": [
        {
            "id": "p1",
            "name": "Derivatives",
            "description": "Differentiate.",
            "subsections": [
                {"id": "p1a", "name": "Power rule", "description": "d/dx x^2",
                 "points": 5, "submissionType": "Text", "maxImages": 0},
                {"id": "p1b", "name": "Sketch", "description": "Sketch the graph.",
                 "points": 10, "submissionType": "Image", "maxImages": 3},
            ],
        },
        {
            "id": "p2",
            "name": "Reflection",
            "description": "",
            "subsections": [
                {"id": "p2a", "name": "AI usage", "description": "",
                 "points": 5, "submissionType": "AI Reflective", "maxImages": 0},
                {"id": "p2b", "name": "Photo", "description": "",
                 "points": 15, "submissionType": "Image", "maxImages": 1},
            ],
        },
    ],
}


class FakeTimer:
    """Stands in for a single-shot QTimer; ``fire`` simulates the timeout."""

    class _Signal:
        def __init__(self):
            self.callbacks = []

        def connect(self, callback):
            self.callbacks.append(callback)

    def __init__(self):
        self.timeout = self._Signal()
        self.active = False
        self.interval = None
        self.single_shot = False
        self.starts = 0

    def setSingleShot(self, value):
        self.single_shot = value

    def setInterval(self, ms):
        self.interval = ms

    def start(self):
        self.active = True
        self.starts += 1

    def stop(self):
        self.active = False

    def isActive(self):
        return self.active

    def fire(self):
        if not self.active:
            return
        self.active = False
        for callback in self.timeout.callbacks:
            callback()


@pytest.fixture
def assignment_data():
    return copy.deepcopy(SAMPLE_ASSIGNMENT)


@pytest.fixture
def assignment(assignment_data):
    return validate_assignment(assignment_data)


@pytest.fixture
def memory_storage():
    return MemoryStorage()


@pytest.fixture
def fake_timer():
    return FakeTimer()


@pytest.fixture
def png_data_url():
    """A 4x4 white PNG as a data URL."""
    pix = fitz.Pixmap(fitz.csRGB, fitz.IRect(0, 0, 4, 4), 0)
    pix.clear_with(255)
    encoded = base64.b64encode(pix.tobytes("png")).decode("ascii")
    return f"data:image/png;base64,{encoded}"
