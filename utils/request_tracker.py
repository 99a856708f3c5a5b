# utils/request_tracker.py
import logging
from typing import Dict

logger = logging.getLogger(__name__)


class RequestGenerations:
    """
    Numbers background requests per kind so only the newest one is applied.

    Each call to :meth:`next` supersedes every earlier request of the same
    kind, whether or not those requests have finished yet. A result is applied
    only when :meth:`is_current` says it belongs to the latest request.
    """

    def __init__(self) -> None:
        self._latest: Dict[str, int] = {}

    def next(self, kind: str) -> int:
        """Register a new request of ``kind`` and return its generation."""
        generation = self._latest.get(kind, 0) + 1
        self._latest[kind] = generation
        return generation

    def is_current(self, kind: str, generation: int) -> bool:
        if generation != self._latest.get(kind, 0):
            logger.debug("Discarding superseded %s read #%d", kind, generation)
            return False
        return True
