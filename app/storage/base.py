"""
Storage interface for manual override documents.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class ManualInputStorageError(RuntimeError):
    """Raised when an override document cannot be read or written."""


class KeyValueStore(ABC):
    """
    Minimal string key/value store.
    """

    @abstractmethod
    def load(self, key: str) -> str | None:
        """
        Return the stored text for *key*, or None when nothing is stored.
        """

    @abstractmethod
    def save(self, key: str, value: str) -> None:
        """
        Replace the stored text for *key*. Failures raise ManualInputStorageError.
        """
