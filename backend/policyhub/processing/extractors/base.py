"""
Abstract base class for all row extractors.
"""

from abc import ABC, abstractmethod
from typing import Any


class BaseExtractor(ABC):
    """Base interface for tabular file extractors."""

    @abstractmethod
    def extract(self, filepath: str) -> list[dict[str, Any]]:
        """Decode every data row of a file.  Returns header-keyed raw dicts."""
        ...

    @abstractmethod
    def supports_format(self, format_type: str) -> bool:
        """Return True if this extractor handles the given format type."""
        ...
