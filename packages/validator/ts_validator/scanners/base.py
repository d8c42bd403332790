"""Base scanner interface."""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Sequence

from ts_validator.parsers.typescript import ParsedModule


class BaseScanner(ABC):
    """Abstract base class for source scanners."""

    name: str = "BaseScanner"

    @abstractmethod
    def scan(self, path: Path) -> Sequence[ParsedModule]:
        """
        Scan the given path and return parsed modules.

        Args:
            path: Path to scan (file or directory)

        Returns:
            Parsed modules in a stable order
        """
        pass
