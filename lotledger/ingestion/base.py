"""Base adapter interface for history ingestion."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path

from lotledger.models.history import History


@dataclass
class ImportResult:
    """Bundles the output from an adapter's parse method."""

    source: str
    history: History = field(default_factory=History)

    @property
    def record_count(self) -> int:
        return len(self.history.trades) + len(self.history.movements)


class BaseAdapter(ABC):
    """Abstract base class for all ingestion adapters."""

    @abstractmethod
    def parse(self, file_path: Path) -> ImportResult:
        """Parse a file and return an ImportResult with typed models."""
        ...

    @abstractmethod
    def validate(self, data: ImportResult) -> list[str]:
        """Validate parsed data. Returns a list of warning messages."""
        ...
