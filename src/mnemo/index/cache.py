"""In-memory store of parsed memory files, keyed by path."""

from ..models import DocumentRecord


class DocumentCache:
    """Path → DocumentRecord store.

    Holds no validation logic; whatever is stored here has already passed
    parsing and validation upstream.
    """

    def __init__(self) -> None:
        self._records: dict[str, DocumentRecord] = {}

    def add(self, record: DocumentRecord) -> None:
        """Add a record, replacing any previous record for the same path."""
        self._records[record.path] = record

    def update(self, record: DocumentRecord) -> bool:
        """Replace an existing record.

        Returns:
            True if the path was present and replaced, False otherwise.
        """
        if record.path not in self._records:
            return False
        self._records[record.path] = record
        return True

    def remove(self, path: str) -> bool:
        return self._records.pop(path, None) is not None

    def get(self, path: str) -> DocumentRecord | None:
        return self._records.get(path)

    def has(self, path: str) -> bool:
        return path in self._records

    def get_all(self) -> list[DocumentRecord]:
        return list(self._records.values())

    def paths(self) -> list[str]:
        return list(self._records)

    def clear(self) -> None:
        self._records.clear()

    def size(self) -> int:
        return len(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, path: object) -> bool:
        return path in self._records
