"""
In-memory record store backing the mock driver.

Records are partitioned by ``(resource kind, mock instance name)``. Two mock
instances never observe each other's records. Every operation holds the store
lock for its whole read-modify-write span, so concurrent callers see a single
total order of creates, reads and deletes.
"""
from collections import defaultdict
from threading import RLock
from typing import Callable, Dict, List, Optional, Tuple, TypeVar

import structlog
from pydantic import BaseModel

from cloudhandle.shared.core.exceptions import ResourceConflictError, ResourceNotFoundError

logger = structlog.get_logger()

RecordT = TypeVar("RecordT", bound=BaseModel)
PartitionKey = Tuple[str, str]


class MockResourceStore:
    """Owns every mock record; pass one to handlers to get an isolated world."""

    def __init__(self) -> None:
        self._lock = RLock()
        self._records: Dict[PartitionKey, List[BaseModel]] = {}
        self._sequences: Dict[PartitionKey, int] = defaultdict(int)

    @staticmethod
    def _name_of(record: BaseModel) -> str:
        return record.iid.name_id  # type: ignore[attr-defined]

    def insert(
        self,
        kind: str,
        mock_name: str,
        name: str,
        build: Callable[[int], RecordT],
    ) -> RecordT:
        """
        Append the record built by ``build`` unless ``name`` is taken.

        ``build`` receives the partition's next allocation number (1-based) and
        runs under the lock.
        """
        key = (kind, mock_name)
        with self._lock:
            records = self._records.setdefault(key, [])
            if any(self._name_of(r) == name for r in records):
                raise ResourceConflictError(
                    f"{kind} {name} already exists",
                    details={"kind": kind, "mock_name": mock_name, "name": name},
                )
            self._sequences[key] += 1
            record = build(self._sequences[key])
            records.append(record)
            return record.model_copy(deep=True)

    def list(self, kind: str, mock_name: str) -> List[BaseModel]:
        with self._lock:
            records = self._records.get((kind, mock_name))
            if not records:
                return []
            return [r.model_copy(deep=True) for r in records]

    def get(self, kind: str, mock_name: str, name: str) -> BaseModel:
        with self._lock:
            for record in self._records.get((kind, mock_name), []):
                if self._name_of(record) == name:
                    return record.model_copy(deep=True)
        raise ResourceNotFoundError(
            f"{kind} {name} does not exist",
            details={"kind": kind, "mock_name": mock_name, "name": name},
        )

    def delete(self, kind: str, mock_name: str, name: str) -> bool:
        with self._lock:
            records = self._records.get((kind, mock_name), [])
            for idx, record in enumerate(records):
                if self._name_of(record) == name:
                    del records[idx]
                    return True
        return False

    def reset(self, mock_name: Optional[str] = None) -> None:
        """Drop every record, or only those of one mock instance."""
        with self._lock:
            if mock_name is None:
                self._records.clear()
                self._sequences.clear()
                return
            for key in [k for k in self._records if k[1] == mock_name]:
                del self._records[key]
                self._sequences.pop(key, None)


# Process-wide store used when a handler is built without one.
default_store = MockResourceStore()
