# marketflow/database.py
import json
import logging
from pathlib import Path
from typing import Callable, Dict, Generic, Iterable, List, Type, TypeVar

from pydantic import BaseModel

from .errors import NotFound

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)


def load_fixture(path: Path) -> List[dict]:
    with Path(path).open("r", encoding="utf-8") as handle:
        data = json.load(handle)
    if not isinstance(data, list):
        raise ValueError(f"Fixture {path} must contain a JSON array")
    return data


class Table(Generic[T]):
    """Process-lifetime table of records keyed by id.

    Records never leave the table by reference: every read hands out a deep
    copy. Ids come from a high-water mark, so an id is never issued twice
    even after the record holding it was deleted.
    """

    def __init__(self, model: Type[T], records: Iterable[T] = (), resource: str = ""):
        self.model = model
        self.resource = resource or model.__name__
        self._rows: Dict[int, T] = {}
        self._high_water = 0
        for record in records:
            self._rows[record.id] = record
            self._high_water = max(self._high_water, record.id)

    @classmethod
    def from_fixture(cls, model: Type[T], path: Path, resource: str = "") -> "Table[T]":
        records = [model.model_validate(row) for row in load_fixture(path)]
        logger.debug("Seeded %d %s records from %s", len(records), model.__name__, path)
        return cls(model, records, resource)

    def __len__(self) -> int:
        return len(self._rows)

    def __contains__(self, record_id: int) -> bool:
        return record_id in self._rows

    def all(self) -> List[T]:
        return [r.model_copy(deep=True) for r in self._rows.values()]

    def filter(self, predicate: Callable[[T], bool]) -> List[T]:
        return [r.model_copy(deep=True) for r in self._rows.values() if predicate(r)]

    def any(self, predicate: Callable[[T], bool]) -> bool:
        return any(predicate(r) for r in self._rows.values())

    def get(self, record_id: int) -> T:
        return self._require(record_id).model_copy(deep=True)

    def next_id(self) -> int:
        return self._high_water + 1

    def insert(self, record: T) -> T:
        self._rows[record.id] = record
        self._high_water = max(self._high_water, record.id)
        return record.model_copy(deep=True)

    def replace(self, record_id: int, record: T) -> T:
        self._require(record_id)
        self._rows[record_id] = record
        return record.model_copy(deep=True)

    def remove(self, record_id: int) -> T:
        record = self._require(record_id)
        del self._rows[record_id]
        return record

    def _require(self, record_id: int) -> T:
        record = self._rows.get(record_id)
        if record is None:
            raise NotFound(f"{self.resource} with ID {record_id} not found")
        return record
