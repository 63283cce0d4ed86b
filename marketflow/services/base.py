# marketflow/services/base.py
import asyncio
import logging
from typing import Any, ClassVar, Dict, Generic, List, Mapping, Optional, Type, TypeVar, Union

from pydantic import BaseModel, ValidationError

from ..config import Settings, get_settings
from ..database import Table
from ..errors import ValidationFailed

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)

Payload = Union[BaseModel, Mapping[str, Any]]


def describe_validation_error(exc: ValidationError) -> str:
    first = exc.errors()[0]
    loc = ".".join(str(part) for part in first.get("loc", ()))
    return f"{loc}: {first['msg']}" if loc else first["msg"]


class MockService(Generic[T]):
    """CRUD surface shared by the mock resource services.

    Every coroutine sleeps its simulated latency first, then does its table
    work in one synchronous step. Nothing awaits between reading the table
    and mutating it, so concurrent calls on one event loop cannot interleave
    inside that step.
    """

    model: ClassVar[Type[BaseModel]]
    # simulated latency per operation, in milliseconds
    delays: ClassVar[Dict[str, int]] = {}

    def __init__(self, table: Table[T], settings: Optional[Settings] = None):
        self.table = table
        self.settings = settings or get_settings()

    async def _pause(self, operation: str) -> None:
        delay_ms = self.delays.get(operation, 200)
        await asyncio.sleep(delay_ms / 1000 * self.settings.latency_scale)

    def _payload(self, data: Payload, partial: bool = False) -> Dict[str, Any]:
        """Normalize a payload to a dict keyed by field name."""
        if isinstance(data, BaseModel):
            return data.model_dump(exclude_unset=partial)
        by_alias = {f.alias: name for name, f in self.model.model_fields.items() if f.alias}
        return {by_alias.get(key, key): value for key, value in dict(data).items()}

    def _build(self, values: Dict[str, Any]) -> T:
        try:
            return self.model.model_validate(values)
        except ValidationError as e:
            raise ValidationFailed(describe_validation_error(e)) from e

    # hooks for resource specific stamping/validation
    def _prepare_create(self, values: Dict[str, Any]) -> Dict[str, Any]:
        return values

    def _prepare_update(self, current: T, changes: Dict[str, Any]) -> Dict[str, Any]:
        return changes

    def _check_record(self, record: T) -> None:
        """Checks that need the validated record, run before it is stored."""

    # ---------------------------
    # CRUD
    # ---------------------------
    async def get_all(self) -> List[T]:
        await self._pause("get_all")
        return self.table.all()

    async def get_by_id(self, record_id: int) -> T:
        await self._pause("get_by_id")
        return self.table.get(record_id)

    async def create(self, data: Payload) -> T:
        await self._pause("create")
        values = self._prepare_create(self._payload(data))
        values["id"] = self.table.next_id()
        record = self._build(values)
        self._check_record(record)
        record = self.table.insert(record)
        logger.debug("Created %s %s", self.table.resource, record.id)
        return record

    async def update(self, record_id: int, data: Payload) -> T:
        await self._pause("update")
        current = self.table.get(record_id)
        changes = self._prepare_update(current, self._payload(data, partial=True))
        merged = {**current.model_dump(), **changes, "id": record_id}
        record = self._build(merged)
        self._check_record(record)
        record = self.table.replace(record_id, record)
        logger.debug("Updated %s %s", self.table.resource, record_id)
        return record

    async def delete(self, record_id: int) -> T:
        await self._pause("delete")
        self._check_delete(record_id)
        record = self.table.remove(record_id)
        logger.debug("Deleted %s %s", self.table.resource, record_id)
        return record

    def _check_delete(self, record_id: int) -> None:
        pass
