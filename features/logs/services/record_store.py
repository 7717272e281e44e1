import asyncio
import json
import logging
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from pydantic import ValidationError

from core.config import settings
from features.common.exceptions.enrichment_exceptions import StorageFailure
from features.logs.models.log_types import FishingRecord

logger = logging.getLogger(__name__)

class RecordStore(ABC):
    """Persistence seam for fishing log entries."""

    @abstractmethod
    async def insert(self, values: Dict[str, Any]) -> FishingRecord:
        """Store a new entry and return it with its assigned id."""

    @abstractmethod
    async def get(self, record_id: int) -> Optional[FishingRecord]:
        pass

    @abstractmethod
    async def update(self, record_id: int, changes: Dict[str, Any]) -> FishingRecord:
        pass

    @abstractmethod
    async def all(self) -> List[FishingRecord]:
        pass

    async def find_missing(self, fields: Sequence[str]) -> List[FishingRecord]:
        """Entries where at least one of ``fields`` is null."""
        records = await self.all()
        return [r for r in records if any(getattr(r, f) is None for f in fields)]

class InMemoryRecordStore(RecordStore):
    def __init__(self, records: Sequence[FishingRecord] = ()):
        self._records: Dict[int, FishingRecord] = {r.id: r for r in records}
        self._next_id = max(self._records, default=0) + 1

    async def insert(self, values: Dict[str, Any]) -> FishingRecord:
        record = FishingRecord(id=self._next_id, **values)
        self._records[record.id] = record
        self._next_id += 1
        return record

    async def get(self, record_id: int) -> Optional[FishingRecord]:
        return self._records.get(record_id)

    async def update(self, record_id: int, changes: Dict[str, Any]) -> FishingRecord:
        record = self._records.get(record_id)
        if record is None:
            raise StorageFailure(f"Record {record_id} not found")
        updated = record.model_copy(update=changes)
        self._records[record_id] = updated
        return updated

    async def all(self) -> List[FishingRecord]:
        return list(self._records.values())

class JsonFileRecordStore(RecordStore):
    """Entries kept in one JSON file, rewritten atomically on every change."""

    def __init__(self, records_file: Path = Path(settings.records_file)):
        self.records_file = Path(records_file)
        self._lock = asyncio.Lock()

    def _read(self) -> Dict[int, FishingRecord]:
        if not self.records_file.exists():
            return {}
        try:
            with open(self.records_file) as f:
                rows = json.load(f)
            return {row["id"]: FishingRecord.model_validate(row) for row in rows}
        except (OSError, ValueError, KeyError, ValidationError) as e:
            logger.error(f"Error reading records from {self.records_file}: {str(e)}")
            raise StorageFailure(f"Error reading records: {str(e)}")

    def _write(self, records: Dict[int, FishingRecord]) -> None:
        tmp_path = self.records_file.with_suffix(".tmp")
        try:
            self.records_file.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, 'w') as f:
                json.dump([r.model_dump(mode="json") for r in records.values()], f, indent=2)
            os.replace(tmp_path, self.records_file)
        except OSError as e:
            logger.error(f"Error writing records to {self.records_file}: {str(e)}")
            raise StorageFailure(f"Error writing records: {str(e)}")

    async def insert(self, values: Dict[str, Any]) -> FishingRecord:
        async with self._lock:
            records = await asyncio.to_thread(self._read)
            record = FishingRecord(id=max(records, default=0) + 1, **values)
            records[record.id] = record
            await asyncio.to_thread(self._write, records)
            return record

    async def get(self, record_id: int) -> Optional[FishingRecord]:
        records = await asyncio.to_thread(self._read)
        return records.get(record_id)

    async def update(self, record_id: int, changes: Dict[str, Any]) -> FishingRecord:
        async with self._lock:
            records = await asyncio.to_thread(self._read)
            if record_id not in records:
                raise StorageFailure(f"Record {record_id} not found")
            updated = records[record_id].model_copy(update=changes)
            records[record_id] = updated
            await asyncio.to_thread(self._write, records)
            return updated

    async def all(self) -> List[FishingRecord]:
        records = await asyncio.to_thread(self._read)
        return list(records.values())
