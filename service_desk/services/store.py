"""
JSON file backed collections.

Each named collection is one JSON array file inside a single data directory.
Writes are read-modify-write without locking: concurrent appends to the same
collection can lose an update (last save wins).
"""

import asyncio
import json
import logging
from functools import partial
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from ..exceptions import StorageError

logger = logging.getLogger(__name__)

APPOINTMENTS = "appointments"
SPARES = "spares"
FEEDBACK = "feedback"
CONTACTS = "contacts"
CUSTOMER_RECORDS = "customer-records"

COLLECTIONS: Dict[str, str] = {
    APPOINTMENTS: "appointments.json",
    SPARES: "spares.json",
    FEEDBACK: "feedback.json",
    CONTACTS: "contacts.json",
    CUSTOMER_RECORDS: "customer-records.json",
}

Record = Dict[str, Any]


class JsonStore:
    def __init__(self, data_dir: Union[str, Path]):
        self.data_dir = Path(data_dir)

    def ensure_data_dir(self) -> Path:
        """Create the data directory if it does not exist yet."""
        self.data_dir.mkdir(parents=True, exist_ok=True)
        return self.data_dir

    def path_for(self, collection: str) -> Path:
        try:
            filename = COLLECTIONS[collection]
        except KeyError:
            raise StorageError(f"Unknown collection: {collection}")
        return self.data_dir / filename

    # Blocking helpers, run in the default executor

    def _read_json(self, path: Path, fallback: Any) -> Any:
        try:
            raw = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.info(f"📁 Creating collection file {path.name}")
            self._write_json(path, fallback)
            return fallback
        data = json.loads(raw)
        return fallback if data is None else data

    def _write_json(self, path: Path, data: Any) -> None:
        payload = json.dumps(data, indent=2, ensure_ascii=False)
        path.write_text(payload, encoding="utf-8")

    async def _run(self, func, *args):
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, partial(func, *args))

    # Collection API

    async def load(self, collection: str, default: Optional[List[Record]] = None) -> List[Record]:
        """Return the stored records, creating the file with ``default`` ([]) if absent."""
        path = self.path_for(collection)
        fallback = [] if default is None else default
        return await self._run(self._read_json, path, fallback)

    async def save(self, collection: str, records: List[Record]) -> None:
        """Overwrite the collection file with ``records`` (not atomic)."""
        path = self.path_for(collection)
        await self._run(self._write_json, path, records)

    async def append(self, collection: str, record: Record) -> Record:
        records = await self.load(collection)
        records.append(record)
        await self.save(collection, records)
        return record

    async def remove(self, collection: str, record_id: str) -> bool:
        """Drop records whose id matches; returns False (and writes nothing) when none did."""
        records = await self.load(collection)
        remaining = [record for record in records if record.get("id") != record_id]
        if len(remaining) == len(records):
            return False
        await self.save(collection, remaining)
        return True
