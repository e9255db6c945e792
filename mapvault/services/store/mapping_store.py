"""Mapping Store - JSON backup file of drive mappings."""

import json
import logging
from pathlib import Path
from typing import List

import aiofiles
import aiofiles.os
from pydantic import TypeAdapter, ValidationError

from ...core.exceptions import BackupNotFoundError, MappingStoreError
from ...models import MappingRecord, MappingSet

_RECORDS = TypeAdapter(List[MappingRecord])


class MappingStore:
    """
    Saves and loads a MappingSet as a UTF-8 JSON array of
    {DriveLetter, RemotePath, Description, Persistent} objects.

    The file is always rewritten as a whole. There is no version field.
    """

    async def save(self, mapping_set: MappingSet, path: str) -> None:
        payload = json.dumps(
            [record.model_dump(by_alias=True) for record in mapping_set],
            indent=2,
            ensure_ascii=False,
        )

        try:
            await aiofiles.os.makedirs(Path(path).parent, exist_ok=True)
            async with aiofiles.open(path, "w", encoding="utf-8", newline="\n") as f:
                await f.write(payload + "\n")
        except OSError as e:
            raise MappingStoreError(f"Cannot write backup file {path}: {e}") from e

        logging.info(f"Saved {len(mapping_set)} mapping(s) to {path}")

    async def load(self, path: str) -> MappingSet:
        if not await aiofiles.os.path.isfile(path):
            raise BackupNotFoundError(path)

        try:
            # utf-8-sig: files written by Windows PowerShell carry a BOM
            async with aiofiles.open(path, "r", encoding="utf-8-sig") as f:
                content = await f.read()
        except OSError as e:
            raise MappingStoreError(f"Cannot read backup file {path}: {e}") from e

        try:
            data = json.loads(content) if content.strip() else []
            # ConvertTo-Json writes a lone object for one-record backups
            if isinstance(data, dict):
                data = [data]
            records = _RECORDS.validate_python(data)
        except (ValueError, ValidationError) as e:
            raise MappingStoreError(f"Backup file {path} is not a valid mapping list: {e}") from e

        mapping_set = MappingSet()
        for record in records:
            if not mapping_set.add(record):
                logging.warning(f"Ignoring duplicate entry in backup: {record.display_name}")

        logging.info(f"Loaded {len(mapping_set)} mapping(s) from {path}")
        return mapping_set
