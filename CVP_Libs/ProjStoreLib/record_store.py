"""
Local record store.

A key/value store backed by one JSON file per key in a storage directory,
plus résumé record helpers on top of it. Résumés are stored under keys with
the ``resume_`` prefix; the last write wins.

Classes:
    LocalRecordStore: JSON-file key/value store with résumé helpers
"""

import json
import logging
from pathlib import Path
from typing import Any, List, Optional

from CVP_Libs.ProjStoreLib.resume_models import ResumeRecord
from CVP_Libs.constants import (
    CURRENT_RESUME_KEY,
    FILENAME_REPLACEMENT_CHAR,
    RESUME_KEY_PREFIX,
    SAFE_FILENAME_CHARS,
    STORAGE_EXTENSION,
)

logger = logging.getLogger(__name__)


def _safe_key(key: str) -> str:
    """Map a key to a filesystem-safe file stem."""
    safe = "".join(
        c if c.isalnum() or c in SAFE_FILENAME_CHARS else FILENAME_REPLACEMENT_CHAR
        for c in str(key)
    ).strip(FILENAME_REPLACEMENT_CHAR)
    if not safe:
        raise ValueError(f"Storage key is empty after sanitization: {key!r}")
    return safe


class LocalRecordStore:
    """
    JSON-file backed key/value store.

    Example:
        >>> store = LocalRecordStore(Path("Storage"))
        >>> record = store.create(ResumeRecord(owner_email="me@example.com"))
        >>> store.list_records("me@example.com")
    """

    def __init__(self, directory: Path):
        self.directory = Path(directory)

    def _path_for(self, key: str) -> Path:
        return self.directory / f"{_safe_key(key)}{STORAGE_EXTENSION}"

    # ====================================================================
    # Key/value
    # ====================================================================

    def get(self, key: str, default: Any = None) -> Any:
        """
        Read a value.

        Raises:
            ValueError: If the stored file is not valid JSON
            OSError: If the file exists but cannot be read
        """
        path = self._path_for(key)
        if not path.exists():
            return default
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise ValueError(f"Corrupt record file {path}: {e}") from e

    def set(self, key: str, value: Any) -> None:
        """Write a JSON-serialisable value, replacing any previous one."""
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self._path_for(key)
        path.write_text(json.dumps(value, indent=2, ensure_ascii=False), encoding="utf-8")
        logger.debug(f"Stored {key} at {path}")

    def remove(self, key: str) -> bool:
        """Delete a value. Returns False if the key did not exist."""
        path = self._path_for(key)
        if not path.exists():
            return False
        path.unlink()
        logger.debug(f"Removed {key}")
        return True

    def keys(self) -> List[str]:
        if not self.directory.exists():
            return []
        return sorted(p.stem for p in self.directory.glob(f"*{STORAGE_EXTENSION}"))

    # ====================================================================
    # Résumé records
    # ====================================================================

    def list_records(self, owner_email: Optional[str] = None) -> List[ResumeRecord]:
        """
        List résumé records, optionally only those owned by owner_email.

        Records are sorted by updated_at, newest first.
        """
        records = []
        for key in self.keys():
            if not key.startswith(RESUME_KEY_PREFIX):
                continue
            record = ResumeRecord.from_dict(self.get(key))
            if owner_email is None or record.owner_email == owner_email:
                records.append(record)
        records.sort(key=lambda r: r.updated_at, reverse=True)
        return records

    def get_record(self, record_id: str) -> Optional[ResumeRecord]:
        data = self.get(f"{RESUME_KEY_PREFIX}{record_id}")
        return ResumeRecord.from_dict(data) if data is not None else None

    def create(self, record: ResumeRecord) -> ResumeRecord:
        self.set(f"{RESUME_KEY_PREFIX}{record.id}", record.to_dict())
        logger.info(f"Created résumé {record.id} for {record.owner_email or 'anonymous'}")
        return record

    def update(self, record: ResumeRecord) -> ResumeRecord:
        """Overwrite a stored record and refresh its updated_at."""
        record.touch()
        self.set(f"{RESUME_KEY_PREFIX}{record.id}", record.to_dict())
        logger.info(f"Updated résumé {record.id}")
        return record

    def delete(self, record_id: str) -> bool:
        removed = self.remove(f"{RESUME_KEY_PREFIX}{record_id}")
        if removed:
            logger.info(f"Deleted résumé {record_id}")
        return removed

    def get_current(self) -> Optional[ResumeRecord]:
        """The résumé currently open in the editor, if any."""
        data = self.get(CURRENT_RESUME_KEY)
        return ResumeRecord.from_dict(data) if data is not None else None

    def set_current(self, record: ResumeRecord) -> None:
        self.set(CURRENT_RESUME_KEY, record.to_dict())
