"""Task status records keyed by task id.

Each task has a single record holding its whole state, so a terminal
write replaces the previous status in one step and a task can never
show both a result and an error. The file store writes records to a
temp file and renames it over the old one.
"""

import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Protocol
from uuid import UUID

from models import TaskRecord

logger = logging.getLogger(__name__)


class TaskStore(Protocol):
    def put(self, task_id: UUID, record: TaskRecord) -> None: ...

    def get(self, task_id: UUID) -> TaskRecord | None: ...

    def save_document(self, task_id: UUID, text: str) -> None: ...

    def load_document(self, task_id: UUID) -> str | None: ...


class MemoryTaskStore:
    """In-process store, used by tests and single-worker setups."""

    def __init__(self):
        self._records: dict[UUID, TaskRecord] = {}
        self._documents: dict[UUID, str] = {}
        self._lock = threading.Lock()

    def put(self, task_id: UUID, record: TaskRecord) -> None:
        with self._lock:
            self._records[task_id] = record.model_copy(deep=True)

    def get(self, task_id: UUID) -> TaskRecord | None:
        with self._lock:
            record = self._records.get(task_id)
        return record.model_copy(deep=True) if record is not None else None

    def save_document(self, task_id: UUID, text: str) -> None:
        with self._lock:
            self._documents[task_id] = text

    def load_document(self, task_id: UUID) -> str | None:
        with self._lock:
            return self._documents.get(task_id)


class FileTaskStore:
    """One JSON status file per task, plus the uploaded source document."""

    def __init__(self, root: str | Path):
        self._root = Path(root)
        self._root.mkdir(parents=True, exist_ok=True)

    @property
    def root(self) -> Path:
        return self._root

    def _status_path(self, task_id: UUID) -> Path:
        return self._root / f"{task_id}.status.json"

    def _document_path(self, task_id: UUID) -> Path:
        return self._root / f"{task_id}.document.txt"

    def put(self, task_id: UUID, record: TaskRecord) -> None:
        payload = record.model_dump_json(by_alias=True, exclude_none=True)
        self._write_atomic(self._status_path(task_id), payload)

    def get(self, task_id: UUID) -> TaskRecord | None:
        try:
            payload = self._status_path(task_id).read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        return TaskRecord.model_validate_json(payload)

    def save_document(self, task_id: UUID, text: str) -> None:
        self._write_atomic(self._document_path(task_id), text)

    def load_document(self, task_id: UUID) -> str | None:
        try:
            return self._document_path(task_id).read_text(encoding="utf-8")
        except FileNotFoundError:
            return None

    def _write_atomic(self, path: Path, text: str) -> None:
        fd, tmp_name = tempfile.mkstemp(dir=self._root, prefix=f".{path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(text)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        logger.debug("Wrote %s (%d chars)", path.name, len(text))
