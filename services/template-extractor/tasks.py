"""Extraction task: document bytes in, one terminal status record out.

    processing --(fields parsed and enriched)--> complete
    processing --(model call or parse failed)--> error

Steps run strictly in order (decode, model call, parse, enrich, persist).
The model call is the only slow step. A task never leaves a terminal
state and is not retried; resubmitting means a new task id.
"""

import logging
import time
from typing import Protocol
from uuid import UUID

from enrichment import enrich_fields
from model_client import AICallFailure
from models import TaskRecord, TemplateField
from parsing import MalformedResponse, parse_fields
from prompts import build_extraction_prompt
from task_store import TaskStore

logger = logging.getLogger(__name__)

MALFORMED_MESSAGE = "Failed to extract fields from document"


class ModelClient(Protocol):
    def generate(self, prompt: str) -> str: ...


def decode_document(buffer: bytes) -> str:
    """Best-effort UTF-8 decode; undecodable bytes become U+FFFD."""
    return buffer.decode("utf-8", errors="replace")


class ExtractionTask:
    """Processes one uploaded document under its own task id."""

    def __init__(self, task_id: UUID, client: ModelClient, store: TaskStore):
        self.task_id = task_id
        self._client = client
        self._store = store

    def run(self, document: bytes) -> TaskRecord:
        """Run the whole pipeline and persist the terminal record.

        Never raises: every failure ends in an ``error`` record. If the
        terminal record cannot be written, the failure is logged and the
        record is still returned.
        """
        start = time.monotonic()
        text = decode_document(document)
        self._store.put(self.task_id, TaskRecord.processing(self.task_id))
        logger.info("Task %s processing: %d bytes", self.task_id, len(document))

        try:
            fields = self._extract(text)
        except AICallFailure as e:
            logger.error("Task %s: model call failed: %s", self.task_id, e)
            record = TaskRecord.failed(self.task_id, f"AI model call failed: {e}", "AICallFailure")
        except MalformedResponse as e:
            logger.error("Task %s: %s", self.task_id, e)
            logger.info("Raw model response: %s", e.raw[:2000])
            record = TaskRecord.failed(self.task_id, MALFORMED_MESSAGE, "MalformedResponse")
        except Exception as e:
            logger.exception("Task %s: unexpected failure", self.task_id)
            record = TaskRecord.failed(self.task_id, f"Unexpected error: {e}", "InternalError")
        else:
            record = TaskRecord.complete(self.task_id, fields)

        try:
            self._store.put(self.task_id, record)
        except Exception:
            logger.exception("Task %s: could not persist %s record", self.task_id, record.status.value)

        elapsed_ms = int((time.monotonic() - start) * 1000)
        logger.info("Task %s finished: status=%s in %dms", self.task_id, record.status.value, elapsed_ms)
        return record

    def _extract(self, text: str) -> list[TemplateField]:
        raw = self._client.generate(build_extraction_prompt(text))
        fields = parse_fields(raw)
        logger.info("Task %s: model proposed %d fields", self.task_id, len(fields))
        return enrich_fields(text, fields)
