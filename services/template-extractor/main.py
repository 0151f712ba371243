"""FastAPI template field extractor.

Accepts a text document, has a Gemini model propose the values likely to
change between uses, and later writes replacement values back into the
document. Extraction runs as a background task; clients poll by task id.
Document text is never logged, only byte counts.
"""

import logging
from contextlib import asynccontextmanager
from uuid import UUID, uuid4

from fastapi import BackgroundTasks, FastAPI, File, UploadFile
from fastapi.responses import JSONResponse, PlainTextResponse

from config import settings
from model_client import GeminiClient
from models import GenerateRequest, TaskRecord, UploadResponse
from substitution import replace_fields
from task_store import FileTaskStore, TaskStore
from tasks import ExtractionTask, decode_document

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

_model_client: GeminiClient | None = None
_task_store: TaskStore | None = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open the task store and, if configured, the Gemini client."""
    global _model_client, _task_store

    _task_store = FileTaskStore(settings.TASK_STORE_DIR)
    logger.info("Task store at %s", _task_store.root)

    if not settings.GEMINI_API_KEY:
        logger.info("Gemini not configured (GEMINI_API_KEY is empty); AI extraction disabled")
    else:
        _model_client = GeminiClient()
        logger.info("Using Gemini model %s", _model_client.model)

    yield

    if _model_client is not None:
        _model_client.close()
        _model_client = None


app = FastAPI(title="Template Field Extractor", version="1.0.0", lifespan=lifespan)


@app.post("/api/v1/documents", status_code=202, response_model=UploadResponse)
def upload_document(
    background_tasks: BackgroundTasks,
    document: UploadFile = File(...),
):
    """Start field extraction for an uploaded text document."""
    if _model_client is None or _task_store is None:
        return JSONResponse(
            status_code=503,
            content={"detail": "AI field extraction is not available - no Gemini API key configured"},
        )

    buffer = document.file.read()
    if not buffer:
        return JSONResponse(
            status_code=400,
            content={"detail": "Empty file uploaded"},
        )

    task_id = uuid4()
    logger.info("Accepted document: task=%s size=%d bytes", task_id, len(buffer))

    _task_store.save_document(task_id, decode_document(buffer))
    _task_store.put(task_id, TaskRecord.processing(task_id))

    task = ExtractionTask(task_id, _model_client, _task_store)
    background_tasks.add_task(task.run, buffer)

    return UploadResponse(task_id=task_id)


@app.get(
    "/api/v1/tasks/{task_id}",
    response_model=TaskRecord,
    response_model_exclude_none=True,
)
def get_task(task_id: UUID):
    """Return the task's status; unknown ids read as still processing.

    Plain ``def`` routes run in the threadpool, keeping store file I/O
    off the event loop.
    """
    if _task_store is None:
        return JSONResponse(status_code=503, content={"detail": "Task store not initialized"})

    record = _task_store.get(task_id)
    if record is None:
        return TaskRecord.processing(task_id)
    return record


@app.post("/api/v1/tasks/{task_id}/generate")
def generate_document(task_id: UUID, request: GenerateRequest):
    """Substitute new values into the original document and return it as a download."""
    if _task_store is None:
        return JSONResponse(status_code=503, content={"detail": "Task store not initialized"})

    document_text = _task_store.load_document(task_id)
    if document_text is None:
        return JSONResponse(
            status_code=404,
            content={"detail": f"No document stored for task {task_id}"},
        )

    updated = replace_fields(document_text, request.fields)
    logger.info("Generated document: task=%s replacements=%d", task_id, len(request.fields))

    return PlainTextResponse(
        updated,
        headers={"Content-Disposition": 'attachment; filename="updated_document.txt"'},
    )


@app.get("/health")
async def health():
    """Return service status and Gemini availability."""
    base = {
        "status": "healthy",
        "ai_available": _model_client is not None,
    }

    if _model_client is not None:
        base["model_health"] = _model_client.health()

    return base


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=settings.PORT)
