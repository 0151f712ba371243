"""Pydantic models for template fields and extraction task records."""

from enum import Enum
from uuid import UUID

from pydantic import BaseModel, ConfigDict, field_validator, model_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TemplateField(CamelModel):
    """A document value likely to change between uses of the template."""

    field_name: str
    current_value: str
    field_type: str
    position: str = ""
    validation_rules: list[str] = []
    dependencies: list[str] = []
    format: str = ""

    # Derived by enrichment, never taken from model output
    context_before: str = ""
    context_after: str = ""
    full_context: str = ""

    @field_validator("current_value", "position", "format", mode="before")
    @classmethod
    def _number_to_str(cls, value):
        # Models sometimes answer positions and amounts as bare numbers
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("position", "format", mode="before")
    @classmethod
    def _null_to_blank(cls, value):
        return "" if value is None else value

    @field_validator("validation_rules", "dependencies", mode="before")
    @classmethod
    def _null_to_empty(cls, value):
        return [] if value is None else value


class TaskStatus(str, Enum):
    PROCESSING = "processing"
    COMPLETE = "complete"
    ERROR = "error"


class TaskRecord(CamelModel):
    """Status of one extraction task.

    ``fields`` is set only when complete, ``message`` and ``error_kind``
    only on error.
    """

    task_id: UUID
    status: TaskStatus
    fields: list[TemplateField] | None = None
    message: str | None = None
    error_kind: str | None = None

    @model_validator(mode="after")
    def _check_payload(self) -> "TaskRecord":
        if self.status is TaskStatus.COMPLETE:
            if self.fields is None or self.message is not None:
                raise ValueError("complete record must carry fields and no message")
        elif self.status is TaskStatus.ERROR:
            if self.message is None or self.fields is not None:
                raise ValueError("error record must carry a message and no fields")
        elif self.fields is not None or self.message is not None:
            raise ValueError("processing record carries no fields or message")
        return self

    @classmethod
    def processing(cls, task_id: UUID) -> "TaskRecord":
        return cls(task_id=task_id, status=TaskStatus.PROCESSING)

    @classmethod
    def complete(cls, task_id: UUID, fields: list[TemplateField]) -> "TaskRecord":
        return cls(task_id=task_id, status=TaskStatus.COMPLETE, fields=fields)

    @classmethod
    def failed(cls, task_id: UUID, message: str, error_kind: str) -> "TaskRecord":
        return cls(
            task_id=task_id,
            status=TaskStatus.ERROR,
            message=message,
            error_kind=error_kind,
        )


class UploadResponse(CamelModel):
    task_id: UUID
    status: TaskStatus = TaskStatus.PROCESSING


class FieldReplacement(CamelModel):
    current_value: str
    new_value: str


class GenerateRequest(CamelModel):
    fields: list[FieldReplacement]
