"""
Pydantic models for request / response validation.

Wire keys are camelCase (``userId``, ``createdAt``); handlers accept
either spelling.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class MessageResponse(CamelModel):
    message: str


# ---- Form definitions ----

FieldType = Literal[
    "text", "email", "number", "textarea", "select",
    "checkbox", "radio", "file", "date",
]


class FormField(CamelModel):
    name: str = Field(..., min_length=1)
    label: str
    type: FieldType
    required: bool = False
    options: Optional[list[str]] = None  # select / radio / checkbox
    placeholder: Optional[str] = None
    accept: Optional[str] = None  # file, e.g. "image/*" or ".pdf,.doc"
    multiple: Optional[bool] = None  # file


class FormSchema(CamelModel):
    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    fields: list[FormField] = Field(default_factory=list)


# ---- Forms ----

class GenerateFormRequest(CamelModel):
    prompt: Optional[str] = Field(default=None, max_length=5000)
    title: Optional[str] = Field(default=None, max_length=512)


class UpdateFormRequest(CamelModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=512)
    description: Optional[str] = None
    form_schema: Optional[FormSchema] = Field(default=None, alias="schema")


class FormResponse(CamelModel):
    id: str
    title: str
    description: Optional[str] = None
    owner: str
    form_schema: Optional[dict[str, Any]] = Field(default=None, alias="schema")
    created_at: datetime
    updated_at: Optional[datetime] = None


class PublicFormResponse(CamelModel):
    id: str
    title: str
    description: Optional[str] = None
    form_schema: Optional[dict[str, Any]] = Field(default=None, alias="schema")
    created_at: datetime


class FormSummary(CamelModel):
    id: str
    title: str
    form_schema: Optional[dict[str, Any]] = Field(default=None, alias="schema")
    submission_count: int
    created_at: datetime


class FormListResponse(CamelModel):
    forms: list[FormSummary]


# ---- Uploads ----

class UploadedMedia(CamelModel):
    url: str
    public_id: str
    file_name: Optional[str] = None
    file_size: Optional[int] = None
    mime_type: Optional[str] = None


class UploadedFileGroup(CamelModel):
    field_name: str
    urls: list[UploadedMedia] = Field(default_factory=list)


# ---- Submissions ----

class SubmissionCreateRequest(CamelModel):
    form_id: Optional[str] = None
    data: Optional[dict[str, Any]] = None
    uploaded_files: list[UploadedFileGroup] = Field(default_factory=list)


class SubmissionResponse(CamelModel):
    id: str
    form_id: str
    data: dict[str, Any]
    files: list[UploadedFileGroup] = Field(default_factory=list)
    submitted_at: datetime


class SubmissionCreatedResponse(CamelModel):
    message: str
    submission: SubmissionResponse


class SubmissionListResponse(CamelModel):
    submissions: list[SubmissionResponse]


# ---- Health ----

class HealthResponse(CamelModel):
    status: str
    database: bool
    gemini_configured: bool
    media_configured: bool
