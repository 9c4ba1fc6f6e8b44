"""Pydantic request/response schemas for the FastAPI endpoints."""

from pydantic import BaseModel

from ocrdoc.processing.state import FileStatus


class FileResponse(BaseModel):
    """Response schema for an uploaded file and its OCR outcome.

    ``confidence`` is a fixed nominal value, not a calibrated score.
    """

    id: str
    filename: str
    content_type: str
    size: int
    status: FileStatus
    extracted_text: str | None = None
    edited_text: str | None = None
    confidence: float | None = None
    error_message: str | None = None


class FileDetailResponse(FileResponse):
    """File response including the data-URL preview."""

    preview: str


class RejectionResponse(BaseModel):
    """Response schema for an upload refused at intake."""

    filename: str
    reason: str


class NotificationResponse(BaseModel):
    """A user-visible message (toast) produced by an operation."""

    level: str
    message: str


class UploadResponse(BaseModel):
    """Response schema for a file upload request."""

    accepted: list[FileResponse]
    rejected: list[RejectionResponse]
    notifications: list[NotificationResponse]


class StatusCounts(BaseModel):
    """Number of session files per status."""

    pending: int = 0
    processing: int = 0
    completed: int = 0
    error: int = 0


class QueueResponse(BaseModel):
    """Response schema listing the session's files."""

    files: list[FileResponse]
    counts: StatusCounts
    is_processing: bool
    progress: float


class ProcessResponse(BaseModel):
    """Response schema for a processing run."""

    targeted: int
    completed: int
    failed: int
    skipped: int
    progress: list[float]
    notifications: list[NotificationResponse]
    files: list[FileResponse]


class TextEditRequest(BaseModel):
    """Request schema for replacing a section's text."""

    text: str


class ExportRequest(BaseModel):
    """Request schema for document preview and export."""

    title: str | None = None
    author: str | None = None
    subject: str | None = None


class SectionResponse(BaseModel):
    """Response schema for one document section."""

    title: str | None = None
    content: str
    image_url: str | None = None


class DocumentResponse(BaseModel):
    """Response schema for an assembled document."""

    title: str | None = None
    author: str | None = None
    subject: str | None = None
    sections: list[SectionResponse]


class HealthResponse(BaseModel):
    """Response schema for the health check endpoint."""

    status: str
    version: str
    model_loaded: bool
    gpu_available: bool
