"""FastAPI application backing the browser converter UI.

Provides endpoints for uploading images, running OCR over the pending
queue, editing extracted text, previewing the assembled document, and
downloading it as PDF or plain text.
"""

import asyncio
from typing import Annotated

import torch
from fastapi import Body, Depends, FastAPI, File, HTTPException, Response, UploadFile
from fastapi.middleware.cors import CORSMiddleware

from ocrdoc import __version__
from ocrdoc.api.session import Session
from ocrdoc.document.assembler import DocumentOptions, build_document
from ocrdoc.errors import (
    EditNotAllowedError,
    EngineInitializationError,
    FileNotFoundInSessionError,
    InvalidTransitionError,
    ProcessingInProgressError,
)
from ocrdoc.export.pdf_exporter import PDFExporter
from ocrdoc.export.text_exporter import TextExporter
from ocrdoc.intake.validator import IntakeCandidate, accept_files
from ocrdoc.ocr.recognition_service import RecognitionService, get_recognition_service
from ocrdoc.processing.orchestrator import Notification, ProcessingOrchestrator
from ocrdoc.processing.state import UploadedFile
from ocrdoc.utils.config import load_config
from ocrdoc.utils.logger import get_logger

from .schemas import (
    DocumentResponse,
    ExportRequest,
    FileDetailResponse,
    FileResponse,
    HealthResponse,
    NotificationResponse,
    ProcessResponse,
    QueueResponse,
    RejectionResponse,
    SectionResponse,
    StatusCounts,
    TextEditRequest,
    UploadResponse,
)

logger = get_logger(__name__)

config = load_config()

app = FastAPI(
    title="Image to Document OCR Converter",
    description="Turn uploaded images into editable PDF and text documents",
    version=__version__,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

_session = Session()


def get_session() -> Session:
    """Return the process-wide interactive session."""
    return _session


def get_service() -> RecognitionService:
    """Return the shared OCR recognition service."""
    return get_recognition_service(config.ocr)


SessionDep = Annotated[Session, Depends(get_session)]
ServiceDep = Annotated[RecognitionService, Depends(get_service)]


def _file_response(file: UploadedFile, session: Session) -> FileResponse:
    return FileResponse(
        id=file.id,
        filename=file.filename,
        content_type=file.content_type,
        size=file.size,
        status=file.status,
        extracted_text=file.extracted_text,
        edited_text=session.overlay.get(file.id),
        confidence=file.confidence,
        error_message=file.error_message,
    )


def _notifications(items: list[Notification]) -> list[NotificationResponse]:
    return [NotificationResponse(level=n.level, message=n.message) for n in items]


def _not_found(exc: FileNotFoundInSessionError) -> HTTPException:
    return HTTPException(status_code=404, detail=str(exc))


def _assemble(session: Session, request: ExportRequest | None) -> DocumentOptions:
    request = request or ExportRequest()
    return build_document(
        session.queue,
        session.overlay,
        title=request.title,
        author=request.author,
        subject=request.subject,
        config=config.export,
    )


def _require_sections(options: DocumentOptions) -> None:
    if not options.sections:
        raise HTTPException(status_code=400, detail="No completed files to export")


def _intake_candidate(upload: UploadFile) -> IntakeCandidate:
    # an undeclared size falls through to the post-read length check
    return IntakeCandidate(
        filename=upload.filename or "unknown",
        content_type=upload.content_type or "",
        size=upload.size or 0,
        read=upload.read,
    )


def _download(content: bytes | str, media_type: str, filename: str) -> Response:
    return Response(
        content=content,
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@app.get("/health", response_model=HealthResponse)
async def health_check(service: ServiceDep) -> HealthResponse:
    """Return system health status."""
    return HealthResponse(
        status="healthy",
        version=__version__,
        model_loaded=service.is_initialized,
        gpu_available=torch.cuda.is_available(),
    )


@app.post("/files", response_model=UploadResponse)
async def upload_files(
    files: Annotated[list[UploadFile], File(...)],
    session: SessionDep,
) -> UploadResponse:
    """Validate uploaded images and queue the valid ones.

    Args:
        files: Uploaded image files.

    Returns:
        Accepted records, per-file rejections, and notifications.
    """
    candidates = [_intake_candidate(f) for f in files]
    result = await accept_files(candidates, session.queue, config.intake)

    notifications = [
        NotificationResponse(level="error", message=r.reason) for r in result.rejected
    ]
    if result.accepted:
        notifications.append(
            NotificationResponse(
                level="success",
                message=f"{len(result.accepted)} image(s) uploaded successfully!",
            )
        )

    return UploadResponse(
        accepted=[_file_response(f, session) for f in result.accepted],
        rejected=[
            RejectionResponse(filename=r.filename, reason=r.reason)
            for r in result.rejected
        ],
        notifications=notifications,
    )


@app.get("/files", response_model=QueueResponse)
async def list_files(session: SessionDep) -> QueueResponse:
    """List session files with per-status counts and run progress."""
    return QueueResponse(
        files=[_file_response(f, session) for f in session.queue],
        counts=StatusCounts(**session.queue.status_counts()),
        is_processing=session.is_processing,
        progress=round(session.progress, 1),
    )


@app.get("/files/{file_id}", response_model=FileDetailResponse)
async def get_file(file_id: str, session: SessionDep) -> FileDetailResponse:
    """Return one file including its preview."""
    try:
        file = session.queue.get(file_id)
    except FileNotFoundInSessionError as exc:
        raise _not_found(exc) from exc
    return FileDetailResponse(
        **_file_response(file, session).model_dump(), preview=file.preview
    )


@app.delete("/files/{file_id}", status_code=204)
async def remove_file(file_id: str, session: SessionDep) -> Response:
    """Remove a file and its edits from the session."""
    try:
        session.remove_file(file_id)
    except FileNotFoundInSessionError as exc:
        raise _not_found(exc) from exc
    return Response(status_code=204)


@app.delete("/files", status_code=204)
async def clear_files(session: SessionDep) -> Response:
    """Remove every file from the session."""
    if session.is_processing:
        raise HTTPException(status_code=409, detail="Images are being processed")
    session.clear()
    return Response(status_code=204)


@app.post("/files/{file_id}/reset", response_model=FileResponse)
async def reset_file(file_id: str, session: SessionDep) -> FileResponse:
    """Return a completed or failed file to ``pending``."""
    try:
        file = session.reset_file(file_id)
    except FileNotFoundInSessionError as exc:
        raise _not_found(exc) from exc
    except InvalidTransitionError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    return _file_response(file, session)


@app.put("/files/{file_id}/text", response_model=FileResponse)
async def edit_text(
    file_id: str, request: TextEditRequest, session: SessionDep
) -> FileResponse:
    """Replace the section text for a completed file."""
    try:
        session.set_text(file_id, request.text)
    except FileNotFoundInSessionError as exc:
        raise _not_found(exc) from exc
    except EditNotAllowedError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    return _file_response(session.queue.get(file_id), session)


@app.delete("/files/{file_id}/text", response_model=FileResponse)
async def revert_text(file_id: str, session: SessionDep) -> FileResponse:
    """Drop user edits so the extracted text is exported again."""
    try:
        session.clear_text(file_id)
    except FileNotFoundInSessionError as exc:
        raise _not_found(exc) from exc
    return _file_response(session.queue.get(file_id), session)


@app.post("/process", response_model=ProcessResponse)
async def process_files(session: SessionDep, service: ServiceDep) -> ProcessResponse:
    """Run OCR over every pending file, one at a time.

    Returns:
        Run counts, progress values, notifications, and the updated files.
    """
    if len(session.queue) == 0:
        raise HTTPException(status_code=400, detail="Please upload some images first")

    try:
        report = await session.process(ProcessingOrchestrator(service))
    except ProcessingInProgressError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    except EngineInitializationError as exc:
        logger.error("Processing aborted: %s", exc)
        raise HTTPException(status_code=503, detail=str(exc)) from exc

    return ProcessResponse(
        targeted=report.targeted,
        completed=report.completed,
        failed=report.failed,
        skipped=report.skipped,
        progress=[round(p, 1) for p in report.progress],
        notifications=_notifications(report.notifications),
        files=[_file_response(f, session) for f in session.queue],
    )


@app.post("/document/preview", response_model=DocumentResponse)
async def preview_document(
    session: SessionDep,
    request: Annotated[ExportRequest | None, Body()] = None,
) -> DocumentResponse:
    """Return the document that an export would produce right now."""
    options = _assemble(session, request)
    return DocumentResponse(
        title=options.title,
        author=options.author,
        subject=options.subject,
        sections=[
            SectionResponse(title=s.title, content=s.content, image_url=s.image_url)
            for s in options.sections
        ],
    )


@app.post("/export/pdf")
async def export_pdf(
    session: SessionDep,
    request: Annotated[ExportRequest | None, Body()] = None,
) -> Response:
    """Download the assembled document as a paginated PDF."""
    options = _assemble(session, request)
    _require_sections(options)
    exporter = PDFExporter(config.export)
    content = await asyncio.to_thread(exporter.render, options)
    return _download(content, exporter.media_type, exporter.filename(options))


@app.post("/export/text")
async def export_text(
    session: SessionDep,
    request: Annotated[ExportRequest | None, Body()] = None,
) -> Response:
    """Download the assembled document as plain text."""
    options = _assemble(session, request)
    _require_sections(options)
    exporter = TextExporter(config.export)
    content = await asyncio.to_thread(exporter.render, options)
    return _download(content, exporter.media_type, exporter.filename(options))
