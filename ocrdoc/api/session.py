"""In-memory state of one interactive converter session.

Holds the upload queue, the edit overlay (file id to replacement text),
and the progress of the current processing run. Nothing is persisted;
the session lives as long as the server process.
"""

from ocrdoc.errors import EditNotAllowedError, ProcessingInProgressError
from ocrdoc.processing.orchestrator import ProcessingOrchestrator, RunReport
from ocrdoc.processing.state import FileQueue, FileStatus, UploadedFile, reset
from ocrdoc.utils.logger import get_logger

logger = get_logger(__name__)


class Session:
    """Upload queue, edit overlay, and run status for a single user."""

    def __init__(self) -> None:
        self.queue = FileQueue()
        self.overlay: dict[str, str] = {}
        self.is_processing = False
        self.progress = 0.0

    def remove_file(self, file_id: str) -> UploadedFile:
        removed = self.queue.remove(file_id)
        self.overlay.pop(file_id, None)
        logger.info("Removed %s from session", removed.filename)
        return removed

    def clear(self) -> None:
        self.queue.clear()
        self.overlay.clear()
        self.progress = 0.0

    def reset_file(self, file_id: str) -> UploadedFile:
        """Send a finished file back to ``pending`` and drop its edits."""
        updated = reset(self.queue.get(file_id))
        self.queue.replace(updated)
        self.overlay.pop(file_id, None)
        return updated

    def set_text(self, file_id: str, text: str) -> None:
        """Store user-edited text for a completed file.

        Raises:
            FileNotFoundInSessionError: If the id is unknown.
            EditNotAllowedError: If the file has not completed OCR.
        """
        file = self.queue.get(file_id)
        if file.status != FileStatus.COMPLETED:
            raise EditNotAllowedError(
                f"{file.filename} has no extracted text to edit ({file.status})"
            )
        self.overlay[file_id] = text

    def clear_text(self, file_id: str) -> None:
        self.queue.get(file_id)
        self.overlay.pop(file_id, None)

    async def process(self, orchestrator: ProcessingOrchestrator) -> RunReport:
        """Run the orchestrator over this session's pending files.

        Raises:
            ProcessingInProgressError: If a run is already in flight.
            EngineInitializationError: Propagated from the orchestrator.
        """
        if self.is_processing:
            raise ProcessingInProgressError("Images are already being processed")

        self.is_processing = True
        self.progress = 0.0
        try:
            return await orchestrator.run(self.queue, on_progress=self._on_progress)
        finally:
            self.is_processing = False

    def _on_progress(self, value: float) -> None:
        self.progress = value
