"""Sequential OCR processing of the pending upload queue.

A run snapshots the ``pending`` files at invocation time and processes
them one at a time in queue order. Per-file failures mark that file as
``error`` and the run moves on; only an engine initialization failure
aborts the run, in which case no targeted file leaves ``pending``.
"""

from collections.abc import Callable
from dataclasses import dataclass, field

from ocrdoc.errors import RecognitionError
from ocrdoc.ocr.recognition_service import RecognitionService
from ocrdoc.processing.state import (
    FileQueue,
    FileStatus,
    complete,
    fail,
    start_processing,
)
from ocrdoc.utils.logger import get_logger

logger = get_logger(__name__)

ProgressCallback = Callable[[float], None]


@dataclass
class Notification:
    """A user-visible message produced by the pipeline."""

    level: str
    message: str


@dataclass
class RunReport:
    """Summary of one processing run."""

    targeted: int = 0
    completed: int = 0
    failed: int = 0
    skipped: int = 0
    progress: list[float] = field(default_factory=list)
    notifications: list[Notification] = field(default_factory=list)

    def notify(self, level: str, message: str) -> None:
        self.notifications.append(Notification(level=level, message=message))


def compute_progress(finished: int, targeted: int) -> float:
    """Percentage of targeted files that reached a terminal state."""
    if targeted <= 0:
        return 100.0
    if finished >= targeted:
        return 100.0
    return finished / targeted * 100.0


class ProcessingOrchestrator:
    """Drives pending files through the recognition service.

    Args:
        service: Shared OCR adapter.
    """

    def __init__(self, service: RecognitionService) -> None:
        self.service = service

    async def run(
        self,
        queue: FileQueue,
        on_progress: ProgressCallback | None = None,
    ) -> RunReport:
        """Process every file that is ``pending`` when the run starts.

        Args:
            queue: Session file queue; records are replaced in place.
            on_progress: Called with the overall percentage after each
                targeted file finishes.

        Returns:
            Counts, observed progress values, and notifications.

        Raises:
            EngineInitializationError: If the engine cannot be loaded.
                Targeted files are left ``pending``.
        """
        report = RunReport()
        target_ids = [f.id for f in queue.pending()]
        report.targeted = len(target_ids)

        if not target_ids:
            report.notify("info", "All images have already been processed")
            return report

        if not self.service.is_initialized:
            logger.info("Initializing OCR engine before processing")
            report.notify("info", "Initializing OCR engine...")
            await self.service.initialize()

        logger.info("Processing %d pending file(s)", report.targeted)

        for finished, file_id in enumerate(target_ids, start=1):
            await self._process_one(queue, file_id, report)
            progress = compute_progress(finished, report.targeted)
            report.progress.append(progress)
            if on_progress is not None:
                on_progress(progress)

        logger.info(
            "Run finished: %d completed, %d failed, %d skipped",
            report.completed,
            report.failed,
            report.skipped,
        )
        if report.failed == 0 and report.skipped == 0:
            report.notify("success", "All images processed successfully!")
        return report

    async def _process_one(
        self, queue: FileQueue, file_id: str, report: RunReport
    ) -> None:
        if file_id not in queue:
            logger.info("File %s was removed before processing, skipping", file_id)
            report.skipped += 1
            return

        current = queue.get(file_id)
        if current.status != FileStatus.PENDING:
            report.skipped += 1
            return

        processing = start_processing(current)
        queue.replace(processing)

        try:
            result = await self.service.recognize(processing.data)
        except RecognitionError as exc:
            logger.error("Error processing %s: %s", processing.filename, exc)
            outcome = fail(processing, str(exc))
        else:
            outcome = complete(processing, result.text, result.confidence)

        # the user may have removed the file while inference was running
        if file_id not in queue:
            report.skipped += 1
            return

        queue.replace(outcome)
        if outcome.status == FileStatus.COMPLETED:
            report.completed += 1
            report.notify("success", f"Extracted text from {outcome.filename}")
        else:
            report.failed += 1
            report.notify("error", f"Failed to process {outcome.filename}")
