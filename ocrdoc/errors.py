"""Exception types raised across the converter pipeline."""


class OCRDocError(Exception):
    """Base class for all converter errors."""


class EngineInitializationError(OCRDocError):
    """The OCR model could not be loaded; the whole run is aborted."""


class RecognitionError(OCRDocError):
    """Text recognition failed for a single image."""


class InvalidTransitionError(OCRDocError):
    """A file status change violates the processing state machine."""


class ProcessingInProgressError(OCRDocError):
    """A processing run is already in flight for this session."""


class FileNotFoundInSessionError(OCRDocError, KeyError):
    """No uploaded file with the given id exists in the session."""

    def __init__(self, file_id: str) -> None:
        super().__init__(file_id)
        self.file_id = file_id

    def __str__(self) -> str:
        return f"File not found: {self.file_id}"


class EditNotAllowedError(OCRDocError):
    """Section text can only be edited for files that completed OCR."""
