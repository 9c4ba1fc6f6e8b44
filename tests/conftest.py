"""Shared test fixtures for the converter test suite."""

import io
from pathlib import Path

import pytest
from PIL import Image

from ocrdoc.ocr.recognition_service import RecognitionService
from ocrdoc.processing.state import FileStatus, UploadedFile
from ocrdoc.utils.config import OCRConfig


def make_image_bytes(
    width: int = 300, height: int = 200, fmt: str = "PNG", color: str = "white"
) -> bytes:
    """Create an encoded synthetic test image."""
    image = Image.new("RGB", (width, height), color)
    buf = io.BytesIO()
    image.save(buf, format=fmt)
    return buf.getvalue()


def make_file(
    file_id: str,
    filename: str | None = None,
    status: FileStatus = FileStatus.PENDING,
    text: str | None = None,
) -> UploadedFile:
    """Create an UploadedFile record directly in the given status."""
    return UploadedFile(
        id=file_id,
        filename=filename or f"{file_id}.png",
        content_type="image/png",
        data=b"\x89PNG fake",
        preview="data:image/png;base64,AAAA",
        status=status,
        extracted_text=text,
        confidence=0.8 if status == FileStatus.COMPLETED else None,
    )


class FakeEngine:
    """Stand-in OCR engine returning scripted text per call."""

    def __init__(self, outputs: list[str | Exception] | None = None) -> None:
        self.outputs = list(outputs or [])
        self.calls: list[tuple[int, int]] = []

    def recognize(self, image: Image.Image) -> str:
        self.calls.append(image.size)
        if not self.outputs:
            return "recognized text"
        output = self.outputs.pop(0)
        if isinstance(output, Exception):
            raise output
        return output


@pytest.fixture
def png_bytes() -> bytes:
    """A small valid PNG image."""
    return make_image_bytes()


@pytest.fixture
def fake_engine() -> FakeEngine:
    return FakeEngine()


@pytest.fixture
def service(fake_engine: FakeEngine) -> RecognitionService:
    """Recognition service backed by the fake engine."""
    return RecognitionService(OCRConfig(), engine_factory=lambda: fake_engine)


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def config_dir(project_root: Path) -> Path:
    """Return the configs directory path."""
    return project_root / "configs"
