"""Process-wide OCR service with once-only lazy model loading.

The model is one shared, stateful resource. ``RecognitionService``
loads it on first use and caches it; callers that arrive while the load
is still running await the same in-flight future instead of starting a
second load. A failed load is not cached, so a later run can retry.
"""

import asyncio
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol

from ocrdoc.errors import EngineInitializationError, RecognitionError
from ocrdoc.ocr.image_ops import prepare_for_ocr
from ocrdoc.utils.config import OCRConfig
from ocrdoc.utils.logger import get_logger

logger = get_logger(__name__)


class TextRecognizer(Protocol):
    """Anything that turns a prepared image into text."""

    def recognize(self, image) -> str: ...


@dataclass(frozen=True)
class RecognitionResult:
    """Text recognized in one image.

    ``confidence`` is a fixed nominal value from configuration: the
    image-to-text pipeline exposes no per-image score, so it must not be
    read as a calibrated probability.
    """

    text: str
    confidence: float


def _default_engine_factory(config: OCRConfig) -> Callable[[], TextRecognizer]:
    def factory() -> TextRecognizer:
        from ocrdoc.ocr.trocr_engine import TrOCREngine

        return TrOCREngine(
            model_name=config.model_name,
            device=config.device,
            max_new_tokens=config.max_new_tokens,
        )

    return factory


class RecognitionService:
    """Shared OCR adapter: lazy engine init, image marshaling, inference.

    Args:
        config: OCR settings (model, resize bound, JPEG quality).
        engine_factory: Zero-argument callable that builds the engine.
            Defaults to loading ``TrOCREngine`` from ``config``.
    """

    def __init__(
        self,
        config: OCRConfig | None = None,
        engine_factory: Callable[[], TextRecognizer] | None = None,
    ) -> None:
        self.config = config or OCRConfig()
        self._engine_factory = engine_factory or _default_engine_factory(self.config)
        self._engine: TextRecognizer | None = None
        self._loading: asyncio.Future | None = None
        self.init_count = 0

    @property
    def is_initialized(self) -> bool:
        return self._engine is not None

    async def initialize(self) -> TextRecognizer:
        """Load the engine once; concurrent callers share one load.

        Raises:
            EngineInitializationError: If the model cannot be loaded.
        """
        if self._engine is not None:
            return self._engine
        if self._loading is None:
            self._loading = asyncio.ensure_future(self._load())
        return await asyncio.shield(self._loading)

    async def _load(self) -> TextRecognizer:
        self.init_count += 1
        logger.info("Initializing OCR engine")
        try:
            engine = await asyncio.to_thread(self._engine_factory)
        except Exception as exc:
            logger.error("OCR engine initialization failed: %s", exc)
            raise EngineInitializationError(
                f"Failed to initialize OCR engine: {exc}"
            ) from exc
        finally:
            self._loading = None
        self._engine = engine
        logger.info("OCR engine initialized")
        return engine

    async def recognize(self, data: bytes) -> RecognitionResult:
        """Recognize the text in one uploaded image.

        Args:
            data: Raw image bytes as uploaded.

        Returns:
            Recognized text (possibly empty) and the nominal confidence.

        Raises:
            EngineInitializationError: If the engine is not loaded and
                loading fails.
            RecognitionError: If decoding, resizing, encoding, or
                inference fails for this image.
        """
        engine = await self.initialize()
        try:
            text = await asyncio.to_thread(self._run_inference, engine, data)
        except Exception as exc:
            logger.error("Error extracting text: %s", exc)
            raise RecognitionError("Failed to extract text from image") from exc
        return RecognitionResult(text=text, confidence=self.config.nominal_confidence)

    def _run_inference(self, engine: TextRecognizer, data: bytes) -> str:
        image = prepare_for_ocr(
            data,
            max_dimension=self.config.max_dimension,
            quality=self.config.jpeg_quality,
        )
        return engine.recognize(image) or ""


_service: RecognitionService | None = None


def get_recognition_service(config: OCRConfig | None = None) -> RecognitionService:
    """Return the process-wide recognition service, creating it on first call."""
    global _service
    if _service is None:
        _service = RecognitionService(config)
    return _service
