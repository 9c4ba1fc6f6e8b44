"""TrOCR text recognition through the Hugging Face pipeline API.

Wraps a pre-trained ``image-to-text`` model. Loading happens in the
constructor, so creating an engine is the expensive step and is done
once per process by the recognition service.
"""

import torch
from PIL import Image
from transformers import pipeline

from ocrdoc.utils.logger import get_logger

logger = get_logger(__name__)


class TrOCREngine:
    """Pre-trained transformer OCR model.

    Args:
        model_name: Hugging Face model identifier.
        device: Torch device (``"cuda"`` or ``"cpu"``). Auto-detected if ``None``.
        max_new_tokens: Upper bound on generated tokens per image.
    """

    def __init__(
        self,
        model_name: str = "microsoft/trocr-base-printed",
        device: str | None = None,
        max_new_tokens: int = 128,
    ) -> None:
        self.device = device or ("cuda" if torch.cuda.is_available() else "cpu")
        self.model_name = model_name
        self.max_new_tokens = max_new_tokens

        logger.info("Loading OCR model: %s on %s", model_name, self.device)
        self._pipeline = pipeline("image-to-text", model=model_name, device=self.device)
        logger.info("OCR model loaded")

    def recognize(self, image: Image.Image) -> str:
        """Generate text for a single image.

        Args:
            image: RGB input image.

        Returns:
            The generated text, stripped; empty string if the model
            produced nothing.
        """
        outputs = self._pipeline(
            image, generate_kwargs={"max_new_tokens": self.max_new_tokens}
        )
        if isinstance(outputs, list):
            outputs = outputs[0] if outputs else {}
        text = (outputs or {}).get("generated_text") or ""
        return text.strip()
