"""Image to Document OCR Converter.

Uploads images, recognizes their text with a pre-trained TrOCR model,
and assembles the editable results into PDF or plain-text documents.
"""

__version__ = "1.0.0"
