"""Download file name derivation for exported documents."""

import re

_UNSAFE_CHARS = re.compile(r"[^a-z0-9]", re.IGNORECASE | re.ASCII)

DEFAULT_BASENAME = "extracted_document"


def export_basename(title: str | None, fallback: str = DEFAULT_BASENAME) -> str:
    """Derive a file base name from a document title.

    Every character outside ASCII letters and digits becomes ``_`` and
    the result is lower-cased, so ``"My Report!"`` gives ``my_report_``.

    Args:
        title: Document title; empty or ``None`` selects the fallback.
        fallback: Base name used when no title is set.
    """
    if not title:
        return fallback
    return _UNSAFE_CHARS.sub("_", title).lower()


def export_filename(
    title: str | None, extension: str, fallback: str = DEFAULT_BASENAME
) -> str:
    """Derive a full download name, e.g. ``my_report_.pdf``."""
    return f"{export_basename(title, fallback)}.{extension.lstrip('.')}"
