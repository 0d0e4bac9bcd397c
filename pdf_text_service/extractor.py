import io
import re
from dataclasses import dataclass
from typing import Any, Dict, Optional

import pdfplumber

WHITESPACE_RE = re.compile(r"\s+")


@dataclass(frozen=True)
class ExtractionResult:
    text: str
    page_count: Optional[int]
    info: Optional[Dict[str, Any]]


def normalize_whitespace(text: str) -> str:
    """Collapse every whitespace run into a single space and trim."""
    return WHITESPACE_RE.sub(" ", text or "").strip()


def _json_safe(value: Any) -> Any:
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    if isinstance(value, dict):
        return {str(k): _json_safe(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_json_safe(v) for v in value]
    return str(value)


def extract_pdf(pdf_bytes: bytes) -> ExtractionResult:
    """Raw text, page count and document info of a PDF.

    pdfminer errors (not a PDF, broken xref, ...) are left to the caller.
    """
    with pdfplumber.open(io.BytesIO(pdf_bytes)) as pdf:
        parts = []
        for page in pdf.pages:
            page_text = page.extract_text()
            if page_text:
                parts.append(page_text)
        page_count = len(pdf.pages)
        info = _json_safe(pdf.metadata)

    return ExtractionResult(
        text="\n\n".join(parts),
        page_count=page_count or None,
        info=info or None,
    )
