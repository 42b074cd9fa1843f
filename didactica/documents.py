# didactica/documents.py: text extraction from uploaded unit documents
import io
import re
from pathlib import Path

from docx import Document
from loguru import logger
from pypdf import PdfReader

SUPPORTED_EXTENSIONS = ("pdf", "docx", "txt", "md")


class FileReadError(Exception):
    """The uploaded document could not be turned into text."""


def _clean(t):
    return re.sub(r"[ \t]+", " ", (t or "")).strip()


def _pdf_text(data: bytes) -> str:
    reader = PdfReader(io.BytesIO(data))
    if getattr(reader, "is_encrypted", False):
        reader.decrypt("")
    return "\n".join(page.extract_text() or "" for page in reader.pages)


def _docx_text(data: bytes) -> str:
    doc = Document(io.BytesIO(data))
    return "\n".join(p.text for p in doc.paragraphs)


def extract_document_text(filename: str, data: bytes) -> str:
    ext = Path(filename).suffix.lower().lstrip(".")
    if ext not in SUPPORTED_EXTENSIONS:
        raise FileReadError(f"Format no suportat: .{ext or '?'} (accepta {', '.join(SUPPORTED_EXTENSIONS)})")
    try:
        if ext == "pdf":
            text = _pdf_text(data)
        elif ext == "docx":
            text = _docx_text(data)
        else:
            text = data.decode("utf-8")
    except Exception as e:
        logger.exception("could not read {}", filename)
        raise FileReadError(f"No s'ha pogut llegir el fitxer {filename}.") from e

    text = _clean(text)
    if not text:
        raise FileReadError(f"El fitxer {filename} no conté text extraïble (potser és un PDF escanejat).")
    logger.debug("extracted {} chars from {}", len(text), filename)
    return text


def read_upload(cache, file_id, filename: str, data: bytes) -> str:
    """``extract_document_text`` remembered per upload in ``cache`` (the Streamlit session state).

    Only the last upload is kept; failures are not stored, so a bad file
    raises again on the next run.
    """
    cached = cache.get("uploaded_document")
    if cached and cached[0] == file_id:
        return cached[1]
    text = extract_document_text(filename, data)
    cache["uploaded_document"] = (file_id, text)
    return text
