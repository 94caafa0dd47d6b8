"""Resume text extraction: PDF via pymupdf (optional dependency), plain text as-is."""

import re
from pathlib import Path

_TEXT_SUFFIXES = {".txt", ".md"}


def extract_resume_text(path: str | Path) -> str:
    """Extract plain text from a resume file.

    Args:
        path: Path to a PDF or plain-text resume.

    Returns:
        The resume text. PDF pages are joined with newlines.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the file type is not supported.
        ImportError: If a PDF is given and pymupdf is not installed.
    """
    path = Path(path)
    if not path.exists():
        msg = f"Resume file not found: {path}"
        raise FileNotFoundError(msg)

    suffix = path.suffix.lower()
    if suffix in _TEXT_SUFFIXES:
        return path.read_text(errors="replace")
    if suffix != ".pdf":
        msg = f"Unsupported resume format '{suffix}' (expected .pdf, .txt or .md)"
        raise ValueError(msg)

    try:
        import pymupdf
    except ImportError:
        msg = (
            "pymupdf is required for PDF extraction. "
            "Install with: pip install 'candidate-screening[pdf]'"
        )
        raise ImportError(msg) from None

    doc = pymupdf.open(str(path))
    text_parts: list[str] = []
    for page in doc:
        text_parts.append(page.get_text())
    doc.close()

    return "\n".join(text_parts)


def candidate_name_from_filename(filename: str) -> str:
    """Guess a display name from a resume filename.

    ``"resume_jane-DOE_2024.pdf"`` becomes ``"Jane Doe"``.
    """
    stem = Path(filename).stem
    name = re.sub(r"[_\-]", " ", stem)
    name = re.sub(r"\d+", " ", name)
    name = re.sub(r"^\s*(cv|resume|résumé|curriculu?m\s*vitae)\b", "", name, flags=re.IGNORECASE)
    parts = [p.capitalize() for p in name.split()]
    return " ".join(parts) or "Unnamed Candidate"
