"""Page geometry read straight from a PDF with PyMuPDF."""

from pathlib import Path

import fitz  # PyMuPDF

from ..logger import logger
from .models import PageDimensions


def read_page_dimensions(file_path: str | Path) -> list[PageDimensions]:
    """Read every page's size in points.

    Used when an analysis result carries no usable page sizes, or to
    cross-check the ones it does carry.

    Args:
        file_path: Path to the PDF file.

    Returns:
        One PageDimensions per page, 1-indexed.
    """
    file_path = Path(file_path)
    if not file_path.exists():
        raise FileNotFoundError(f"PDF file not found: {file_path}")

    doc = fitz.open(file_path)
    try:
        pages = [
            PageDimensions(
                page_number=page_num + 1,
                width=page.rect.width,
                height=page.rect.height,
            )
            for page_num, page in enumerate(doc)
        ]
    finally:
        doc.close()

    logger.info(
        "pdf page dimensions read",
        file_path=str(file_path),
        total_pages=len(pages),
    )
    return pages
