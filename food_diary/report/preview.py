from __future__ import annotations

from pathlib import Path
from typing import List

import fitz  # PyMuPDF

from ..config import PREVIEW_DPI, PREVIEW_PAGES
from ..storage import preview_path


def render_previews(pdf_path: Path, pages: int = PREVIEW_PAGES, dpi: int = PREVIEW_DPI) -> List[Path]:
    """
    PNG previews of the first ``pages`` pages of a saved report, written
    next to it as ``<stem>-preview-<n>.png``.
    """
    previews: List[Path] = []
    with fitz.open(str(pdf_path)) as doc:
        for index in range(min(pages, doc.page_count)):
            out_path = preview_path(pdf_path, index + 1)
            pix = doc.load_page(index).get_pixmap(dpi=dpi, alpha=False)
            pix.save(str(out_path))
            previews.append(out_path)
    return previews
