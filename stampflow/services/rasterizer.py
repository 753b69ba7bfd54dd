from __future__ import annotations

import base64
from dataclasses import dataclass

import fitz  # PyMuPDF

from stampflow.core.config import get_settings
from stampflow.core.errors import DocumentParseError
from stampflow.core.logging import configure_logging

logger = configure_logging("rasterizer")


@dataclass(frozen=True)
class PageRaster:
    bitmap: bytes
    width_px: int
    height_px: int
    width_pt: float
    height_pt: float
    extracted_text: str
    page_count: int
    scale: float

    def to_data_url(self) -> str:
        encoded = base64.b64encode(self.bitmap).decode("utf-8")
        return f"data:image/png;base64,{encoded}"


def rasterize(pdf_bytes: bytes, scale: float | None = None) -> PageRaster:
    """
    عرض الصفحة الأولى من ملف PDF كصورة PNG واستخراج نصها.

    Args:
        pdf_bytes: محتوى الملف الخام (لا يتم تعديله).
        scale: معامل التكبير الثابت؛ الافتراضي من الإعدادات (1.5).

    Raises:
        DocumentParseError: ملف تالف أو مشفّر أو بلا صفحات.
    """
    scale = scale or get_settings().render_scale
    if not pdf_bytes:
        raise DocumentParseError("Empty document.")

    try:
        document = fitz.open(stream=bytes(pdf_bytes), filetype="pdf")
    except Exception as exc:
        raise DocumentParseError(f"Unable to parse PDF: {exc}") from exc

    with document:
        if document.needs_pass:
            raise DocumentParseError("Encrypted PDF documents are not supported.")
        if document.page_count < 1:
            raise DocumentParseError("PDF document has no pages.")

        try:
            page = document.load_page(0)
            pixmap = page.get_pixmap(matrix=fitz.Matrix(scale, scale), alpha=False)
            bitmap = pixmap.tobytes("png")
            text = extract_text_runs(page)
        except Exception as exc:
            raise DocumentParseError(f"Unable to render first page: {exc}") from exc

        raster = PageRaster(
            bitmap=bitmap,
            width_px=pixmap.width,
            height_px=pixmap.height,
            width_pt=page.rect.width,
            height_pt=page.rect.height,
            extracted_text=text,
            page_count=document.page_count,
            scale=scale,
        )

    logger.info(
        "Rendered page 1 at %sx: %sx%s px (%s chars of text).",
        scale,
        raster.width_px,
        raster.height_px,
        len(raster.extracted_text),
    )
    return raster


def extract_text_runs(page: fitz.Page) -> str:
    """ضم كل مقاطع النص (spans) بمسافة واحدة وبالترتيب الذي يعرضه المستند."""
    runs: list[str] = []
    for block in page.get_text("dict")["blocks"]:
        if block.get("type") != 0:
            continue
        for line in block["lines"]:
            for span in line["spans"]:
                runs.append(span["text"])
    return " ".join(runs)
