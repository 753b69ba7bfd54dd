from __future__ import annotations

from io import BytesIO
from typing import Tuple

from pypdf import PageObject, PasswordType, PdfReader, PdfWriter
from reportlab.pdfgen import canvas

from stampflow.core.errors import DocumentParseError, NoPageError, UnsupportedTextError
from stampflow.core.logging import configure_logging
from stampflow.models.stamp import StampSpec
from stampflow.services.coordinates import PdfPagePoint, to_pdf_point
from stampflow.utils.colors import parse_color

logger = configure_logging("compositor")

STAMP_FONT = "Helvetica-Bold"
# الخطوط القياسية في reportlab تستخدم ترميز WinAnsi
STAMP_FONT_ENCODING = "cp1252"


class StampCompositor:
    """إضافة نص الختم إلى الصفحة الأولى من ملف PDF وإرجاع الملف الجديد كبايتات."""

    font_name = STAMP_FONT

    def stamp(
        self,
        pdf_bytes: bytes,
        text: str,
        x_percent: float,
        y_percent: float,
        font_size: float,
        color: str,
    ) -> bytes:
        reader = self._load(pdf_bytes)

        try:
            page_count = len(reader.pages)
            first_page = reader.pages[0] if page_count else None
        except Exception as exc:
            raise DocumentParseError(f"Unable to read PDF pages: {exc}") from exc
        if first_page is None:
            raise NoPageError("PDF document has no pages to stamp.")

        width = float(first_page.mediabox.width)
        height = float(first_page.mediabox.height)
        rgb = parse_color(color)
        self._check_encodable(text)
        point = to_pdf_point(x_percent, y_percent, font_size, width, height)

        overlay = self._create_overlay_page(width, height, text, point, font_size, rgb)

        try:
            writer = PdfWriter(clone_from=reader)
            writer.pages[0].merge_page(overlay)
            buffer = BytesIO()
            writer.write(buffer)
        except Exception as exc:
            raise DocumentParseError(f"Unable to write stamped PDF: {exc}") from exc

        logger.info(
            "Stamped %r at (%.2f, %.2f) pt on a %.0fx%.0f pt page.",
            text,
            point.x_pt,
            point.y_pt,
            width,
            height,
        )
        return buffer.getvalue()

    def stamp_spec(self, pdf_bytes: bytes, spec: StampSpec) -> bytes:
        return self.stamp(
            pdf_bytes,
            text=spec.text,
            x_percent=spec.x_percent,
            y_percent=spec.y_percent,
            font_size=spec.font_size,
            color=spec.color,
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    @staticmethod
    def _load(pdf_bytes: bytes) -> PdfReader:
        if not pdf_bytes:
            raise DocumentParseError("Empty document.")
        try:
            reader = PdfReader(BytesIO(bytes(pdf_bytes)))
            if reader.is_encrypted and reader.decrypt("") == PasswordType.NOT_DECRYPTED:
                raise DocumentParseError("Encrypted PDF documents are not supported.")
        except DocumentParseError:
            raise
        except Exception as exc:
            raise DocumentParseError(f"Unable to parse PDF: {exc}") from exc
        return reader

    @staticmethod
    def _check_encodable(text: str) -> None:
        try:
            text.encode(STAMP_FONT_ENCODING)
        except UnicodeEncodeError as exc:
            bad = text[exc.start : exc.end]
            raise UnsupportedTextError(
                f"Characters {bad!r} cannot be drawn with {STAMP_FONT}; use Latin text."
            ) from exc

    def _create_overlay_page(
        self,
        width: float,
        height: float,
        text: str,
        point: PdfPagePoint,
        font_size: float,
        rgb: Tuple[float, float, float],
    ) -> PageObject:
        packet = BytesIO()
        c = canvas.Canvas(packet, pagesize=(width, height))
        c.setFillColorRGB(*rgb)
        c.setFont(self.font_name, font_size)
        c.drawString(point.x_pt, point.y_pt, text)
        c.save()
        packet.seek(0)
        return PdfReader(packet).pages[0]


def stamp(
    pdf_bytes: bytes,
    text: str,
    x_percent: float,
    y_percent: float,
    font_size: float,
    color: str,
) -> bytes:
    return StampCompositor().stamp(pdf_bytes, text, x_percent, y_percent, font_size, color)
