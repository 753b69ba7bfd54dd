import string
from io import BytesIO

import pytest
from pypdf import PdfReader, PdfWriter

from stampflow.core.errors import DocumentParseError, InvalidColorError, NoPageError, UnsupportedTextError
from stampflow.models import StampSpec
from stampflow.services.compositor import StampCompositor, stamp
from stampflow.services.rasterizer import rasterize


def page_text(pdf_bytes: bytes, index: int = 0) -> str:
    return PdfReader(BytesIO(pdf_bytes)).pages[index].extract_text()


@pytest.mark.parametrize("text", ["PB 966753", "Ref: #999 (A/B)", "PO-2024-X", "a\\b"])
def test_stamped_text_is_extractable_from_first_page(letter_pdf, text):
    result = stamp(letter_pdf, text, 50, 50, 16, "#FF0000")

    assert text in page_text(result)
    assert text in rasterize(result).extracted_text
    assert "Invoice PB 966753" in page_text(result)


def test_long_printable_text_round_trips(letter_pdf):
    text = (string.ascii_letters + string.digits + "-#:/.") * 4
    text = text[:200]
    result = stamp(letter_pdf, text, 0, 50, 8, "#000000")
    assert text in page_text(result)


def test_only_first_page_is_stamped(two_page_pdf):
    result = stamp(two_page_pdf, "PB 42", 10, 10, 12, "#0000FF")
    reader = PdfReader(BytesIO(result))

    assert len(reader.pages) == 2
    assert "PB 42" in reader.pages[0].extract_text()
    assert "PB 42" not in reader.pages[1].extract_text()
    assert "Second page" in reader.pages[1].extract_text()


def test_draws_with_bold_font_and_normalized_color(letter_pdf):
    result = stamp(letter_pdf, "PB 1", 85, 5, 16, "#FF0000")
    page = PdfReader(BytesIO(result)).pages[0]

    fonts = page["/Resources"]["/Font"]
    base_fonts = {fonts[name].get_object()["/BaseFont"] for name in fonts}
    assert "/Helvetica-Bold" in base_fonts

    content = page.get_contents().get_data()
    assert b"1 0 0 rg" in content
    assert b"520.2" in content


def test_original_buffer_is_untouched(letter_pdf):
    original = bytes(letter_pdf)
    stamp(letter_pdf, "PB 1", 50, 50, 16, "#FF0000")
    assert letter_pdf == original


def test_empty_text_is_a_visual_no_op(letter_pdf):
    result = stamp(letter_pdf, "", 50, 50, 16, "#FF0000")

    assert result.startswith(b"%PDF")
    assert len(PdfReader(BytesIO(result)).pages) == 1
    assert page_text(result).strip() == page_text(letter_pdf).strip()


def test_stamp_spec_uses_all_fields(letter_pdf):
    spec = StampSpec(text="PB 7", x_percent=20, y_percent=80, font_size=24, color="#00FF00")
    result = StampCompositor().stamp_spec(letter_pdf, spec)
    assert "PB 7" in page_text(result)
    assert b"0 1 0 rg" in PdfReader(BytesIO(result)).pages[0].get_contents().get_data()


@pytest.mark.parametrize("color", ["red", "#ZZZZZZ", "#12345"])
def test_invalid_color_aborts(letter_pdf, color):
    with pytest.raises(InvalidColorError):
        stamp(letter_pdf, "PB 1", 50, 50, 16, color)


@pytest.mark.parametrize("payload", [b"", b"%PDF-1.4 garbage without structure"])
def test_malformed_document(payload):
    with pytest.raises(DocumentParseError):
        stamp(payload, "PB 1", 50, 50, 16, "#FF0000")


def test_zero_page_document(zero_page_pdf):
    with pytest.raises(NoPageError):
        stamp(zero_page_pdf, "PB 1", 50, 50, 16, "#FF0000")


def test_encrypted_document(encrypted_pdf):
    with pytest.raises(DocumentParseError):
        stamp(encrypted_pdf, "PB 1", 50, 50, 16, "#FF0000")


@pytest.mark.parametrize("text", ["مرجع 42", "PB ✓", "参考 7"])
def test_text_outside_font_encoding_is_rejected(letter_pdf, text):
    with pytest.raises(UnsupportedTextError):
        stamp(letter_pdf, text, 50, 50, 16, "#FF0000")


def test_western_european_text_is_accepted(letter_pdf):
    result = stamp(letter_pdf, "Réf. Nº 42 €", 50, 50, 16, "#FF0000")
    assert result.startswith(b"%PDF")


def test_rotated_page_is_mapped_against_unrotated_mediabox(letter_pdf):
    writer = PdfWriter(clone_from=PdfReader(BytesIO(letter_pdf)))
    writer.pages[0].rotate(90)
    buffer = BytesIO()
    writer.write(buffer)
    rotated = buffer.getvalue()

    # the preview shows the rotated page box
    raster = rasterize(rotated)
    assert (raster.width_pt, raster.height_pt) == (792, 612)

    # stamping maps percentages against the raw 612x792 mediabox
    content = PdfReader(BytesIO(stamp(rotated, "PB 1", 85, 5, 16, "#FF0000"))).pages[0].get_contents().get_data()
    assert b"520.2 739.6" in content
