"""
تحويل الإحداثيات بين موضع الواجهة النسبي (0-100٪، الأصل أعلى اليسار)
ونقاط PDF الأصلية (الأصل أسفل اليسار).

كل الدوال هنا نقية: لا إدخال/إخراج ولا حالة. أبعاد الصفحة تُمرَّر دائمًا
بالنقاط وليس ببكسلات المعاينة، لذلك لا يتأثر الختم بدقة العرض.
"""

from __future__ import annotations

from typing import NamedTuple, Tuple

# النص في PDF يُرسم من خط الأساس بينما الواجهة تعتبر النقطة مركز الصندوق.
# نسبة تقريبية ثابتة وليست محسوبة من مقاييس الخط.
BASELINE_OFFSET_RATIO = 0.8


class PdfPagePoint(NamedTuple):
    x_pt: float
    y_pt: float


def clamp_percent(value: float) -> float:
    return max(0.0, min(100.0, float(value)))


def baseline_offset(font_size: float) -> float:
    return font_size * BASELINE_OFFSET_RATIO


def to_pdf_point(
    x_percent: float,
    y_percent: float,
    font_size: float,
    page_width_pt: float,
    page_height_pt: float,
) -> PdfPagePoint:
    """
    تحويل موضع نسبي إلى نقطة رسم في فضاء PDF.

    لا يعيد التحقق من الحدود: y = 100 ينتج قيمة سالبة (خارج الصفحة) وهذا متوقع.
    """
    x_pt = (x_percent / 100) * page_width_pt
    y_pt = page_height_pt - (y_percent / 100) * page_height_pt - baseline_offset(font_size)
    return PdfPagePoint(x_pt, y_pt)


def from_pdf_point(
    x_pt: float,
    y_pt: float,
    font_size: float,
    page_width_pt: float,
    page_height_pt: float,
) -> Tuple[float, float]:
    """العكس الدقيق لـ to_pdf_point."""
    x_percent = (x_pt / page_width_pt) * 100
    y_percent = ((page_height_pt - y_pt - baseline_offset(font_size)) / page_height_pt) * 100
    return x_percent, y_percent


def pointer_to_percent(
    x_px: float,
    y_px: float,
    width_px: float,
    height_px: float,
) -> Tuple[float, float]:
    """موضع المؤشر داخل المعاينة المعروضة (بأي حجم) إلى نسبة مئوية مقيدة."""
    if width_px <= 0 or height_px <= 0:
        raise ValueError("Displayed preview size must be positive.")
    return (
        clamp_percent((x_px / width_px) * 100),
        clamp_percent((y_px / height_px) * 100),
    )
