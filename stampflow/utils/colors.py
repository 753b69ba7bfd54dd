import re
from typing import Tuple

from stampflow.core.errors import InvalidColorError

_HEX_COLOR = re.compile(r"#([0-9a-fA-F]{2})([0-9a-fA-F]{2})([0-9a-fA-F]{2})")


def parse_color(value: str) -> Tuple[float, float, float]:
    """
    تحويل لون بصيغة #RRGGBB إلى ثلاث قيم RGB بين 0 و 1.

    لا يتم تصحيح القيم غير الصالحة تلقائيًا؛ أي صيغة أخرى ترفع InvalidColorError.
    """
    match = _HEX_COLOR.fullmatch(value or "")
    if not match:
        raise InvalidColorError(f"Invalid color {value!r}: expected #RRGGBB.")
    red, green, blue = (int(channel, 16) / 255 for channel in match.groups())
    return red, green, blue


def normalize_color(value: str) -> str:
    parse_color(value)
    return value.upper()
