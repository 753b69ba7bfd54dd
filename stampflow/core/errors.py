"""أخطاء خط الختم."""

from __future__ import annotations


class StampError(Exception):
    """الأصل المشترك لأخطاء الختم."""


class DocumentParseError(StampError):
    """الملف ليس PDF صالحًا أو لا يمكن قراءته."""


class NoPageError(StampError):
    """المستند لا يحتوي على صفحات للختم."""


class InvalidColorError(StampError, ValueError):
    """اللون ليس بصيغة #RRGGBB."""


class UnsupportedTextError(StampError):
    """النص يحتوي على أحرف لا يدعمها خط الختم (Helvetica-Bold / WinAnsi)."""


class StaleDocumentError(StampError):
    """تم استبدال المستند أثناء تنفيذ العملية."""


class SessionNotFoundError(StampError):
    """جلسة التحرير غير موجودة أو انتهت صلاحيتها."""
