from __future__ import annotations

import threading
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Dict, Optional
from uuid import uuid4

from stampflow.core.config import get_settings
from stampflow.core.errors import SessionNotFoundError, StaleDocumentError
from stampflow.models.stamp import StampSpec
from stampflow.services.rasterizer import PageRaster


@dataclass
class StampSession:
    session_id: str
    created_at: datetime
    generation: int = 0
    document_generation: int = 0
    filename: Optional[str] = None
    pdf_bytes: Optional[bytes] = None
    raster: Optional[PageRaster] = None
    stamp: StampSpec = field(default_factory=StampSpec)

    def to_card(self) -> dict:
        card: dict = {
            "session_id": self.session_id,
            "generation": self.document_generation,
            "filename": self.filename,
            "stamp": self.stamp.model_dump(),
        }
        if self.raster is not None:
            card.update(
                {
                    "page_count": self.raster.page_count,
                    "width_pt": self.raster.width_pt,
                    "height_pt": self.raster.height_pt,
                    "width_px": self.raster.width_px,
                    "height_px": self.raster.height_px,
                    "preview": self.raster.to_data_url(),
                    "extracted_text": self.raster.extracted_text,
                }
            )
        return card


@dataclass(frozen=True)
class StampSnapshot:
    generation: int
    filename: str
    pdf_bytes: bytes
    stamp: StampSpec


class SessionStore:
    """
    سجل جلسات التحرير في الذاكرة مع رقم إصدار لكل رفع.

    كل رفع جديد يزيد رقم الإصدار، ولا تُطبَّق نتيجة أي عملية إلا إذا كان رقمها
    ما زال هو الإصدار الحالي.
    """

    def __init__(self, ttl: Optional[timedelta] = None) -> None:
        self._sessions: Dict[str, StampSession] = {}
        self._lock = threading.Lock()
        self._ttl = ttl or timedelta(minutes=get_settings().session_ttl_minutes)

    def open_session(self) -> StampSession:
        self.cleanup()
        session = StampSession(session_id=uuid4().hex, created_at=datetime.utcnow())
        with self._lock:
            self._sessions[session.session_id] = session
        return session

    def get(self, session_id: str) -> StampSession:
        self.cleanup()
        with self._lock:
            session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFoundError(f"Unknown or expired session: {session_id}")
        return session

    def begin_upload(self, session_id: str) -> int:
        session = self.get(session_id)
        with self._lock:
            session.generation += 1
            return session.generation

    def abandon_upload(self, session_id: str, generation: int) -> None:
        """إلغاء رفع فاشل وإعادة المستند السابق كإصدار حالي ما لم يبدأ رفع أحدث."""
        session = self.get(session_id)
        with self._lock:
            if session.generation == generation:
                session.generation = session.document_generation

    def apply_document(
        self,
        session_id: str,
        generation: int,
        filename: str,
        pdf_bytes: bytes,
        raster: PageRaster,
    ) -> bool:
        """تطبيق نتيجة الرفع فقط إذا لم يسبقها رفع أحدث."""
        session = self.get(session_id)
        with self._lock:
            if session.generation != generation:
                return False
            session.filename = filename
            session.pdf_bytes = pdf_bytes
            session.raster = raster
            session.document_generation = generation
            session.stamp = StampSpec()
            return True

    def replace_stamp(self, session_id: str, stamp: StampSpec) -> StampSpec:
        session = self.get(session_id)
        with self._lock:
            session.stamp = stamp
        return stamp

    def snapshot(self, session_id: str) -> StampSnapshot:
        session = self.get(session_id)
        with self._lock:
            if session.pdf_bytes is None:
                raise StaleDocumentError("No document has been uploaded for this session.")
            if session.document_generation != session.generation:
                raise StaleDocumentError("A newer document is still being loaded.")
            return StampSnapshot(
                generation=session.generation,
                filename=session.filename or "document.pdf",
                pdf_bytes=session.pdf_bytes,
                stamp=session.stamp,
            )

    def is_current(self, session_id: str, generation: int) -> bool:
        try:
            session = self.get(session_id)
        except SessionNotFoundError:
            return False
        with self._lock:
            return session.generation == generation and session.document_generation == generation

    def close(self, session_id: str) -> None:
        with self._lock:
            self._sessions.pop(session_id, None)

    def cleanup(self) -> None:
        """حذف الجلسات المنتهية الصلاحية وفق مدة الاحتفاظ المحددة."""
        now = datetime.utcnow()
        with self._lock:
            expired = [sid for sid, s in self._sessions.items() if now - s.created_at > self._ttl]
            for session_id in expired:
                self._sessions.pop(session_id, None)

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)


session_store = SessionStore()
