from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Request, Response, UploadFile, status
from fastapi.concurrency import run_in_threadpool
from pydantic import ValidationError

from stampflow.core.errors import (
    DocumentParseError,
    InvalidColorError,
    NoPageError,
    SessionNotFoundError,
    StaleDocumentError,
    StampError,
    UnsupportedTextError,
)
from stampflow.core.logging import configure_logging
from stampflow.models import (
    PointerPositionRequest,
    SessionRequest,
    StampCommitRequest,
    StampSpec,
    StampUpdateRequest,
)
from stampflow.services.compositor import StampCompositor
from stampflow.services.coordinates import pointer_to_percent
from stampflow.services.rasterizer import rasterize
from stampflow.services.suggestion_service import TextSuggestionAdapter
from stampflow.storage.sessions import StampSession, session_store
from stampflow.utils.file_utils import attachment_header, ensure_pdf, read_upload, stamped_filename

router = APIRouter(prefix="/stamp", tags=["PDF Stamp"])

logger = configure_logging("api")
compositor = StampCompositor()


def get_suggestion_adapter(request: Request) -> TextSuggestionAdapter:
    return request.app.state.suggestion_adapter


# ============ Helpers ============
def _http_error(exc: StampError) -> HTTPException:
    if isinstance(exc, SessionNotFoundError):
        code = status.HTTP_404_NOT_FOUND
    elif isinstance(exc, StaleDocumentError):
        code = status.HTTP_409_CONFLICT
    elif isinstance(exc, (DocumentParseError, NoPageError, InvalidColorError, UnsupportedTextError)):
        code = status.HTTP_400_BAD_REQUEST
    else:
        code = status.HTTP_500_INTERNAL_SERVER_ERROR
    return HTTPException(status_code=code, detail=str(exc))


def _session(session_id: str) -> StampSession:
    try:
        return session_store.get(session_id)
    except SessionNotFoundError as exc:
        raise _http_error(exc)


def _store_stamp(session: StampSession, **changes) -> StampSpec:
    try:
        spec = session.stamp.replace(**changes)
    except ValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=exc.errors(include_url=False, include_context=False, include_input=False),
        )
    return session_store.replace_stamp(session.session_id, spec)


# ============ Endpoints ============
@router.post("/upload", summary="رفع ملف PDF وإنشاء معاينة الصفحة الأولى")
async def upload_pdf(
    file: UploadFile = File(...),
    session_id: Optional[str] = Form(None),
) -> dict:
    ensure_pdf(file)
    data = await read_upload(file)

    created = session_id is None
    session = session_store.open_session() if created else _session(session_id)
    generation = session_store.begin_upload(session.session_id)

    try:
        raster = await run_in_threadpool(rasterize, data)
    except DocumentParseError as exc:
        logger.warning("Rejected upload %s: %s", file.filename, exc)
        if created:
            session_store.close(session.session_id)
        else:
            session_store.abandon_upload(session.session_id, generation)
        raise _http_error(exc)

    applied = session_store.apply_document(
        session.session_id, generation, file.filename or "document.pdf", data, raster
    )
    if not applied:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="تم رفع ملف أحدث أثناء معالجة هذا الملف.",
        )

    logger.info("Upload %s -> session %s (generation %s)", file.filename, session.session_id, generation)
    return {"status": "ok", "file": session.to_card()}


@router.post("/suggest", summary="اقتراح رمز مرجعي من نص الصفحة الأولى")
async def suggest_code(
    payload: SessionRequest,
    adapter: TextSuggestionAdapter = Depends(get_suggestion_adapter),
) -> dict:
    session = _session(payload.session_id)
    if session.raster is None:
        return {"status": "ok", "found": False, "suggestion": "", "stamp": session.stamp.model_dump()}

    generation = session.document_generation
    suggestion = await run_in_threadpool(adapter.suggest, session.raster.extracted_text)

    found = bool(suggestion) and session_store.is_current(session.session_id, generation)
    if found:
        _store_stamp(session, text=suggestion)

    return {
        "status": "ok",
        "found": found,
        "suggestion": suggestion if found else "",
        "message": None if found else "لم يتم العثور على رمز مرجعي. أدخله يدويًا.",
        "stamp": session.stamp.model_dump(),
    }


@router.put("/spec", summary="استبدال إعدادات الختم الحالية")
async def update_stamp(payload: StampUpdateRequest) -> dict:
    session = _session(payload.session_id)
    spec = _store_stamp(
        session,
        text=payload.text,
        x_percent=payload.x_percent,
        y_percent=payload.y_percent,
        font_size=payload.font_size,
        color=payload.color,
    )
    return {"status": "ok", "stamp": spec.model_dump()}


@router.post("/position", summary="تحديد موضع الختم من موضع المؤشر على المعاينة")
async def update_position(payload: PointerPositionRequest) -> dict:
    session = _session(payload.session_id)
    x_percent, y_percent = pointer_to_percent(payload.x_px, payload.y_px, payload.width_px, payload.height_px)
    spec = _store_stamp(session, x_percent=x_percent, y_percent=y_percent)
    return {"status": "ok", "stamp": spec.model_dump()}


@router.post("/commit", summary="ختم الصفحة الأولى وإرجاع ملف PDF الناتج")
async def commit_stamp(payload: StampCommitRequest) -> Response:
    try:
        snapshot = session_store.snapshot(payload.session_id)
    except StampError as exc:
        raise _http_error(exc)

    if payload.generation is not None and payload.generation != snapshot.generation:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="تم استبدال المستند؛ أعد تحميل المعاينة قبل الختم.",
        )
    if not snapshot.stamp.text:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="أدخل نص الختم أولًا.",
        )

    try:
        pdf_bytes = await run_in_threadpool(compositor.stamp_spec, snapshot.pdf_bytes, snapshot.stamp)
    except StampError as exc:
        logger.warning("Stamping failed for session %s: %s", payload.session_id, exc)
        raise _http_error(exc)

    if not session_store.is_current(payload.session_id, snapshot.generation):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="تم استبدال المستند أثناء الختم.",
        )

    output_name = stamped_filename(snapshot.filename)
    logger.info("Stamped %s for session %s", output_name, payload.session_id)
    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": attachment_header(output_name)},
    )


@router.delete("/{session_id}", summary="إغلاق جلسة التحرير ومسح بياناتها")
async def close_session(session_id: str) -> dict:
    session_store.close(session_id)
    return {"status": "ok"}
