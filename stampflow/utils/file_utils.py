from pathlib import Path
from urllib.parse import quote

from fastapi import HTTPException, UploadFile, status


def ensure_pdf(upload: UploadFile) -> None:
    """التحقق من أن الملف المرفوع هو PDF."""
    content_type = (upload.content_type or "").lower()
    if not content_type.endswith("pdf"):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="يجب أن يكون الملف من نوع PDF.",
        )


async def read_upload(upload: UploadFile) -> bytes:
    await upload.seek(0)
    return await upload.read()


def stamped_filename(filename: str | None) -> str:
    name = Path(filename or "document.pdf").name
    return f"stamped_{name}"


def attachment_header(filename: str) -> str:
    """ترويسة Content-Disposition تدعم الأسماء غير اللاتينية."""
    ascii_name = filename.encode("ascii", "ignore").decode() or "stamped.pdf"
    ascii_name = ascii_name.replace('"', "")
    return f"attachment; filename=\"{ascii_name}\"; filename*=UTF-8''{quote(filename)}"
