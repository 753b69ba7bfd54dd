from io import BytesIO
from types import SimpleNamespace

import pytest
from pypdf import PdfWriter
from reportlab.lib.pagesizes import letter
from reportlab.pdfgen import canvas

from stampflow.storage.sessions import session_store


def make_pdf(*pages, pagesize=letter) -> bytes:
    """Build a PDF where each argument is the list of (x, y, text) lines on one page."""
    buffer = BytesIO()
    c = canvas.Canvas(buffer, pagesize=pagesize)
    for lines in pages:
        c.setFont("Helvetica", 12)
        for x, y, text in lines:
            c.drawString(x, y, text)
        c.showPage()
    c.save()
    return buffer.getvalue()


@pytest.fixture
def letter_pdf() -> bytes:
    return make_pdf([(72, 700, "Invoice PB 966753")])


@pytest.fixture
def two_page_pdf() -> bytes:
    return make_pdf([(72, 700, "First page")], [(72, 700, "Second page")])


@pytest.fixture
def zero_page_pdf() -> bytes:
    buffer = BytesIO()
    PdfWriter().write(buffer)
    return buffer.getvalue()


@pytest.fixture
def encrypted_pdf(letter_pdf) -> bytes:
    from pypdf import PdfReader

    writer = PdfWriter(clone_from=PdfReader(BytesIO(letter_pdf)))
    writer.encrypt(user_password="secret", owner_password="owner", algorithm="RC4-128")
    buffer = BytesIO()
    writer.write(buffer)
    return buffer.getvalue()


class FakeMistralClient:
    """Stands in for mistralai.Mistral: records prompts and replies with a fixed answer."""

    def __init__(self, reply=None, error: Exception | None = None) -> None:
        self.reply = reply
        self.error = error
        self.calls: list[dict] = []
        self.chat = SimpleNamespace(complete=self._complete)

    def _complete(self, model, messages):
        self.calls.append({"model": model, "messages": messages})
        if self.error is not None:
            raise self.error
        message = SimpleNamespace(content=self.reply)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


@pytest.fixture
def fake_client_factory():
    return FakeMistralClient


@pytest.fixture(autouse=True)
def clean_sessions():
    yield
    for session_id in list(session_store._sessions):
        session_store.close(session_id)
