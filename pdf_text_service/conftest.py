import pytest
from fastapi.testclient import TestClient

from pdf_text_service.app import create_app
from pdf_text_service.config import Settings


def build_pdf(*page_texts: str, title: str = "Test") -> bytes:
    """Smallest valid PDF with one Helvetica text line per page."""
    page_texts = page_texts or ("Hello   World",)
    n_pages = len(page_texts)
    first_page = 5
    kids = " ".join(f"{first_page + 2 * i} 0 R" for i in range(n_pages))

    objects = [
        b"<< /Type /Catalog /Pages 2 0 R >>",
        f"<< /Type /Pages /Kids [{kids}] /Count {n_pages} >>".encode(),
        b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>",
        f"<< /Title ({title}) /Producer (pytest) >>".encode(),
    ]
    for i, text in enumerate(page_texts):
        content = f"BT /F1 24 Tf 72 720 Td ({text}) Tj ET".encode()
        objects.append(
            f"<< /Type /Page /Parent 2 0 R /MediaBox [0 0 612 792] "
            f"/Contents {first_page + 2 * i + 1} 0 R "
            f"/Resources << /Font << /F1 3 0 R >> >> >>".encode()
        )
        objects.append(
            b"<< /Length %d >>\nstream\n" % len(content) + content + b"\nendstream"
        )

    out = bytearray(b"%PDF-1.4\n")
    offsets = []
    for num, obj in enumerate(objects, 1):
        offsets.append(len(out))
        out += b"%d 0 obj\n" % num + obj + b"\nendobj\n"

    xref_at = len(out)
    out += b"xref\n0 %d\n" % (len(objects) + 1)
    out += b"0000000000 65535 f \n"
    for off in offsets:
        out += b"%010d 00000 n \n" % off
    out += b"trailer\n<< /Size %d /Root 1 0 R /Info 4 0 R >>\n" % (len(objects) + 1)
    out += b"startxref\n%d\n%%%%EOF\n" % xref_at
    return bytes(out)


@pytest.fixture
def pdf_bytes():
    return build_pdf("Hello   World")


@pytest.fixture
def make_client():
    def _make(**overrides):
        return TestClient(create_app(Settings(**overrides)))
    return _make


@pytest.fixture
def client(make_client):
    return make_client()


@pytest.fixture
def secured_client(make_client):
    return make_client(service_secret="s3cret")
