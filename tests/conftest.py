"""Shared fixtures: a throwaway SQLite database and image directory per test run."""

import os
import tempfile

_TMP = tempfile.mkdtemp(prefix="splitsies-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_TMP, 'test.db')}"
os.environ["IMAGE_DIR"] = os.path.join(_TMP, "images")
os.environ["SCAN_RATE_LIMIT"] = "1000/minute"
os.environ["RECEIPT_PROVIDER"] = "gemini"
os.environ.pop("SENTRY_DSN", None)

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from app.database import Base, SessionLocal, engine  # noqa: E402
from app.images import LocalImageStore  # noqa: E402
from app.main import app  # noqa: E402
from app.receipt.base import ParsedReceipt  # noqa: E402
from app.session import ScanSession  # noqa: E402


class FakeExtractor:
    """Returns a canned result (or raises a canned error) and records calls."""

    def __init__(self, result=None, error: Exception | None = None):
        self.result = result
        self.error = error
        self.calls = 0

    async def extract(self, image_bytes: bytes, content_type: str) -> ParsedReceipt:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.result


def parsed_receipt(**overrides) -> ParsedReceipt:
    payload = {
        "storeName": "Shake Shack",
        "receiptDate": "2026-03-14",
        "subtotal": 14.00,
        "tax": 1.24,
        "tip": None,
        "discount": None,
        "total": 15.24,
        "items": [
            {"name": "Burger", "price": 10.00, "confidence": "high"},
            {"name": "Fries", "price": 4.00, "confidence": "medium"},
        ],
    }
    payload.update(overrides)
    return ParsedReceipt.model_validate(payload)


@pytest.fixture(autouse=True)
def fresh_database():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def image_store(tmp_path) -> LocalImageStore:
    return LocalImageStore(tmp_path / "images")


@pytest.fixture
def extractor() -> FakeExtractor:
    return FakeExtractor(result=parsed_receipt())


@pytest.fixture
def client(extractor, image_store):
    app.state.image_store = image_store
    app.state.scan_session = ScanSession(lambda: extractor, image_store, timeout=5)
    with TestClient(app) as c:
        yield c
