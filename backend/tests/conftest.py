"""
KK's Cafe Backend - Test Configuration (conftest.py)
=====================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Environment variables are pointed at a throwaway directory BEFORE any
       kkcafe import, so the module-level app never touches ./data.json or
       ./uploads. Individual tests get their own tmp_path-based settings.

Fixture Hierarchy (all function-scoped):
    ├── test_settings: Settings rooted in tmp_path
    ├── file_service: FileService on the test upload dir
    ├── memory_store: Empty InMemoryDrinkStore
    ├── drink_service: DrinkService(memory_store, file_service)
    ├── sample_image_bytes: Minimal real PNG for upload tests
    └── test_client: HTTPX AsyncClient against create_app(test_settings)
"""

import os
import tempfile

_scratch = tempfile.mkdtemp(prefix="kkcafe_test_")
os.environ["DATA_FILE"] = os.path.join(_scratch, "data.json")
os.environ["UPLOAD_DIR"] = os.path.join(_scratch, "uploads")
os.environ["PUBLIC_DIR"] = os.path.join(_scratch, "public")
os.environ["STORE_BACKEND"] = "json"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from kkcafe.config import Settings
from kkcafe.services.drink_service import DrinkService
from kkcafe.services.file_service import FileService
from kkcafe.stores import InMemoryDrinkStore


@pytest.fixture
def test_settings(tmp_path):
    """Settings whose data file, upload dir and public dir live under tmp_path."""
    return Settings(
        data_file=str(tmp_path / "data.json"),
        upload_dir=str(tmp_path / "uploads"),
        public_dir=str(tmp_path / "public"),
        store_backend="json",
        log_level="WARNING",
    )


@pytest.fixture
def file_service(test_settings):
    return FileService(
        upload_dir=test_settings.upload_dir,
        url_prefix=test_settings.uploads_url_prefix,
        max_file_size=test_settings.max_file_size,
        max_files=test_settings.max_files_per_request,
    )


@pytest.fixture
def memory_store():
    return InMemoryDrinkStore()


@pytest.fixture
def drink_service(memory_store, file_service):
    return DrinkService(memory_store, file_service)


@pytest.fixture
def sample_image_bytes():
    """
    A complete 1x1 PNG.

    Uploads are sniffed with libmagic, so the header must be a real PNG
    signature followed by an IHDR chunk.
    """
    return bytes.fromhex(
        "89504e470d0a1a0a0000000d4948445200000001000000010806000000"
        "1f15c4890000000d49444154789c63000100000500010d0a2db400000000"
        "49454e44ae426082"
    )


@pytest_asyncio.fixture
async def test_client(test_settings):
    """
    HTTPX AsyncClient talking to a fresh app built from test_settings.

    Usage:
        async def test_list(test_client):
            response = await test_client.get("/api/drinks")
            assert response.status_code == 200
    """
    from kkcafe.main import create_app

    app = create_app(test_settings)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
