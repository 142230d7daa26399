"""
Storage Test Configuration and Fixtures

This file contains pytest fixtures shared across storage tests.

To use pytest:
    pip install -e ".[test]"
    pytest tests/storage/
"""

import pytest

from recording.interfaces.capture_interface import CaptureResult
from storage import SessionDraft, StorageController, Thumbnail
from storage.implementations.local_storage import LocalStorage
from storage.implementations.mock_storage import MockStorage

BASE_TIME = 1_700_000_000.0

# =============================================================================
# STORAGE FIXTURES
# =============================================================================


@pytest.fixture
def mock_storage():
    """
    Provide a fresh, initialized MockStorage instance for each test.

    Usage:
        def test_something(mock_storage):
            mock_storage.create_atomic(make_draft(), b"media")
    """
    storage = MockStorage()
    storage.initialize()
    yield storage
    storage.cleanup()


@pytest.fixture
def temp_storage_dir(tmp_path):
    """Provide an empty directory for a session database"""
    path = tmp_path / "sessions"
    path.mkdir()
    return path


@pytest.fixture
def local_storage(temp_storage_dir):
    """
    Provide initialized LocalStorage on a temp directory.

    Usage:
        def test_db(local_storage):
            session_id = local_storage.create_atomic(make_draft(), b"media")
    """
    storage = LocalStorage(base_path=temp_storage_dir)
    storage.initialize()
    yield storage
    storage.cleanup()


@pytest.fixture(params=["local", "mock"])
def any_storage(request, temp_storage_dir):
    """Run a test against both store implementations"""
    if request.param == "local":
        storage = LocalStorage(base_path=temp_storage_dir)
    else:
        storage = MockStorage()
    storage.initialize()
    yield storage
    storage.cleanup()


@pytest.fixture
def storage_controller(mock_storage):
    """Provide StorageController over MockStorage with a 200s budget"""
    controller = StorageController(mock_storage, max_recent_duration_seconds=200)
    controller.initialize()
    yield controller
    controller.cleanup()


# =============================================================================
# DATA HELPERS
# =============================================================================


def make_draft(offset: float = 0.0, duration: float = 120.0, **kwargs) -> SessionDraft:
    """Draft created `offset` seconds after BASE_TIME"""
    thumbnails = kwargs.pop(
        "thumbnails",
        [Thumbnail(time=0.0, image=b"\xff\xd8first"), Thumbnail(time=3.0, image=b"\xff\xd8second")],
    )
    return SessionDraft(
        created_at=BASE_TIME + offset,
        duration=duration,
        thumbnail=thumbnails[0].image if thumbnails else b"",
        thumbnails=thumbnails,
        **kwargs,
    )


@pytest.fixture
def draft_factory():
    """
    Provide make_draft for building SessionDrafts.

    Usage:
        def test_x(any_storage, draft_factory):
            any_storage.create_atomic(draft_factory(offset=10), b"media")
    """
    return make_draft


@pytest.fixture
def capture_result():
    """A 120-second capture result"""
    return CaptureResult(data=b"\x00\x00\x00\x20ftypmp42" + b"\x00" * 64, duration_ms=120_000.0)
