"""
Session Store Tests

Behaviour shared by LocalStorage and MockStorage, run against both:
- Atomic create and delete
- Listing order
- Partial updates
- Duration-budget pruning

To run:
    pytest tests/storage/test_session_store.py -v
"""

import pytest

from storage import SessionNotFoundError, StorageUnavailableError
from storage.implementations.local_storage import LocalStorage
from storage.implementations.mock_storage import MockStorage

# =============================================================================
# CREATE / READ TESTS
# =============================================================================


@pytest.mark.unit
def test_create_and_get(any_storage, draft_factory):
    """
    Test creating a session.

    Should:
    - Return a generated id
    - Set blob_key to the id
    - Store thumbnails in order and the payload
    """
    session_id = any_storage.create_atomic(draft_factory(), b"media-bytes")

    session = any_storage.get(session_id)
    assert session.id == session_id
    assert session.blob_key == session_id
    assert session.duration == 120.0
    assert session.saved is False
    assert [t.time for t in session.thumbnails] == [0.0, 3.0]
    assert session.thumbnail == b"\xff\xd8first"
    assert any_storage.get_payload(session_id) == b"media-bytes"


@pytest.mark.unit
def test_ids_are_unique(any_storage, draft_factory):
    """Test every create gets a fresh id."""
    ids = {any_storage.create_atomic(draft_factory(offset=i), b"x") for i in range(5)}
    assert len(ids) == 5


@pytest.mark.unit
def test_get_missing(any_storage):
    """Test unknown ids read as None."""
    assert any_storage.get("nope") is None
    assert any_storage.get_payload("nope") is None


@pytest.mark.unit
def test_lists_newest_first(any_storage, draft_factory):
    """Test recent/saved/all listings are sorted newest first."""
    old = any_storage.create_atomic(draft_factory(offset=0), b"a")
    new = any_storage.create_atomic(draft_factory(offset=100), b"b")
    kept = any_storage.create_atomic(draft_factory(offset=50, saved=True, name="keep"), b"c")

    assert [s.id for s in any_storage.list_recent()] == [new, old]
    assert [s.id for s in any_storage.list_saved()] == [kept]
    assert [s.id for s in any_storage.list_all()] == [new, kept, old]
    assert [s.id for s in any_storage.list_recent(limit=1)] == [new]


@pytest.mark.unit
def test_returned_sessions_are_copies(any_storage, draft_factory):
    """Test changing a returned session does not change the store."""
    session_id = any_storage.create_atomic(draft_factory(), b"media")

    any_storage.get(session_id).thumbnails.clear()
    any_storage.list_all()[0].thumbnails.clear()

    assert len(any_storage.get(session_id).thumbnails) == 2

# =============================================================================
# UPDATE TESTS
# =============================================================================


@pytest.mark.unit
def test_update_merges_fields(any_storage, draft_factory):
    """Test update changes only the given fields."""
    session_id = any_storage.create_atomic(draft_factory(), b"media")

    updated = any_storage.update(session_id, name="Scales")

    assert updated.name == "Scales"
    assert updated.duration == 120.0
    assert any_storage.get(session_id).name == "Scales"
    assert len(any_storage.get(session_id).thumbnails) == 2


@pytest.mark.unit
def test_update_missing_raises(any_storage):
    """Test updating an unknown id raises SessionNotFoundError."""
    with pytest.raises(SessionNotFoundError):
        any_storage.update("nope", name="x")


@pytest.mark.unit
def test_update_unknown_field_raises(any_storage, draft_factory):
    """Test an unknown field is rejected."""
    session_id = any_storage.create_atomic(draft_factory(), b"media")

    with pytest.raises(ValueError):
        any_storage.update(session_id, colour="red")


@pytest.mark.unit
def test_update_keeps_identity(any_storage, draft_factory):
    """Test id and blob_key cannot be changed through update."""
    session_id = any_storage.create_atomic(draft_factory(), b"media")

    updated = any_storage.update(session_id, id="other", blob_key="other", saved=True)

    assert updated.id == session_id
    assert updated.blob_key == session_id
    assert any_storage.get("other") is None


@pytest.mark.unit
def test_mark_saved(any_storage, draft_factory):
    """Test mark_saved stars and names a session."""
    session_id = any_storage.create_atomic(draft_factory(), b"media")

    session = any_storage.mark_saved(session_id, "Warmup")

    assert session.saved is True
    assert session.name == "Warmup"
    assert [s.id for s in any_storage.list_saved()] == [session_id]
    assert any_storage.list_recent() == []


@pytest.mark.unit
def test_set_trim(any_storage, draft_factory):
    """Test trim points are stored."""
    session_id = any_storage.create_atomic(draft_factory(), b"media")

    session = any_storage.set_trim(session_id, 3.5, 42.0)

    assert session.is_trimmed
    assert (session.trim_in, session.trim_out) == (3.5, 42.0)


@pytest.mark.unit
@pytest.mark.parametrize("trim_in,trim_out", [(-1.0, 5.0), (5.0, 5.0), (10.0, 2.0)])
def test_set_trim_rejects_bad_range(any_storage, draft_factory, trim_in, trim_out):
    """Test trim ranges must satisfy 0 <= in < out."""
    session_id = any_storage.create_atomic(draft_factory(), b"media")

    with pytest.raises(ValueError):
        any_storage.set_trim(session_id, trim_in, trim_out)


# =============================================================================
# DELETE TESTS
# =============================================================================


@pytest.mark.unit
def test_delete_removes_payload(any_storage, draft_factory):
    """Test delete_atomic removes metadata and payload together."""
    session_id = any_storage.create_atomic(draft_factory(), b"media")

    any_storage.delete_atomic(session_id)

    assert any_storage.get(session_id) is None
    assert any_storage.get_payload(session_id) is None


@pytest.mark.unit
def test_delete_missing_is_noop(any_storage):
    """Test deleting an unknown id does not raise."""
    any_storage.delete_atomic("nope")


@pytest.mark.unit
def test_clear(any_storage, draft_factory):
    """Test clear removes everything and reports the count."""
    for i in range(3):
        any_storage.create_atomic(draft_factory(offset=i), b"x")

    assert any_storage.clear() == 3
    assert any_storage.list_all() == []
    assert any_storage.get_stats().payload_bytes == 0


# =============================================================================
# PRUNE TESTS
# =============================================================================


@pytest.mark.unit
def test_prune_over_budget(any_storage, draft_factory):
    """
    Test three 120s sessions against a 200s budget.

    Should:
    - Keep the newest (0s before it) and the second (120s before it)
    - Delete the oldest (240s before it)
    """
    oldest = any_storage.create_atomic(draft_factory(offset=0), b"a")
    middle = any_storage.create_atomic(draft_factory(offset=200), b"b")
    newest = any_storage.create_atomic(draft_factory(offset=400), b"c")

    assert any_storage.prune(200) == 1

    assert [s.id for s in any_storage.list_recent()] == [newest, middle]
    assert any_storage.get_payload(oldest) is None


@pytest.mark.unit
def test_prune_within_budget(any_storage, draft_factory):
    """Test nothing is deleted when the total fits."""
    any_storage.create_atomic(draft_factory(offset=0, duration=60), b"a")
    any_storage.create_atomic(draft_factory(offset=100, duration=60), b"b")

    assert any_storage.prune(200) == 0
    assert len(any_storage.list_recent()) == 2


@pytest.mark.unit
def test_prune_boundary_is_inclusive(any_storage, draft_factory):
    """Test a session with exactly budget seconds before it is kept."""
    any_storage.create_atomic(draft_factory(offset=0, duration=100), b"a")
    any_storage.create_atomic(draft_factory(offset=100, duration=100), b"b")
    any_storage.create_atomic(draft_factory(offset=200, duration=100), b"c")

    assert any_storage.prune(200) == 0


@pytest.mark.unit
def test_prune_zero_budget_keeps_newest(any_storage, draft_factory):
    """Test a zero budget keeps only the newest unsaved session."""
    any_storage.create_atomic(draft_factory(offset=0), b"a")
    any_storage.create_atomic(draft_factory(offset=200), b"b")
    newest = any_storage.create_atomic(draft_factory(offset=400), b"c")

    assert any_storage.prune(0) == 2
    assert [s.id for s in any_storage.list_recent()] == [newest]


@pytest.mark.unit
def test_prune_never_touches_saved(any_storage, draft_factory):
    """Test saved sessions survive pruning and do not count toward the budget."""
    saved = any_storage.create_atomic(
        draft_factory(offset=0, duration=1000, saved=True, name="keep"),
        b"s",
    )
    any_storage.create_atomic(draft_factory(offset=100), b"a")
    any_storage.create_atomic(draft_factory(offset=200), b"b")

    assert any_storage.prune(0) == 1
    assert any_storage.get(saved) is not None
    assert len(any_storage.list_recent()) == 1


@pytest.mark.unit
def test_prune_empty_store(any_storage):
    """Test pruning an empty store deletes nothing."""
    assert any_storage.prune(0) == 0


# =============================================================================
# STATS AND LIFECYCLE TESTS
# =============================================================================


@pytest.mark.unit
def test_stats(any_storage, draft_factory):
    """Test stats split recent and saved sessions."""
    any_storage.create_atomic(draft_factory(offset=0, duration=30), b"12345")
    any_storage.create_atomic(draft_factory(offset=10, duration=20, saved=True), b"123")

    stats = any_storage.get_stats()

    assert stats.recent_count == 1
    assert stats.saved_count == 1
    assert stats.total_sessions == 2
    assert stats.recent_duration_seconds == 30
    assert stats.saved_duration_seconds == 20
    assert stats.payload_bytes == 8


@pytest.mark.unit
@pytest.mark.parametrize("factory", [MockStorage, LocalStorage])
def test_use_before_initialize_raises(factory, tmp_path, draft_factory):
    """Test every store refuses work until initialize()."""
    storage = factory() if factory is MockStorage else factory(base_path=tmp_path)

    assert storage.is_available() is False
    with pytest.raises(StorageUnavailableError):
        storage.create_atomic(draft_factory(), b"media")
