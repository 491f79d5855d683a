"""Tests for the classification store."""

from tagcheck_cli.registry.challenge import AuthChallenge
from tagcheck_cli.registry.parser import parse_image_reference
from tagcheck_cli.store import ClassificationStore


def _store_with_pending(*names):
    store = ClassificationStore()
    for name in names:
        store.add_pending(parse_image_reference(name), AuthChallenge("https://auth.example.com/token"))
    return store


class TestClassificationStore:
    def test_positions_follow_insertion(self):
        """Test pending positions follow insertion order."""
        store = _store_with_pending("a/x:1", "a/y:1", "a/z:1")
        assert [p.position for p in store.pending] == [0, 1, 2]

    def test_remove_pending_keeps_order(self):
        """Test removal keeps the survivors in order and renumbers them."""
        store = _store_with_pending("a/v:1", "a/w:1", "a/x:1", "a/y:1", "a/z:1")

        store.remove_pending([3, 0, 1])

        assert [p.reference.raw_name for p in store.pending] == ["a/x:1", "a/z:1"]
        assert [p.position for p in store.pending] == [0, 1]

    def test_remove_nothing(self):
        """Test an empty removal is a no-op."""
        store = _store_with_pending("a/x:1")
        store.remove_pending([])
        assert len(store.pending) == 1

    def test_snapshot_is_a_copy(self):
        """Test snapshots do not follow later removals."""
        store = _store_with_pending("a/x:1")
        snapshot = store.snapshot()
        store.remove_pending([0])
        assert len(snapshot) == 1
        assert store.pending == []

    def test_add_resolved_copies_tags(self):
        """Test resolved tags are copied."""
        store = ClassificationStore()
        tags = ["1.0"]
        image = store.add_resolved(parse_image_reference("a/x:1.0"), tags)
        tags.append("2.0")
        assert image.tags == ["1.0"]
