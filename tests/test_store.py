"""Tests for the per-image annotation store."""

from boxmark.core.models import Rectangle
from boxmark.core.store import AnnotationStore


def make_rect(**kwargs):
    values = dict(x=0, y=0, width=10, height=10)
    values.update(kwargs)
    return Rectangle(**values)


class TestAnnotationStore:
    """Tests for AnnotationStore."""

    def test_get_missing(self):
        """Test that unknown images have no rectangles."""
        store = AnnotationStore()

        assert store.get("a.jpg") == []
        assert "a.jpg" not in store

    def test_set_and_get(self):
        """Test replacing the rectangles of an image."""
        store = AnnotationStore()
        rects = [make_rect(), make_rect(x=5)]

        store.set("a.jpg", rects)

        assert store.get("a.jpg") == rects
        assert "a.jpg" in store

    def test_get_returns_copy(self):
        """Test that modifying the returned list does not change the store."""
        store = AnnotationStore()
        store.set("a.jpg", [make_rect()])

        store.get("a.jpg").append(make_rect())

        assert len(store.get("a.jpg")) == 1

    def test_set_empty_removes_entry(self):
        """Test that an empty list and no entry are the same."""
        store = AnnotationStore()
        store.set("a.jpg", [make_rect()])

        store.set("a.jpg", [])

        assert "a.jpg" not in store
        assert store.get("a.jpg") == []
        assert len(store) == 0

    def test_clear(self):
        """Test clearing one image."""
        store = AnnotationStore()
        store.set("a.jpg", [make_rect()])
        store.set("b.jpg", [make_rect()])

        store.clear("a.jpg")
        store.clear("unknown.jpg")

        assert store.get("a.jpg") == []
        assert len(store.get("b.jpg")) == 1

    def test_clear_all(self):
        """Test clearing every image."""
        store = AnnotationStore()
        store.set("a.jpg", [make_rect()])
        store.set("b.jpg", [make_rect()])

        store.clear_all()

        assert len(store) == 0
        assert store.total_rectangles == 0

    def test_load_bulk(self):
        """Test replacing the whole store."""
        store = AnnotationStore()
        store.set("old.jpg", [make_rect()])

        store.load_bulk({
            "a.jpg": [make_rect(), make_rect()],
            "b.jpg": [],
            "c.jpg": [make_rect()],
        })

        assert "old.jpg" not in store
        assert "b.jpg" not in store
        assert [image_id for image_id, _ in store.items()] == ["a.jpg", "c.jpg"]
        assert store.total_rectangles == 3

    def test_items_preserve_insertion_order(self):
        """Test that images are iterated in the order they were first set."""
        store = AnnotationStore()
        for name in ["z.jpg", "a.jpg", "m.jpg"]:
            store.set(name, [make_rect()])

        store.set("z.jpg", [make_rect(), make_rect()])

        assert [image_id for image_id, _ in store.items()] == ["z.jpg", "a.jpg", "m.jpg"]

    def test_find(self):
        """Test looking up a rectangle by id."""
        store = AnnotationStore()
        rect = make_rect()
        store.set("a.jpg", [make_rect(), rect])

        assert store.find("a.jpg", rect.id) is rect
        assert store.find("a.jpg", "missing") is None
        assert store.find("b.jpg", rect.id) is None
