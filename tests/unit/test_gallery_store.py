"""Tests for imaginarium.core.gallery_store — in-memory gallery."""

from __future__ import annotations

import pytest

from imaginarium.core.gallery_store import GalleryStore
from imaginarium.core.models import AspectRatio, EncodedImage, GeneratedEntry


def _entry(prompt: str = "a cat", entry_id: str | None = None) -> GeneratedEntry:
    image = EncodedImage(mime_type="image/png", data="Zm9v")
    if entry_id is None:
        return GeneratedEntry(image=image, original_prompt_text=prompt, aspect_ratio=AspectRatio.SQUARE)
    return GeneratedEntry(
        image=image, original_prompt_text=prompt, aspect_ratio=AspectRatio.SQUARE, id=entry_id
    )


@pytest.fixture
def gallery() -> GalleryStore:
    return GalleryStore()


class TestAppend:
    """Test GalleryStore.append ordering and uniqueness."""

    def test_starts_empty(self, gallery):
        assert len(gallery) == 0
        assert gallery.list_all() == ()

    def test_newest_first(self, gallery):
        first, second, third = _entry("one"), _entry("two"), _entry("three")
        for entry in (first, second, third):
            gallery.append(entry)
        assert gallery.list_all() == (third, second, first)

    def test_duplicate_id_rejected(self, gallery):
        gallery.append(_entry(entry_id="same"))
        with pytest.raises(ValueError):
            gallery.append(_entry(entry_id="same"))
        assert len(gallery) == 1

    def test_generated_ids_are_unique(self):
        assert _entry().id != _entry().id


class TestRemove:
    """Test GalleryStore.remove."""

    def test_remove_existing(self, gallery):
        keep, drop = _entry("keep"), _entry("drop")
        gallery.append(keep)
        gallery.append(drop)
        assert gallery.remove(drop.id) is True
        assert gallery.list_all() == (keep,)

    def test_remove_preserves_order(self, gallery):
        entries = [_entry(str(i)) for i in range(4)]
        for entry in entries:
            gallery.append(entry)
        gallery.remove(entries[1].id)
        assert gallery.list_all() == (entries[3], entries[2], entries[0])

    def test_remove_unknown_is_noop(self, gallery):
        entry = _entry()
        gallery.append(entry)
        assert gallery.remove("missing") is False
        assert gallery.list_all() == (entry,)


class TestLookup:
    """Test get / iteration."""

    def test_get(self, gallery):
        entry = _entry()
        gallery.append(entry)
        assert gallery.get(entry.id) is entry
        assert gallery.get("missing") is None

    def test_iteration_matches_list(self, gallery):
        for i in range(3):
            gallery.append(_entry(str(i)))
        assert tuple(gallery) == gallery.list_all()

    def test_list_is_a_snapshot(self, gallery):
        gallery.append(_entry())
        listing = gallery.list_all()
        gallery.append(_entry())
        assert len(listing) == 1
