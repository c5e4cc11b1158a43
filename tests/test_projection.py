# tests for the entry list projection — wholesale replacement and the tab filter
# tests for diary/state/projection.py

import pytest

from diary.state.projection import EntryListProjection


def _item(entry_id, favorite=False, **extra):
    return {"id": entry_id, "owner_id": "u1", "title": entry_id, "is_favorite": favorite, **extra}


class TestProjection:

    def test_starts_empty_on_all_tab(self):
        projection = EntryListProjection()
        assert projection.entries == []
        assert projection.tab == "all"
        assert projection.displayed == []

    def test_all_tab_keeps_order(self):
        projection = EntryListProjection()
        projection.replace([_item("a", favorite=True), _item("b", favorite=False)])
        assert [e.id for e in projection.displayed] == ["a", "b"]

    def test_favorites_tab_filters_and_keeps_order(self):
        projection = EntryListProjection()
        projection.replace([_item("a", True), _item("b"), _item("c", True)])
        projection.set_tab("favorites")
        assert [e.id for e in projection.displayed] == ["a", "c"]

    def test_settings_tab_applies_no_filter(self):
        projection = EntryListProjection()
        projection.replace([_item("a", True), _item("b")])
        projection.set_tab("settings")
        assert [e.id for e in projection.displayed] == ["a", "b"]

    def test_unknown_tab_rejected(self):
        projection = EntryListProjection()
        with pytest.raises(ValueError):
            projection.set_tab("archive")
        assert projection.tab == "all"

    def test_replace_is_wholesale(self):
        projection = EntryListProjection()
        projection.replace([_item("a"), _item("b")])
        projection.replace([_item("c")])
        assert [e.id for e in projection.entries] == ["c"]

    def test_replace_accepts_camel_case_and_missing_lists(self):
        projection = EntryListProjection()
        projection.replace([{"id": "a", "ownerId": "u1", "isFavorite": True, "images": None}])
        entry = projection.entries[0]
        assert entry.is_favorite is True
        assert entry.images == []
        assert entry.attachments == []

    def test_malformed_entries_are_skipped(self):
        projection = EntryListProjection()
        projection.replace([_item("a"), _item("b", mood="furious"), {"title": "no id"}])
        assert [e.id for e in projection.entries] == ["a"]

    def test_find_and_clear(self):
        projection = EntryListProjection()
        projection.replace([_item("a"), _item("b")])
        assert projection.find("b").id == "b"
        assert projection.find("zzz") is None
        projection.clear()
        assert projection.entries == []
