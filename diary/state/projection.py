# entry list projection — latest live query snapshot plus the sidebar tab filter

import logging
from typing import Optional

from pydantic import ValidationError

from diary.models.entry import Entry, Tab

logger = logging.getLogger(__name__)

TABS: tuple[str, ...] = ("all", "favorites", "settings")

MENU_LABELS = {
    "all": "All Entries",
    "favorites": "Favorites",
    "settings": "Settings",
}


class EntryListProjection:
    """the full ordered entry list and the displayed subset for the active tab"""

    def __init__(self):
        self.entries: list[Entry] = []
        self.tab: Tab = "all"

    def replace(self, snapshot: list[dict]):
        """swap in a complete snapshot, never patched incrementally"""
        entries = []
        for item in snapshot:
            try:
                entries.append(Entry.model_validate(item))
            except ValidationError as e:
                logger.warning(f"Skipping malformed entry {item.get('id')}: {e.error_count()} errors")
        self.entries = entries

    def clear(self):
        self.entries = []

    def set_tab(self, tab: str):
        if tab not in TABS:
            raise ValueError(f"unknown tab: {tab}")
        self.tab = tab

    def view_all(self):
        self.tab = "all"

    @property
    def displayed(self) -> list[Entry]:
        if self.tab == "favorites":
            return [e for e in self.entries if e.is_favorite]
        # settings is a view of its own, the list is left unfiltered
        return list(self.entries)

    def find(self, entry_id: str) -> Optional[Entry]:
        for entry in self.entries:
            if entry.id == entry_id:
                return entry
        return None
