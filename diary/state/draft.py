# draft state — the one entry open in the editor
# replaced wholesale on selection, reset after save, never written back implicitly

import time
from datetime import date
from typing import Any, Optional

from pydantic import ValidationError

from diary.models.entry import AttachmentDescriptor, Entry, EntryDraft, ImageDescriptor
from diary.services.entry_store import SERVER_TIMESTAMP
from diary.state.dates import editor_date, entry_date
from diary.state.errors import DraftFieldError

EDITABLE_FIELDS = {
    "title": "title",
    "content": "content",
    "mood": "mood",
    "date": "date",
    "images": "images",
    "attachments": "attachments",
    "is_favorite": "is_favorite",
    "isFavorite": "is_favorite",
    "is_locked": "is_locked",
    "isLocked": "is_locked",
}


def format_size(size_bytes: int) -> str:
    return f"{size_bytes / 1024:.1f} KB"


class DraftState:
    def __init__(self):
        self.entry = EntryDraft()

    def reset(self):
        self.entry = EntryDraft()

    def update_field(self, name: str, value: Any):
        """replace one attribute, checking only that the value has the right type"""
        field = EDITABLE_FIELDS.get(name)
        if field is None:
            raise DraftFieldError(f"Unknown field: {name}")

        data = self.entry.model_dump()
        data[field] = value
        try:
            self.entry = EntryDraft.model_validate(data)
        except ValidationError as e:
            raise DraftFieldError(f"Invalid value for {name}") from e

    def select(self, entry: Entry):
        """open a copy of a persisted entry"""
        self.entry = EntryDraft.model_validate(entry.model_dump())

    def is_blank(self) -> bool:
        return not self.entry.title.strip() and not self.entry.content.strip()

    @property
    def char_count(self) -> int:
        return len(self.entry.content)

    def editor_date(self, today: Optional[date] = None) -> str:
        return editor_date(self.entry.date, today)

    # images and attachments

    def _next_descriptor_id(self) -> int:
        now_ms = int(time.time() * 1000)
        taken = [d.id for d in self.entry.images] + [d.id for d in self.entry.attachments]
        return max([now_ms] + [i + 1 for i in taken])

    def add_image(self, url: str, name: str = "", local_ref: Optional[str] = None) -> ImageDescriptor:
        image = ImageDescriptor(id=self._next_descriptor_id(), url=url, name=name, localRef=local_ref)
        self.entry.images = [*self.entry.images, image]
        return image

    def remove_image(self, image_id: int):
        self.entry.images = [img for img in self.entry.images if img.id != image_id]

    def add_attachment(self, name: str, size_bytes: int, local_ref: Optional[str] = None) -> AttachmentDescriptor:
        attachment = AttachmentDescriptor(
            id=self._next_descriptor_id(),
            name=name,
            size=format_size(size_bytes),
            localRef=local_ref,
        )
        self.entry.attachments = [*self.entry.attachments, attachment]
        return attachment

    def remove_attachment(self, attachment_id: int):
        self.entry.attachments = [f for f in self.entry.attachments if f.id != attachment_id]

    def to_document(self, owner_id: str, today: Optional[date] = None) -> dict:
        """the new document a save writes. local file handles are not persisted."""
        d = self.entry
        return {
            "owner_id": owner_id,
            "title": d.title or "Untitled",
            "content": d.content or "",
            "mood": d.mood or "neutral",
            "created_at": SERVER_TIMESTAMP,
            "date": entry_date(d.date, today),
            "images": [img.model_dump(exclude={"local_ref"}) for img in d.images],
            "attachments": [f.model_dump(exclude={"local_ref"}) for f in d.attachments],
            "is_favorite": d.is_favorite,
            "is_locked": d.is_locked,
        }
