# entry models — persisted diary entries, the editable draft, and the rendered view
# api uses camelCase aliases, mongodb documents use snake_case field names

from datetime import datetime
from typing import Optional, Literal
from pydantic import BaseModel, Field, field_validator

Mood = Literal["happy", "neutral", "sad"]
Tab = Literal["all", "favorites", "settings"]


class ImageDescriptor(BaseModel):
    """image attached to an entry in the editor"""
    id: int
    url: str = ""
    name: str = ""
    local_ref: Optional[str] = Field(None, alias="localRef", description="transient handle, never persisted")

    model_config = {"populate_by_name": True}


class AttachmentDescriptor(BaseModel):
    """file attached to an entry in the editor"""
    id: int
    name: str
    size: str = Field(..., description="display size, e.g. '12.5 KB'")
    local_ref: Optional[str] = Field(None, alias="localRef", description="transient handle, never persisted")

    model_config = {"populate_by_name": True}


class Entry(BaseModel):
    """persisted diary entry as delivered by a live query snapshot"""
    id: str
    owner_id: str = Field(..., alias="ownerId")
    title: str = ""
    content: str = ""
    mood: Mood = "neutral"
    created_at: Optional[datetime] = Field(None, alias="createdAt")
    date: str = ""
    images: list[ImageDescriptor] = Field(default_factory=list)
    attachments: list[AttachmentDescriptor] = Field(default_factory=list)
    is_favorite: bool = Field(False, alias="isFavorite")
    is_locked: bool = Field(False, alias="isLocked")

    model_config = {"populate_by_name": True}

    @field_validator("images", "attachments", mode="before")
    @classmethod
    def _missing_list(cls, v):
        return [] if v is None else v


class EntryDraft(BaseModel):
    """the single entry open in the editor — new (no id) or a copy of a persisted one"""
    id: Optional[str] = None
    owner_id: Optional[str] = Field(None, alias="ownerId")
    title: str = ""
    content: str = ""
    mood: Mood = "neutral"
    created_at: Optional[datetime] = Field(None, alias="createdAt")
    date: str = ""
    images: list[ImageDescriptor] = Field(default_factory=list)
    attachments: list[AttachmentDescriptor] = Field(default_factory=list)
    is_favorite: bool = Field(False, alias="isFavorite")
    is_locked: bool = Field(False, alias="isLocked")

    model_config = {"populate_by_name": True}


class DraftUpdate(BaseModel):
    """partial editor update — only the fields present are written"""
    title: Optional[str] = None
    content: Optional[str] = None
    mood: Optional[Mood] = None
    date: Optional[str] = None
    is_favorite: Optional[bool] = Field(None, alias="isFavorite")
    is_locked: Optional[bool] = Field(None, alias="isLocked")

    model_config = {"populate_by_name": True}


class ImageAdd(BaseModel):
    url: str = Field(..., min_length=1)
    name: str = ""
    local_ref: Optional[str] = Field(None, alias="localRef")

    model_config = {"populate_by_name": True}


class AttachmentAdd(BaseModel):
    name: str = Field(..., min_length=1)
    size_bytes: int = Field(..., alias="sizeBytes", ge=0)
    local_ref: Optional[str] = Field(None, alias="localRef")

    model_config = {"populate_by_name": True}


class TabChange(BaseModel):
    tab: Tab


# rendered view

class MenuItem(BaseModel):
    id: Tab
    label: str
    active: bool = False


class EntryListItem(Entry):
    """entry as shown in the sidebar list"""
    display_date: str = Field("Unknown date", alias="displayDate")


class UserView(BaseModel):
    id: str
    display_name: Optional[str] = Field(None, alias="displayName")
    email: Optional[str] = None
    photo_url: Optional[str] = Field(None, alias="photoURL")
    initials: str = "U"

    model_config = {"populate_by_name": True}


class DiaryView(BaseModel):
    """everything needed to render the sidebar and the editor"""
    status: Literal["loading", "authenticated", "anonymous"]
    user: Optional[UserView] = None
    tab: Tab = "all"
    menu: list[MenuItem] = Field(default_factory=list)
    entries: list[EntryListItem] = Field(default_factory=list)
    entry_count: int = Field(0, alias="entryCount")
    draft: EntryDraft = Field(default_factory=EntryDraft)
    char_count: int = Field(0, alias="charCount")
    editor_date: str = Field("", alias="editorDate")
    saving: bool = False
    sidebar_open: bool = Field(False, alias="sidebarOpen")

    model_config = {"populate_by_name": True}
