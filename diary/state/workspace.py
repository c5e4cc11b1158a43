# diary workspace — one signed-in client's state
# binds the session provider to a single live entry subscription and owns
# the projection, the draft and the mobile sidebar flag

import asyncio
import logging
from typing import Any, Optional

from bson.errors import InvalidId
from pymongo.errors import PyMongoError

from diary.config import settings
from diary.models.entry import DiaryView, Entry, EntryListItem, MenuItem, UserView
from diary.models.user import Identity
from diary.services.entry_store import EntryStore, LiveQuery
from diary.services.session import SessionProvider
from diary.state.dates import list_date
from diary.state.draft import DraftState
from diary.state.errors import DraftValidationError, StoreOperationError
from diary.state.projection import MENU_LABELS, TABS, EntryListProjection

logger = logging.getLogger(__name__)

EMPTY_DRAFT_WARNING = "Please write a title or some content first!"
LOGIN_REQUIRED_WARNING = "You need to be logged in to save."
DELETE_FAILED_MESSAGE = "Could not delete entry."


def user_initials(identity: Identity) -> str:
    if identity.email:
        return identity.email[0].upper()
    return "U"


class DiaryWorkspace:
    """session binding, entry list projection and draft for one client.

    the entry list only changes when the live subscription pushes a snapshot;
    save and delete never touch it directly.
    """

    def __init__(
        self,
        session_id: str,
        session: SessionProvider,
        store: EntryStore,
        collection: Optional[str] = None,
    ):
        self.session_id = session_id
        self.session = session
        self.store = store
        self.collection = collection or settings.ENTRIES_COLLECTION

        self.identity: Optional[Identity] = None
        self.loading = True
        self.projection = EntryListProjection()
        self.draft = DraftState()
        self.sidebar_open = False

        self._subscription: Optional[LiveQuery] = None
        self._generation = 0
        self._pending_saves = 0
        self._binding_lock = asyncio.Lock()
        self._unsubscribe_session = None

    # session binding

    def start(self):
        """subscribe to identity changes, once"""
        if self._unsubscribe_session is None:
            self._unsubscribe_session = self.session.subscribe(self._on_identity_change)

    async def stop(self):
        if self._unsubscribe_session is not None:
            self._unsubscribe_session()
            self._unsubscribe_session = None
        async with self._binding_lock:
            await self._release_subscription()

    async def _release_subscription(self):
        if self._subscription is not None:
            subscription, self._subscription = self._subscription, None
            await subscription.close()

    async def _on_identity_change(self, identity: Optional[Identity]):
        async with self._binding_lock:
            self.loading = False
            self.identity = identity

            # the old subscription is fully closed before a new one opens
            await self._release_subscription()

            if identity is None:
                self.projection.clear()
                return

            self._generation += 1
            generation = self._generation
            self._subscription = self.store.subscribe_query(
                self.collection,
                identity.id,
                lambda snapshot: self._apply_snapshot(generation, snapshot),
            )

    def _apply_snapshot(self, generation: int, snapshot: list[dict]):
        if self._subscription is None or generation != self._generation:
            logger.debug(f"Dropping stale snapshot (generation {generation}, active {self._generation})")
            return
        self.projection.replace(snapshot)

    async def settled(self):
        """wait for snapshots already requested on the active subscription"""
        if self._subscription is not None:
            await self._subscription.settled()

    # list intents

    def set_tab(self, tab: str):
        self.projection.set_tab(tab)

    def view_all(self):
        self.projection.view_all()

    def open_sidebar(self):
        self.sidebar_open = True

    def close_sidebar(self):
        self.sidebar_open = False

    def select_entry(self, entry: Entry):
        self.draft.select(entry)
        self.sidebar_open = False

    # draft intents

    def update_field(self, name: str, value: Any):
        self.draft.update_field(name, value)

    def update_fields(self, fields: dict):
        for name, value in fields.items():
            self.draft.update_field(name, value)

    @property
    def saving(self) -> bool:
        return self._pending_saves > 0

    async def save(self) -> str:
        """create a new entry from the draft, then reset the draft.

        always creates, even when the draft was opened from a saved entry.
        """
        if self.draft.is_blank():
            raise DraftValidationError(EMPTY_DRAFT_WARNING)
        if self.identity is None:
            raise DraftValidationError(LOGIN_REQUIRED_WARNING)

        document = self.draft.to_document(self.identity.id)

        self._pending_saves += 1
        try:
            entry_id = await self.store.create(self.collection, document)
        except PyMongoError as e:
            logger.error(f"Error saving entry: {e}")
            raise StoreOperationError(f"Error saving: {e}") from e
        finally:
            self._pending_saves -= 1

        self.draft.reset()
        return entry_id

    async def delete(self, entry_id: str):
        """delete an entry, clearing the editor if it was the one open"""
        if self.identity is None:
            raise StoreOperationError(DELETE_FAILED_MESSAGE)

        try:
            await self.store.delete_by_id(self.collection, entry_id, owner_id=self.identity.id)
        except (PyMongoError, InvalidId) as e:
            logger.error(f"Error deleting entry {entry_id}: {e}")
            raise StoreOperationError(DELETE_FAILED_MESSAGE) from e

        if self.draft.entry.id == entry_id:
            self.draft.reset()

    async def logout(self):
        await self.session.sign_out()

    # view

    @property
    def status(self) -> str:
        if self.loading:
            return "loading"
        return "authenticated" if self.identity is not None else "anonymous"

    def view(self) -> DiaryView:
        user = None
        if self.identity is not None:
            user = UserView(
                id=self.identity.id,
                displayName=self.identity.display_name,
                email=self.identity.email,
                photoURL=self.identity.photo_url,
                initials=user_initials(self.identity),
            )

        entries = [
            EntryListItem(**entry.model_dump(), display_date=list_date(entry.date or entry.created_at))
            for entry in self.projection.displayed
        ]
        menu = [
            MenuItem(id=tab, label=MENU_LABELS[tab], active=tab == self.projection.tab)
            for tab in TABS
        ]

        return DiaryView(
            status=self.status,
            user=user,
            tab=self.projection.tab,
            menu=menu,
            entries=entries,
            entry_count=len(entries),
            draft=self.draft.entry,
            char_count=self.draft.char_count,
            editor_date=self.draft.editor_date(),
            saving=self.saving,
            sidebar_open=self.sidebar_open,
        )
