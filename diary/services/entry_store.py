# entry store — owner-scoped diary documents with live queries
# writes go through the store so every matching live query gets a fresh full snapshot

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from bson import ObjectId

logger = logging.getLogger(__name__)

SnapshotCallback = Callable[[list[dict]], None]


class _ServerTimestamp:
    """placeholder resolved to the store's clock when a document is written"""

    def __repr__(self):
        return "SERVER_TIMESTAMP"


SERVER_TIMESTAMP = _ServerTimestamp()


def doc_to_snapshot_item(doc: dict) -> dict:
    """mongodb document -> {id, ...fields}"""
    item = {k: v for k, v in doc.items() if k != "_id"}
    item["id"] = str(doc["_id"])
    return item


class LiveQuery:
    """one live subscription: entries of a single owner, newest first.

    refresh requests go through a queue drained by a single pump task, so
    snapshots reach the callback in the order they were produced. queued
    requests are coalesced into one query since each snapshot is complete.
    """

    def __init__(self, store: "EntryStore", collection: str, owner_id: str, on_snapshot: SnapshotCallback):
        self._store = store
        self.collection = collection
        self.owner_id = owner_id
        self._on_snapshot = on_snapshot
        self._queue: asyncio.Queue = asyncio.Queue()
        self._task: Optional[asyncio.Task] = None
        self.closed = False

    def start(self):
        self._task = asyncio.create_task(self._pump())
        self.request_refresh()

    def matches(self, collection: str, owner_id: Optional[str]) -> bool:
        return collection == self.collection and owner_id == self.owner_id

    def request_refresh(self):
        if not self.closed:
            self._queue.put_nowait(None)

    async def _pump(self):
        while True:
            await self._queue.get()
            pending = 1
            try:
                while not self._queue.empty():
                    self._queue.get_nowait()
                    pending += 1

                snapshot = await self._store.query(self.collection, self.owner_id)
                if not self.closed:
                    self._on_snapshot(snapshot)
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.error(f"Live query for owner {self.owner_id} failed: {e}")
            finally:
                for _ in range(pending):
                    self._queue.task_done()

    async def settled(self):
        """wait until every requested refresh has been delivered"""
        await self._queue.join()

    async def close(self):
        """release the subscription. no snapshot is delivered once this returns."""
        if self.closed:
            return
        self.closed = True
        self._store._detach(self)

        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

        # unblock anyone waiting in settled()
        while not self._queue.empty():
            self._queue.get_nowait()
            self._queue.task_done()


class EntryStore:
    """document store for diary entries with in-process live queries"""

    def __init__(self, db):
        self.db = db
        self._live: list[LiveQuery] = []
        self._last_timestamp: Optional[datetime] = None

    def _server_time(self) -> datetime:
        """strictly increasing utc time, truncated to mongodb's millisecond precision"""
        now = datetime.now(timezone.utc)
        now = now.replace(microsecond=now.microsecond // 1000 * 1000)
        if self._last_timestamp is not None and now <= self._last_timestamp:
            now = self._last_timestamp + timedelta(milliseconds=1)
        self._last_timestamp = now
        return now

    def _notify(self, collection: str, owner_id: Optional[str]):
        for live in list(self._live):
            if live.matches(collection, owner_id):
                live.request_refresh()

    def _detach(self, live: LiveQuery):
        if live in self._live:
            self._live.remove(live)

    async def query(self, collection: str, owner_id: str) -> list[dict]:
        cursor = self.db.collection(collection).find({"owner_id": owner_id}).sort("created_at", -1)
        snapshot = []
        async for doc in cursor:
            snapshot.append(doc_to_snapshot_item(doc))
        return snapshot

    async def create(self, collection: str, document: dict) -> str:
        """insert a document, resolving SERVER_TIMESTAMP fields. returns the new id."""
        doc = {
            k: (self._server_time() if v is SERVER_TIMESTAMP else v)
            for k, v in document.items()
        }
        result = await self.db.collection(collection).insert_one(doc)
        entry_id = str(result.inserted_id)
        logger.info(f"Entry created: {entry_id} in {collection}")

        self._notify(collection, doc.get("owner_id"))
        return entry_id

    async def delete_by_id(self, collection: str, entry_id: str, owner_id: Optional[str] = None) -> bool:
        """delete one document. deleting a missing document is not an error."""
        query: dict = {"_id": ObjectId(entry_id)}
        if owner_id is not None:
            query["owner_id"] = owner_id

        doc = await self.db.collection(collection).find_one(query, {"owner_id": 1})
        result = await self.db.collection(collection).delete_one(query)
        deleted = result.deleted_count > 0
        if deleted:
            logger.info(f"Entry deleted: {entry_id} from {collection}")
            self._notify(collection, doc.get("owner_id") if doc else owner_id)
        return deleted

    def subscribe_query(self, collection: str, owner_id: str, on_snapshot: SnapshotCallback) -> LiveQuery:
        """start a live query, the first snapshot is delivered right away"""
        live = LiveQuery(self, collection, owner_id, on_snapshot)
        self._live.append(live)
        live.start()
        logger.info(f"Live query opened for owner {owner_id} on {collection}")
        return live

    async def close_all(self):
        for live in list(self._live):
            await live.close()
