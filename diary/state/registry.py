# workspace registry — live diary workspaces keyed by session id
# one entry store per database so every workspace of a user sees the same live queries
# workspaces idle for longer than a refresh token lives are closed on the next sweep

import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional

from diary.config import settings
from diary.services.entry_store import EntryStore
from diary.services.federated import GoogleTokenVerifier
from diary.services.session import SessionProvider
from diary.state.workspace import DiaryWorkspace

logger = logging.getLogger(__name__)


class WorkspaceRegistry:
    def __init__(
        self,
        verifier: Optional[GoogleTokenVerifier] = None,
        idle_timeout: Optional[timedelta] = None,
    ):
        self._workspaces: dict[str, DiaryWorkspace] = {}
        self._last_seen: dict[str, datetime] = {}
        self._ended: dict[str, datetime] = {}
        self._store: Optional[EntryStore] = None
        # shared so google's signing keys are fetched once, not per sign-in
        self._verifier = verifier or GoogleTokenVerifier()
        self.idle_timeout = idle_timeout or timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS)

    def _store_for(self, db) -> EntryStore:
        if self._store is None or self._store.db is not db:
            self._store = EntryStore(db)
        return self._store

    def _create(self, session_id: str, db) -> DiaryWorkspace:
        session = SessionProvider(db, verifier=self._verifier)
        workspace = DiaryWorkspace(session_id, session, self._store_for(db))
        workspace.start()
        self._workspaces[session_id] = workspace
        self._touch(session_id)
        return workspace

    def _touch(self, session_id: str):
        self._last_seen[session_id] = datetime.now(timezone.utc)

    async def open(self, db) -> DiaryWorkspace:
        """new anonymous workspace, ready for a sign-in"""
        await self.sweep()
        return self._create(secrets.token_urlsafe(16), db)

    def get(self, session_id: str) -> Optional[DiaryWorkspace]:
        return self._workspaces.get(session_id)

    async def resume(self, session_id: str, user_id: str, db) -> Optional[DiaryWorkspace]:
        """workspace for a bearer token, rebuilt from the user id if this process has none"""
        workspace = self._workspaces.get(session_id)
        if workspace is not None:
            self._touch(session_id)
            return workspace
        if session_id in self._ended:
            return None

        logger.info(f"Restoring workspace session {session_id}")
        workspace = self._create(session_id, db)
        identity = await workspace.session.restore(user_id)
        if identity is None:
            await self.close(session_id)
            return None
        return workspace

    async def close(self, session_id: str):
        self._last_seen.pop(session_id, None)
        workspace = self._workspaces.pop(session_id, None)
        if workspace is not None:
            await workspace.stop()

    async def end(self, session_id: str):
        """sign-out: close the workspace and refuse to restore it from old tokens"""
        self._ended[session_id] = datetime.now(timezone.utc)
        await self.close(session_id)

    async def sweep(self, now: Optional[datetime] = None) -> int:
        """close workspaces no token can reach anymore, returns how many were closed"""
        cutoff = (now or datetime.now(timezone.utc)) - self.idle_timeout

        idle = [sid for sid, seen in self._last_seen.items() if seen < cutoff]
        for session_id in idle:
            await self.close(session_id)

        # an ended session's tokens have all expired by now, nothing left to refuse
        for session_id in [sid for sid, ended in self._ended.items() if ended < cutoff]:
            del self._ended[session_id]

        if idle:
            logger.info(f"Closed {len(idle)} idle workspaces")
        return len(idle)

    async def close_all(self):
        for session_id in list(self._workspaces):
            await self.close(session_id)

    def __len__(self):
        return len(self._workspaces)


# singleton instance
registry = WorkspaceRegistry()


async def get_registry() -> WorkspaceRegistry:
    """dependency injection for the workspace registry"""
    return registry
