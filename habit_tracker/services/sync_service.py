"""Sync service - offline-first reconciliation between the local store and the remote backend.

One cycle pushes dirty rows (users, goals, habit_logs), pulls rows changed
remotely since the last successful cycle in the same order, records the new
sync time and purges confirmed tombstones. Conflicts are settled per row by
``updated_at`` (last write wins).
"""
from datetime import datetime
from typing import Awaitable, Callable, Optional

from loguru import logger

from habit_tracker.config import Settings, settings as default_settings
from habit_tracker.database import SYNC_TABLES, StoreNotInitializedError
from habit_tracker.models.sync import ReconcileOutcome, RemoteConfig, SyncResult, SyncState, SyncStatus
from habit_tracker.services.remote_store import RemoteStore
from habit_tracker.services.sync_store import LocalSyncStore
from habit_tracker.utils.connectivity import check_connectivity
from habit_tracker.utils.dates import format_timestamp, parse_timestamp, utc_now
from habit_tracker.utils.sync_rows import to_local_row, to_remote_row


LAST_SYNC_AT = "last_sync_at"
REMOTE_URL = "remote_url"
REMOTE_API_KEY = "remote_api_key"

SyncListener = Callable[[SyncStatus, Optional[str]], None]
RemoteFactory = Callable[[RemoteConfig], RemoteStore]


class SyncEngine:
    """Runs sync cycles and broadcasts status transitions to subscribers."""

    def __init__(
        self,
        store: LocalSyncStore,
        config: Optional[Settings] = None,
        remote_factory: Optional[RemoteFactory] = None,
        connectivity_check: Optional[Callable[[], Awaitable[bool]]] = None,
        remote_override: Optional[RemoteConfig] = None,
    ):
        """
        Initialize the engine.

        Args:
            store: Local store operations
            config: Settings (batch size, pull limit, default credentials)
            remote_factory: Builds a remote client for a config
            connectivity_check: Coroutine function returning True when online
            remote_override: Credentials used for every cycle instead of the
                saved ones and the settings defaults
        """
        self.store = store
        self.config = config or default_settings
        self._remote_factory = remote_factory or self._default_remote_factory
        self._connectivity_check = connectivity_check or self._default_connectivity_check
        self.remote_override = remote_override
        self._listeners: list[SyncListener] = []
        self._in_progress = False

        self.status = SyncStatus.IDLE
        self.message: Optional[str] = None
        self.last_result: Optional[SyncResult] = None

    def _default_remote_factory(self, remote_config: RemoteConfig) -> RemoteStore:
        return RemoteStore(remote_config, timeout=self.config.remote_timeout_seconds)

    async def _default_connectivity_check(self) -> bool:
        return await check_connectivity(
            self.config.connectivity_check_url,
            self.config.connectivity_timeout_seconds,
        )

    @property
    def in_progress(self) -> bool:
        return self._in_progress

    # -- subscribers ---------------------------------------------------------

    def subscribe(self, listener: SyncListener) -> Callable[[], None]:
        """
        Register a status listener; it is called right away with the current status.

        Returns:
            A function that removes the listener
        """
        self._listeners.append(listener)
        listener(self.status, self.message)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, status: SyncStatus, message: Optional[str] = None) -> None:
        self.status = status
        self.message = message
        logger.info("Sync status: {}{}", status.value, f" ({message})" if message else "")

        for listener in list(self._listeners):
            try:
                listener(status, message)
            except Exception:
                logger.exception("Sync status listener failed")

    # -- configuration -------------------------------------------------------

    async def load_remote_config(self) -> Optional[RemoteConfig]:
        """Override first, then saved credentials, then the settings defaults; None if none is complete."""
        if self.remote_override is not None:
            return self.remote_override
        url = await self.store.get_sync_meta(REMOTE_URL) or self.config.remote_url
        api_key = await self.store.get_sync_meta(REMOTE_API_KEY) or self.config.remote_api_key
        if url and api_key:
            return RemoteConfig(url=url, api_key=api_key)
        return None

    async def save_remote_config(self, remote_config: RemoteConfig) -> None:
        """Persist remote credentials; they apply from the next cycle."""
        await self.store.set_sync_meta(REMOTE_URL, remote_config.url.strip())
        await self.store.set_sync_meta(REMOTE_API_KEY, remote_config.api_key.strip())

    async def clear_remote_config(self) -> None:
        """Forget saved remote credentials."""
        await self.store.delete_sync_meta(REMOTE_URL)
        await self.store.delete_sync_meta(REMOTE_API_KEY)

    async def get_last_sync_at(self) -> Optional[datetime]:
        return parse_timestamp(await self.store.get_sync_meta(LAST_SYNC_AT))

    async def get_state(self) -> SyncState:
        return SyncState(
            status=self.status,
            message=self.message,
            last_sync_at=await self.get_last_sync_at(),
            last_result=self.last_result,
        )

    # -- sync cycle ----------------------------------------------------------

    async def perform_sync(self) -> SyncStatus:
        """
        Run one sync cycle unless one is already running.

        Returns:
            The status the cycle ended in (or the current status if skipped)

        Raises:
            StoreNotInitializedError: If the local store is not open
        """
        if self._in_progress:
            logger.debug("Sync already in progress, skipping trigger")
            return self.status

        self._in_progress = True
        try:
            if not await self._connectivity_check():
                self._notify(SyncStatus.OFFLINE)
                return self.status

            remote_config = await self.load_remote_config()
            if remote_config is None:
                self._notify(SyncStatus.NOT_CONFIGURED)
                return self.status

            self._notify(SyncStatus.SYNCING)
            result = SyncResult()

            async with self._remote_factory(remote_config) as remote:
                for table in SYNC_TABLES:
                    result.pushed[table] = await self._push_table(remote, table)

                last_sync_at = await self.store.get_sync_meta(LAST_SYNC_AT)
                for table in SYNC_TABLES:
                    result.pulled[table] = await self._pull_table(remote, table, last_sync_at)

            await self.store.set_sync_meta(LAST_SYNC_AT, format_timestamp(utc_now()))
            result.purged = await self.store.purge_deleted_rows()

            self.last_result = result
            logger.info(
                "Sync finished: pushed={} pulled={} purged={}",
                result.pushed,
                result.pulled,
                result.purged,
            )
            self._notify(SyncStatus.SUCCESS)

        except StoreNotInitializedError as e:
            self._notify(SyncStatus.ERROR, str(e))
            raise
        except Exception as e:
            logger.exception("Sync failed")
            self._notify(SyncStatus.ERROR, str(e) or type(e).__name__)
        finally:
            self._in_progress = False

        return self.status

    async def _push_table(self, remote: RemoteStore, table: str) -> int:
        """Upsert every dirty row of a table in batches, then mark them clean."""
        dirty_rows = await self.store.get_dirty_rows(table)
        if not dirty_rows:
            return 0

        remote_rows = [to_remote_row(table, row) for row in dirty_rows]
        batch_size = self.config.sync_push_batch_size

        for start in range(0, len(remote_rows), batch_size):
            await remote.upsert(table, remote_rows[start:start + batch_size])

        for row in dirty_rows:
            await self.store.clear_dirty_flag(table, row["_id"], row["updated_at"])

        logger.debug("Pushed {} rows to {}", len(dirty_rows), table)
        return len(dirty_rows)

    async def _pull_table(
        self,
        remote: RemoteStore,
        table: str,
        last_sync_at: Optional[str],
    ) -> int:
        """Apply remote rows changed since the last sync; returns rows applied."""
        remote_rows = await remote.select(
            table,
            updated_after=last_sync_at,
            limit=self.config.sync_pull_limit,
        )

        applied = 0
        for remote_row in remote_rows:
            outcome = await self.store.upsert_from_remote(table, to_local_row(table, remote_row))
            if outcome in (
                ReconcileOutcome.INSERTED,
                ReconcileOutcome.OVERWRITTEN,
                ReconcileOutcome.DELETED,
            ):
                applied += 1

        logger.debug("Pulled {} rows from {} ({} applied)", len(remote_rows), table, applied)
        return applied
