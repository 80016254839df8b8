"""Sync engine model definitions."""
from datetime import datetime
from enum import Enum
from typing import Literal, Optional

from pydantic import BaseModel, Field


class SyncStatus(str, Enum):
    """Sync engine states."""

    IDLE = "idle"
    SYNCING = "syncing"
    SUCCESS = "success"
    ERROR = "error"
    OFFLINE = "offline"
    NOT_CONFIGURED = "not_configured"


class ReconcileOutcome(str, Enum):
    """What happened to one remote row during the pull phase."""

    INSERTED = "inserted"
    SKIPPED_TOMBSTONE = "skipped_tombstone"
    LOCAL_WINS = "local_wins"
    DELETED = "deleted"
    OVERWRITTEN = "overwritten"


class RemoteConfig(BaseModel):
    """Remote backend endpoint and credentials."""

    url: str = Field(min_length=1)
    api_key: str = Field(min_length=1)


class SyncResult(BaseModel):
    """Counts collected during one sync cycle."""

    pushed: dict[str, int] = {}
    pulled: dict[str, int] = {}
    purged: dict[str, int] = {}


class SyncState(BaseModel):
    """Current sync status as exposed to clients."""

    status: SyncStatus
    message: Optional[str] = None
    last_sync_at: Optional[datetime] = None
    last_result: Optional[SyncResult] = None


class AppStateChange(BaseModel):
    """Application lifecycle transition reported by the client."""

    state: Literal["active", "inactive", "background"]
