"""One-shot sync script: run a single sync cycle against the remote backend.

Usage:
    # Sync with the credentials saved in the local store (or .env)
    python scripts/sync.py

    # Sync with explicit credentials (not saved)
    python scripts/sync.py --remote-url https://xyz.supabase.co --remote-api-key KEY

    # Save credentials for later cycles, then sync
    python scripts/sync.py --remote-url https://xyz.supabase.co --remote-api-key KEY --save
"""
import argparse
import asyncio
import sys
from pathlib import Path
from typing import Optional

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from habit_tracker.config import Settings
from habit_tracker.database import Database
from habit_tracker.models.sync import RemoteConfig, SyncStatus
from habit_tracker.services.sync_service import SyncEngine
from habit_tracker.services.sync_store import LocalSyncStore
from habit_tracker.utils.logging import setup_logging


def build_settings(args: argparse.Namespace) -> Settings:
    """Settings from the environment with command-line overrides applied."""
    overrides = {
        "mongodb_url": args.mongodb_url,
        "mongodb_db_name": args.db_name,
        "log_level": args.log_level,
    }
    return Settings(**{key: value for key, value in overrides.items() if value is not None})


def explicit_remote_config(args: argparse.Namespace) -> Optional[RemoteConfig]:
    """Remote credentials given on the command line, or None unless both are set."""
    if args.remote_url and args.remote_api_key:
        return RemoteConfig(url=args.remote_url.strip(), api_key=args.remote_api_key.strip())
    return None


async def run(args: argparse.Namespace) -> int:
    config = build_settings(args)
    setup_logging(level=config.log_level)

    explicit = explicit_remote_config(args)
    if explicit is None and (args.save or args.remote_url or args.remote_api_key):
        print("--remote-url and --remote-api-key must be given together")
        return 2

    database = Database(config)
    await database.connect()
    try:
        if args.save:
            engine = SyncEngine(LocalSyncStore(database), config)
            await engine.save_remote_config(explicit)
            print("Saved remote credentials")
        else:
            engine = SyncEngine(LocalSyncStore(database), config, remote_override=explicit)

        status = await engine.perform_sync()
        state = await engine.get_state()
    finally:
        await database.disconnect()

    print(f"\nSync {status.value}")
    if state.message:
        print(f"  {state.message}")
    if state.last_result:
        print(f"  Pushed: {state.last_result.pushed}")
        print(f"  Pulled: {state.last_result.pulled}")
        print(f"  Purged: {state.last_result.purged}")

    return 0 if status is SyncStatus.SUCCESS else 1


def main():
    parser = argparse.ArgumentParser(description="Run one sync cycle")
    parser.add_argument("--mongodb-url", help="MongoDB connection URL")
    parser.add_argument("--db-name", help="Local database name")
    parser.add_argument("--remote-url", help="Remote backend base URL")
    parser.add_argument("--remote-api-key", help="Remote backend API key")
    parser.add_argument(
        "--save",
        action="store_true",
        help="Persist the given remote credentials in the local store",
    )
    parser.add_argument("--log-level", help="Log level (default from settings)")
    args = parser.parse_args()

    sys.exit(asyncio.run(run(args)))


if __name__ == "__main__":
    main()
