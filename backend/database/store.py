import json
from contextlib import contextmanager
from datetime import datetime, timedelta, timezone

from activity.records import Progress, parse_timestamp
from database.db import get_db
from profiles.platforms import PlatformHandle, parse_platform
from profiles.profile import CanonicalProfile


def _stamp(dt: datetime | None) -> str | None:
    # fixed width so stored stamps compare correctly as text
    if dt is None:
        return None
    return dt.astimezone(timezone.utc).isoformat(timespec="microseconds")


def _handle_from_row(row) -> PlatformHandle:
    return PlatformHandle(
        platform=parse_platform(row["platform"]),
        handle=row["handle"] or "",
        last_synced_at=parse_timestamp(row["last_synced_at"]),
        sync_in_progress=bool(row["sync_in_progress"]),
        last_sync_error=row["last_sync_error"],
        sync_started_at=parse_timestamp(row["sync_started_at"]),
    )


class RecordStore:
    """
    Handle directory plus profile/progress bodies, one row per (user, platform).

    Bodies are JSON text and are always replaced whole. Every method opens its
    own connection, so records are updated independently of each other.
    """

    def __init__(self, db_path: str | None = None):
        self.db_path = db_path

    @contextmanager
    def _db(self):
        conn = get_db(self.db_path)
        try:
            yield conn
            conn.commit()
        finally:
            conn.close()

    # handles

    def list_handles(self, user_id) -> list[PlatformHandle]:
        with self._db() as db:
            rows = db.execute(
                "SELECT * FROM platform_handles WHERE user_id = ? ORDER BY rowid",
                (user_id,)
            ).fetchall()
        return [_handle_from_row(r) for r in rows]

    def get_handle(self, user_id, platform) -> PlatformHandle | None:
        with self._db() as db:
            row = db.execute(
                "SELECT * FROM platform_handles WHERE user_id = ? AND platform = ?",
                (user_id, parse_platform(platform).value)
            ).fetchone()
        return _handle_from_row(row) if row else None

    def upsert_handle(self, user_id, platform, handle: str) -> PlatformHandle:
        """Set the handle for a platform, resetting any sync state it had."""
        platform = parse_platform(platform)
        with self._db() as db:
            db.execute(
                '''
                INSERT INTO platform_handles (user_id, platform, handle)
                VALUES (?, ?, ?)
                ON CONFLICT(user_id, platform) DO UPDATE SET
                    handle = excluded.handle,
                    last_synced_at = NULL,
                    sync_in_progress = 0,
                    sync_started_at = NULL,
                    last_sync_error = NULL
                ''',
                (user_id, platform.value, handle)
            )
        return PlatformHandle(platform=platform, handle=handle)

    def replace_handles(self, user_id, pairs) -> list[PlatformHandle]:
        """Swap the user's whole handle set for `pairs` in one transaction."""
        with self._db() as db:
            db.execute("DELETE FROM platform_handles WHERE user_id = ?", (user_id,))
            db.executemany(
                "INSERT INTO platform_handles (user_id, platform, handle) VALUES (?, ?, ?)",
                [(user_id, p.value, h) for p, h in pairs]
            )
        return [PlatformHandle(platform=p, handle=h) for p, h in pairs]

    def delete_handle(self, user_id, platform) -> bool:
        with self._db() as db:
            cur = db.execute(
                "DELETE FROM platform_handles WHERE user_id = ? AND platform = ?",
                (user_id, parse_platform(platform).value)
            )
        return cur.rowcount > 0

    def try_begin_sync(self, user_id, platform, now: datetime, stale_after: int) -> bool:
        """
        Atomically raise the sync flag. False when another sync holds it and
        its lock is younger than `stale_after` seconds.
        """
        cutoff = _stamp(now - timedelta(seconds=stale_after))
        with self._db() as db:
            cur = db.execute(
                '''
                UPDATE platform_handles
                SET sync_in_progress = 1, sync_started_at = ?, last_sync_error = NULL
                WHERE user_id = ? AND platform = ?
                  AND (sync_in_progress = 0 OR sync_started_at IS NULL OR sync_started_at < ?)
                ''',
                (_stamp(now), user_id, parse_platform(platform).value, cutoff)
            )
        return cur.rowcount == 1

    def finish_sync(self, user_id, platform, synced_at: datetime | None = None,
                    error: str | None = None) -> None:
        """Clear the flag; a success stamps last_synced_at, a failure records the error."""
        with self._db() as db:
            db.execute(
                '''
                UPDATE platform_handles
                SET sync_in_progress = 0,
                    sync_started_at = NULL,
                    last_synced_at = COALESCE(?, last_synced_at),
                    last_sync_error = ?
                WHERE user_id = ? AND platform = ?
                ''',
                (_stamp(synced_at), error, user_id, parse_platform(platform).value)
            )

    # profiles

    def get_profile(self, user_id, platform) -> CanonicalProfile | None:
        with self._db() as db:
            row = db.execute(
                "SELECT body FROM platform_profiles WHERE user_id = ? AND platform = ?",
                (user_id, parse_platform(platform).value)
            ).fetchone()
        return CanonicalProfile.from_dict(json.loads(row["body"])) if row else None

    def list_profiles(self, user_id) -> list[CanonicalProfile]:
        with self._db() as db:
            rows = db.execute(
                "SELECT body FROM platform_profiles WHERE user_id = ? ORDER BY rowid",
                (user_id,)
            ).fetchall()
        return [CanonicalProfile.from_dict(json.loads(r["body"])) for r in rows]

    def upsert_profile(self, user_id, profile: CanonicalProfile) -> None:
        with self._db() as db:
            db.execute(
                '''
                INSERT INTO platform_profiles (user_id, platform, body, updated_at)
                VALUES (?, ?, ?, CURRENT_TIMESTAMP)
                ON CONFLICT(user_id, platform)
                DO UPDATE SET body = excluded.body, updated_at = CURRENT_TIMESTAMP
                ''',
                (user_id, profile.platform.value, json.dumps(profile.to_dict()))
            )

    def delete_profile(self, user_id, platform) -> None:
        with self._db() as db:
            db.execute(
                "DELETE FROM platform_profiles WHERE user_id = ? AND platform = ?",
                (user_id, parse_platform(platform).value)
            )

    # progress

    def get_progress(self, user_id, platform) -> Progress | None:
        with self._db() as db:
            row = db.execute(
                "SELECT body FROM progress WHERE user_id = ? AND platform = ?",
                (user_id, parse_platform(platform).value)
            ).fetchone()
        return Progress.from_dict(json.loads(row["body"])) if row else None

    def list_progress(self, user_id) -> list[Progress]:
        with self._db() as db:
            rows = db.execute(
                "SELECT body FROM progress WHERE user_id = ? ORDER BY rowid",
                (user_id,)
            ).fetchall()
        return [Progress.from_dict(json.loads(r["body"])) for r in rows]

    def upsert_progress(self, user_id, progress: Progress) -> None:
        with self._db() as db:
            db.execute(
                '''
                INSERT INTO progress (user_id, platform, body, updated_at)
                VALUES (?, ?, ?, CURRENT_TIMESTAMP)
                ON CONFLICT(user_id, platform)
                DO UPDATE SET body = excluded.body, updated_at = CURRENT_TIMESTAMP
                ''',
                (user_id, parse_platform(progress.platform).value, json.dumps(progress.to_dict()))
            )
