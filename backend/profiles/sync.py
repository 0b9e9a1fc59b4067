"""
Sync orchestration: handle directory -> extractor -> normalizer -> store.

Per (user, platform) a sync moves Idle -> Syncing -> Idle. Entering Syncing is
an atomic check-and-set on the persisted handle row, so two concurrent requests
for the same pair cannot both fetch. Syncs for one user run one platform at a
time; a failing platform is recorded and the rest carry on.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone

import config
from activity.extract import activity_from_profile
from activity.merge import merge_with_counts
from activity.records import ProblemRecord, Progress
from database.store import RecordStore
from errors import NotFound, SyncError, SyncInProgress, ValidationError
from profiles.platforms import PlatformHandle, parse_platform, validate_handles
from profiles.profile import CanonicalProfile
from scrape.registry import fetch_profile

log = logging.getLogger(__name__)


@dataclass
class SyncReport:
    succeeded: list[str] = field(default_factory=list)
    failed: list[dict] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {"succeeded": list(self.succeeded), "failed": list(self.failed)}


class SyncOrchestrator:
    def __init__(self, store: RecordStore | None = None, fetcher=None, clock=None,
                 stale_after: int | None = None):
        self.store = store or RecordStore()
        # fetcher(platform, handle) -> raw record
        self.fetcher = fetcher or fetch_profile
        self.clock = clock or (lambda: datetime.now(timezone.utc))
        self.stale_after = config.SYNC_LOCK_STALE_SECONDS if stale_after is None else stale_after

    # handle directory

    def verify_handle(self, platform, handle: str) -> dict:
        """Run the extractor once; NotFound/Unavailable propagate to the caller."""
        platform = parse_platform(platform)
        handle = (handle or "").strip()
        if not handle:
            raise ValidationError("Handle must not be empty", platform=platform.value)
        return self.fetcher(platform, handle)

    def add_handle(self, user_id, platform, handle: str, verify: bool = False) -> PlatformHandle:
        platform = parse_platform(platform)
        handle = (handle or "").strip()
        if not handle:
            raise ValidationError("Handle must not be empty", platform=platform.value)
        if verify:
            self.verify_handle(platform, handle)
        log.info("User %s set %s handle to %s", user_id, platform, handle)
        return self.store.upsert_handle(user_id, platform, handle)

    def set_handles(self, user_id, entries) -> list[PlatformHandle]:
        """Replace every handle of the user; duplicates reject the whole batch."""
        pairs = validate_handles(entries)
        return self.store.replace_handles(user_id, pairs)

    def remove_handle(self, user_id, platform) -> None:
        """Drop the handle and its synced profile. Progress is kept."""
        platform = parse_platform(platform)
        if not self.store.delete_handle(user_id, platform):
            raise NotFound(f"No {platform} handle configured", platform=platform.value)
        self.store.delete_profile(user_id, platform)

    # syncing

    def sync_one(self, user_id, platform) -> CanonicalProfile:
        platform = parse_platform(platform)
        entry = self.store.get_handle(user_id, platform)
        if entry is None or not entry.handle.strip():
            raise NotFound(f"No {platform} handle configured", platform=platform.value)

        started = self.clock()
        if not self.store.try_begin_sync(user_id, platform, started, self.stale_after):
            raise SyncInProgress(f"A {platform} sync is already running", platform=platform.value)

        log.info("Syncing %s profile %s for user %s", platform, entry.handle, user_id)
        try:
            raw = self.fetcher(platform, entry.handle)
            now = self.clock()
            profile = CanonicalProfile.from_raw(platform, entry.handle, raw, now)
            self.store.upsert_profile(user_id, profile)
            self._merge_activity(user_id, platform, raw, now)
        except Exception as e:
            if isinstance(e, SyncError) and not e.platform:
                e.platform = platform.value
            self.store.finish_sync(user_id, platform, error=str(e) or type(e).__name__)
            log.warning("%s sync for user %s failed: %s", platform, user_id, e)
            raise

        self.store.finish_sync(user_id, platform, synced_at=now)
        return profile

    def sync_all(self, user_id) -> SyncReport:
        report = SyncReport()
        for entry in self.store.list_handles(user_id):
            if not entry.handle.strip():
                continue
            try:
                self.sync_one(user_id, entry.platform)
            except SyncError as e:
                report.failed.append({"platform": entry.platform.value, "error": e.message})
            except Exception as e:
                log.exception("Unexpected error syncing %s for user %s", entry.platform, user_id)
                report.failed.append({"platform": entry.platform.value, "error": str(e) or type(e).__name__})
            else:
                report.succeeded.append(entry.platform.value)
        log.info("Sync for user %s: %d succeeded, %d failed",
                 user_id, len(report.succeeded), len(report.failed))
        return report

    # progress

    def _merge_activity(self, user_id, platform, raw, now) -> Progress:
        activity = activity_from_profile(platform, raw, now=now)
        existing = self.store.get_progress(user_id, platform)
        progress, counts = merge_with_counts(existing, platform, activity, user_id=user_id, now=now)
        self.store.upsert_progress(user_id, progress)
        log.info("%s progress for user %s: %d added, %d updated, %d skipped",
                 platform, user_id, counts.added, counts.updated, counts.skipped)
        return progress

    def record_problem(self, user_id, platform, data) -> Progress:
        """
        Manual entry; a malformed record is rejected rather than skipped.

        Clients normally send no timestamps, so the attempt (and, for a solve,
        the solve) is stamped now. An explicit but unreadable time is still an error.
        """
        platform = parse_platform(platform)
        now = self.clock()
        if isinstance(data, dict) and not (data.get("attempted_at") or data.get("attemptedAt")):
            data = dict(data, attempted_at=now.isoformat())
        record = ProblemRecord.from_dict(data, platform=platform.value)
        existing = self.store.get_progress(user_id, platform)
        progress, _ = merge_with_counts(existing, platform, [record], user_id=user_id, now=now)
        self.store.upsert_progress(user_id, progress)
        return progress

    def resync_progress(self, user_id) -> list[Progress]:
        """Re-derive progress from every stored profile without refetching."""
        out = []
        now = self.clock()
        for profile in self.store.list_profiles(user_id):
            out.append(self._merge_activity(user_id, profile.platform, profile.raw_data, now))
        return out

    def refresh(self, user_id) -> SyncReport:
        """Sync every platform, then rebuild progress from whatever profiles are stored."""
        report = self.sync_all(user_id)
        self.resync_progress(user_id)
        return report
