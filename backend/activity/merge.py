import logging
from collections import namedtuple
from copy import deepcopy
from datetime import datetime, timezone

from activity.records import Progress, ProblemRecord
from activity.stats import compute_stats
from errors import ValidationError

log = logging.getLogger(__name__)

MergeCounts = namedtuple("MergeCounts", ["added", "updated", "skipped"])


def _find_match(problems, record: ProblemRecord) -> int:
    for i, existing in enumerate(problems):
        if existing.matches(record):
            return i
    return -1


def merge_with_counts(existing: Progress | None, platform, activity, user_id=None,
                      now: datetime | None = None, tz_name: str | None = None):
    """
    Fold `activity` into a copy of `existing` and recompute its stats.

    Returns (Progress, MergeCounts). Records that fail validation are skipped
    and only counted. A record matching an existing one (same problem_id, or
    same title) updates it in place; anything else is appended.
    """
    now = now or datetime.now(timezone.utc)
    if existing is not None:
        progress = deepcopy(existing)
        if user_id is not None:
            progress.user_id = user_id
    else:
        progress = Progress(platform=str(platform), user_id=user_id)

    added = updated = skipped = 0
    for item in activity or []:
        try:
            record = ProblemRecord.from_dict(item, platform=str(platform))
        except ValidationError as e:
            log.debug("skipping activity record: %s", e)
            skipped += 1
            continue

        idx = _find_match(progress.problems, record)
        if idx < 0:
            progress.problems.append(record)
            added += 1
        else:
            merged = progress.problems[idx].updated_with(record)
            if merged != progress.problems[idx]:
                progress.problems[idx] = merged
                updated += 1

    progress.stats = compute_stats(progress.problems, now=now, tz_name=tz_name)
    progress.last_updated = now
    if skipped:
        log.info("%s merge skipped %d malformed activity records", platform, skipped)
    return progress, MergeCounts(added, updated, skipped)


def merge(existing: Progress | None, platform, activity, user_id=None,
          now: datetime | None = None, tz_name: str | None = None) -> Progress:
    progress, _ = merge_with_counts(existing, platform, activity, user_id=user_id,
                                    now=now, tz_name=tz_name)
    return progress
