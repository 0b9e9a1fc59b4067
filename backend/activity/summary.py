"""
Cross-platform rollups for the dashboard, read from stored profiles and progress.

- `activity_by_month`: attempts summed over every platform for the last few
  calendar months, oldest first, empty months included.
- `skills`: an ordered, de-duplicated skill list drawn from profile skill tags,
  platform-specific hints and the top tags of each Progress.
- `recent_activity`: the newest problem attempts and profile syncs, newest first.
"""
import calendar
from datetime import datetime, timezone

from activity.stats import local_zone
from profiles.platforms import Platform

ACTIVITY_MONTHS = 6
SKILLS_LIMIT = 8
RECENT_LIMIT = 10
RECENT_PER_PLATFORM = 5


def _month_keys(now: datetime, months: int, tz) -> list[tuple[int, int]]:
    local = now.astimezone(tz)
    year, month = local.year, local.month
    keys = []
    for _ in range(months):
        keys.append((year, month))
        month -= 1
        if month == 0:
            year, month = year - 1, 12
    return keys[::-1]


def activity_by_month(progress_list, now: datetime | None = None, months: int = ACTIVITY_MONTHS,
                      tz_name: str | None = None) -> list[dict]:
    now = now or datetime.now(timezone.utc)
    tz = local_zone(tz_name)
    keys = _month_keys(now, months, tz)
    counts = dict.fromkeys(keys, 0)
    for progress in progress_list:
        for problem in progress.problems:
            local = problem.attempted_at.astimezone(tz)
            if (local.year, local.month) in counts:
                counts[(local.year, local.month)] += 1
    return [
        {"month": f"{y}-{m}", "name": calendar.month_abbr[m], "count": counts[(y, m)]}
        for y, m in keys
    ]


def codechef_tier(rating) -> str | None:
    try:
        rating = int(rating)
    except (TypeError, ValueError):
        return None
    if rating <= 0:
        return None
    if rating > 1800:
        return "Advanced Algorithms"
    if rating > 1400:
        return "Intermediate Algorithms"
    return "Basic Algorithms"


def skills(profiles, progress_list, limit: int = SKILLS_LIMIT) -> list[str]:
    found = []

    def add(value):
        value = str(value or "").strip()
        if value and value not in found:
            found.append(value)

    for profile in profiles:
        for tag in sorted(profile.skill_tags):
            add(tag)
        raw = profile.raw_data or {}
        if profile.platform is Platform.CODEFORCES:
            for sub in raw.get("recent_submissions") or []:
                if isinstance(sub, dict):
                    for tag in sub.get("tags") or []:
                        add(tag)
        elif profile.platform is Platform.CODECHEF:
            add(codechef_tier(profile.stats.get("rating")))
        elif profile.platform is Platform.GEEKSFORGEEKS:
            add(raw.get("language_used"))

    for progress in progress_list:
        for entry in progress.stats.get("top_tags") or []:
            add(entry.get("tag") if isinstance(entry, dict) else None)
    return found[:limit]


def recent_activity(progress_list, profiles, limit: int = RECENT_LIMIT,
                    per_platform: int = RECENT_PER_PLATFORM) -> list[dict]:
    items = []
    for progress in progress_list:
        platform = str(progress.platform)
        latest = sorted(progress.problems, key=lambda p: p.attempted_at, reverse=True)
        for problem in latest[:per_platform]:
            items.append({
                "kind": "problem",
                "platform": platform,
                "text": f"{problem.status.value} {platform} problem: {problem.title}",
                "at": problem.attempted_at,
            })
    for profile in profiles:
        if profile.last_synced_at:
            items.append({
                "kind": "sync",
                "platform": profile.platform.value,
                "text": f"Synced {profile.platform.value} profile: {profile.username}",
                "at": profile.last_synced_at,
            })
    items.sort(key=lambda item: item["at"], reverse=True)
    return [dict(item, at=item["at"].isoformat()) for item in items[:limit]]


def dashboard(store, user_id, now: datetime | None = None, tz_name: str | None = None) -> dict:
    profiles = store.list_profiles(user_id)
    progress = store.list_progress(user_id)
    return {
        "handles": [h.to_dict() for h in store.list_handles(user_id)],
        "profiles": [p.to_dict() for p in profiles],
        "progress": [p.to_dict() for p in progress],
        "activity": activity_by_month(progress, now=now, tz_name=tz_name),
        "skills": skills(profiles, progress),
        "recent_activity": recent_activity(progress, profiles),
    }
