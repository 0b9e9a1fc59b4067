from datetime import datetime, timedelta, timezone

import pytz

import config
from activity.records import Difficulty, Status

TOP_TAGS_LIMIT = 10


def local_zone(tz_name: str | None = None):
    try:
        return pytz.timezone(tz_name or config.sync_timezone())
    except pytz.UnknownTimeZoneError:
        return pytz.utc


def _local_date(dt: datetime, tz):
    return dt.astimezone(tz).date()


def weekly_activity(problems, now: datetime, tz) -> list[dict]:
    """Seven buckets, Sunday through Saturday of the week containing `now`."""
    today = _local_date(now, tz)
    # Python weeks start on Monday (weekday() == 0); shift so Sunday is day 0
    week_start = today - timedelta(days=(today.weekday() + 1) % 7)
    days = [week_start + timedelta(days=i) for i in range(7)]

    counts = {d: 0 for d in days}
    for p in problems:
        d = _local_date(p.attempted_at, tz)
        if d in counts:
            counts[d] += 1
    return [{"date": d.isoformat(), "count": counts[d]} for d in days]


def monthly_activity(problems, tz) -> list[dict]:
    counts = {}
    for p in problems:
        d = _local_date(p.attempted_at, tz)
        key = (d.year, d.month)
        counts[key] = counts.get(key, 0) + 1
    return [{"month": f"{y}-{m}", "count": counts[(y, m)]} for (y, m) in sorted(counts)]


def top_tags(problems, limit: int = TOP_TAGS_LIMIT) -> list[dict]:
    counts = {}
    for p in problems:
        for tag in p.tags:
            counts[tag] = counts.get(tag, 0) + 1
    # sorted() is stable, so equal counts keep first-seen order
    ranked = sorted(counts.items(), key=lambda kv: -kv[1])
    return [{"tag": tag, "count": count} for tag, count in ranked[:limit]]


def compute_stats(problems, now: datetime | None = None, tz_name: str | None = None) -> dict:
    """Derive every Progress stat from the problem list; nothing is carried over."""
    now = now or datetime.now(timezone.utc)
    tz = local_zone(tz_name)

    solved = [p for p in problems if p.status is Status.SOLVED]
    by_difficulty = {d: 0 for d in Difficulty}
    for p in solved:
        by_difficulty[p.difficulty] += 1

    attempted = len(problems)
    return {
        "total_solved": len(solved),
        "easy_solved": by_difficulty[Difficulty.EASY],
        "medium_solved": by_difficulty[Difficulty.MEDIUM],
        "hard_solved": by_difficulty[Difficulty.HARD],
        "success_rate": round(len(solved) / attempted * 100, 2) if attempted else 0,
        "weekly_activity": weekly_activity(problems, now, tz),
        "monthly_activity": monthly_activity(problems, tz),
        "top_tags": top_tags(problems),
    }
