"""
Problem activity carried inside a raw profile record.

Each platform exposes a short "recent" list on its profile; these helpers turn
it into activity mappings the merge engine accepts. Nothing here talks to the
network, so stored raw records can be reprocessed at any time.
"""
from datetime import datetime, timezone

from activity.records import Status, parse_timestamp, slugify
from profiles.platforms import Platform, parse_platform

LEETCODE_PROBLEM_URL = "https://leetcode.com/problems/{slug}/"


def _rows(value):
    return [r for r in value if isinstance(r, dict)] if isinstance(value, list) else []


def _when(value, now):
    dt = parse_timestamp(value, now=now)
    # keep the raw text when unreadable; the merge skips and counts it
    return dt.isoformat() if dt else value


def _leetcode(raw, now):
    out = []
    for sub in _rows(raw.get("recent_submissions")):
        slug = sub.get("slug") or slugify(sub.get("title") or "")
        out.append({
            "problem_id": f"leetcode:{slug}" if slug else "",
            "title": sub.get("title") or "",
            "url": LEETCODE_PROBLEM_URL.format(slug=slug) if slug else "",
            "status": Status.SOLVED.value,
            "attempted_at": _when(sub.get("date") or sub.get("timestamp"), now),
        })
    return out


def _codeforces(raw, now):
    out = []
    for sub in _rows(raw.get("recent_submissions")):
        pid = sub.get("problem_id") or ""
        out.append({
            "problem_id": f"codeforces:{pid}" if pid else "",
            "title": sub.get("problem_name") or "",
            "tags": list(sub.get("tags") or []),
            "url": sub.get("problem_link") or "",
            "status": Status.SOLVED.value if sub.get("verdict") == "OK" else Status.ATTEMPTED.value,
            "attempted_at": _when(sub.get("submission_time"), now),
        })
    return out


def _codechef(raw, now):
    out = []
    for item in _rows((raw.get("stats") or {}).get("last_solved")):
        code = item.get("code") or ""
        label = (item.get("status") or "").strip().lower()
        out.append({
            "problem_id": f"codechef:{code}" if code else "",
            "title": item.get("name") or "",
            "url": item.get("link") or "",
            "status": Status.ATTEMPTED.value if label == "partially solved" else Status.SOLVED.value,
            "attempted_at": _when(item.get("date"), now),
        })
    return out


_EXTRACTORS = {
    Platform.LEETCODE: _leetcode,
    Platform.CODEFORCES: _codeforces,
    Platform.CODECHEF: _codechef,
    # GeeksforGeeks profiles carry totals only
    Platform.GEEKSFORGEEKS: lambda raw, now: [],
}


def _sort_key(item):
    dt = parse_timestamp(item.get("attempted_at"))
    # unreadable dates sort last; sorted() keeps their relative order
    return (dt is None, dt or datetime.min.replace(tzinfo=timezone.utc))


def activity_from_profile(platform, raw, now: datetime | None = None) -> list[dict]:
    """Activity mappings for `raw`, oldest first."""
    platform = parse_platform(platform)
    if not isinstance(raw, dict):
        return []
    now = now or datetime.now(timezone.utc)
    return sorted(_EXTRACTORS[platform](raw, now), key=_sort_key)
