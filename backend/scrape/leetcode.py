import logging
from datetime import datetime, timezone

from errors import NotFound, SyncError, Unavailable
from scrape.http import get_json, make_scraper, pause

log = logging.getLogger(__name__)

PLATFORM = "LeetCode"
GRAPHQL_URL = "https://leetcode.com/graphql"
PROFILE_URL = "https://leetcode.com/u/{handle}/"

PROFILE_QUERY = """
query getUserProfile($username: String!) {
  matchedUser(username: $username) {
    username
    profile { realName ranking userAvatar skillTags }
    submitStatsGlobal { acSubmissionNum { difficulty count } }
  }
}
"""

RECENT_AC_QUERY = """
query recentAcSubmissions($username: String!, $limit: Int!) {
  recentAcSubmissionList(username: $username, limit: $limit) {
    id title titleSlug timestamp
  }
}
"""

_DIFFICULTY_KEYS = {
    "All": "total_solved",
    "Easy": "easy_solved",
    "Medium": "medium_solved",
    "Hard": "hard_solved",
}


def _post(session, handle, query, variables):
    payload = {"query": query, "variables": variables}
    headers = {
        "Content-Type": "application/json",
        "Referer": PROFILE_URL.format(handle=handle),
    }
    body = get_json(session, PLATFORM, handle, GRAPHQL_URL, method="POST",
                    json=payload, headers=headers)
    if not isinstance(body, dict):
        raise Unavailable("GraphQL answered with a non-object body", platform=PLATFORM)
    return body


def _process_stats(ac_counts) -> dict:
    stats = {v: 0 for v in _DIFFICULTY_KEYS.values()}
    for item in ac_counts or []:
        key = _DIFFICULTY_KEYS.get((item or {}).get("difficulty"))
        if key:
            try:
                stats[key] = int(item.get("count") or 0)
            except (TypeError, ValueError):
                stats[key] = 0
    return stats


def _process_recent(submissions) -> list[dict]:
    out = []
    for sub in submissions or []:
        if not isinstance(sub, dict):
            continue
        ts = sub.get("timestamp")
        try:
            when = datetime.fromtimestamp(int(ts), tz=timezone.utc).isoformat()
        except (TypeError, ValueError, OverflowError):
            when = None
        out.append({
            "id": sub.get("id"),
            "title": sub.get("title") or "",
            "slug": sub.get("titleSlug") or "",
            "timestamp": ts,
            "date": when,
        })
    return out


def fetch_recent_accepted(session, handle: str, limit: int = 20) -> list[dict]:
    body = _post(session, handle, RECENT_AC_QUERY, {"username": handle, "limit": limit})
    data = body.get("data") or {}
    return _process_recent(data.get("recentAcSubmissionList"))


def fetch(handle: str, session=None) -> dict:
    """
    Fetch a LeetCode profile through the public GraphQL endpoint.

    The profile query is the identifying call; the recent-submissions query
    that follows is best effort and degrades to an empty list.
    """
    session = session or make_scraper()
    log.info("Fetching LeetCode profile for %s", handle)

    body = _post(session, handle, PROFILE_QUERY, {"username": handle})
    data = body.get("data") or {}
    user = data.get("matchedUser")
    if not user:
        errors = body.get("errors") or []
        if errors or "matchedUser" in data:
            raise NotFound(f"User '{handle}' not found on LeetCode", platform=PLATFORM)
        raise Unavailable("GraphQL response carried no user data", platform=PLATFORM)

    profile = user.get("profile") or {}
    record = {
        "username": user.get("username") or "",
        "name": profile.get("realName") or "",
        "avatar": profile.get("userAvatar") or "",
        "ranking": profile.get("ranking") or 0,
        "skill_tags": list(profile.get("skillTags") or []),
        "stats": _process_stats((user.get("submitStatsGlobal") or {}).get("acSubmissionNum")),
        "recent_submissions": [],
        "source": PROFILE_URL.format(handle=handle),
    }
    if not record["username"]:
        raise Unavailable("LeetCode profile carried no username", platform=PLATFORM)

    pause()
    try:
        record["recent_submissions"] = fetch_recent_accepted(session, handle)
    except SyncError as e:
        log.warning("LeetCode recent submissions for %s unavailable: %s", handle, e)

    return record
