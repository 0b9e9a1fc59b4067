import logging
from datetime import datetime, timezone

import config
from errors import NotFound, SyncError, Unavailable
from scrape.cascade import Field, Locator, PageCandidate, extract_fields, load_first_page, parse_int
from scrape.http import BROWSER_HEADERS, make_scraper, pause, request_with_retry
from scrape.script_json import find_in_scripts

log = logging.getLogger(__name__)

PLATFORM = "Codeforces"
API = "https://codeforces.com/api"
PROFILE_URL = "https://codeforces.com/profile/{handle}"

RANK_COLORS = {
    "legendary grandmaster": "#FF0000",
    "international grandmaster": "#FF0000",
    "grandmaster": "#FF0000",
    "international master": "#FF8C00",
    "master": "#FF8C00",
    "candidate master": "#AA00AA",
    "expert": "#0000FF",
    "specialist": "#03A89E",
    "pupil": "#008000",
    "newbie": "#808080",
}

PROFILE_PAGES = (
    PageCandidate(PROFILE_URL, anchors=("div.userbox", "div.main-info", "div.info")),
)

PROFILE_FIELDS = (
    Field("username", (
        Locator("div.main-info h1 a"),
        Locator("div.userbox div.main-info a.rated-user"),
    )),
    Field("rank", (
        Locator("div.user-rank span"),
        Locator("div.main-info div.user-rank"),
    )),
    Field("rating", (
        Locator("div.info li", contains="Contest rating", inner="span"),
    ), parse=parse_int, default=0),
    Field("max_rating", (
        Locator("div.info li", contains="max.", inner="span.smaller span", index=1),
        Locator("div.info li", contains="max.", inner="span", index=-1),
    ), parse=parse_int, default=0),
    Field("contribution", (
        Locator("div.info li", contains="Contribution", inner="span"),
    ), parse=parse_int, default=0),
    Field("title_text", (Locator("div.main-info h1"),)),
    Field("avatar", (Locator("div.title-photo img", attr="src"),)),
    Field("problems_solved", (
        Locator("div._UserActivityFrame_counterValue"),
        Locator("div.personal-sidebar li", contains="Solved problems", inner="span"),
    ), parse=parse_int, default=0),
)


def rank_color(rank: str | None) -> str:
    if not rank:
        return "#000000"
    return RANK_COLORS.get(rank.strip().lower(), "#000000")


def _iso(seconds) -> str:
    try:
        return datetime.fromtimestamp(int(seconds), tz=timezone.utc).isoformat()
    except (TypeError, ValueError, OverflowError):
        return ""


def _api(session, who, method, **params):
    """Call one API method; `who` only names the user in errors."""
    body = None
    resp = request_with_retry(session, PLATFORM, f"{API}/{method}", params=params)
    try:
        body = resp.json()
    except ValueError:
        pass
    if isinstance(body, dict) and body.get("status") == "OK":
        return body.get("result")

    comment = (body or {}).get("comment", "") if isinstance(body, dict) else ""
    # user.info answers 400 + "handles: User with handle x not found"
    if "not found" in comment.lower() or resp.status_code == 404:
        raise NotFound(f"User '{who}' not found on Codeforces", platform=PLATFORM)
    raise Unavailable(
        f"{method} failed: {comment or f'HTTP {resp.status_code}'}",
        platform=PLATFORM,
    )


def _submission(sub: dict) -> dict:
    problem = sub.get("problem") or {}
    contest_id = problem.get("contestId") or sub.get("contestId")
    index = problem.get("index") or ""
    return {
        "problem_id": f"{contest_id}{index}" if contest_id else index,
        "problem_name": problem.get("name") or "",
        "verdict": sub.get("verdict") or "",
        "programming_language": sub.get("programmingLanguage") or "",
        "submission_time": _iso(sub.get("creationTimeSeconds")),
        "link": f"https://codeforces.com/contest/{contest_id}/submission/{sub.get('id')}" if contest_id else "",
        "problem_link": f"https://codeforces.com/contest/{contest_id}/problem/{index}" if contest_id else "",
        "tags": list(problem.get("tags") or []),
        "rating": problem.get("rating") or 0,
    }


def _rating_history(soup) -> list[dict]:
    raw = find_in_scripts(soup, "Codeforces.getRatingGraphData", default=[])
    history = []
    for entry in raw if isinstance(raw, list) else []:
        if not isinstance(entry, dict):
            continue
        old = entry.get("oldRating") or 0
        new = entry.get("newRating") or 0
        history.append({
            "contest_id": entry.get("contestId"),
            "contest_name": entry.get("contestName") or "",
            "rank": entry.get("rank"),
            "old_rating": old,
            "new_rating": new,
            "rating_change": new - old,
        })
    return history


def _from_api(info: dict) -> dict:
    first, last = info.get("firstName"), info.get("lastName")
    photo = info.get("titlePhoto") or ""
    return {
        "username": info.get("handle") or "",
        "name": f"{first} {last}" if first and last else (first or info.get("handle") or ""),
        "avatar": photo if not photo or photo.startswith("http") else f"https:{photo}",
        "country": info.get("country") or "",
        "city": info.get("city") or "",
        "organization": info.get("organization") or "",
        "rank": {
            "title": info.get("rank") or "",
            "color": rank_color(info.get("rank")),
            "rating": info.get("rating") or 0,
            "max_rating": info.get("maxRating") or 0,
            "max_rank": info.get("maxRank") or "",
        },
        "contribution": info.get("contribution") or 0,
        "registration_date": _iso(info.get("registrationTimeSeconds")),
        "last_visit": _iso(info.get("lastOnlineTimeSeconds")),
    }


def _from_html(fields: dict) -> dict:
    title = fields.get("title_text") or ""
    name = title.split("(")[0].strip() if "(" in title else ""
    photo = fields.get("avatar") or ""
    return {
        "username": fields.get("username") or "",
        "name": name or fields.get("username") or "",
        "avatar": photo if not photo or photo.startswith("http") else f"https:{photo}",
        "country": "",
        "city": "",
        "organization": "",
        "rank": {
            "title": fields.get("rank") or "",
            "color": rank_color(fields.get("rank")),
            "rating": fields.get("rating") or 0,
            "max_rating": fields.get("max_rating") or 0,
            "max_rank": "",
        },
        "contribution": fields.get("contribution") or 0,
        "registration_date": "",
        "last_visit": "",
    }


def fetch(handle: str, session=None) -> dict:
    """
    Codeforces: API first, profile page second.

    The page is always requested because the rating graph and solved-count
    only live there. It is only fatal when the API already failed.
    """
    session = session or make_scraper()
    log.info("Fetching Codeforces profile for %s", handle)

    info = None
    recent = []
    api_error = None
    try:
        result = _api(session, handle, "user.info", handles=handle)
        info = result[0] if isinstance(result, list) and result else None
        pause()
        try:
            subs = _api(session, handle, "user.status", handle=handle,
                        **{"from": 1, "count": config.CODEFORCES_SUBMISSION_COUNT})
            recent = [_submission(s) for s in subs or [] if isinstance(s, dict)]
        except SyncError as e:
            log.warning("Codeforces submissions for %s unavailable: %s", handle, e)
    except SyncError as e:
        api_error = e
        log.warning("Codeforces API failed for %s: %s. Falling back to webpage scraping.", handle, e)

    pause()
    page = None
    try:
        page = load_first_page(session, PLATFORM, handle, PROFILE_PAGES, headers=BROWSER_HEADERS)
    except SyncError as e:
        if info is None:
            # both strategies failed; a not-found from either side is the more useful answer
            if isinstance(e, NotFound) or isinstance(api_error, NotFound):
                raise NotFound(f"User '{handle}' not found on Codeforces", platform=PLATFORM) from e
            raise
        log.warning("Codeforces profile page for %s unavailable: %s", handle, e)

    fields = extract_fields(page.soup, PROFILE_FIELDS) if page else {}
    record = _from_api(info) if info else _from_html(fields)
    record["stats"] = {"problems_solved": fields.get("problems_solved") or 0}
    record["recent_submissions"] = recent
    record["rating_history"] = _rating_history(page.soup) if page else []
    record["source"] = PROFILE_URL.format(handle=handle)
    if page is None:
        record["note"] = "Limited profile data available due to scraping restrictions"

    if not record["username"]:
        raise Unavailable(f"No identifying fields found for '{handle}'", platform=PLATFORM)
    return record
