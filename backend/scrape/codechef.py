import logging
from datetime import datetime

from scrape.cascade import Field, Locator, PageCandidate, extract_fields, has_identity, load_first_page, parse_int
from scrape.http import BROWSER_HEADERS, make_scraper
from scrape.script_json import find_in_scripts
from errors import Unavailable

log = logging.getLogger(__name__)

PLATFORM = "CodeChef"
BASE = "https://www.codechef.com"

PROFILE_PAGES = (
    PageCandidate(
        BASE + "/users/{handle}",
        anchors=(
            "div.user-details-container",
            "div.user-profile-container",
            "div.rating-header",
            "section.user-details",
        ),
    ),
)

IDENTITY_FIELDS = ("username", "name")

PROFILE_FIELDS = (
    Field("username", (
        Locator("span.m-username--link"),
        Locator("div.user-details-container span.m-username--link"),
        Locator("section.user-details li", contains="Username", inner="span.m-username--link"),
    )),
    Field("name", (
        Locator("div.user-details-container h1.h2-style"),
        Locator("h1.h2-style"),
        Locator(".m-username"),
    )),
    Field("avatar", (
        Locator("div.user-details-container img.profileImage", attr="src"),
        Locator("div.user-details-container img", attr="src"),
    )),
    Field("country", (
        Locator("span.user-country-name"),
        Locator("section.user-details li", contains="Country", inner="span.user-country-name"),
    )),
    Field("country_flag", (Locator("img.user-country-flag", attr="src"),
                           Locator(".user-country-flag img", attr="src"))),
    Field("rating", (Locator("div.rating-number"), Locator(".rating-number")),
          parse=parse_int, default=0),
    Field("global_rank", (Locator("div.rating-ranks strong", index=0),
                          Locator(".rating-ranks a", index=0)), parse=parse_int, default=0),
    Field("country_rank", (Locator("div.rating-ranks strong", index=1),
                           Locator(".rating-ranks a", index=1)), parse=parse_int, default=0),
    Field("stars", (Locator("div.rating-star"), Locator("span.rating"))),
    Field("total_solved", (
        Locator("section.rating-data-section h3", contains="Total Problems Solved"),
    ), parse=parse_int, default=0),
    Field("fully_solved", (
        Locator("section.problems-solved h5", contains="Fully Solved"),
        Locator(".problems-solved h5", contains="Fully Solved"),
    ), parse=lambda t: parse_int(t.split("(")[-1]), default=0),
    Field("partially_solved", (
        Locator("section.problems-solved h5", contains="Partially Solved"),
        Locator(".problems-solved h5", contains="Partially Solved"),
    ), parse=lambda t: parse_int(t.split("(")[-1]), default=0),
    Field("contests_participated", (
        Locator("div.contest-participated-count b"),
        Locator(".contest-participated-count"),
    ), parse=parse_int, default=0),
)

# candidates for the "recent activity" table, most specific first
RECENT_TABLE_SELECTORS = (
    "section.rating-data-section.recent-activity table tbody tr",
    "#content-regions .content-container table tbody tr",
    ".problems-solved + div table tr",
    ".user-profile-data table tr",
)

RECENT_CONTEST_SELECTOR = ".contest-participated-count table tbody tr"

SETTINGS_ANCHOR = "jQuery.extend(Drupal.settings"


def _cell(row, n: int) -> str:
    cells = row.find_all("td")
    return cells[n].get_text(" ", strip=True) if len(cells) > n else ""


def _recent_problems(soup, limit: int = 10) -> list[dict]:
    for selector in RECENT_TABLE_SELECTORS:
        found = []
        for row in soup.select(selector):
            cells = row.find_all("td")
            if not cells:
                continue
            name = cells[0].get_text(" ", strip=True)
            if not name or "Contest" in name or "Challenge" in name:
                continue
            link_el = cells[0].find("a")
            href = link_el.get("href", "") if link_el else ""
            problem = {
                "name": name,
                "code": href.rstrip("/").split("/")[-1] if href else "",
                "link": href if href.startswith("http") or not href else BASE + href,
                "date": _cell(row, 1),
                "status": _cell(row, 2) or "Solved",
            }
            if not any(p["name"] == problem["name"] for p in found):
                found.append(problem)
            if len(found) >= limit:
                break
        if found:
            return found
    return []


def _recent_contests(soup, limit: int = 5) -> list[dict]:
    out = []
    for row in soup.select(RECENT_CONTEST_SELECTOR)[:limit]:
        out.append({"name": _cell(row, 0), "rank": _cell(row, 1), "score": _cell(row, 2)})
    return out


def _contest_date(entry: dict) -> str:
    try:
        return datetime(int(entry["getyear"]), int(entry["getmonth"]), int(entry["getday"])).date().isoformat()
    except (KeyError, TypeError, ValueError):
        return ""


def _contest_history(soup) -> dict:
    settings = find_in_scripts(soup, SETTINGS_ANCHOR, default={})
    raw = []
    if isinstance(settings, dict):
        raw = ((settings.get("date_versus_rating") or {}).get("all")) or []

    contests = []
    for entry in raw if isinstance(raw, list) else []:
        if not isinstance(entry, dict):
            continue
        contests.append({
            "code": entry.get("code") or "",
            "name": entry.get("name") or "",
            "date": _contest_date(entry),
            "rating": parse_int(str(entry.get("rating") or "")) or 0,
            "rank": entry.get("rank"),
            "color": entry.get("color") or "",
        })

    highest = max((c["rating"] for c in contests), default=0)
    dated = [c for c in contests if c["date"]]
    current = max(dated, key=lambda c: c["date"])["rating"] if dated else 0
    return {
        "total": len(contests),
        "highest_rating": highest,
        "current_rating": current,
        "contests": contests,
    }


def parse_profile(html_soup, handle: str) -> dict:
    fields = extract_fields(html_soup, PROFILE_FIELDS)
    if not has_identity(fields, IDENTITY_FIELDS):
        raise Unavailable(f"No identifying fields found for '{handle}'", platform=PLATFORM)

    fully = fields["fully_solved"]
    partially = fields["partially_solved"]
    total = fields["total_solved"] or (fully + partially)
    return {
        "username": fields["username"] or handle,
        "name": fields["name"],
        "avatar": fields["avatar"],
        "country": {"name": fields["country"], "flag": fields["country_flag"]},
        "ranks": {"global": fields["global_rank"], "country": fields["country_rank"]},
        "stars": fields["stars"],
        "rating": fields["rating"],
        "stats": {
            "total": total,
            "fully_solved": fully,
            "partially_solved": partially,
            "contests_participated": fields["contests_participated"],
            "last_solved": _recent_problems(html_soup),
        },
        "recent_contests": _recent_contests(html_soup),
        "contest_history": _contest_history(html_soup),
    }


def fetch(handle: str, session=None) -> dict:
    session = session or make_scraper()
    log.info("Fetching CodeChef profile for %s", handle)
    page = load_first_page(session, PLATFORM, handle, PROFILE_PAGES, headers=BROWSER_HEADERS)
    record = parse_profile(page.soup, handle)
    record["source"] = page.url
    log.info("Found %d recently solved CodeChef problems for %s",
             len(record["stats"]["last_solved"]), handle)
    return record
