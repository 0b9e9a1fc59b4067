import logging
import re

from errors import Unavailable
from scrape.cascade import (
    NOT_FOUND_TITLE, Field, Locator, PageCandidate, extract_fields, has_identity, load_first_page, parse_int,
)
from scrape.http import BROWSER_HEADERS, make_scraper

log = logging.getLogger(__name__)

PLATFORM = "GeeksforGeeks"

# GfG ships CSS-module class names with a hash suffix (scoreCard_head__nxXR8),
# so selectors match on the stable prefix only.
_ANCHORS = (
    "[class*='profilePicSection_head']",
    "[class*='userMainDiv']",
    "div.profile_name",
    "div.profilePage",
)

PROFILE_PAGES = tuple(
    PageCandidate(url, anchors=_ANCHORS, not_found_title=NOT_FOUND_TITLE)
    for url in (
        "https://www.geeksforgeeks.org/user/{handle}/",
        "https://auth.geeksforgeeks.org/user/{handle}",
        "https://www.geeksforgeeks.org/user/{handle}",
        "https://auth.geeksforgeeks.org/user/{handle}/practice/",
    )
)

IDENTITY_FIELDS = ("username",)

_SCORE = "[class*='scoreCard_head_left--score']"


def _score_card(label: str) -> Locator:
    return Locator("[class*='scoreCard_head__']", contains=label, inner=_SCORE)


def _contest_rating(text: str):
    # unrated users show "__"
    return None if text.strip("_ ") == "" else parse_int(text)


PROFILE_FIELDS = (
    Field("username", (
        Locator("[class*='profilePicSection_head_userHandle']"),
        Locator("div.profile_name h3"),
        Locator("div.user_details_container h3"),
        Locator("div.userPage h1"),
    )),
    Field("avatar", (
        Locator("[class*='profilePicSection_head_img'] img", attr="src"),
        Locator("div.profile_img img", attr="src"),
    )),
    Field("institution", (
        Locator("[class*='educationDetails_head_left--text']"),
        Locator("div.basic_details_data a"),
    )),
    Field("institution_rank", (
        Locator("[class*='educationDetails_head_left_userRankContainer--text'] b"),
    )),
    Field("language_used", (
        Locator("[class*='educationDetails_head_right--text']"),
    )),
    Field("coding_score", (_score_card("Coding Score"),), parse=parse_int, default=0),
    Field("problems_solved", (_score_card("Problem Solved"),), parse=parse_int, default=0),
    Field("contest_rating", (_score_card("Contest Rating"),), parse=_contest_rating, default=0),
    Field("current_streak", (
        Locator("[class*='circularProgressBar_head_mid_streakCnt']"),
    ), parse=lambda t: parse_int(t.split("/")[0]), default=0),
)

_DIFFICULTY_RE = re.compile(r"(SCHOOL|BASIC|EASY|MEDIUM|HARD)\s*\(\s*(\d+)\s*\)", re.I)


def _problems_by_difficulty(soup) -> dict:
    counts = {"school": 0, "basic": 0, "easy": 0, "medium": 0, "hard": 0}
    for el in soup.select("[class*='problemNavbar_head_nav']"):
        m = _DIFFICULTY_RE.search(el.get_text(" ", strip=True))
        if m:
            counts[m.group(1).lower()] = int(m.group(2))
    return counts


def parse_profile(soup, handle: str, source: str = "") -> dict:
    fields = extract_fields(soup, PROFILE_FIELDS)
    if not has_identity(fields, IDENTITY_FIELDS):
        raise Unavailable(f"No identifying fields found for '{handle}'", platform=PLATFORM)

    by_difficulty = _problems_by_difficulty(soup)
    total = fields["problems_solved"] or sum(by_difficulty.values())
    return {
        "username": fields["username"],
        "avatar": fields["avatar"],
        "institution": fields["institution"],
        "institution_rank": fields["institution_rank"],
        "language_used": fields["language_used"],
        "coding_score": fields["coding_score"],
        "contest_rating": fields["contest_rating"],
        "stats": {
            "problems_solved": {"total": total, **by_difficulty},
            "streak": {"current": fields["current_streak"]},
        },
        "source": source,
    }


def fetch(handle: str, session=None) -> dict:
    session = session or make_scraper()
    log.info("Fetching GeeksforGeeks profile for %s", handle)
    headers = dict(BROWSER_HEADERS, Referer="https://www.geeksforgeeks.org/")
    page = load_first_page(session, PLATFORM, handle, PROFILE_PAGES, headers=headers)
    log.info("Loaded GeeksforGeeks profile from %s", page.url)
    return parse_profile(page.soup, handle, source=page.url)
