"""
A small interpreter over declarative extraction rules.

Each platform describes its pages as data:

- `PageCandidate`: a URL template plus the DOM anchors that prove the page is
  really a profile page. Candidates are tried in order until one loads with
  at least one anchor present.
- `Field`: an output name and an ordered list of `Locator`s. The first locator
  that produces a value wins; when none does the field takes its default.

Nothing in here raises on a missing selector. Only loading a page can fail,
and only after every candidate has been exhausted.
"""
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Callable

from bs4 import BeautifulSoup

from errors import NotFound, SyncError, Unavailable
from scrape.http import raise_for_status, request_with_retry

log = logging.getLogger(__name__)

# whole-phrase only: a handle like "coder404" must not read as missing
NOT_FOUND_TITLE = re.compile(r"page not found|^\s*404\b", re.IGNORECASE)


@dataclass(frozen=True)
class Locator:
    css: str
    contains: str | None = None   # keep only matches whose text contains this
    inner: str | None = None      # then descend into this selector
    attr: str | None = None       # read an attribute instead of the text
    index: int = 0                # which surviving match to use


@dataclass(frozen=True)
class Field:
    name: str
    locators: tuple[Locator, ...]
    parse: Callable[[str], Any] = str.strip
    default: Any = ""


@dataclass(frozen=True)
class PageCandidate:
    url_template: str
    anchors: tuple[str, ...]
    # platforms that answer 200 with an error page set this
    not_found_title: re.Pattern | None = None

    def url_for(self, handle: str) -> str:
        return self.url_template.format(handle=handle)


@dataclass
class LoadedPage:
    url: str
    soup: BeautifulSoup
    html: str
    tried: list[str] = field(default_factory=list)


def parse_int(text: str) -> int | None:
    """First integer in the text, thousands separators allowed."""
    m = re.search(r"-?\d[\d,]*", text or "")
    if not m:
        return None
    return int(m.group(0).replace(",", ""))


def _resolve(soup, loc: Locator) -> str | None:
    nodes = soup.select(loc.css)
    if loc.contains:
        nodes = [n for n in nodes if loc.contains.lower() in n.get_text(" ", strip=True).lower()]
    if loc.inner:
        nodes = [inner for n in nodes for inner in n.select(loc.inner)]
    if not -len(nodes) <= loc.index < len(nodes):
        return None
    node = nodes[loc.index]
    if loc.attr:
        value = node.get(loc.attr)
        if isinstance(value, list):
            value = " ".join(value)
        return value or None
    return node.get_text(" ", strip=True) or None


def extract_field(soup, rule: Field):
    for loc in rule.locators:
        raw = _resolve(soup, loc)
        if raw is None:
            continue
        try:
            value = rule.parse(raw)
        except (TypeError, ValueError):
            continue
        if value is None or value == "":
            continue
        return value
    return rule.default


def extract_fields(soup, fields) -> dict:
    return {f.name: extract_field(soup, f) for f in fields}


def has_identity(record: dict, keys) -> bool:
    return any(record.get(k) not in (None, "", 0) for k in keys)


def _title_says_not_found(soup, pattern) -> bool:
    if pattern is None or soup.title is None:
        return False
    return bool(pattern.search(soup.title.get_text(" ", strip=True)))


def load_first_page(session, platform: str, handle: str, candidates,
                    headers: dict | None = None) -> LoadedPage:
    """
    Walk the candidates in priority order and return the first usable page.

    A candidate is skipped when the request fails, the title carries a
    not-found marker, or none of its anchors are present. If every candidate
    reported not-found the handle is treated as missing; any other mix of
    failures is Unavailable.
    """
    tried = []
    not_found = 0
    for cand in candidates:
        url = cand.url_for(handle)
        tried.append(url)
        try:
            resp = request_with_retry(session, platform, url, headers=headers)
            raise_for_status(resp, platform, handle)
        except NotFound:
            log.info("%s: %s says not found, trying next candidate", platform, url)
            not_found += 1
            continue
        except SyncError as e:
            log.info("%s: %s failed (%s), trying next candidate", platform, url, e.message)
            continue

        soup = BeautifulSoup(resp.text, "html.parser")
        if _title_says_not_found(soup, cand.not_found_title):
            log.info("%s: %s looks like a not-found page", platform, url)
            not_found += 1
            continue
        if not any(soup.select_one(anchor) for anchor in cand.anchors):
            log.info("%s: %s has no profile anchor", platform, url)
            continue
        return LoadedPage(url=url, soup=soup, html=resp.text, tried=tried)

    if tried and not_found == len(tried):
        raise NotFound(f"User '{handle}' not found on {platform}", platform=platform)
    raise Unavailable(
        f"Could not access profile for {handle} from any known URL format",
        platform=platform,
    )
