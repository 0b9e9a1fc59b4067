"""
Best-effort extraction of JSON literals embedded in page scripts.

Pages often ship their data as a client-side assignment such as

    Codeforces.getRatingGraphData = [{...}, ...];
    jQuery.extend(Drupal.settings, {'date_versus_rating': {...}});

`parse_embedded_json` finds the anchor, cuts out the balanced literal that
follows it, repairs the usual JavaScript-isms and parses it. It never raises:
anything it cannot make sense of comes back as None.
"""
import json
import logging
import re

log = logging.getLogger(__name__)

_OPENERS = {"{": "}", "[": "]"}
_TRAILING_COMMA = re.compile(r",(\s*[}\]])")
_UNDEFINED = re.compile(r"\bundefined\b")


def extract_literal(text: str, anchor: str) -> str | None:
    """Return the first balanced {...} or [...] that follows `anchor`."""
    if not text or not anchor:
        return None
    idx = text.find(anchor)
    if idx < 0:
        return None

    start = None
    for pos in range(idx + len(anchor), len(text)):
        ch = text[pos]
        if ch in _OPENERS:
            start = pos
            break
        if ch == ";":
            # statement ended before any literal showed up
            return None
    if start is None:
        return None

    stack = []
    quote = None
    escaped = False
    for pos in range(start, len(text)):
        ch = text[pos]
        if quote:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == quote:
                quote = None
            continue
        if ch in ("'", '"'):
            quote = ch
        elif ch in _OPENERS:
            stack.append(_OPENERS[ch])
        elif ch in ("}", "]"):
            if not stack or stack.pop() != ch:
                return None
            if not stack:
                return text[start:pos + 1]
    return None


def _segments(literal: str):
    """
    Split into (quoted, text) runs. Single-quoted strings come back rewritten
    as double-quoted ones; double-quoted strings are left alone.
    """
    buf = []
    quote = None
    escaped = False
    for ch in literal:
        if quote is None:
            if ch in ("'", '"'):
                if buf:
                    yield False, "".join(buf)
                quote = ch
                buf = ['"']
            else:
                buf.append(ch)
            continue

        if escaped:
            escaped = False
            if quote == "'" and ch == "'":
                # \' only needs escaping inside single quotes
                buf[-1] = "'"
            else:
                buf.append(ch)
            continue
        if ch == "\\":
            escaped = True
            buf.append(ch)
        elif ch == quote:
            quote = None
            buf.append('"')
            yield True, "".join(buf)
            buf = []
        elif ch == '"' and quote == "'":
            buf.append('\\"')
        else:
            buf.append(ch)
    if buf:
        # an unterminated string stays quoted so nothing inside it is rewritten
        yield quote is not None, "".join(buf)


def repair_json(literal: str) -> str:
    parts = []
    for quoted, text in _segments(literal):
        if not quoted:
            text = _UNDEFINED.sub("null", _TRAILING_COMMA.sub(r"\1", text))
        parts.append(text)
    return "".join(parts)


def parse_embedded_json(text: str, anchor: str, default=None):
    literal = extract_literal(text, anchor)
    if literal is None:
        return default
    for candidate in (literal, repair_json(literal)):
        try:
            return json.loads(candidate)
        except ValueError:
            continue
    log.info("embedded payload after %r could not be parsed", anchor)
    return default


def find_in_scripts(soup, anchor: str, default=None):
    """Scan every <script> block of a parsed page for `anchor`."""
    for script in soup.find_all("script"):
        body = script.string or script.get_text() or ""
        if anchor not in body:
            continue
        value = parse_embedded_json(body, anchor)
        if value is not None:
            return value
    return default
