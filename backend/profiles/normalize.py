"""
Raw extractor record -> canonical profile fragment.

Which raw field feeds which canonical stat is data, not code: FIELD_TABLE maps
every Platform to its FieldMap rows. Each row lists one or more dot-paths into
the raw record; the first path holding a non-empty value wins, so a platform's
own headline figure can be listed ahead of a derived fallback.

| Platform      | stats                                                                 | extra field  |
|---------------|-----------------------------------------------------------------------|--------------|
| LeetCode      | total/easy/medium/hard solved, ranking                                | skill_tags   |
| Codeforces    | rating, max_rating, rank, max_rank, contribution, problems/total solved | organization, country |
| CodeChef      | rating, highest_rating, stars, global/country rank, solved counts      | country      |
| GeeksforGeeks | coding_score, total + per-difficulty solved, streak, contest_rating    | institution  |
"""
from dataclasses import dataclass
from typing import Any

from errors import ValidationError
from profiles.platforms import Platform, parse_platform


@dataclass(frozen=True)
class FieldMap:
    canonical: str
    raw_paths: tuple[str, ...]
    kind: str = "int"   # int | float | str | list
    default: Any = None

    def fallback(self):
        if self.default is not None:
            return self.default
        return {"int": 0, "float": 0.0, "str": "", "list": []}[self.kind]


def _ints(*pairs):
    return tuple(FieldMap(name, tuple(paths)) for name, paths in pairs)


FIELD_TABLE: dict[Platform, dict[str, tuple[FieldMap, ...]]] = {
    Platform.LEETCODE: {
        "stats": _ints(
            ("total_solved", ["stats.total_solved"]),
            ("easy_solved", ["stats.easy_solved"]),
            ("medium_solved", ["stats.medium_solved"]),
            ("hard_solved", ["stats.hard_solved"]),
            ("ranking", ["ranking"]),
        ),
        "extra": (
            FieldMap("skill_tags", ("skill_tags",), kind="list"),
        ),
    },
    Platform.CODEFORCES: {
        "stats": _ints(
            ("rating", ["rank.rating", "rating_history.-1.new_rating"]),
            ("max_rating", ["rank.max_rating"]),
            ("contribution", ["contribution"]),
            ("problems_solved", ["stats.problems_solved"]),
            ("total_solved", ["stats.problems_solved"]),
        ) + (
            FieldMap("rank", ("rank.title",), kind="str"),
            FieldMap("max_rank", ("rank.max_rank",), kind="str"),
        ),
        "extra": (
            FieldMap("organization", ("organization",), kind="str"),
            FieldMap("country", ("country",), kind="str"),
        ),
    },
    Platform.CODECHEF: {
        "stats": _ints(
            ("rating", ["rating", "contest_history.current_rating"]),
            ("highest_rating", ["contest_history.highest_rating"]),
            ("global_rank", ["ranks.global"]),
            ("country_rank", ["ranks.country"]),
            ("total_solved", ["stats.total"]),
            ("fully_solved", ["stats.fully_solved"]),
            ("partially_solved", ["stats.partially_solved"]),
            ("contests_participated", ["stats.contests_participated", "contest_history.total"]),
        ) + (
            FieldMap("stars", ("stars",), kind="str"),
        ),
        "extra": (
            FieldMap("country", ("country.name",), kind="str"),
        ),
    },
    Platform.GEEKSFORGEEKS: {
        "stats": _ints(
            ("coding_score", ["coding_score"]),
            ("total_solved", ["stats.problems_solved.total"]),
            ("school_solved", ["stats.problems_solved.school"]),
            ("basic_solved", ["stats.problems_solved.basic"]),
            ("easy_solved", ["stats.problems_solved.easy"]),
            ("medium_solved", ["stats.problems_solved.medium"]),
            ("hard_solved", ["stats.problems_solved.hard"]),
            ("streak", ["stats.streak.current"]),
            ("contest_rating", ["contest_rating"]),
        ) + (
            FieldMap("institution_rank", ("institution_rank",), kind="str"),
        ),
        "extra": (
            FieldMap("institution", ("institution",), kind="str"),
        ),
    },
}

EXTRA_FIELDS = ("skill_tags", "country", "institution", "organization")


def check_field_table() -> None:
    """Every platform needs a table; every extra row must be a known profile field."""
    missing = [p.value for p in Platform if p not in FIELD_TABLE]
    if missing:
        raise RuntimeError(f"No field mapping for: {', '.join(missing)}")
    for platform, table in FIELD_TABLE.items():
        for row in table.get("extra", ()):
            if row.canonical not in EXTRA_FIELDS:
                raise RuntimeError(f"{platform.value}: unknown profile field {row.canonical!r}")


def get_by_path(data: Any, path: str) -> Any:
    """
    Dot-path lookup: "a.b.0.c". Numeric segments index lists (negative
    indexes count from the end). Returns None when any step is missing.
    """
    cur = data
    for part in path.split("."):
        if isinstance(cur, dict):
            cur = cur.get(part)
        elif isinstance(cur, list):
            try:
                cur = cur[int(part)]
            except (ValueError, IndexError):
                return None
        else:
            return None
        if cur is None:
            return None
    return cur


def _coerce(value, row: FieldMap):
    try:
        if row.kind == "int":
            if isinstance(value, bool):
                return None
            return int(float(str(value).replace(",", "")))
        if row.kind == "float":
            return float(str(value).replace(",", ""))
        if row.kind == "str":
            return str(value).strip()
        if row.kind == "list":
            if isinstance(value, (list, tuple, set)):
                return [str(v) for v in value if v not in (None, "")]
            return None
    except (TypeError, ValueError, OverflowError):
        return None
    return None


def _resolve(raw: dict, row: FieldMap):
    for path in row.raw_paths:
        value = _coerce(get_by_path(raw, path), row)
        if value not in (None, "", []) and not (row.kind in ("int", "float") and value == 0):
            return value
    return row.fallback()


def normalize(platform, raw) -> dict:
    """
    Map a raw record to {stats, skill_tags, country, institution, organization}.

    Never raises: a missing or malformed source field is simply its default.
    """
    try:
        table = FIELD_TABLE[parse_platform(platform)]
    except ValidationError:
        table = {}
    raw = raw if isinstance(raw, dict) else {}

    out = {
        "stats": {row.canonical: _resolve(raw, row) for row in table.get("stats", ())},
        "skill_tags": [],
        "country": "",
        "institution": "",
        "organization": "",
    }
    for row in table.get("extra", ()):
        out[row.canonical] = _resolve(raw, row)
    return out


check_field_table()
