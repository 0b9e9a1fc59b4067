import re
from dataclasses import dataclass, field, replace
from datetime import date, datetime, timedelta, timezone
from enum import Enum

from errors import ValidationError


class Status(str, Enum):
    SOLVED = "Solved"
    ATTEMPTED = "Attempted"
    FAILED = "Failed"


class Difficulty(str, Enum):
    EASY = "Easy"
    MEDIUM = "Medium"
    HARD = "Hard"
    UNKNOWN = "Unknown"


# camelCase keys sent by JS clients
_ALIASES = {
    "problemId": "problem_id",
    "attemptedAt": "attempted_at",
    "solvedAt": "solved_at",
    "timeTaken": "time_taken_minutes",
    "timeTakenMinutes": "time_taken_minutes",
}

_RELATIVE = re.compile(r"^(\d+)\s*(sec|second|min|minute|hour|hr|day|week)s?\s+ago$", re.I)
_RELATIVE_UNITS = {
    "sec": "seconds", "second": "seconds",
    "min": "minutes", "minute": "minutes",
    "hour": "hours", "hr": "hours",
    "day": "days", "week": "weeks",
}
# CodeChef's recent-activity table prints "12:30 PM 05/01/24"
_TEXT_FORMATS = ("%I:%M %p %d/%m/%y", "%d/%m/%y", "%Y-%m-%d %H:%M:%S")


def parse_timestamp(value, now: datetime | None = None) -> datetime | None:
    """
    Best effort: datetime, date, epoch seconds, ISO-8601 (with or without Z),
    a few page formats, or "N units ago". Naive values are taken as UTC.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, date):
        dt = datetime(value.year, value.month, value.day)
    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        try:
            return datetime.fromtimestamp(value, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    else:
        text = str(value).strip()
        if text.isdigit():
            return parse_timestamp(int(text))
        m = _RELATIVE.match(text)
        if m:
            base = now or datetime.now(timezone.utc)
            return base - timedelta(**{_RELATIVE_UNITS[m.group(2).lower()]: int(m.group(1))})
        dt = None
        try:
            dt = datetime.fromisoformat(text.replace("Z", "+00:00"))
        except ValueError:
            for fmt in _TEXT_FORMATS:
                try:
                    dt = datetime.strptime(text, fmt)
                    break
                except ValueError:
                    continue
        if dt is None:
            return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def slugify(text: str) -> str:
    return re.sub(r"[^a-z0-9]+", "-", (text or "").lower()).strip("-")


def title_key(title: str) -> str:
    return " ".join((title or "").split()).casefold()


def _iso(dt: datetime | None) -> str | None:
    return dt.isoformat() if dt else None


@dataclass
class ProblemRecord:
    problem_id: str
    title: str
    status: Status
    attempted_at: datetime
    difficulty: Difficulty = Difficulty.UNKNOWN
    tags: list[str] = field(default_factory=list)
    url: str = ""
    solved_at: datetime | None = None
    time_taken_minutes: float | None = None
    notes: str | None = None

    def matches(self, other: "ProblemRecord") -> bool:
        return self.problem_id == other.problem_id or title_key(self.title) == title_key(other.title)

    @classmethod
    def from_dict(cls, data, platform: str | None = None) -> "ProblemRecord":
        """
        Build and validate a record from an activity mapping.

        Raises ValidationError for anything the merge should skip: no title,
        an unknown status, or an attempt time that cannot be read. A missing
        problem_id is replaced by a stable "<platform>:<title-slug>" id.
        """
        if isinstance(data, ProblemRecord):
            return replace(
                data,
                tags=list(data.tags),
                solved_at=data.solved_at if data.status is Status.SOLVED else None,
            )
        if not isinstance(data, dict):
            raise ValidationError("activity record must be an object", platform=platform)
        d = {_ALIASES.get(k, k): v for k, v in data.items()}

        title = str(d.get("title") or "").strip()
        if not title:
            raise ValidationError("activity record has no title", platform=platform)

        try:
            status = Status(str(d.get("status") or "").strip().capitalize())
        except ValueError:
            raise ValidationError(f"unknown status {d.get('status')!r} for {title!r}", platform=platform)

        attempted_at = parse_timestamp(d.get("attempted_at"))
        if attempted_at is None:
            raise ValidationError(f"unreadable attempted_at for {title!r}", platform=platform)

        try:
            difficulty = Difficulty(str(d.get("difficulty") or "Unknown").strip().capitalize())
        except ValueError:
            difficulty = Difficulty.UNKNOWN

        problem_id = str(d.get("problem_id") or "").strip()
        if not problem_id:
            prefix = str(platform).lower() if platform else "manual"
            problem_id = f"{prefix}:{slugify(title)}"

        solved_at = None
        if status is Status.SOLVED:
            solved_at = parse_timestamp(d.get("solved_at")) or attempted_at

        time_taken = d.get("time_taken_minutes")
        try:
            time_taken = float(time_taken) if time_taken not in (None, "") else None
        except (TypeError, ValueError):
            time_taken = None

        tags = []
        for tag in d.get("tags") or []:
            tag = str(tag).strip()
            if tag and tag not in tags:
                tags.append(tag)

        return cls(
            problem_id=problem_id,
            title=title,
            status=status,
            attempted_at=attempted_at,
            difficulty=difficulty,
            tags=tags,
            url=str(d.get("url") or ""),
            solved_at=solved_at,
            time_taken_minutes=time_taken,
            notes=d.get("notes") or None,
        )

    def to_dict(self) -> dict:
        return {
            "problem_id": self.problem_id,
            "title": self.title,
            "difficulty": self.difficulty.value,
            "tags": list(self.tags),
            "url": self.url,
            "status": self.status.value,
            "attempted_at": _iso(self.attempted_at),
            "solved_at": _iso(self.solved_at),
            "time_taken_minutes": self.time_taken_minutes,
            "notes": self.notes,
        }

    def updated_with(self, newer: "ProblemRecord") -> "ProblemRecord":
        """
        The later record's status and metadata win; where it carries nothing
        the existing value stays, and the first attempt time is kept.
        """
        return replace(
            self,
            title=newer.title or self.title,
            status=newer.status,
            attempted_at=min(self.attempted_at, newer.attempted_at),
            difficulty=newer.difficulty if newer.difficulty is not Difficulty.UNKNOWN else self.difficulty,
            tags=list(newer.tags) if newer.tags else list(self.tags),
            url=newer.url or self.url,
            solved_at=newer.solved_at if newer.status is Status.SOLVED else None,
            time_taken_minutes=newer.time_taken_minutes if newer.time_taken_minutes is not None else self.time_taken_minutes,
            notes=newer.notes if newer.notes is not None else self.notes,
        )


def empty_stats() -> dict:
    return {
        "total_solved": 0,
        "easy_solved": 0,
        "medium_solved": 0,
        "hard_solved": 0,
        "success_rate": 0,
        "weekly_activity": [],
        "monthly_activity": [],
        "top_tags": [],
    }


@dataclass
class Progress:
    platform: str
    user_id: int | None = None
    problems: list[ProblemRecord] = field(default_factory=list)
    stats: dict = field(default_factory=empty_stats)
    last_updated: datetime | None = None

    def to_dict(self) -> dict:
        return {
            "user_id": self.user_id,
            "platform": str(self.platform),
            "problems": [p.to_dict() for p in self.problems],
            "stats": self.stats,
            "last_updated": _iso(self.last_updated),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Progress":
        platform = data.get("platform")
        problems = []
        for item in data.get("problems") or []:
            try:
                problems.append(ProblemRecord.from_dict(item, platform=platform))
            except ValidationError:
                # stored rows were valid when written; drop anything that no longer is
                continue
        return cls(
            platform=platform,
            user_id=data.get("user_id"),
            problems=problems,
            stats=data.get("stats") or empty_stats(),
            last_updated=parse_timestamp(data.get("last_updated")),
        )
