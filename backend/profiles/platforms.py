from dataclasses import dataclass, asdict
from datetime import datetime
from enum import Enum

from errors import ValidationError


class Platform(str, Enum):
    LEETCODE = "LeetCode"
    CODEFORCES = "Codeforces"
    CODECHEF = "CodeChef"
    GEEKSFORGEEKS = "GeeksforGeeks"

    def __str__(self) -> str:
        return self.value

    @property
    def slug(self) -> str:
        return self.value.lower()


_ALIASES = {
    "lc": Platform.LEETCODE,
    "cf": Platform.CODEFORCES,
    "cc": Platform.CODECHEF,
    "gfg": Platform.GEEKSFORGEEKS,
}


def parse_platform(value) -> Platform:
    """Accept an enum member, its display name in any case, or a short alias."""
    if isinstance(value, Platform):
        return value
    key = str(value or "").strip().lower()
    if key in _ALIASES:
        return _ALIASES[key]
    for platform in Platform:
        if platform.slug == key:
            return platform
    raise ValidationError(f"Unsupported platform: {value!r}")


@dataclass
class PlatformHandle:
    platform: Platform
    handle: str
    last_synced_at: datetime | None = None
    sync_in_progress: bool = False
    last_sync_error: str | None = None
    sync_started_at: datetime | None = None

    def to_dict(self) -> dict:
        d = asdict(self)
        d["platform"] = self.platform.value
        for key in ("last_synced_at", "sync_started_at"):
            if d[key] is not None:
                d[key] = d[key].isoformat()
        return d


def validate_handles(entries) -> list[tuple[Platform, str]]:
    """
    Turn a batch of {platform, handle} mappings into (Platform, handle) pairs.

    A platform may appear only once per user, so a batch naming the same
    platform twice is rejected as a whole.
    """
    pairs: list[tuple[Platform, str]] = []
    seen: set[Platform] = set()
    for entry in entries or []:
        if not isinstance(entry, dict):
            raise ValidationError("Each handle entry must be an object")
        platform = parse_platform(entry.get("platform"))
        if platform in seen:
            raise ValidationError(
                "Duplicate coding platforms detected. Each platform can only be added once.",
                platform=platform.value,
            )
        seen.add(platform)
        handle = entry.get("handle")
        pairs.append((platform, str(handle).strip() if handle is not None else ""))
    return pairs
