from dataclasses import dataclass, field
from datetime import datetime

from activity.records import parse_timestamp
from profiles.normalize import normalize
from profiles.platforms import Platform, parse_platform

PROFILE_URLS = {
    Platform.LEETCODE: "https://leetcode.com/u/{handle}/",
    Platform.CODEFORCES: "https://codeforces.com/profile/{handle}",
    Platform.CODECHEF: "https://www.codechef.com/users/{handle}",
    Platform.GEEKSFORGEEKS: "https://www.geeksforgeeks.org/user/{handle}/",
}


@dataclass
class CanonicalProfile:
    platform: Platform
    username: str
    profile_url: str
    last_synced_at: datetime | None = None
    stats: dict = field(default_factory=dict)
    raw_data: dict = field(default_factory=dict)
    skill_tags: set[str] = field(default_factory=set)
    country: str = ""
    institution: str = ""
    organization: str = ""

    @classmethod
    def from_raw(cls, platform, handle: str, raw: dict, synced_at: datetime) -> "CanonicalProfile":
        """Normalize an extractor record; the record itself is kept untouched in raw_data."""
        platform = parse_platform(platform)
        fragment = normalize(platform, raw)
        return cls(
            platform=platform,
            username=raw.get("username") or handle,
            profile_url=raw.get("source") or PROFILE_URLS[platform].format(handle=handle),
            last_synced_at=synced_at,
            stats=fragment["stats"],
            raw_data=raw,
            skill_tags=set(fragment["skill_tags"]),
            country=fragment["country"],
            institution=fragment["institution"],
            organization=fragment["organization"],
        )

    def to_dict(self) -> dict:
        return {
            "platform": self.platform.value,
            "username": self.username,
            "profile_url": self.profile_url,
            "last_synced_at": self.last_synced_at.isoformat() if self.last_synced_at else None,
            "stats": self.stats,
            "raw_data": self.raw_data,
            "skill_tags": sorted(self.skill_tags),
            "country": self.country,
            "institution": self.institution,
            "organization": self.organization,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "CanonicalProfile":
        return cls(
            platform=parse_platform(data.get("platform")),
            username=data.get("username") or "",
            profile_url=data.get("profile_url") or "",
            last_synced_at=parse_timestamp(data.get("last_synced_at")),
            stats=data.get("stats") or {},
            raw_data=data.get("raw_data") or {},
            skill_tags=set(data.get("skill_tags") or []),
            country=data.get("country") or "",
            institution=data.get("institution") or "",
            organization=data.get("organization") or "",
        )
