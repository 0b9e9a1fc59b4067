import pytest

from errors import ValidationError
from profiles.platforms import Platform, PlatformHandle, parse_platform, validate_handles


@pytest.mark.parametrize("value,expected", [
    ("leetcode", Platform.LEETCODE),
    ("LeetCode", Platform.LEETCODE),
    ("cf", Platform.CODEFORCES),
    (" CC ", Platform.CODECHEF),
    ("gfg", Platform.GEEKSFORGEEKS),
    (Platform.CODECHEF, Platform.CODECHEF),
])
def test_parse_platform(value, expected):
    assert parse_platform(value) is expected


def test_parse_platform_rejects_unknown():
    with pytest.raises(ValidationError):
        parse_platform("hackerrank")


def test_duplicate_platforms_rejected():
    with pytest.raises(ValidationError) as exc:
        validate_handles([
            {"platform": "LeetCode", "handle": "a"},
            {"platform": "lc", "handle": "b"},
        ])
    assert "Duplicate coding platforms" in exc.value.message


def test_validate_handles_keeps_empty_handles():
    pairs = validate_handles([{"platform": "cc", "handle": None}, {"platform": "cf", "handle": " bob "}])
    assert pairs == [(Platform.CODECHEF, ""), (Platform.CODEFORCES, "bob")]


def test_handle_to_dict():
    d = PlatformHandle(Platform.CODEFORCES, "tourist").to_dict()
    assert d == {
        "platform": "Codeforces",
        "handle": "tourist",
        "last_synced_at": None,
        "sync_in_progress": False,
        "last_sync_error": None,
        "sync_started_at": None,
    }
