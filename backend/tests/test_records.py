from datetime import date, datetime, timezone

import pytest

from activity.records import Difficulty, ProblemRecord, Progress, Status, parse_timestamp
from errors import ValidationError

NOW = datetime(2024, 1, 10, 12, 0, tzinfo=timezone.utc)


@pytest.mark.parametrize("value,expected", [
    ("2024-01-01", datetime(2024, 1, 1, tzinfo=timezone.utc)),
    ("2024-01-01T10:00:00Z", datetime(2024, 1, 1, 10, tzinfo=timezone.utc)),
    ("2024-01-01T12:00:00+02:00", datetime(2024, 1, 1, 10, tzinfo=timezone.utc)),
    (1704067200, datetime(2024, 1, 1, tzinfo=timezone.utc)),
    ("1704067200", datetime(2024, 1, 1, tzinfo=timezone.utc)),
    (date(2024, 1, 1), datetime(2024, 1, 1, tzinfo=timezone.utc)),
    ("12:30 PM 05/01/24", datetime(2024, 1, 5, 12, 30, tzinfo=timezone.utc)),
    ("2 days ago", datetime(2024, 1, 8, 12, 0, tzinfo=timezone.utc)),
])
def test_parse_timestamp(value, expected):
    assert parse_timestamp(value, now=NOW) == expected


@pytest.mark.parametrize("value", [None, "", "yesterday-ish", "31/31/31"])
def test_parse_timestamp_unreadable(value):
    assert parse_timestamp(value) is None


def test_from_dict_accepts_camel_case_and_fills_defaults():
    rec = ProblemRecord.from_dict({
        "problemId": "1",
        "title": " Two Sum ",
        "status": "solved",
        "difficulty": "easy",
        "attemptedAt": "2024-01-01",
        "timeTaken": "15",
        "tags": ["array", "array", "hash-table", ""],
    }, platform="LeetCode")
    assert rec.problem_id == "1"
    assert rec.title == "Two Sum"
    assert rec.status is Status.SOLVED
    assert rec.difficulty is Difficulty.EASY
    assert rec.solved_at == rec.attempted_at
    assert rec.time_taken_minutes == 15.0
    assert rec.tags == ["array", "hash-table"]


def test_missing_problem_id_gets_platform_slug():
    rec = ProblemRecord.from_dict({"title": "Two Sum!", "status": "Attempted", "attemptedAt": "2024-01-01"},
                                  platform="CodeChef")
    assert rec.problem_id == "codechef:two-sum"
    assert rec.solved_at is None
    assert rec.difficulty is Difficulty.UNKNOWN


@pytest.mark.parametrize("data", [
    {"status": "Solved", "attemptedAt": "2024-01-01"},
    {"title": "A", "status": "Accepted", "attemptedAt": "2024-01-01"},
    {"title": "A", "status": "Solved", "attemptedAt": "someday"},
    "not a dict",
])
def test_invalid_records_raise(data):
    with pytest.raises(ValidationError):
        ProblemRecord.from_dict(data, platform="LeetCode")


def test_progress_round_trip_drops_rows_that_no_longer_validate():
    rec = ProblemRecord.from_dict({"title": "A", "status": "Solved", "attemptedAt": "2024-01-01"}, platform="LeetCode")
    stored = Progress(platform="LeetCode", user_id=1, problems=[rec], last_updated=NOW).to_dict()
    stored["problems"].append({"title": "", "status": "Solved"})

    loaded = Progress.from_dict(stored)
    assert loaded.problems == [rec]
    assert loaded.last_updated == NOW
    assert loaded.user_id == 1
