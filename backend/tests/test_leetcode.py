import pytest

from errors import NotFound, RateLimited, Unavailable
from scrape import leetcode

from fakes import FakeSession, make_response

PROFILE = {"data": {"matchedUser": {
    "username": "alice",
    "profile": {"realName": "Alice", "ranking": 1234, "userAvatar": "a.png", "skillTags": ["dp", "graphs"]},
    "submitStatsGlobal": {"acSubmissionNum": [
        {"difficulty": "All", "count": 10},
        {"difficulty": "Easy", "count": 5},
        {"difficulty": "Medium", "count": 4},
        {"difficulty": "Hard", "count": 1},
    ]},
}}}

RECENT = {"data": {"recentAcSubmissionList": [
    {"id": "9", "title": "Two Sum", "titleSlug": "two-sum", "timestamp": "1704067200"},
]}}


def test_fetch_profile_and_recent_submissions():
    session = FakeSession([("POST", "leetcode.com/graphql", [
        make_response(200, PROFILE),
        make_response(200, RECENT),
    ])])
    record = leetcode.fetch("alice", session=session)

    assert record["username"] == "alice"
    assert record["ranking"] == 1234
    assert record["skill_tags"] == ["dp", "graphs"]
    assert record["stats"] == {"total_solved": 10, "easy_solved": 5, "medium_solved": 4, "hard_solved": 1}
    assert record["recent_submissions"][0]["slug"] == "two-sum"
    assert record["recent_submissions"][0]["date"] == "2024-01-01T00:00:00+00:00"
    assert record["source"] == "https://leetcode.com/u/alice/"
    assert len(session.calls) == 2


def test_recent_submissions_degrade_to_empty():
    session = FakeSession([("POST", "leetcode.com/graphql", [
        make_response(200, PROFILE),
        make_response(500, "boom"),
    ])])
    record = leetcode.fetch("alice", session=session)
    assert record["username"] == "alice"
    assert record["recent_submissions"] == []


def test_unknown_user_is_not_found():
    body = {"data": {"matchedUser": None}, "errors": [{"message": "That user does not exist."}]}
    session = FakeSession([("POST", "leetcode.com/graphql", make_response(200, body))])
    with pytest.raises(NotFound) as exc:
        leetcode.fetch("nobody", session=session)
    assert exc.value.platform == "LeetCode"


def test_empty_body_is_unavailable():
    session = FakeSession([("POST", "leetcode.com/graphql", make_response(200, {"data": {}}))])
    with pytest.raises(Unavailable):
        leetcode.fetch("alice", session=session)


def test_rate_limited_profile_query():
    session = FakeSession([("POST", "leetcode.com/graphql", make_response(429, ""))])
    with pytest.raises(Unavailable) as exc:
        leetcode.fetch("alice", session=session)
    assert isinstance(exc.value.__cause__, RateLimited)
    assert len(session.calls) == 1
