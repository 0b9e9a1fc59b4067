from datetime import datetime, timezone

from activity.extract import activity_from_profile
from activity.merge import merge_with_counts

NOW = datetime(2024, 1, 10, tzinfo=timezone.utc)


def test_leetcode_recent_accepted_are_solved():
    raw = {"recent_submissions": [
        {"title": "Two Sum", "slug": "two-sum", "timestamp": "1704153600", "date": "2024-01-02T00:00:00+00:00"},
        {"title": "Valid Parentheses", "slug": "valid-parentheses", "timestamp": "1704067200", "date": None},
    ]}
    activity = activity_from_profile("LeetCode", raw, now=NOW)
    assert [a["problem_id"] for a in activity] == ["leetcode:valid-parentheses", "leetcode:two-sum"]
    assert all(a["status"] == "Solved" for a in activity)
    assert activity[1]["url"] == "https://leetcode.com/problems/two-sum/"


def test_codeforces_verdicts():
    raw = {"recent_submissions": [
        {"problem_id": "1500A", "problem_name": "Going Home", "verdict": "OK", "tags": ["math"],
         "submission_time": "2024-01-02T00:00:00+00:00", "problem_link": "https://codeforces.com/contest/1500/problem/A"},
        {"problem_id": "1500A", "problem_name": "Going Home", "verdict": "WRONG_ANSWER", "tags": ["math"],
         "submission_time": "2024-01-01T00:00:00+00:00"},
    ]}
    activity = activity_from_profile("cf", raw, now=NOW)
    assert [a["status"] for a in activity] == ["Attempted", "Solved"]

    progress, counts = merge_with_counts(None, "Codeforces", activity, now=NOW)
    assert counts.added == 1 and counts.updated == 1
    assert progress.problems[0].problem_id == "codeforces:1500A"
    assert progress.problems[0].status.value == "Solved"
    assert progress.stats["top_tags"] == [{"tag": "math", "count": 1}]


def test_codechef_partial_is_attempted():
    raw = {"stats": {"last_solved": [
        {"name": "Knapsack", "code": "KNAP", "link": "https://www.codechef.com/problems/KNAP",
         "date": "12:30 PM 06/01/24", "status": "Partially Solved"},
        {"name": "Two Sum", "code": "", "link": "", "date": "05/01/24", "status": "Solved"},
    ]}}
    activity = activity_from_profile("CodeChef", raw, now=NOW)
    assert [(a["title"], a["status"]) for a in activity] == [("Two Sum", "Solved"), ("Knapsack", "Attempted")]
    assert activity[1]["problem_id"] == "codechef:KNAP"

    progress = merge_with_counts(None, "CodeChef", activity, now=NOW)[0]
    assert progress.problems[0].problem_id == "codechef:two-sum"


def test_geeksforgeeks_has_no_activity():
    assert activity_from_profile("gfg", {"stats": {"problems_solved": {"total": 5}}}) == []


def test_malformed_raw_data():
    assert activity_from_profile("LeetCode", None) == []
    assert activity_from_profile("LeetCode", {"recent_submissions": "nope"}) == []
    activity = activity_from_profile("CodeChef", {"stats": {"last_solved": [
        {"name": "A", "date": "sometime"}, {"name": "B", "date": "05/01/24"}, "junk",
    ]}}, now=NOW)
    assert [a["title"] for a in activity] == ["B", "A"]
    assert merge_with_counts(None, "CodeChef", activity, now=NOW)[1].skipped == 1
