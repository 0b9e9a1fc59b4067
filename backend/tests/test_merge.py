from datetime import datetime, timezone

from activity.merge import merge, merge_with_counts
from activity.records import Status

NOW = datetime(2024, 1, 3, 12, 0, tzinfo=timezone.utc)  # a Wednesday

TWO_SUM = {
    "problemId": "1",
    "title": "Two Sum",
    "status": "Solved",
    "difficulty": "Easy",
    "attemptedAt": "2024-01-01",
}


def test_two_sum_scenario():
    progress = merge(None, "LeetCode", [TWO_SUM], user_id=7, now=NOW)
    stats = progress.stats
    assert len(progress.problems) == 1
    assert progress.user_id == 7
    assert stats["total_solved"] == 1
    assert stats["easy_solved"] == 1
    assert stats["success_rate"] == 100
    assert stats["monthly_activity"] == [{"month": "2024-1", "count": 1}]
    assert len(stats["weekly_activity"]) == 7
    assert progress.last_updated == NOW


def test_merge_is_idempotent():
    activity = [TWO_SUM, {"title": "Add Two Numbers", "status": "Attempted", "attemptedAt": "2024-01-02",
                          "tags": ["linked-list"]}]
    once = merge(None, "LeetCode", activity, now=NOW)
    twice, counts = merge_with_counts(once, "LeetCode", activity, now=NOW)
    assert twice.problems == once.problems
    assert twice.stats == once.stats
    assert counts == (0, 0, 0)


def test_same_title_is_one_problem_and_later_status_wins():
    first = merge(None, "LeetCode", [{"title": "Two Sum", "status": "Attempted", "attemptedAt": "2024-01-01"}],
                  now=NOW)
    second, counts = merge_with_counts(first, "LeetCode", [
        {"title": "  two   SUM ", "status": "Solved", "attemptedAt": "2024-01-02", "difficulty": "Easy"},
    ], now=NOW)
    assert len(second.problems) == 1
    rec = second.problems[0]
    assert rec.status is Status.SOLVED
    assert rec.title == "two   SUM"
    assert rec.attempted_at == datetime(2024, 1, 1, tzinfo=timezone.utc)
    assert counts.updated == 1
    assert second.stats["total_solved"] == 1
    assert second.stats["easy_solved"] == 1


def test_empty_incoming_metadata_keeps_existing():
    first = merge(None, "Codeforces", [{"problemId": "codeforces:1500A", "title": "Going Home", "status": "Attempted",
                                        "attemptedAt": "2024-01-01", "tags": ["math"], "url": "https://x/1"}], now=NOW)
    second = merge(first, "Codeforces", [{"problemId": "codeforces:1500A", "title": "Going Home",
                                          "status": "Solved", "attemptedAt": "2024-01-02"}], now=NOW)
    rec = second.problems[0]
    assert rec.tags == ["math"]
    assert rec.url == "https://x/1"
    assert rec.solved_at == datetime(2024, 1, 2, tzinfo=timezone.utc)


def test_invalid_records_are_skipped_and_counted():
    progress, counts = merge_with_counts(None, "LeetCode", [
        TWO_SUM,
        {"title": "", "status": "Solved", "attemptedAt": "2024-01-01"},
        {"title": "X", "status": "Queued", "attemptedAt": "2024-01-01"},
        {"title": "Y", "status": "Solved"},
    ], now=NOW)
    assert counts.added == 1
    assert counts.skipped == 3
    assert [p.title for p in progress.problems] == ["Two Sum"]


def test_existing_progress_is_not_mutated():
    first = merge(None, "LeetCode", [TWO_SUM], now=NOW)
    merge(first, "LeetCode", [{"title": "Three Sum", "status": "Solved", "attemptedAt": "2024-01-02"}], now=NOW)
    assert len(first.problems) == 1


def test_stats_invariants_hold_after_every_merge():
    progress = None
    batches = [
        [TWO_SUM],
        [{"title": "Median", "status": "Failed", "difficulty": "Hard", "attemptedAt": "2024-01-02"}],
        [{"title": "median", "status": "Solved", "difficulty": "Hard", "attemptedAt": "2024-01-03"},
         {"title": "LRU", "status": "Solved", "difficulty": "Medium", "attemptedAt": "2023-12-20"}],
    ]
    for batch in batches:
        progress = merge(progress, "LeetCode", batch, now=NOW)
        stats = progress.stats
        solved = [p for p in progress.problems if p.status is Status.SOLVED]
        assert stats["total_solved"] == len(solved)
        assert stats["easy_solved"] + stats["medium_solved"] + stats["hard_solved"] <= stats["total_solved"]
        assert len(stats["weekly_activity"]) == 7
        assert 0 <= stats["success_rate"] <= 100
        ids = [p.problem_id for p in progress.problems]
        assert len(ids) == len(set(ids))

    assert progress.stats["success_rate"] == 100
    assert progress.stats["monthly_activity"] == [
        {"month": "2023-12", "count": 1},
        {"month": "2024-1", "count": 2},
    ]


def test_duplicate_ids_in_one_batch_collapse_to_one_problem():
    batch = [
        TWO_SUM,
        dict(TWO_SUM, title="Two Sum (retry)", status="Attempted", attemptedAt="2024-01-02"),
    ]
    progress, counts = merge_with_counts(None, "LeetCode", batch, now=NOW)
    assert len(progress.problems) == 1
    assert progress.problems[0].status is Status.ATTEMPTED
    assert progress.stats["total_solved"] == 0
    assert counts.added == 1
    assert counts.updated == 1


def test_unknown_difficulty_solve_is_in_total_but_not_the_split():
    batch = [TWO_SUM, {"problemId": "9", "title": "Mystery", "status": "Solved", "attemptedAt": "2024-01-02"}]
    stats = merge(None, "LeetCode", batch, now=NOW).stats
    assert stats["total_solved"] == 2
    assert stats["easy_solved"] + stats["medium_solved"] + stats["hard_solved"] == 1
