import pytest

from errors import NotFound, Unavailable
from scrape import codechef

from fakes import FakeSession, make_response

PAGE = """
<html><head><title>alice | CodeChef User Profile</title></head><body>
<div class="user-details-container">
  <img class="profileImage" src="https://cdn.codechef.com/alice.png">
  <h1 class="h2-style">Alice Smith</h1>
  <span class="m-username--link">alice</span>
  <span class="user-country-name">India</span>
</div>
<div class="rating-header">
  <div class="rating-number">1,750</div>
  <div class="rating-star">4&#9733;</div>
</div>
<div class="rating-ranks"><ul>
  <li><a href="/ratings/all"><strong>1234</strong></a> Global Rank</li>
  <li><a href="/ratings/all?country=India"><strong>56</strong></a> Country Rank</li>
</ul></div>
<section class="rating-data-section problems-solved">
  <h3>Total Problems Solved: 120</h3>
  <h5>Fully Solved (100)</h5>
  <h5>Partially Solved (20)</h5>
</section>
<section class="rating-data-section recent-activity">
  <table><tbody>
    <tr><td><a href="/problems/TWOSUM">Two Sum</a></td><td>05/01/24</td><td>Solved</td></tr>
    <tr><td><a href="/problems/KNAP">Knapsack</a></td><td>12:30 PM 06/01/24</td><td>Partially Solved</td></tr>
    <tr><td>Starters 100 Contest</td><td>07/01/24</td><td></td></tr>
  </tbody></table>
</section>
<script>
jQuery.extend(Drupal.settings, {'basePath': '/', 'date_versus_rating': {'all': [
  {'code': 'START1', 'name': 'Starters 1', 'getyear': '2024', 'getmonth': '1', 'getday': '5',
   'rating': '1800', 'rank': '100', 'color': '#3366CC'},
  {'code': 'START2', 'name': 'Starters 2', 'getyear': '2024', 'getmonth': '2', 'getday': '5',
   'rating': '1750', 'rank': '300', 'color': '#3366CC'},
]}});
</script>
</body></html>
"""


def test_fetch_parses_profile_tables_and_settings():
    session = FakeSession([("GET", "codechef.com/users/alice", make_response(200, PAGE))])
    record = codechef.fetch("alice", session=session)

    assert record["username"] == "alice"
    assert record["name"] == "Alice Smith"
    assert record["country"]["name"] == "India"
    assert record["rating"] == 1750
    assert record["ranks"] == {"global": 1234, "country": 56}
    assert record["stats"]["total"] == 120
    assert record["stats"]["fully_solved"] == 100
    assert record["stats"]["partially_solved"] == 20

    recent = record["stats"]["last_solved"]
    assert [p["code"] for p in recent] == ["TWOSUM", "KNAP"]
    assert recent[0]["link"] == "https://www.codechef.com/problems/TWOSUM"
    assert recent[1]["status"] == "Partially Solved"

    history = record["contest_history"]
    assert history["total"] == 2
    assert history["highest_rating"] == 1800
    assert history["current_rating"] == 1750
    assert record["source"] == "https://www.codechef.com/users/alice"


def test_broken_settings_payload_leaves_history_empty():
    page = PAGE.replace("'basePath': '/',", "'basePath': ,,, '/',")
    session = FakeSession([("GET", "codechef.com/users/alice", make_response(200, page))])
    record = codechef.fetch("alice", session=session)
    assert record["username"] == "alice"
    assert record["contest_history"]["contests"] == []
    assert record["contest_history"]["current_rating"] == 0


def test_page_without_identity_is_unavailable():
    page = '<html><body><div class="rating-header"><div class="rating-number">1500</div></div></body></html>'
    session = FakeSession([("GET", "codechef.com/users/ghost", make_response(200, page))])
    with pytest.raises(Unavailable):
        codechef.fetch("ghost", session=session)


def test_missing_user_is_not_found():
    with pytest.raises(NotFound):
        codechef.fetch("nobody", session=FakeSession())


def test_identity_only_page_degrades_to_defaults():
    page = """
    <html><body><div class="user-details-container">
      <span class="m-username--link">bare</span>
    </div></body></html>
    """
    session = FakeSession([("GET", "codechef.com/users/bare", make_response(200, page))])
    record = codechef.fetch("bare", session=session)
    assert record["username"] == "bare"
    assert record["rating"] == 0
    assert record["ranks"] == {"global": 0, "country": 0}
    assert record["stats"]["total"] == 0
    assert record["stats"]["last_solved"] == []
    assert record["contest_history"] == {"total": 0, "highest_rating": 0, "current_rating": 0, "contests": []}


def test_handle_containing_404_is_a_real_user():
    page = PAGE.replace("alice", "coder404")
    session = FakeSession([("GET", "codechef.com/users/coder404", make_response(200, page))])
    record = codechef.fetch("coder404", session=session)
    assert record["username"] == "coder404"
    assert record["rating"] == 1750
