from profiles.platforms import Platform, parse_platform
from scrape import codechef, codeforces, geeksforgeeks, leetcode

FETCHERS = {
    Platform.LEETCODE: leetcode.fetch,
    Platform.CODEFORCES: codeforces.fetch,
    Platform.CODECHEF: codechef.fetch,
    Platform.GEEKSFORGEEKS: geeksforgeeks.fetch,
}


def fetch_profile(platform, handle: str, session=None) -> dict:
    platform = parse_platform(platform)
    return FETCHERS[platform](handle, session=session)
