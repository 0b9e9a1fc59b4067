import logging
import time

import cloudscraper
import requests
from urllib3.util.retry import Retry

import config
from errors import NotFound, RateLimited, Unavailable

log = logging.getLogger(__name__)

USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/122.0 Safari/537.36"
)

BROWSER_HEADERS = {
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
    "Cache-Control": "max-age=0",
}

# statuses platforms use to say "slow down"
THROTTLE_STATUSES = (403, 429)


class FixedBackoffRetry(Retry):
    """Same gap before every retry instead of urllib3's exponential curve."""

    def get_backoff_time(self):
        return config.RATE_LIMIT_BACKOFF_SECONDS


def throttle_retry(retries: int | None = None) -> Retry:
    # connection and read failures are not retried
    return FixedBackoffRetry(
        total=config.RATE_LIMIT_RETRIES if retries is None else retries,
        connect=0,
        read=0,
        other=0,
        status_forcelist=THROTTLE_STATUSES,
        allowed_methods=None,
        respect_retry_after_header=False,
    )


def mount_throttle_retry(session, retries: int | None = None):
    """Put the throttle retry on the session's http and https adapters."""
    for prefix in ("https://", "http://"):
        # cloudscraper mounts its own cipher adapter on https; keep it
        session.get_adapter(prefix).max_retries = throttle_retry(retries)
    return session


def make_scraper():
    s = cloudscraper.create_scraper()
    # keep a UA for good measure
    s.headers.update({"User-Agent": USER_AGENT})
    return mount_throttle_retry(s)


def pause(seconds: float | None = None) -> None:
    """Fixed gap between dependent calls to the same platform."""
    delay = config.INTER_REQUEST_DELAY_SECONDS if seconds is None else seconds
    if delay and delay > 0:
        time.sleep(delay)


def request_with_retry(session, platform: str, url: str, method: str = "GET",
                       **kwargs) -> requests.Response:
    """
    Issue one logical request through a session from `make_scraper`.

    The session's adapters retry 403/429 with a fixed backoff. When those
    retries run out the RateLimited is escalated to Unavailable. Timeouts and
    connection errors become Unavailable straight away. Any other response is
    returned to the caller, which decides what the status means.
    """
    kwargs.setdefault("timeout", config.REQUEST_TIMEOUT_SECONDS)
    try:
        resp = session.request(method, url, **kwargs)
    except requests.exceptions.RetryError as e:
        throttled = RateLimited(f"{url} kept answering {THROTTLE_STATUSES}", platform=platform)
        throttled.__cause__ = e
        raise Unavailable(f"Rate limited by {platform}", platform=platform) from throttled
    except requests.Timeout as e:
        raise Unavailable(f"Request to {url} timed out", platform=platform) from e
    except requests.RequestException as e:
        raise Unavailable(f"Request to {url} failed: {e}", platform=platform) from e

    # a session without the retry adapter hands the throttle response back
    if resp.status_code in THROTTLE_STATUSES:
        throttled = RateLimited(f"{url} answered {resp.status_code}", platform=platform)
        raise Unavailable(f"Rate limited by {platform}", platform=platform) from throttled
    return resp


def raise_for_status(resp: requests.Response, platform: str, handle: str) -> None:
    if resp.status_code == 404:
        raise NotFound(f"User '{handle}' not found on {platform}", platform=platform)
    if resp.status_code >= 400:
        raise Unavailable(
            f"Failed to fetch profile for '{handle}': HTTP {resp.status_code}",
            platform=platform,
        )


def get_json(session, platform: str, handle: str, url: str, method: str = "GET",
             **kwargs):
    """Request + status check + JSON decode; undecodable bodies are Unavailable."""
    resp = request_with_retry(session, platform, url, method=method, **kwargs)
    raise_for_status(resp, platform, handle)
    try:
        return resp.json()
    except ValueError as e:
        raise Unavailable(f"{url} did not return JSON", platform=platform) from e
