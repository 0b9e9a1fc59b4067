import json

import requests


def make_response(status=200, body=b"", url="https://example.test/"):
    r = requests.Response()
    r.status_code = status
    if isinstance(body, (dict, list)):
        body = json.dumps(body)
        r.headers["Content-Type"] = "application/json"
    if isinstance(body, str):
        body = body.encode("utf-8")
    r._content = body
    r.encoding = "utf-8"
    r.url = url
    return r


class FakeSession:
    """
    requests-compatible session answering from a route table.

    Each route is (method, url fragment, outcome). An outcome is a Response,
    an exception to raise, or a list of those consumed in order (the last one
    repeats). Unmatched requests get a 404.
    """

    def __init__(self, routes=()):
        self.routes = [(m, frag, list(o) if isinstance(o, list) else o) for m, frag, o in routes]
        self.calls = []
        self.headers = {}

    def request(self, method, url, **kwargs):
        self.calls.append((method, url, kwargs))
        for m, frag, outcome in self.routes:
            if m != method or frag not in url:
                continue
            if isinstance(outcome, list):
                outcome = outcome.pop(0) if len(outcome) > 1 else outcome[0]
            if isinstance(outcome, Exception):
                raise outcome
            return outcome
        return make_response(404, "<html><head><title>Not Found</title></head></html>", url)

    def urls(self):
        return [url for _, url, _ in self.calls]
