from datetime import datetime, timezone

import pytest
import requests

from gh_importer.errors import AbuseDetectedError, ConfigurationError, RateLimitError
from gh_importer.github_api import GitHubClient, PRDetail, parse_timestamp


class _FakeResponse:
    def __init__(self, status_code=200, payload=None, headers=None):
        self.status_code = status_code
        self._payload = payload
        self.headers = headers or {}
        self.text = ""

    def json(self):
        if self._payload is None:
            raise ValueError("no json")
        return self._payload

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error", response=self)


class _FakeSession:
    def __init__(self, responses):
        self.responses = list(responses)
        self.headers = {}
        self.requests = []

    def get(self, url, params=None, timeout=None):
        self.requests.append((url, params))
        return self.responses.pop(0)


def _client(*responses):
    session = _FakeSession(responses)
    return GitHubClient("t0ken", session=session), session


def _pull_payload(**overrides):
    payload = {
        "id": 101,
        "number": 7,
        "title": "Fix cache",
        "state": "closed",
        "updated_at": "2024-05-01T12:00:00Z",
        "closed_at": "2024-05-02T08:30:00Z",
        "merged_at": None,
        "user": {"id": 1, "login": "alice", "html_url": "https://github.com/alice"},
        "additions": 12,
        "deletions": 3,
        "changed_files": 2,
        "commits": 4,
    }
    payload.update(overrides)
    return payload


def test_missing_token_fails_before_any_request() -> None:
    session = _FakeSession([])

    with pytest.raises(ConfigurationError, match="GITHUB_TOKEN"):
        GitHubClient(None, session=session)
    with pytest.raises(ConfigurationError):
        GitHubClient("", session=session)
    assert session.requests == []


def test_token_sent_as_bearer_header() -> None:
    client, session = _client()

    assert session.headers["Authorization"] == "Bearer t0ken"
    assert client.token == "t0ken"


def test_org_repositories_request_and_decoding() -> None:
    payload = [{
        "id": 5, "name": "next.js", "full_name": "vercel/next.js",
        "html_url": "https://github.com/vercel/next.js", "private": False, "archived": True,
    }]
    client, session = _client(_FakeResponse(payload=payload))

    repos = client.get_organization_repositories("vercel", "public", 100, 2)

    assert session.requests == [(
        "https://api.github.com/orgs/vercel/repos",
        {"type": "public", "per_page": 100, "page": 2},
    )]
    assert repos[0].full_name == "vercel/next.js"
    assert repos[0].archived is True


def test_pull_request_detail_decoding() -> None:
    client, session = _client(_FakeResponse(payload=_pull_payload()))

    pr = client.get_pull_request_detail("vercel/next.js", 7)

    assert session.requests[0][0] == "https://api.github.com/repos/vercel/next.js/pulls/7"
    assert isinstance(pr, PRDetail)
    assert pr.closed_at == datetime(2024, 5, 2, 8, 30, tzinfo=timezone.utc)
    assert pr.merged_at is None
    assert (pr.additions, pr.deletions, pr.changed_files, pr.commits) == (12, 3, 2, 4)
    assert pr.user.login == "alice"


def test_ghost_author_decodes_to_none() -> None:
    client, _ = _client(_FakeResponse(payload=[_pull_payload(user=None)]))

    [summary] = client.get_pull_requests("vercel/next.js", "all", 100, 1)

    assert summary.user is None


def test_reviews_request() -> None:
    payload = [{"id": 9, "state": "APPROVED", "submitted_at": "2024-05-01T12:00:00Z", "user": None}]
    client, session = _client(_FakeResponse(payload=payload))

    [review] = client.get_pull_request_reviews("vercel/next.js", 7, 100)

    assert session.requests == [(
        "https://api.github.com/repos/vercel/next.js/pulls/7/reviews", {"per_page": 100},
    )]
    assert review.state == "APPROVED"
    assert review.user is None


def test_rate_limit_status() -> None:
    client, _ = _client(_FakeResponse(payload={"resources": {"core": {"reset": 1714564800}}}))

    status = client.get_rate_limit_status()

    assert status.resets_at == datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def test_429_maps_to_rate_limit_error_with_hint() -> None:
    client, _ = _client(_FakeResponse(429, {"message": "Too many"}, {"Retry-After": "30"}))

    with pytest.raises(RateLimitError) as excinfo:
        client.get_repository("vercel/next.js")

    assert excinfo.value.retry_after == 30


def test_exhausted_quota_maps_to_rate_limit_error_with_reset() -> None:
    headers = {"X-RateLimit-Remaining": "0", "X-RateLimit-Reset": "1714564800"}
    client, _ = _client(_FakeResponse(403, {"message": "API rate limit exceeded"}, headers))

    with pytest.raises(RateLimitError) as excinfo:
        client.get_repository("vercel/next.js")

    assert excinfo.value.retry_after is None
    assert excinfo.value.resets_at == datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def test_secondary_limit_maps_to_abuse_error() -> None:
    body = {"message": "You have exceeded a secondary rate limit. Please wait a few minutes."}
    client, _ = _client(_FakeResponse(403, body, {"Retry-After": "60", "X-RateLimit-Remaining": "4000"}))

    with pytest.raises(AbuseDetectedError) as excinfo:
        client.get_repository("vercel/next.js")

    assert excinfo.value.retry_after == 60


def test_other_errors_are_not_rate_limits() -> None:
    client, _ = _client(
        _FakeResponse(403, {"message": "Resource not accessible"}, {"X-RateLimit-Remaining": "4000"}),
        _FakeResponse(404, {"message": "Not Found"}),
    )

    with pytest.raises(requests.HTTPError):
        client.get_repository("vercel/private")
    with pytest.raises(requests.HTTPError):
        client.get_repository("vercel/missing")


def test_parse_timestamp() -> None:
    assert parse_timestamp(None) is None
    assert parse_timestamp("") is None
    assert parse_timestamp("2024-05-01T12:00:00Z").tzinfo is not None
