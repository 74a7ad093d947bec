# gh_importer/github_api.py
# GitHub REST client. Payloads are decoded once into frozen records; throttling
# responses become RateLimitError / AbuseDetectedError for gh_importer.retry.
from dataclasses import dataclass
from datetime import datetime, timezone
import logging

import requests

from gh_importer.errors import AbuseDetectedError, ConfigurationError, RateLimitError

logger = logging.getLogger(__name__)

GITHUB_API_URL = "https://api.github.com"


def parse_timestamp(value):
    """Parse a GitHub ISO-8601 timestamp ("2024-05-01T12:00:00Z")."""
    if not value:
        return None
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


@dataclass(frozen=True)
class UserRecord:
    id: int
    login: str
    html_url: str

    @classmethod
    def from_json(cls, data):
        if not data:
            return None
        return cls(id=data["id"], login=data["login"], html_url=data["html_url"])


@dataclass(frozen=True)
class RepoRecord:
    id: int
    name: str
    full_name: str
    html_url: str
    private: bool
    archived: bool

    @classmethod
    def from_json(cls, data):
        return cls(
            id=data["id"],
            name=data["name"],
            full_name=data["full_name"],
            html_url=data["html_url"],
            private=bool(data.get("private", False)),
            archived=bool(data.get("archived", False)),
        )


@dataclass(frozen=True)
class PRSummary:
    """A pull request as returned by the list endpoint (no diff statistics)."""

    id: int
    number: int
    title: str
    state: str
    updated_at: datetime
    closed_at: datetime
    merged_at: datetime
    user: UserRecord

    @classmethod
    def from_json(cls, data):
        return cls(
            id=data["id"],
            number=data["number"],
            title=data.get("title"),
            state=data.get("state"),
            updated_at=parse_timestamp(data.get("updated_at")),
            closed_at=parse_timestamp(data.get("closed_at")),
            merged_at=parse_timestamp(data.get("merged_at")),
            user=UserRecord.from_json(data.get("user")),
        )


@dataclass(frozen=True)
class PRDetail(PRSummary):
    """A single pull request fetched by number, with diff statistics."""

    additions: int = None
    deletions: int = None
    changed_files: int = None
    commits: int = None

    @classmethod
    def from_json(cls, data):
        summary = PRSummary.from_json(data)
        return cls(
            id=summary.id,
            number=summary.number,
            title=summary.title,
            state=summary.state,
            updated_at=summary.updated_at,
            closed_at=summary.closed_at,
            merged_at=summary.merged_at,
            user=summary.user,
            additions=data.get("additions"),
            deletions=data.get("deletions"),
            changed_files=data.get("changed_files"),
            commits=data.get("commits"),
        )


@dataclass(frozen=True)
class ReviewRecord:
    id: int
    state: str
    submitted_at: datetime
    user: UserRecord

    @classmethod
    def from_json(cls, data):
        return cls(
            id=data["id"],
            state=data.get("state"),
            submitted_at=parse_timestamp(data.get("submitted_at")),
            user=UserRecord.from_json(data.get("user")),
        )


@dataclass(frozen=True)
class RateLimitStatus:
    resets_at: datetime


def _epoch_header(response, name):
    value = response.headers.get(name)
    if not value:
        return None
    return datetime.fromtimestamp(int(value), tz=timezone.utc)


def _int_header(response, name):
    value = response.headers.get(name)
    if value is None or not value.strip().isdigit():
        return None
    return int(value)


def _error_message(response):
    try:
        return str(response.json().get("message", ""))
    except ValueError:
        return response.text or ""


def raise_for_rate_limit(response):
    """Raise RateLimitError / AbuseDetectedError if the response signals throttling."""
    if response.status_code == 429:
        raise RateLimitError(
            _error_message(response) or "Too many requests",
            retry_after=_int_header(response, "Retry-After"),
            resets_at=_epoch_header(response, "X-RateLimit-Reset"),
        )
    if response.status_code != 403:
        return

    message = _error_message(response)
    lowered = message.lower()
    if "secondary rate limit" in lowered or "abuse" in lowered:
        raise AbuseDetectedError(
            message,
            retry_after=_int_header(response, "Retry-After"),
        )
    if response.headers.get("X-RateLimit-Remaining") == "0":
        raise RateLimitError(
            message or "API rate limit exceeded",
            retry_after=_int_header(response, "Retry-After"),
            resets_at=_epoch_header(response, "X-RateLimit-Reset"),
        )


class GitHubClient:
    """Client for the GitHub REST API, authenticated with a single token."""

    def __init__(self, token, base_url=GITHUB_API_URL, session=None, timeout=30):
        """
        Args:
            token: GitHub personal access token. Required.
            base_url: API root, overridable for GitHub Enterprise.
            session: Optional requests.Session (tests pass a fake one).
            timeout: Per-request timeout in seconds.

        Raises:
            ConfigurationError: if the token is missing or empty.
        """
        if not token:
            raise ConfigurationError("GITHUB_TOKEN is not set; export a GitHub access token")
        self._token = token
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({
            "Authorization": f"Bearer {token}",
            "Accept": "application/vnd.github+json",
            "User-Agent": "gh-importer",
        })

    @property
    def token(self):
        return self._token

    def _get(self, path, params=None):
        url = f"{self.base_url}{path}"
        logger.debug("GET %s %s", url, params or {})
        response = self.session.get(url, params=params, timeout=self.timeout)
        raise_for_rate_limit(response)
        response.raise_for_status()
        return response.json()

    def get_organization_repositories(self, org, visibility, page_size, page):
        data = self._get(
            f"/orgs/{org}/repos",
            params={"type": visibility, "per_page": page_size, "page": page},
        )
        return [RepoRecord.from_json(item) for item in data]

    def get_repository(self, full_name):
        return RepoRecord.from_json(self._get(f"/repos/{full_name}"))

    def get_pull_requests(self, full_name, state, page_size, page):
        data = self._get(
            f"/repos/{full_name}/pulls",
            params={"state": state, "per_page": page_size, "page": page},
        )
        return [PRSummary.from_json(item) for item in data]

    def get_pull_request_detail(self, full_name, number):
        return PRDetail.from_json(self._get(f"/repos/{full_name}/pulls/{number}"))

    def get_pull_request_reviews(self, full_name, number, page_size):
        data = self._get(
            f"/repos/{full_name}/pulls/{number}/reviews",
            params={"per_page": page_size},
        )
        return [ReviewRecord.from_json(item) for item in data]

    def get_rate_limit_status(self):
        data = self._get("/rate_limit")
        reset = (data.get("resources", {}).get("core") or {}).get("reset")
        if reset is None:
            return RateLimitStatus(resets_at=None)
        return RateLimitStatus(resets_at=datetime.fromtimestamp(int(reset), tz=timezone.utc))
