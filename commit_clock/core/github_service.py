"""
GitHub Service - open pull request lookup
Wraps the REST calls and turns every failure into GithubFetchError
"""
import requests
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .logging_service import get_logger


class GithubFetchError(Exception):
    """Raised when the pull request count cannot be fetched."""


@dataclass(frozen=True)
class PullRequest:
    title: str
    url: str


@dataclass(frozen=True)
class PullRequestSummary:
    count: int
    pull_requests: List[PullRequest] = field(default_factory=list)


class GithubService:
    """
    Fetch the authenticated user's open pull requests.
    """

    USER_AGENT = 'commit-clock'
    RECENT_LIMIT = 3
    REPO_SCAN_LIMIT = 20
    PULLS_PER_REPO = 10

    def __init__(self, token: str, api_url: str = 'https://api.github.com', timeout: float = 4):
        """
        Initialize GitHub service.

        Args:
            token: Personal access token
            api_url: REST API root
            timeout: Per-request timeout in seconds
        """
        self._token = token
        self._api_url = api_url.rstrip('/')
        self._timeout = timeout
        self._logger = get_logger()

        self._session = requests.Session()
        self._session.headers.update({
            'User-Agent': self.USER_AGENT,
            'Authorization': f"Bearer {token}",
            'Accept': 'application/vnd.github+json',
        })

    def get_open_pr_count(self) -> int:
        """
        Count open pull requests authored by the token's user.

        Raises:
            GithubFetchError: On network, auth, timeout or parse failure
        """
        return self.fetch().count

    def fetch(self) -> PullRequestSummary:
        """
        Fetch the open pull request count and the most recently updated ones.

        When the author search lists nothing, the open pull requests of the
        user's most recently updated repositories are scanned instead.

        Returns:
            PullRequestSummary

        Raises:
            GithubFetchError: On network, auth, timeout or parse failure
        """
        login = self._get_login()
        data = self._get('/search/issues', params={
            'q': f"is:pr is:open author:{login}",
            'sort': 'updated',
            'order': 'desc',
            'per_page': self.RECENT_LIMIT,
        })
        summary = self._parse_search(data)

        if not summary.pull_requests:
            found = self._scan_repositories(login)
            if found:
                summary = PullRequestSummary(
                    count=max(summary.count, len(found)),
                    pull_requests=found[:self.RECENT_LIMIT],
                )

        self._logger.info(f"GitHub: {summary.count} open pull requests for {login}")
        return summary

    def _scan_repositories(self, login: str) -> List[PullRequest]:
        """
        Collect open pull requests authored by ``login`` from the user's repositories.

        A failed repository listing yields nothing; a failed repository is skipped.

        Returns:
            Matches, most recently updated first
        """
        try:
            repos = self._get_list('/user/repos', params={
                'affiliation': 'owner,collaborator,organization_member',
                'per_page': 50,
                'sort': 'updated',
            })
        except GithubFetchError as e:
            self._logger.warning(f"GitHub repository scan skipped: {e}")
            return []

        names = [repo['full_name'] for repo in repos
                 if isinstance(repo, dict) and isinstance(repo.get('full_name'), str)]

        matches = []
        for name in names[:self.REPO_SCAN_LIMIT]:
            try:
                pulls = self._get_list(f"/repos/{name}/pulls", params={
                    'state': 'open',
                    'per_page': self.PULLS_PER_REPO,
                    'sort': 'updated',
                    'direction': 'desc',
                })
            except GithubFetchError as e:
                self._logger.debug(f"Skipping {name}: {e}")
                continue

            for pull in pulls:
                if not isinstance(pull, dict):
                    continue
                author = pull.get('user') or {}
                if not isinstance(author, dict) or author.get('login') != login:
                    continue
                title = pull.get('title')
                url = pull.get('html_url')
                if isinstance(title, str) and isinstance(url, str):
                    updated = pull.get('updated_at')
                    matches.append((updated if isinstance(updated, str) else '', PullRequest(title=title, url=url)))

        # ISO 8601 timestamps sort chronologically as strings
        matches.sort(key=lambda match: match[0], reverse=True)
        return [pull_request for _, pull_request in matches]

    def _get_login(self) -> str:
        login = self._get('/user').get('login')
        if not isinstance(login, str) or not login:
            raise GithubFetchError("GitHub user response has no login")
        return login

    def _request(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        url = f"{self._api_url}{path}"
        self._logger.debug(f"GitHub request: {url}")

        try:
            response = self._session.get(url, params=params, timeout=self._timeout)
            response.raise_for_status()
            return response.json()
        except requests.exceptions.Timeout as e:
            raise GithubFetchError(f"GitHub request timed out: {path}") from e
        except requests.exceptions.HTTPError as e:
            status = e.response.status_code if e.response is not None else '?'
            if status == 401:
                raise GithubFetchError("GitHub rejected the token (401)") from e
            raise GithubFetchError(f"GitHub HTTP error {status} for {path}") from e
        except ValueError as e:
            raise GithubFetchError(f"GitHub returned invalid JSON for {path}") from e
        except requests.exceptions.RequestException as e:
            raise GithubFetchError(f"GitHub request failed: {e}") from e

    def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        data = self._request(path, params)
        if not isinstance(data, dict):
            raise GithubFetchError(f"Unexpected GitHub response for {path}")
        return data

    def _get_list(self, path: str, params: Optional[Dict[str, Any]] = None) -> List[Any]:
        data = self._request(path, params)
        if not isinstance(data, list):
            raise GithubFetchError(f"Unexpected GitHub response for {path}")
        return data

    def _parse_search(self, data: Dict[str, Any]) -> PullRequestSummary:
        """
        Parse a search response into a summary.

        Args:
            data: Decoded /search/issues response
        """
        count = data.get('total_count')
        if not isinstance(count, int) or isinstance(count, bool) or count < 0:
            raise GithubFetchError("GitHub search response has no total_count")

        items = data.get('items')
        if items is None:
            items = []
        if not isinstance(items, list):
            raise GithubFetchError("GitHub search response items is not a list")

        pull_requests = []
        for item in items:
            if not isinstance(item, dict):
                continue
            title = item.get('title')
            url = item.get('html_url')
            if isinstance(title, str) and isinstance(url, str):
                pull_requests.append(PullRequest(title=title, url=url))

        return PullRequestSummary(count=count, pull_requests=pull_requests[:self.RECENT_LIMIT])

    def close(self) -> None:
        self._session.close()
