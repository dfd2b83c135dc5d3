"""Abstract base for issue comment transports."""

from abc import ABC, abstractmethod
from typing import List

from pydantic import ValidationError

from preview_comment.models import Comment

ACCEPT = "application/vnd.github.raw+json"
API_VERSION = "2022-11-28"


class GitHubError(Exception):
    """Raised when a GitHub API call fails."""

    pass


class NetworkError(GitHubError):
    """Raised when the request never produced a response (connection, timeout)."""

    pass


class APIError(GitHubError):
    """Raised when the API answers with an unexpected status."""

    def __init__(self, status: int | None, body: str, action: str = "API request") -> None:
        self.status = status
        self.body = body
        status_text = status if status is not None else "unknown"
        super().__init__(f"{action} failed with status {status_text}: {body}")


def parse_comment(data: dict) -> Comment:
    """Build Comment from GitHub API issue comment dict.

    Raises:
        GitHubError: If the payload is not a comment object
    """
    if not isinstance(data, dict) or "url" not in data:
        raise GitHubError(f"Unexpected comment payload: {data!r}")
    user = data.get("user") or {}
    try:
        return Comment(
            id=data.get("id"),
            body=data.get("body") or "",
            author=user.get("login") or "",
            url=data["url"],
        )
    except ValidationError as e:
        raise GitHubError(f"Unexpected comment payload: {e}") from e


def parse_comments(data_list: object) -> List[Comment]:
    """Build Comments from a decoded list response.

    Raises:
        GitHubError: If the response is not a list of comment objects
    """
    if not isinstance(data_list, list):
        raise GitHubError(f"Expected a list of comments, got: {data_list!r}")
    return [parse_comment(data) for data in data_list]


class CommentTransport(ABC):
    """Issue comment operations against the GitHub Issues-Comments API.

    Implementations differ only in how requests reach GitHub.
    """

    def __init__(self, token: str, api_url: str) -> None:
        self.token = token
        self.api_url = api_url.rstrip("/")

    def comments_url(self, repo: str, pr_number: str) -> str:
        """Collection URL for comments on an issue or PR."""
        return f"{self.api_url}/repos/{repo}/issues/{pr_number}/comments"

    @abstractmethod
    def list_comments(self, repo: str, pr_number: str) -> List[Comment]:
        """List comments on an issue, in API order.

        Args:
            repo: Repository in format owner/repo
            pr_number: Pull request (issue) number

        Returns:
            List of Comment instances, empty when there are none

        Raises:
            GitHubError: If the call fails or the response cannot be decoded
        """
        ...

    @abstractmethod
    def delete_comment(self, comment_url: str) -> None:
        """Delete a comment by the URL returned from list_comments.

        Raises:
            GitHubError: If the call fails
        """
        ...

    @abstractmethod
    def create_comment(self, repo: str, pr_number: str, body: str) -> Comment | None:
        """Post a comment on an issue.

        Args:
            repo: Repository in format owner/repo
            pr_number: Pull request (issue) number
            body: Comment body (markdown supported)

        Returns:
            Created Comment when the response carries one

        Raises:
            GitHubError: If the call fails
        """
        ...
