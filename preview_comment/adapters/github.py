"""GitHub REST adapter over requests."""

from typing import List

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from preview_comment.adapters.base import (
    ACCEPT,
    API_VERSION,
    APIError,
    CommentTransport,
    GitHubError,
    NetworkError,
    parse_comment,
    parse_comments,
)
from preview_comment.models import Comment, NewCommentRequest


class GitHubAdapter(CommentTransport):
    """Direct HTTP implementation of CommentTransport."""

    def __init__(
        self,
        token: str,
        api_url: str = "https://api.github.com",
        timeout: float = 30,
        retries: int = 0,
    ) -> None:
        super().__init__(token, api_url)
        self.timeout = timeout
        self._session = requests.Session()
        self._session.headers.update(
            {
                "Accept": ACCEPT,
                "X-GitHub-Api-Version": API_VERSION,
                "Authorization": f"Bearer {token}",
            }
        )
        if retries > 0:
            retry = Retry(
                total=retries,
                backoff_factor=0.5,
                status_forcelist=(502, 503, 504),
                allowed_methods=frozenset({"GET", "DELETE"}),
                raise_on_status=False,
            )
            self._session.mount("https://", HTTPAdapter(max_retries=retry))
            self._session.mount("http://", HTTPAdapter(max_retries=retry))

    def _request(self, method: str, url: str, **kwargs: object) -> requests.Response:
        try:
            return self._session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            raise NetworkError(f"HTTP request {method} {url} failed: {e}") from e

    def list_comments(self, repo: str, pr_number: str) -> List[Comment]:
        """Fetch all comments on an issue (single page, API order)."""
        resp = self._request("GET", self.comments_url(repo, pr_number))
        if resp.status_code != 200:
            raise APIError(resp.status_code, resp.text, action="Listing comments")
        # An empty thread needs no decoding
        if resp.text == "[]":
            return []
        try:
            data_list = resp.json()
        except ValueError as e:
            raise GitHubError(f"Failed to decode comments: {e}") from e
        return parse_comments(data_list)

    def delete_comment(self, comment_url: str) -> None:
        """Delete a comment; GitHub answers 204 No Content on success."""
        resp = self._request("DELETE", comment_url)
        if resp.status_code != 204:
            raise APIError(resp.status_code, resp.text, action=f"Deleting comment {comment_url}")

    def create_comment(self, repo: str, pr_number: str, body: str) -> Comment | None:
        """Post a comment; GitHub answers 201 Created on success."""
        payload = NewCommentRequest(body=body).model_dump_json()
        resp = self._request(
            "POST",
            self.comments_url(repo, pr_number),
            data=payload.encode("utf-8"),
            headers={"Content-Type": "application/json"},
        )
        if resp.status_code != 201:
            raise APIError(resp.status_code, resp.text, action="Creating comment")
        try:
            return parse_comment(resp.json())
        except (ValueError, GitHubError):
            return None
