"""GitHub CLI adapter: issue comment calls through ``gh api``.

The token is handed to gh through GH_TOKEN (plus GH_HOST and
GH_ENTERPRISE_TOKEN for GitHub Enterprise), never on the command line.
"""

import json
import logging
import os
import re
import subprocess
import tempfile
from pathlib import Path
from typing import List
from urllib.parse import urlparse

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

_HTTP_STATUS_RE = re.compile(r"HTTP (\d{3})")
GITHUB_COM_API_HOST = "api.github.com"


class GhCliAdapter(CommentTransport):
    """CommentTransport that shells out to the GitHub CLI."""

    def __init__(
        self,
        token: str,
        api_url: str = "https://api.github.com",
        timeout: float = 30,
        command: str = "gh",
        log: logging.Logger | None = None,
    ) -> None:
        super().__init__(token, api_url)
        self.timeout = timeout
        self.command = command
        self._log = log or logging.getLogger("preview_comment.adapters.gh_cli")

    def _run(self, args: list[str], action: str) -> str:
        """Run ``gh api`` with the fixed headers; return stdout.

        Raises:
            NetworkError: If gh is missing or the call timed out
            APIError: If gh exits non-zero
        """
        cmd = [
            self.command,
            "api",
            "-H",
            f"Accept: {ACCEPT}",
            "-H",
            f"X-GitHub-Api-Version: {API_VERSION}",
            *args,
        ]
        env = os.environ.copy()
        env["GH_TOKEN"] = self.token
        host = urlparse(self.api_url).hostname or ""
        if host and host != GITHUB_COM_API_HOST:
            # gh only reads GH_TOKEN for github.com
            env["GH_HOST"] = host
            env["GH_ENTERPRISE_TOKEN"] = self.token
        self._log.debug("Running %s", " ".join(cmd))
        try:
            result = subprocess.run(
                cmd,
                env=env,
                timeout=self.timeout,
                check=False,
                capture_output=True,
                text=True,
            )
        except subprocess.TimeoutExpired as e:
            raise NetworkError(f"{action}: timed out after {self.timeout}s") from e
        except FileNotFoundError as e:
            raise NetworkError(f"{action}: {self.command} not found") from e

        if result.returncode != 0:
            stderr = (result.stderr or "").strip()
            match = _HTTP_STATUS_RE.search(stderr)
            status = int(match.group(1)) if match else None
            body = (result.stdout or "").strip() or stderr
            raise APIError(status, body, action=action)
        return result.stdout or ""

    def list_comments(self, repo: str, pr_number: str) -> List[Comment]:
        """Fetch all comments on an issue (single page, API order)."""
        out = self._run([self.comments_url(repo, pr_number)], action="Listing comments").strip()
        if out == "[]":
            return []
        try:
            data_list = json.loads(out)
        except ValueError as e:
            raise GitHubError(f"Failed to decode comments: {e}") from e
        return parse_comments(data_list)

    def delete_comment(self, comment_url: str) -> None:
        """Delete a comment by its API URL."""
        self._run(["--method", "DELETE", comment_url], action=f"Deleting comment {comment_url}")

    def create_comment(self, repo: str, pr_number: str, body: str) -> Comment | None:
        """Post a comment; the JSON payload is staged in a temporary file."""
        payload = NewCommentRequest(body=body).model_dump_json()
        with tempfile.TemporaryDirectory(prefix="preview-comment-") as tmp_dir:
            payload_path = Path(tmp_dir) / "payload.json"
            payload_path.write_text(payload, encoding="utf-8")
            out = self._run(
                [
                    "--method",
                    "POST",
                    "-H",
                    "Content-Type: application/json",
                    self.comments_url(repo, pr_number),
                    "--input",
                    str(payload_path),
                ],
                action="Creating comment",
            )
        try:
            return parse_comment(json.loads(out))
        except (ValueError, GitHubError):
            return None
