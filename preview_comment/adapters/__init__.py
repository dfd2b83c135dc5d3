"""Issue comment transports."""

from preview_comment.adapters.base import APIError, CommentTransport, GitHubError, NetworkError
from preview_comment.adapters.gh_cli import GhCliAdapter
from preview_comment.adapters.github import GitHubAdapter

__all__ = ["APIError", "CommentTransport", "GhCliAdapter", "GitHubAdapter", "GitHubError", "NetworkError"]
