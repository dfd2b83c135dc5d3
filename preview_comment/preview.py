"""Replace the preview deployment comment on a pull request.

Flow: list comments -> select stale ones -> delete them one by one ->
(stop here in delete-all mode) -> render body -> create the new comment.
A comment that fails to delete is logged and skipped; every other
failure propagates to the caller.
"""

import logging
from typing import List

from preview_comment.adapters import CommentTransport, GhCliAdapter, GitHubAdapter, GitHubError
from preview_comment.config import PreviewConfig
from preview_comment.models import Comment, Mode, Transport
from preview_comment.template import body_from_rendered, read_static_file, render_file, template_path


def create_transport(config: PreviewConfig) -> CommentTransport:
    """Build the transport selected in config."""
    if config.transport is Transport.GH:
        return GhCliAdapter(token=config.token, api_url=config.api_url, timeout=config.timeout)
    return GitHubAdapter(
        token=config.token,
        api_url=config.api_url,
        timeout=config.timeout,
        retries=config.retries,
    )


class PreviewCommenter:
    """Keeps exactly one up-to-date preview comment on a PR."""

    def __init__(
        self,
        config: PreviewConfig,
        transport: CommentTransport,
        log: logging.Logger | None = None,
    ) -> None:
        self.config = config
        self.transport = transport
        self._log = log or logging.getLogger("preview_comment.preview")

    def is_stale(self, comment: Comment) -> bool:
        """Whether a comment should be removed before posting.

        delete-all removes everything by the user; comment mode only
        removes the user's comments that start with the title.
        """
        if comment.author != self.config.user_login:
            return False
        if self.config.mode is Mode.DELETE_ALL:
            return True
        return comment.body.startswith(self.config.title)

    def select_stale(self, comments: List[Comment]) -> List[Comment]:
        """Stale comments in API order."""
        return [c for c in comments if self.is_stale(c)]

    def delete_comments(self, comments: List[Comment]) -> int:
        """Delete comments in order; return how many were deleted."""
        deleted = 0
        for comment in comments:
            try:
                self.transport.delete_comment(comment.url)
            except GitHubError as e:
                self._log.warning("Failed to delete comment %s: %s", comment.url, e)
                continue
            self._log.debug("Deleted comment %s", comment.url)
            deleted += 1
        return deleted

    def render_body(self) -> str:
        """Static file contents, or the rendered template for the transport."""
        if self.config.static_file is not None:
            return read_static_file(self.config.static_file)
        kind = self.config.template_kind
        rendered = render_file(
            template_path(self.config.assets_dir, kind),
            {
                "TITLE": self.config.title,
                "COMMIT_SHA": self.config.commit_sha,
                "URL": self.config.url,
            },
        )
        return body_from_rendered(rendered, kind)

    def run(self) -> Comment | None:
        """Run the whole flow.

        Returns:
            The created comment, or None in delete-all mode or when the
            API response did not describe it

        Raises:
            GitHubError: If listing or creating fails
            TemplateError: If the body cannot be produced
        """
        cfg = self.config
        comments = self.transport.list_comments(cfg.repo, cfg.pr_number)
        self._log.info("Found %d comments on %s#%s", len(comments), cfg.repo, cfg.pr_number)

        stale = self.select_stale(comments)
        self._log.info("Deleting %d comments by %s...", len(stale), cfg.user_login)
        deleted = self.delete_comments(stale)
        if deleted < len(stale):
            self._log.warning("Deleted %d of %d comments", deleted, len(stale))

        if cfg.mode is Mode.DELETE_ALL:
            self._log.info("Deleted all comments successfully.")
            return None

        self._log.info("Creating new comment...")
        body = self.render_body()
        created = self.transport.create_comment(cfg.repo, cfg.pr_number, body)
        self._log.info("Comment created successfully.")
        return created
