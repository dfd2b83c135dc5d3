"""preview-comment entry point.

Posts (or replaces) the preview deployment comment on a pull request, or
deletes every comment by a user with --mode delete-all.
Usage: preview-comment [--mode comment|delete-all] [--file PATH] <owner/repo>
"""

import argparse
import logging
import re
import sys
from pathlib import Path

from preview_comment.adapters import GitHubError
from preview_comment.config import ConfigError, load_settings, log_config, resolve_config
from preview_comment.logging import DEFAULT_FORMAT, PreviewLogging
from preview_comment.models import Mode, Transport
from preview_comment.preview import PreviewCommenter, create_transport
from preview_comment.template import TemplateError, TemplateParseError

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2

_REPO_RE = re.compile(r"^[A-Za-z0-9_.-]+/[A-Za-z0-9_.-]+$")

ENV_HELP = """\
environment variables:
  PR_NUMBER          The pull request number to comment on.
  GITHUB_TOKEN       GitHub API token with repo permissions.
  USER_LOGIN         The GitHub user login whose comments are replaced.

  DEBUG              Set to 'true' to enable debug output. Default is 'false'.

  ASSETS_DIR         Where to look for the comment template. Default is '' (filesystem root).
  COMMIT_SHA         The commit SHA.
  TITLE              The comment title. Default is '# Preview Deployment'.
  URL                The deployment URL.

  GITHUB_API_URL     API base URL. Default is 'https://api.github.com'.
  GITHUB_TIMEOUT     Per-request timeout in seconds. Default is 30.
  GITHUB_RETRIES     Retries for transient HTTP failures. Default is 0.
  GITHUB_TRANSPORT   'http' or 'gh'. Default is 'http'.
  LOGGING_LEVEL      DEBUG, INFO, WARNING or ERROR. Default is 'INFO'.
"""


def existing_path(value: str) -> Path:
    """argparse type: a path that must exist."""
    path = Path(value)
    if not path.exists():
        raise argparse.ArgumentTypeError(f"file does not exist: {value}")
    return path


def repository(value: str) -> str:
    """argparse type: repository in owner/repo format."""
    if not _REPO_RE.match(value):
        raise argparse.ArgumentTypeError(f"invalid repository {value!r}; expected 'owner/repo'")
    return value


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse CLI arguments. Exits 0 for --help and 2 for usage errors."""
    parser = argparse.ArgumentParser(
        prog="preview-comment",
        description="Post or replace the preview deployment comment on a pull request.",
        epilog=ENV_HELP,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "repo",
        type=repository,
        help="The repository name in the format 'owner/repo'",
    )
    parser.add_argument(
        "--mode",
        "-m",
        choices=[m.value for m in Mode],
        default=None,
        help="The mode of operation: comment or delete-all (default comment)",
    )
    parser.add_argument(
        "--file",
        "-f",
        type=existing_path,
        default=None,
        help="Path to a static non-template file. Causes the template env vars to be ignored",
    )
    parser.add_argument(
        "--url-is-template",
        action="store_true",
        help="URL is a template, e.g. https://pr{{PR_NUMBER}}.example.com",
    )
    parser.add_argument(
        "--config",
        "-c",
        type=existing_path,
        default=None,
        help="Path to YAML config file",
    )
    parser.add_argument(
        "--transport",
        choices=[t.value for t in Transport],
        default=None,
        help="Send requests directly (http) or through the GitHub CLI (gh)",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    """Entry point: resolve config, then replace (or purge) comments."""
    args = parse_args(argv)

    try:
        settings = load_settings(args.config)
    except ConfigError as e:
        logging.basicConfig(level=logging.INFO, format=DEFAULT_FORMAT)
        logging.getLogger("preview_comment").error("%s", e)
        return EXIT_USAGE

    PreviewLogging(settings.logging, debug=settings.deployment.debug).setup()
    log = logging.getLogger("preview_comment")

    try:
        config = resolve_config(
            settings,
            repo=args.repo,
            mode=Mode(args.mode) if args.mode else None,
            static_file=args.file,
            url_is_template=args.url_is_template,
            transport=Transport(args.transport) if args.transport else None,
        )
    except ConfigError as e:
        log.error("%s", e)
        return EXIT_USAGE
    except TemplateParseError as e:
        log.error("Failed to parse URL template: %s", e)
        return EXIT_USAGE

    if config.debug:
        log_config(config, log)

    commenter = PreviewCommenter(config, create_transport(config))
    try:
        commenter.run()
    except GitHubError as e:
        log.error("%s", e)
        return EXIT_FAILURE
    except TemplateError as e:
        log.error("Failed to produce comment body: %s", e)
        return EXIT_FAILURE
    except Exception as e:
        log.exception("Fatal error: %s", e)
        return EXIT_FAILURE
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
