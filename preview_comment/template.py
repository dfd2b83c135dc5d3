"""Literal placeholder substitution for comment templates.

Templates use ``{{NAME}}`` placeholders. Substitution is plain substring
replacement: no conditionals, loops or escaping. Placeholders without a
value in the mapping are left in the output unchanged.
"""

import re
from pathlib import Path
from typing import Mapping

from pydantic import ValidationError

from preview_comment.models import NewCommentRequest, TemplateKind

PR_NUMBER_PLACEHOLDER = "PR_NUMBER"

# {{PR_NUMBER}}, {{ PR_NUMBER }} and {{.PR_NUMBER}}
_URL_PLACEHOLDER_RE = re.compile(r"\{\{\s*\.?\s*([A-Za-z_][A-Za-z0-9_]*)\s*\}\}")


class TemplateError(Exception):
    """Base error for template loading and rendering."""

    pass


class FileReadError(TemplateError):
    """Raised when a template or static file cannot be read."""

    pass


class TemplateParseError(TemplateError):
    """Raised when template syntax or the rendered result is invalid."""

    pass


def placeholder(name: str) -> str:
    """Return the placeholder token for ``name``."""
    return "{{" + name + "}}"


def substitute(text: str, replacements: Mapping[str, str]) -> str:
    """Replace every ``{{NAME}}`` occurrence for each entry in replacements."""
    result = text
    for name, value in replacements.items():
        result = result.replace(placeholder(name), value)
    return result


def read_static_file(path: Path) -> str:
    """Return file contents verbatim.

    Raises:
        FileReadError: If the file cannot be read
    """
    try:
        return Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise FileReadError(f"Failed to read file {path}: {e}") from e


def render_file(path: Path, replacements: Mapping[str, str]) -> str:
    """Read a template file and substitute placeholders.

    Args:
        path: Template file path
        replacements: Placeholder name -> literal value

    Returns:
        Rendered text

    Raises:
        FileReadError: If the template cannot be read
    """
    try:
        content = Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise FileReadError(f"Failed to read template file {path}: {e}") from e
    return substitute(content, replacements)


def template_path(assets_dir: str, kind: TemplateKind) -> Path:
    """Locate a template under assets_dir.

    assets_dir is a plain string prefix, so an empty value points at the
    filesystem root.
    """
    return Path(f"{assets_dir}/{kind.value}")


def body_from_rendered(rendered: str, kind: TemplateKind) -> str:
    """Turn rendered template text into the comment body.

    Markdown templates are the body itself. JSON templates hold the whole
    create payload, which must decode to ``{"body": ...}``.
    """
    if kind is TemplateKind.MARKDOWN:
        return rendered
    try:
        return NewCommentRequest.model_validate_json(rendered).body
    except ValidationError as e:
        raise TemplateParseError(f"Rendered JSON template is not a valid comment payload: {e}") from e


def render_url(url: str, pr_number: str) -> str:
    """Render a URL template containing the PR number placeholder.

    Raises:
        TemplateParseError: On unbalanced braces or unknown placeholders
    """
    if url.count("{{") != url.count("}}"):
        raise TemplateParseError(f"Unbalanced braces in URL template: {url!r}")

    def _replace(match: re.Match) -> str:
        name = match.group(1)
        if name != PR_NUMBER_PLACEHOLDER:
            raise TemplateParseError(f"Unknown placeholder {name!r} in URL template: {url!r}")
        return pr_number

    rendered = _URL_PLACEHOLDER_RE.sub(_replace, url)
    if "{{" in rendered or "}}" in rendered:
        raise TemplateParseError(f"Malformed placeholder in URL template: {url!r}")
    return rendered
