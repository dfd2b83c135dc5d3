"""Data models for issue comments and enumerations (Pydantic)."""

from enum import Enum

from pydantic import BaseModel, ConfigDict


class Mode(str, Enum):
    """Operation mode."""

    COMMENT = "comment"
    DELETE_ALL = "delete-all"


class Transport(str, Enum):
    """How requests reach the GitHub API."""

    HTTP = "http"
    GH = "gh"


class TemplateKind(str, Enum):
    """Comment template flavours; the value is the template file name."""

    MARKDOWN = "preview-body.md.tpl"
    JSON = "preview-body.json.tpl"


class Comment(BaseModel):
    """Comment on an issue or PR, as returned by the API."""

    model_config = ConfigDict(frozen=True)

    id: int | None = None
    body: str = ""
    author: str = ""
    url: str


class NewCommentRequest(BaseModel):
    """Payload for creating an issue comment."""

    body: str
