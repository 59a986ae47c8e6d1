"""Pydantic models for the memory index."""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, StrictStr, field_validator


class DocumentFrontmatter(BaseModel):
    """Validated frontmatter of a memory file.

    Only title and tags are typed; every other header field is kept as-is
    in ``model_extra``.
    """

    model_config = ConfigDict(extra="allow")

    title: StrictStr = Field(min_length=1)
    tags: list[StrictStr] = Field(min_length=1)

    @field_validator("tags")
    @classmethod
    def _tags_are_dotted_paths(cls, tags: list[str]) -> list[str]:
        for tag in tags:
            if not tag or any(segment == "" for segment in tag.split(".")):
                raise ValueError(f"tag {tag!r} has an empty segment")
        return tags


class DocumentRecord(BaseModel):
    """A parsed, currently-valid memory file held by the document cache."""

    path: str
    title: str
    tags: list[str]
    body: str
    extra_metadata: dict[str, Any] = Field(default_factory=dict)  # priority, created, ...
    last_modified: datetime  # When this record was (re)indexed


class LinkRecord(BaseModel):
    """An inline markdown link found in a document body."""

    text: str  # Display text between the brackets
    target: str  # Verbatim target between the parentheses
    start: int  # Offset of the opening bracket
    end: int  # Offset just past the closing parenthesis

    @property
    def full_syntax(self) -> str:
        return f"[{self.text}]({self.target})"


class ResolvedLink(BaseModel):
    """Outcome of resolving one link target."""

    target: str
    resolved_path: str | None = None
    content: str | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.content is not None


class ExpandedDocument(BaseModel):
    """A document body with links flattened and linked content appended."""

    path: str
    title: str
    content: str


class MatchSummary(BaseModel):
    """Documents matched by a set of tag patterns."""

    count: int
    paths: list[str] = Field(default_factory=list)
    patterns: list[str] = Field(default_factory=list)


class SyncSummary(BaseModel):
    """Result of a batch synchronization."""

    total: int
    indexed: list[str] = Field(default_factory=list)
    failed: list[str] = Field(default_factory=list)


class Severity(str, Enum):
    INFO = "Info"
    WARNING = "Warning"
    ERROR = "Error"


class ErrorReport(BaseModel):
    """A single entry in the diagnostics history."""

    timestamp: datetime
    severity: Severity
    message: str
    path: str | None = None
    details: str | None = None


class TagCompletion(BaseModel):
    """A completion suggestion for a tag being typed."""

    label: str  # What the UI displays
    insert_text: str  # What gets inserted at the cursor
    full_tag: str | None = None  # Complete tag path, None for the wildcard entry
    detail: str = ""  # e.g. "(3 memories)"
    sort_text: str = ""  # Lower sorts first


class TagCommand(BaseModel):
    """A parsed tag command: patterns from the first line plus the question."""

    tags: list[str] = Field(default_factory=list)
    remaining_prompt: str = ""
