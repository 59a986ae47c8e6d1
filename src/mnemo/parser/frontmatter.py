"""Memory file parsing with YAML frontmatter support.

Parsing happens in two phases. The structural phase splits the ``---``
delimited header from the body and loads it as YAML; the validation phase
checks the required fields. A structural failure never reaches validation.
"""

from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

import yaml
from frontmatter.default_handlers import YAMLHandler
from pydantic import ValidationError

from ..models import DocumentFrontmatter, DocumentRecord

_handler = YAMLHandler()


class DocumentError(Exception):
    """Base class for problems with a memory file's content."""

    def __init__(self, message: str, path: str | None = None) -> None:
        self.path = path
        self.message = message
        super().__init__(f"{path}: {message}" if path else message)


class FrontmatterParseError(DocumentError):
    """Raised when the header is missing, unterminated or not a YAML mapping."""


class FrontmatterValidationError(DocumentError):
    """Raised when the header parses but required fields are missing or mistyped."""


@dataclass
class ParsedDocument:
    """Result of parsing a memory file."""

    frontmatter: DocumentFrontmatter
    body: str

    @property
    def extra_metadata(self) -> dict[str, Any]:
        return dict(self.frontmatter.model_extra or {})


def _split_header(raw_text: str, path: str | None) -> tuple[str, str]:
    if not _handler.detect(raw_text):
        raise FrontmatterParseError(
            "File does not start with YAML frontmatter delimiter (---)", path
        )

    try:
        header, body = _handler.split(raw_text)
    except ValueError as e:
        raise FrontmatterParseError(
            "Could not find closing frontmatter delimiter (---)", path
        ) from e

    return header, body.strip()


def _load_header(header: str, path: str | None) -> dict[str, Any]:
    try:
        data = _handler.load(header)
    except yaml.YAMLError as e:
        raise FrontmatterParseError(f"Failed to parse YAML: {e}", path) from e

    if data is None:
        raise FrontmatterParseError("YAML frontmatter is empty", path)

    if not isinstance(data, dict):
        raise FrontmatterParseError("YAML frontmatter must be a mapping", path)

    return data


def _format_validation_error(error: ValidationError) -> str:
    """Turn pydantic errors into one readable line per problem."""
    messages = []
    for item in error.errors():
        loc = ".".join(str(x) for x in item["loc"])
        if item["type"] == "missing":
            messages.append(f"Missing required field: {loc}")
        else:
            messages.append(f'Field "{loc}": {item["msg"]}')
    return "; ".join(messages)


def validate_frontmatter(data: dict[str, Any], path: str | None = None) -> DocumentFrontmatter:
    """Validate a loaded header mapping.

    Raises:
        FrontmatterValidationError: If title or tags are missing or mistyped.
    """
    try:
        return DocumentFrontmatter.model_validate(data)
    except ValidationError as e:
        raise FrontmatterValidationError(_format_validation_error(e), path) from e


def parse_document(raw_text: str, path: str | None = None) -> ParsedDocument:
    """Parse the raw text of a memory file.

    Args:
        raw_text: Full file content.
        path: Optional path, only used in error messages.

    Returns:
        ParsedDocument with validated frontmatter and the stripped body.

    Raises:
        FrontmatterParseError: If the header is structurally broken.
        FrontmatterValidationError: If required fields are invalid.
    """
    header, body = _split_header(raw_text, path)
    data = _load_header(header, path)
    frontmatter = validate_frontmatter(data, path)
    return ParsedDocument(frontmatter=frontmatter, body=body)


def load_document(raw_text: str, path: str) -> DocumentRecord:
    """Parse raw text into a DocumentRecord stamped with the current time."""
    parsed = parse_document(raw_text, path)
    return DocumentRecord(
        path=path,
        title=parsed.frontmatter.title,
        tags=list(parsed.frontmatter.tags),
        body=parsed.body,
        extra_metadata=parsed.extra_metadata,
        last_modified=datetime.now(UTC),
    )
