"""Memory file parsing: frontmatter documents and inline links."""

from ..models import DocumentRecord, LinkRecord
from .frontmatter import (
    DocumentError,
    FrontmatterParseError,
    FrontmatterValidationError,
    ParsedDocument,
    load_document,
    parse_document,
)
from .links import extract_links, is_absolute_path, is_url, replace_links_with_text

__all__ = [
    "parse_document",
    "load_document",
    "ParsedDocument",
    "DocumentError",
    "FrontmatterParseError",
    "FrontmatterValidationError",
    "DocumentRecord",
    "LinkRecord",
    "extract_links",
    "replace_links_with_text",
    "is_url",
    "is_absolute_path",
]
