"""Single-level resolution of inline links.

Given the path of the document that contains some links, each local target
is resolved against that document's directory and read. Content read this
way is handed back as-is and never scanned for further links.
"""

from __future__ import annotations

import logging
import os.path

from .diagnostics import DiagnosticSink
from .models import LinkRecord, ResolvedLink
from .parser.links import is_absolute_path, is_anchor, is_url
from .sources import FileSource

log = logging.getLogger(__name__)

NOT_RESOLVED = "URLs are not resolved"


class LinkResolutionError(Exception):
    """Raised when a local link target cannot be read."""

    def __init__(self, target: str, resolved_path: str, reason: str) -> None:
        self.target = target
        self.resolved_path = resolved_path
        self.reason = reason
        super().__init__(f"{target}: {reason}")


def resolve_target(base_path: str, target: str) -> str:
    """Absolute path for a local link target found in ``base_path``."""
    if is_absolute_path(target):
        return target
    return os.path.normpath(os.path.join(os.path.dirname(base_path), target))


class LinkResolver:
    """Resolves links found in a document to file content.

    Args:
        source: Where linked files are read from.
        reporter: Receives a warning for each local link that cannot be read.
    """

    def __init__(self, source: FileSource, reporter: DiagnosticSink | None = None) -> None:
        self._source = source
        self._reporter = reporter

    async def resolve(self, base_path: str, links: list[LinkRecord]) -> dict[str, ResolvedLink]:
        """Resolve every link in ``links``.

        Returns:
            Mapping of target to outcome, in first-seen order. A target that
            appears several times is resolved once.
        """
        results: dict[str, ResolvedLink] = {}

        for link in links:
            target = link.target
            if target in results:
                continue

            if is_url(target) or is_anchor(target):
                results[target] = ResolvedLink(target=target, error=NOT_RESOLVED)
                continue

            try:
                results[target] = await self._read(base_path, target)
            except LinkResolutionError as e:
                results[target] = ResolvedLink(
                    target=target,
                    resolved_path=e.resolved_path,
                    error=e.reason,
                )
                if self._reporter is not None:
                    self._reporter.report_warning(
                        f"Could not resolve link {target}", base_path, e.reason
                    )

        return results

    async def _read(self, base_path: str, target: str) -> ResolvedLink:
        resolved = resolve_target(base_path, target)
        try:
            raw = await self._source.read_bytes(resolved)
        except FileNotFoundError as e:
            raise LinkResolutionError(target, resolved, "not found") from e
        except OSError as e:
            raise LinkResolutionError(target, resolved, f"unreadable: {e}") from e

        try:
            content = raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise LinkResolutionError(target, resolved, "unreadable: not valid UTF-8") from e

        log.debug("Resolved %s -> %s", target, resolved)
        return ResolvedLink(target=target, resolved_path=resolved, content=content)
