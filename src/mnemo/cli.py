#!/usr/bin/env python3
"""
mnemo: CLI for the memory tag index

Usage:
    mnemo tags                         # List every tag with file counts
    mnemo query backend.*              # Files matching tag patterns
    mnemo query backend.db --content   # Expanded content of the matches
    mnemo ask "backend.db\nQuestion"   # Matched content followed by the question
    mnemo complete backend.            # Tag suggestions
    mnemo show                         # Dump the parsed index as JSON
    mnemo check                        # Report files that fail to index
    mnemo watch                        # Keep the index live and log changes
"""

from __future__ import annotations

import asyncio
import json
import sys
from pathlib import Path
from typing import Any

import click
from click.exceptions import ClickException, UsageError

from . import __version__ as MNEMO_VERSION
from .assembly import assemble_clean_content
from .config import ConfigurationError, get_memory_pattern, get_memory_root
from .diagnostics import format_report
from .manager import MemoryManager


def run_async(coro):
    """Run async function synchronously."""
    return asyncio.run(coro)


def output(data: Any, as_json: bool = False) -> None:
    """Output data as JSON or formatted text."""
    if as_json:
        click.echo(json.dumps(data, indent=2, default=str))
    else:
        click.echo(data)


def _resolve_root(root: str | None) -> Path:
    if root:
        return Path(root).resolve()
    try:
        return get_memory_root()
    except ConfigurationError as e:
        raise ClickException(str(e)) from e


async def _load(root: Path, pattern: str) -> MemoryManager:
    """Build a manager and index every file once, without watching."""
    manager = MemoryManager()
    await manager.synchronize_batch(manager.source.list_files(str(root), pattern))
    return manager


def _root_options(func):
    func = click.option(
        "--pattern",
        default=None,
        help="Glob for memory files under the root (default: MNEMO_PATTERN or **/*.md)",
    )(func)
    func = click.option(
        "--root",
        type=click.Path(file_okay=False),
        default=None,
        help="Memory folder (default: MNEMO_ROOT or ./Memory)",
    )(func)
    return func


# ─────────────────────────────────────────────────────────────────────────────
# Main CLI Group
# ─────────────────────────────────────────────────────────────────────────────


@click.group()
@click.version_option(version=MNEMO_VERSION, prog_name="mnemo")
def cli():
    """mnemo: hierarchical tag index over a folder of markdown memory files.

    \b
    Tag patterns:
      backend.database      # exact tag (includes deeper tags)
      backend.*             # one level below backend
      **.postgres           # postgres at any depth
    """


@cli.command()
@_root_options
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def tags(root: str | None, pattern: str | None, as_json: bool):
    """List every tag with the number of files under it."""
    from .inspection import render_tag_tree

    manager = run_async(_load(_resolve_root(root), pattern or get_memory_pattern()))

    if as_json:
        output({tag: manager.trie.count(tag) for tag in manager.get_all_tags()}, as_json=True)
        return

    click.echo(render_tag_tree(manager.trie), nl=False)


@cli.command()
@click.argument("patterns", nargs=-1, required=True)
@_root_options
@click.option("--content", is_flag=True, help="Print expanded content of the matches")
@click.option(
    "--with-references",
    is_flag=True,
    help="Also list files linked directly from the matches",
)
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def query(
    patterns: tuple[str, ...],
    root: str | None,
    pattern: str | None,
    content: bool,
    with_references: bool,
    as_json: bool,
):
    """Find files whose tags match PATTERNS."""

    async def _run() -> tuple[list[str], list[Any]]:
        manager = await _load(_resolve_root(root), pattern or get_memory_pattern())
        if with_references:
            summary = await manager.match_summary_with_references(list(patterns))
        else:
            summary = manager.match_summary(list(patterns))
        documents = await manager.resolve_and_assemble(summary.paths) if content else []
        return summary.paths, documents

    paths, documents = run_async(_run())

    if as_json:
        if content:
            output([doc.model_dump() for doc in documents], as_json=True)
        else:
            output(paths, as_json=True)
        return

    if not paths:
        click.echo(f"No memory files found with tags: {', '.join(patterns)}")
        return

    if content:
        for doc in documents:
            click.echo(f"# {doc.title}\n")
            click.echo(doc.content)
            click.echo()
        return

    for path in paths:
        click.echo(path)


@cli.command()
@click.argument("prompt")
@_root_options
def ask(prompt: str, root: str | None, pattern: str | None):
    """Gather memories for a tag command.

    The first line of PROMPT lists tag patterns and the remaining lines hold
    the question. With a question, prints the matched content followed by the
    question, ready to paste into a chat. Without one, lists the matches.

    \b
    Example:
      mnemo ask $'backend.database\\nHow do we pool connections?'
    """

    async def _run():
        manager = await _load(_resolve_root(root), pattern or get_memory_pattern())
        command, summary = await manager.run_tag_command(prompt)
        context = ""
        if command.remaining_prompt and summary.paths:
            context = assemble_clean_content(await manager.resolve_and_assemble(summary.paths))
        return command, summary, context

    command, summary, context = run_async(_run())

    if not command.tags:
        raise UsageError("Please specify tag patterns on the first line.")

    if summary.count == 0:
        click.echo(f"No memory files found with tags: {', '.join(command.tags)}")
        return

    if not command.remaining_prompt:
        click.echo(f"Found {summary.count} memory file(s) matching tags {', '.join(command.tags)}:")
        for path in summary.paths:
            click.echo(f"- {Path(path).name}")
        return

    if context:
        click.echo(context)
        click.echo()
    click.echo(command.remaining_prompt)


@cli.command()
@click.argument("tag_input", default="")
@_root_options
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def complete(tag_input: str, root: str | None, pattern: str | None, as_json: bool):
    """Suggest tags for TAG_INPUT.

    Input ending in '.' lists the next level; anything else is fuzzy matched.
    """
    manager = run_async(_load(_resolve_root(root), pattern or get_memory_pattern()))
    items = manager.complete_tags(tag_input)

    if as_json:
        output([item.model_dump() for item in items], as_json=True)
        return

    for item in items:
        click.echo(f"{item.label}  {item.detail}".rstrip())


@cli.command()
@_root_options
def show(root: str | None, pattern: str | None):
    """Dump every indexed document as JSON."""
    from .inspection import dump_documents

    manager = run_async(_load(_resolve_root(root), pattern or get_memory_pattern()))
    output(dump_documents(manager.cache), as_json=True)


@cli.command()
@_root_options
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def check(root: str | None, pattern: str | None, as_json: bool):
    """Report files that fail to index. Exits 1 if any do."""
    manager = run_async(_load(_resolve_root(root), pattern or get_memory_pattern()))
    problems = manager.reporter.get_file_problems()

    if as_json:
        output(
            {
                "indexed": len(manager.cache),
                "problems": [{"path": p, "error": e} for p, e in sorted(problems.items())],
            },
            as_json=True,
        )
    elif problems:
        for report in manager.reporter.get_error_history():
            click.echo(format_report(report), err=True)
    else:
        click.echo(f"All {len(manager.cache)} memory files indexed.")

    if problems:
        sys.exit(1)


@cli.command()
@_root_options
def watch(root: str | None, pattern: str | None):
    """Index the memory folder and keep it in sync until interrupted."""
    memory_root = _resolve_root(root)
    glob = pattern or get_memory_pattern()

    async def _run() -> None:
        manager = MemoryManager()
        summary = await manager.start(memory_root, glob)
        click.echo(
            f"Watching {memory_root}: {len(summary.indexed)} indexed, "
            f"{len(summary.failed)} failed. Press Ctrl-C to stop."
        )
        try:
            while True:
                await asyncio.sleep(3600)
        finally:
            manager.dispose()

    try:
        run_async(_run())
    except KeyboardInterrupt:
        click.echo("Stopped.")


# ─────────────────────────────────────────────────────────────────────────────
# Entry Point
# ─────────────────────────────────────────────────────────────────────────────


def main():
    """Entry point for mnemo CLI."""
    from ._logging import configure_logging

    configure_logging()
    cli()


if __name__ == "__main__":
    main()
