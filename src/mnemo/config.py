"""Configuration management for mnemo.

This module contains all configurable constants for the memory index.
Magic numbers are documented here rather than scattered throughout the codebase.
"""

import os
from pathlib import Path


class ConfigurationError(Exception):
    """Raised when required configuration is missing."""

    pass


# =============================================================================
# Memory folder discovery
# =============================================================================

# Folder (relative to cwd) used when MNEMO_ROOT is not set
DEFAULT_MEMORY_DIR = "Memory"

# Glob matched against paths relative to the memory root
DEFAULT_MEMORY_PATTERN = "**/*.md"


def get_memory_root() -> Path:
    """Get the memory folder to index.

    Discovery order:
    1. MNEMO_ROOT environment variable (explicit override)
    2. ./Memory relative to the current working directory

    Raises:
        ConfigurationError: If the resolved directory does not exist.
    """
    root = os.environ.get("MNEMO_ROOT")
    path = Path(root) if root else Path.cwd() / DEFAULT_MEMORY_DIR

    if not path.is_dir():
        raise ConfigurationError(
            f"Memory folder not found: {path}\n"
            "  Set MNEMO_ROOT to an existing directory, or pass --root"
        )
    return path.resolve()


def get_memory_pattern() -> str:
    """Get the glob used to select memory files under the root."""
    return os.environ.get("MNEMO_PATTERN", DEFAULT_MEMORY_PATTERN)


# =============================================================================
# Diagnostics
# =============================================================================

# Reports kept in ErrorReporter history before the oldest is dropped
MAX_ERROR_HISTORY = 100


# =============================================================================
# Tag completion
# =============================================================================

# Recently used tags remembered for completion ordering
MAX_RECENT_TAGS = 10


# =============================================================================
# Content assembly and inspection
# =============================================================================

# Characters of body shown per document in `mnemo show`
CONTENT_PREVIEW_CHARS = 200

# Separator written before each piece of resolved link content
LINKED_CONTENT_HEADER = "\n\n---\n\n**Linked Content from: {target}**\n\n"
