"""Parsing of tag commands typed into a chat prompt.

The first line of the prompt lists tag patterns; everything after it is the
question to ask with the matched memories attached::

    backend.database, backend.auth
    How do we pool connections?
"""

import re

from .models import TagCommand

_SEPARATORS = re.compile(r"[\s,]+")


def parse_tag_command(prompt: str) -> TagCommand:
    """Split a prompt into tag patterns (first line) and the remaining question."""
    stripped = prompt.strip()
    if not stripped:
        return TagCommand()

    first_line, _, rest = stripped.partition("\n")
    tags = [tag for tag in _SEPARATORS.split(first_line) if tag]

    # Keep order, drop repeats
    unique = list(dict.fromkeys(tags))
    return TagCommand(tags=unique, remaining_prompt=rest.strip())
