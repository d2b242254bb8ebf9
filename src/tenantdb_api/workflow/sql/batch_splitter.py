"""Split T-SQL scripts into batches on the batch separator line."""

import re
from typing import List

DEFAULT_SEPARATOR = "GO"

_LINE_BREAK = re.compile(r"\r\n|\n|\r")


def split_batches(script: str, separator: str = DEFAULT_SEPARATOR) -> List[str]:
    """
    Split a script into independently executable batches.

    A separator is a line that, trimmed, equals ``separator`` case-insensitively.
    Batches are returned in source order, trimmed, and blank batches are dropped.
    """
    if not script or not script.strip():
        return []

    keyword = separator.strip().lower()
    batches: List[str] = []
    current: List[str] = []

    for line in _LINE_BREAK.split(script):
        if line.strip().lower() == keyword:
            batches.append("\n".join(current))
            current = []
        else:
            current.append(line)
    batches.append("\n".join(current))

    return [batch.strip() for batch in batches if batch.strip()]
