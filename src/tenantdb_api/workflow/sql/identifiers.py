"""
Identifier Sanitizer

Turns arbitrary project names into bounded SQL Server identifiers. The result is
the only kind of name ever interpolated into DDL, so every database name passes
through here first.
"""

import re
from typing import Pattern

from tenantdb_api.workflow.exceptions import InvalidIdentifierError

DEFAULT_FALLBACK = "DefaultProject"
DEFAULT_DIGIT_PREFIX = "DB_"
DEFAULT_INVALID_PATTERN = r"[^A-Za-z0-9_]"

CATALOG_NAME_MAX_LENGTH = 10
DATABASE_NAME_MAX_LENGTH = 128

_UNDERSCORE_RUN = re.compile(r"_{2,}")
_SAFE_IDENTIFIER = re.compile(r"^[A-Za-z0-9_]+$")


class IdentifierSanitizer:
    """
    Total function from any string to a valid identifier of at most ``max_length`` characters.

    Rules, in order:
        1. blank input -> fallback
        2. characters matching ``invalid_pattern`` -> ``_``
        3. runs of underscores collapse to one, leading/trailing underscores are trimmed
        4. a leading digit gets ``digit_prefix``
        5. truncate to ``max_length`` (trailing underscores left by the cut are trimmed)
        6. empty result -> fallback (itself truncated to ``max_length``)
    """

    def __init__(
        self,
        max_length: int,
        fallback: str = DEFAULT_FALLBACK,
        digit_prefix: str = DEFAULT_DIGIT_PREFIX,
        invalid_pattern: str = DEFAULT_INVALID_PATTERN,
    ):
        if max_length < 1:
            raise ValueError("max_length must be positive")
        self.max_length = max_length
        self.fallback = fallback[:max_length] or "_"
        self.digit_prefix = digit_prefix
        self._invalid: Pattern[str] = re.compile(invalid_pattern)

    def sanitize(self, candidate: str) -> str:
        if candidate is None or not candidate.strip():
            return self.fallback

        name = self._invalid.sub("_", candidate.strip())
        name = _UNDERSCORE_RUN.sub("_", name).strip("_")

        if name[:1].isdigit():
            name = self.digit_prefix + name

        name = name[: self.max_length].rstrip("_")
        return name or self.fallback

    __call__ = sanitize

    @classmethod
    def catalog(cls, **kwargs) -> "IdentifierSanitizer":
        """Short catalog name variant (project name -> work item database name)."""
        return cls(max_length=CATALOG_NAME_MAX_LENGTH, **kwargs)

    @classmethod
    def database(cls, **kwargs) -> "IdentifierSanitizer":
        """Full SQL Server database name variant."""
        return cls(max_length=DATABASE_NAME_MAX_LENGTH, **kwargs)


def validate_identifier(name: str, max_length: int = DATABASE_NAME_MAX_LENGTH) -> str:
    """Reject anything that is not already a sanitized identifier."""
    if not name or len(name) > max_length or not _SAFE_IDENTIFIER.match(name):
        raise InvalidIdentifierError(f"'{name}' is not a valid database identifier")
    return name


def quote_identifier(name: str) -> str:
    """Bracket-quote an identifier for T-SQL."""
    return "[" + name.replace("]", "]]") + "]"
