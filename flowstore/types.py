"""Common annotated types for field validation.

These types provide consistent validation patterns across the package.
"""

from typing import Annotated

from pydantic import AfterValidator, Field

# Pattern for valid identifiers (activity keys)
# Alphanumeric, underscore, hyphen - must be non-empty
IDENTIFIER_PATTERN = r"^[a-zA-Z0-9_-]+$"

# Pattern for file names: a single path component
FILENAME_PATTERN = r"^[^/\\]+$"


def _not_dot_name(name: str) -> str:
    if name in (".", ".."):
        raise ValueError(f"[{name}] is not a file name")
    return name


def is_file_name(name: str) -> bool:
    """Check that ``name`` is usable as a ``FileName``."""
    return bool(name) and "/" not in name and "\\" not in name and name not in (".", "..")


# Activity key - used for activity identifiers within workflows
ActivityKey = Annotated[str, Field(min_length=1, pattern=IDENTIFIER_PATTERN)]

# File name - base name only, prevents path traversal
FileName = Annotated[
    str, Field(min_length=1, pattern=FILENAME_PATTERN), AfterValidator(_not_dot_name)
]

# MIME type, e.g. "application/pdf"
MimeType = Annotated[str, Field(min_length=1)]
