"""Reference extraction for ``@(name)`` mentions."""

import re

REFERENCE_PATTERN = re.compile(r"@\(([^)]+)\)")


def extract_references(content: str) -> list[str]:
    """Extract referenced document paths from raw document text.

    A mention has the form ``@(path/to/document)``; the text between the
    parentheses is taken verbatim as a logical path and is not checked
    against existing documents.

    Args:
        content: Raw document text

    Returns:
        Referenced paths in order of first occurrence, without duplicates
    """
    return list(dict.fromkeys(REFERENCE_PATTERN.findall(content)))
