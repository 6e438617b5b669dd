"""Placeholder syntax and variable-name validation.

Two placeholder spellings are recognised in text:

* ``{{user.first_name}}`` -- the canonical form, always written back.
* ``{}user.first_name{}`` -- an alternative form accepted on input.

A variable name is a dot-separated path of identifier segments.  Names
that break the rule still become ``variable`` nodes; they are flagged
with ``isInvalid`` so the editor can highlight them.
"""

from __future__ import annotations

import re

# ``{{...}}`` may be empty (the user is still typing); ``{}...{}`` may not.
PLACEHOLDER_RE = re.compile(r"\{\{([^{}]*)\}\}|\{\}([^{}]+)\{\}")

_SEGMENT = r"[A-Za-z_][A-Za-z0-9_]*"
_VARIABLE_NAME_RE = re.compile(rf"{_SEGMENT}(?:\.{_SEGMENT})*")


def is_valid_variable_name(name: str) -> bool:
    """Return ``True`` when *name* is a well-formed variable path.

    Surrounding whitespace is ignored.  Every dot-separated segment must
    start with a letter or underscore and contain only letters, digits
    and underscores, so empty names, leading/trailing/double dots and
    embedded whitespace are all rejected.

    Examples
    --------
    >>> is_valid_variable_name("user.firstName")
    True
    >>> is_valid_variable_name("user.")
    False
    >>> is_valid_variable_name("user name")
    False
    """
    return _VARIABLE_NAME_RE.fullmatch(name.strip()) is not None


def is_placeholder_valid(name: str) -> bool:
    """Validity of a name found inside a placeholder.

    Identical to :func:`is_valid_variable_name` except that the empty
    name is accepted: ``{{}}`` is what the editor inserts before the user
    has typed anything.
    """
    if name == "":
        return True
    return is_valid_variable_name(name)


def placeholder_name(match: re.Match[str]) -> str:
    """Extract the variable name from a :data:`PLACEHOLDER_RE` match."""
    braces, empty_braces = match.group(1), match.group(2)
    return braces if braces is not None else empty_braces


def format_placeholder(name: str) -> str:
    """Return the canonical ``{{name}}`` spelling."""
    return "{{" + name + "}}"
