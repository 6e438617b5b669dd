"""Identifier generation for block-level editor nodes.

Ids are opaque to the converters; only the editing surface relies on
them staying stable while a document is open.
"""

from __future__ import annotations

import uuid
from collections.abc import Callable


def new_node_id() -> str:
    """Return a fresh ``node-<uuid4>`` identifier.

    Examples
    --------
    >>> new_node_id().startswith("node-")
    True
    """
    return f"node-{uuid.uuid4()}"


def id_generator(factory: Callable[[], str] | None) -> Callable[[], str]:
    """Return *factory* when given, else :func:`new_node_id`."""
    return factory if factory is not None else new_node_id
