"""Identifier allocation for generated artifacts"""

import uuid
from typing import Callable

IdGenerator = Callable[[], str]


def new_id() -> str:
    """Default generator: random UUID4 string"""
    return str(uuid.uuid4())


def sequential_ids(prefix: str = "id") -> IdGenerator:
    """Deterministic generator yielding prefix-1, prefix-2, ..."""
    counter = 0

    def _next() -> str:
        nonlocal counter
        counter += 1
        return f"{prefix}-{counter}"

    return _next
