"""Field id generators"""
import itertools
import uuid
from typing import Callable

IdFactory = Callable[[], str]


def uuid_ids() -> IdFactory:
    """Random ids, the default for builder sessions"""
    return lambda: uuid.uuid4().hex


def counter_ids(prefix: str = "field") -> IdFactory:
    """Monotonic ids (field-1, field-2, ...), useful for deterministic tests"""
    counter = itertools.count(1)
    return lambda: f"{prefix}-{next(counter)}"
