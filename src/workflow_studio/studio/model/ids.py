"""Step id generators.

Any operation that creates steps takes the generator explicitly; nothing in the
engine owns a hidden global counter.
"""

from __future__ import annotations

import itertools
import uuid
from collections.abc import Callable

IdGenerator = Callable[[], str]


def counter_id_generator(prefix: str = "flow_step_", start: int = 1) -> IdGenerator:
    """Return a generator producing ``flow_step_1``, ``flow_step_2``, ...

    Deterministic, which is what tests and snapshot diffs want.
    """

    counter = itertools.count(start)

    def create_id() -> str:
        return f"{prefix}{next(counter)}"

    return create_id


def uuid_id_generator(length: int = 8) -> IdGenerator:
    def create_id() -> str:
        return uuid.uuid4().hex[:length]

    return create_id
