from collections.abc import Iterator

from ..domain import EventKey


class LiveDedupCache:
    """Keys of events seen on the live stream during a recovery cycle.

    A catch-up query and the live stream may both return the same event when
    the connection comes back while the query is in flight. The cache
    remembers what the live stream delivered so the catch-up can skip it.

    The cache is unbounded within a cycle and must be reset when the cycle
    completes, which bounds it to the events of one outage.
    """

    __slots__ = ("_keys",)

    def __init__(self) -> None:
        self._keys: dict[EventKey, None] = {}

    def add(self, key: EventKey) -> None:
        self._keys[key] = None

    def contains(self, key: EventKey) -> bool:
        return key in self._keys

    def reset(self) -> None:
        self._keys.clear()

    def __contains__(self, key: object) -> bool:
        return key in self._keys

    def __iter__(self) -> Iterator[EventKey]:
        return iter(self._keys)

    def __len__(self) -> int:
        return len(self._keys)
