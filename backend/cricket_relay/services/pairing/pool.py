from collections import OrderedDict
from typing import Hashable, Iterator, Optional


class WaitingPool:
    """FIFO of connections waiting for a partner; each member appears once."""

    def __init__(self):
        self._entries: 'OrderedDict[Hashable, None]' = OrderedDict()

    def __contains__(self, connection: Hashable) -> bool:
        return connection in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[Hashable]:
        return iter(list(self._entries))

    def enqueue(self, connection: Hashable) -> bool:
        if connection in self._entries:
            return False
        self._entries[connection] = None
        return True

    def dequeue(self) -> Optional[Hashable]:
        if not self._entries:
            return None
        connection, _ = self._entries.popitem(last=False)
        return connection

    def remove(self, connection: Hashable) -> bool:
        if connection not in self._entries:
            return False
        del self._entries[connection]
        return True
