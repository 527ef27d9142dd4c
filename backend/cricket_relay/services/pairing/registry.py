import uuid
from typing import Dict, Hashable, Optional


class IdentityRegistry:
    """Maps live connections to the opaque identifiers issued to their clients.

    An identifier survives reconnection: the client presents it again from a
    new connection and the registry is re-bound to that connection.
    """

    def __init__(self, prefix: str = 'client-'):
        self._prefix = prefix
        self._by_conn: Dict[Hashable, str] = {}
        self._by_id: Dict[str, Hashable] = {}

    def __len__(self) -> int:
        return len(self._by_conn)

    def issue(self) -> str:
        # Random rather than sequential so ids kept by clients across a
        # restart never collide with freshly issued ones.
        while True:
            identifier = f"{self._prefix}{uuid.uuid4().hex[:12]}"
            if identifier not in self._by_id:
                return identifier

    def bind(self, connection: Hashable, identifier: str) -> None:
        previous = self._by_conn.get(connection)
        if previous is not None and previous != identifier and self._by_id.get(previous) == connection:
            del self._by_id[previous]
        self._by_conn[connection] = identifier
        self._by_id[identifier] = connection

    def lookup(self, identifier: Optional[str]) -> Optional[Hashable]:
        if identifier is None:
            return None
        return self._by_id.get(identifier)

    def identifier_of(self, connection: Hashable) -> Optional[str]:
        return self._by_conn.get(connection)

    def release(self, connection: Hashable) -> Optional[str]:
        """Forget the connection; its identifier is freed only if still bound to it."""
        identifier = self._by_conn.pop(connection, None)
        if identifier is not None and self._by_id.get(identifier) == connection:
            del self._by_id[identifier]
        return identifier
