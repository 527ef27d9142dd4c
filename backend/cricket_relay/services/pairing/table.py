import logging
from typing import Dict, Hashable, Optional

logger = logging.getLogger(__name__)


class PairingTable:
    """Symmetric partner mapping.

    Each pairing is stored as two directed entries (a -> b, b -> a) which are
    always written and removed together.
    """

    def __init__(self):
        self._partners: Dict[Hashable, Hashable] = {}

    def __contains__(self, connection: Hashable) -> bool:
        return connection in self._partners

    def pair_count(self) -> int:
        return len(self._partners) // 2

    def partner_of(self, connection: Hashable) -> Optional[Hashable]:
        return self._partners.get(connection)

    def pair(self, a: Hashable, b: Hashable) -> bool:
        if a == b or a in self._partners or b in self._partners:
            logger.warning(f"[pair-reject] a={a} b={b} already paired")
            return False
        self._partners[a] = b
        self._partners[b] = a
        return True

    def unpair(self, connection: Hashable) -> Optional[Hashable]:
        partner = self._partners.pop(connection, None)
        if partner is not None and self._partners.get(partner) == connection:
            del self._partners[partner]
        return partner

    def replace(self, old: Hashable, new: Hashable) -> Optional[Hashable]:
        """Swap ``new`` in for ``old``; the partner keeps its own entry key."""
        partner = self._partners.get(old)
        if partner is None or new in self._partners:
            return None
        del self._partners[old]
        self._partners[new] = partner
        self._partners[partner] = new
        return partner
